# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/models.py
"""
Pydantic models for the objects metaldata reads and writes.

Field names are snake_case in Python and camelCase on the wire, matching the
cluster-api / metal3 custom resources. Acronym fields (``ipv4DHCP``,
``fromIPPool`` ...) carry an explicit alias.
"""
from __future__ import annotations

import base64
from typing import ClassVar, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ---------------------------------------------------------------------
# Object metadata
# ---------------------------------------------------------------------
class OwnerReference(WireModel):
    api_version: str
    kind: str
    name: str
    uid: str = ""
    controller: Optional[bool] = None


class ObjectMeta(WireModel):
    name: str
    namespace: str = "default"
    uid: str = ""
    resource_version: Optional[str] = None
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    owner_references: List[OwnerReference] = Field(default_factory=list)
    deletion_timestamp: Optional[str] = None


class KubeObject(WireModel):
    """
    Base for every stored object. ``GROUP``/``VERSION``/``PLURAL`` locate the
    resource on a Kubernetes API server; ``KIND`` keys bundle loading.
    """

    KIND: ClassVar[str] = ""
    GROUP: ClassVar[str] = ""
    VERSION: ClassVar[str] = ""
    PLURAL: ClassVar[str] = ""

    api_version: str = ""
    kind: str = ""
    metadata: ObjectMeta

    def model_post_init(self, __context) -> None:
        if not self.kind:
            self.kind = self.KIND
        if not self.api_version:
            self.api_version = f"{self.GROUP}/{self.VERSION}" if self.GROUP else self.VERSION


class ObjectRef(WireModel):
    name: str = ""
    namespace: str = ""


# ---------------------------------------------------------------------
# Metal3DataTemplate: MetaData rules
# ---------------------------------------------------------------------
class MetaDataString(WireModel):
    key: str
    value: str = ""


class MetaDataObjectName(WireModel):
    key: str
    object: str


class MetaDataIndex(WireModel):
    key: str
    offset: int = 0
    step: int = 1
    prefix: str = ""
    suffix: str = ""


class MetaDataNamespace(WireModel):
    key: str


class MetaDataFromPool(WireModel):
    key: str
    name: str


class MetaDataHostInterface(WireModel):
    key: str
    interface: str


class MetaDataFromLabel(WireModel):
    key: str
    object: str
    label: str


class MetaDataFromAnnotation(WireModel):
    key: str
    object: str
    annotation: str


class MetaDataSpec(WireModel):
    strings: List[MetaDataString] = Field(default_factory=list)
    object_names: List[MetaDataObjectName] = Field(default_factory=list)
    indexes: List[MetaDataIndex] = Field(default_factory=list)
    namespaces: List[MetaDataNamespace] = Field(default_factory=list)
    ip_addresses_from_pool: List[MetaDataFromPool] = Field(
        default_factory=list, alias="ipAddressesFromIPPool"
    )
    prefixes_from_pool: List[MetaDataFromPool] = Field(
        default_factory=list, alias="prefixesFromIPPool"
    )
    gateways_from_pool: List[MetaDataFromPool] = Field(
        default_factory=list, alias="gatewaysFromIPPool"
    )
    from_host_interfaces: List[MetaDataHostInterface] = Field(default_factory=list)
    from_labels: List[MetaDataFromLabel] = Field(default_factory=list)
    from_annotations: List[MetaDataFromAnnotation] = Field(default_factory=list)


# ---------------------------------------------------------------------
# Metal3DataTemplate: NetworkData
# ---------------------------------------------------------------------
EthernetType = Literal[
    "bridge", "dvs", "hw_veb", "hyperv", "ovs", "tap", "vhostuser", "vif", "phy"
]
BondMode = Literal[
    "balance-rr", "active-backup", "balance-xor", "broadcast",
    "balance-tlb", "balance-alb", "802.3ad",
]


class MacAddressSpec(WireModel):
    string: Optional[str] = None
    from_host_interface: Optional[str] = None


class EthernetLink(WireModel):
    type: EthernetType = "phy"
    id: str
    mtu: int = 1500
    mac_address: MacAddressSpec = Field(default_factory=MacAddressSpec)


class BondLink(WireModel):
    id: str
    mtu: int = 1500
    mac_address: MacAddressSpec = Field(default_factory=MacAddressSpec)
    bond_mode: BondMode = "active-backup"
    bond_links: List[str] = Field(default_factory=list)


class VlanLink(WireModel):
    id: str
    mtu: int = 1500
    mac_address: MacAddressSpec = Field(default_factory=MacAddressSpec)
    vlan_id: int = Field(0, alias="vlanID")
    vlan_link: str = ""


class NetworkLinks(WireModel):
    ethernets: List[EthernetLink] = Field(default_factory=list)
    bonds: List[BondLink] = Field(default_factory=list)
    vlans: List[VlanLink] = Field(default_factory=list)


class ServicesSpec(WireModel):
    dns: List[str] = Field(default_factory=list)


class RouteGateway(WireModel):
    string: Optional[str] = None
    from_ip_pool: Optional[str] = Field(None, alias="fromIPPool")


class Route(WireModel):
    network: str
    prefix: int = 0
    gateway: RouteGateway = Field(default_factory=RouteGateway)
    services: ServicesSpec = Field(default_factory=ServicesSpec)


class StaticNetwork(WireModel):
    id: str
    link: str
    ip_address_from_ip_pool: str = Field(alias="ipAddressFromIPPool")
    routes: List[Route] = Field(default_factory=list)


class DynamicNetwork(WireModel):
    id: str
    link: str
    routes: List[Route] = Field(default_factory=list)


class Networks(WireModel):
    ipv4: List[StaticNetwork] = Field(default_factory=list)
    ipv6: List[StaticNetwork] = Field(default_factory=list)
    ipv4_dhcp: List[DynamicNetwork] = Field(default_factory=list, alias="ipv4DHCP")
    ipv6_dhcp: List[DynamicNetwork] = Field(default_factory=list, alias="ipv6DHCP")
    ipv6_slaac: List[DynamicNetwork] = Field(default_factory=list, alias="ipv6SLAAC")


class NetworkDataSpec(WireModel):
    links: NetworkLinks = Field(default_factory=NetworkLinks)
    networks: Networks = Field(default_factory=Networks)
    services: ServicesSpec = Field(default_factory=ServicesSpec)


class DataTemplateSpec(WireModel):
    cluster_name: str = ""
    meta_data: Optional[MetaDataSpec] = None
    network_data: Optional[NetworkDataSpec] = None


class Metal3DataTemplate(KubeObject):
    KIND: ClassVar[str] = "Metal3DataTemplate"
    GROUP: ClassVar[str] = "infrastructure.cluster.x-k8s.io"
    VERSION: ClassVar[str] = "v1alpha4"
    PLURAL: ClassVar[str] = "metal3datatemplates"

    spec: DataTemplateSpec = Field(default_factory=DataTemplateSpec)


# ---------------------------------------------------------------------
# Metal3Data (the rendering request)
# ---------------------------------------------------------------------
class DataSpec(WireModel):
    index: int = 0
    template: ObjectRef
    metal3_machine: Optional[ObjectRef] = None
    meta_data: Optional[ObjectRef] = None
    network_data: Optional[ObjectRef] = None


class DataStatus(WireModel):
    ready: bool = False
    error: bool = False
    error_message: Optional[str] = None


class Metal3Data(KubeObject):
    KIND: ClassVar[str] = "Metal3Data"
    GROUP: ClassVar[str] = "infrastructure.cluster.x-k8s.io"
    VERSION: ClassVar[str] = "v1alpha4"
    PLURAL: ClassVar[str] = "metal3datas"

    spec: DataSpec
    status: DataStatus = Field(default_factory=DataStatus)


# ---------------------------------------------------------------------
# IP pools and addresses
# ---------------------------------------------------------------------
class AddressRange(WireModel):
    start: Optional[str] = None
    end: Optional[str] = None
    subnet: Optional[str] = None
    prefix: Optional[int] = None
    gateway: Optional[str] = None


class IPPoolSpec(WireModel):
    cluster_name: str = ""
    pools: List[AddressRange] = Field(default_factory=list)
    prefix: Optional[int] = None
    gateway: Optional[str] = None
    name_prefix: str = ""


class IPPoolStatus(WireModel):
    allocations: Dict[str, str] = Field(default_factory=dict)


class Metal3IPPool(KubeObject):
    KIND: ClassVar[str] = "Metal3IPPool"
    GROUP: ClassVar[str] = "infrastructure.cluster.x-k8s.io"
    VERSION: ClassVar[str] = "v1alpha4"
    PLURAL: ClassVar[str] = "metal3ippools"

    spec: IPPoolSpec = Field(default_factory=IPPoolSpec)
    status: IPPoolStatus = Field(default_factory=IPPoolStatus)


class IPAddressSpec(WireModel):
    address: str
    prefix: int = 0
    gateway: Optional[str] = None
    pool: Optional[ObjectRef] = None
    claim: Optional[ObjectRef] = None


class Metal3IPAddress(KubeObject):
    KIND: ClassVar[str] = "Metal3IPAddress"
    GROUP: ClassVar[str] = "infrastructure.cluster.x-k8s.io"
    VERSION: ClassVar[str] = "v1alpha4"
    PLURAL: ClassVar[str] = "metal3ipaddresses"

    spec: IPAddressSpec


# ---------------------------------------------------------------------
# Node attribute sources
# ---------------------------------------------------------------------
class Metal3MachineSpec(WireModel):
    data_template: Optional[ObjectRef] = None


class Metal3Machine(KubeObject):
    KIND: ClassVar[str] = "Metal3Machine"
    GROUP: ClassVar[str] = "infrastructure.cluster.x-k8s.io"
    VERSION: ClassVar[str] = "v1alpha4"
    PLURAL: ClassVar[str] = "metal3machines"

    spec: Metal3MachineSpec = Field(default_factory=Metal3MachineSpec)


class Machine(KubeObject):
    KIND: ClassVar[str] = "Machine"
    GROUP: ClassVar[str] = "cluster.x-k8s.io"
    VERSION: ClassVar[str] = "v1alpha3"
    PLURAL: ClassVar[str] = "machines"


class NIC(WireModel):
    name: str
    mac: str = ""
    ip: Optional[str] = None


class HardwareDetails(WireModel):
    nics: Optional[List[NIC]] = None


class BareMetalHostStatus(WireModel):
    hardware: Optional[HardwareDetails] = None


class BareMetalHost(KubeObject):
    KIND: ClassVar[str] = "BareMetalHost"
    GROUP: ClassVar[str] = "metal3.io"
    VERSION: ClassVar[str] = "v1alpha1"
    PLURAL: ClassVar[str] = "baremetalhosts"

    status: BareMetalHostStatus = Field(default_factory=BareMetalHostStatus)


# ---------------------------------------------------------------------
# Output documents
# ---------------------------------------------------------------------
class Secret(KubeObject):
    KIND: ClassVar[str] = "Secret"
    VERSION: ClassVar[str] = "v1"
    PLURAL: ClassVar[str] = "secrets"

    type: str = "Opaque"
    data: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_payload(
        cls,
        *,
        name: str,
        namespace: str,
        key: str,
        payload: bytes,
        labels: Optional[Dict[str, str]] = None,
        owner_references: Optional[List[OwnerReference]] = None,
    ) -> "Secret":
        return cls(
            metadata=ObjectMeta(
                name=name,
                namespace=namespace,
                labels=dict(labels or {}),
                owner_references=list(owner_references or []),
            ),
            data={key: base64.b64encode(payload).decode("ascii")},
        )

    def payload(self, key: str) -> bytes:
        return base64.b64decode(self.data[key])


KINDS: Dict[str, Type[KubeObject]] = {
    model.KIND: model
    for model in (
        Metal3Data,
        Metal3DataTemplate,
        Metal3IPPool,
        Metal3IPAddress,
        Metal3Machine,
        Machine,
        BareMetalHost,
        Secret,
    )
}
