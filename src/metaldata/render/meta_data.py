# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/render/meta_data.py
from __future__ import annotations

from typing import Dict, Optional

from metaldata.claims.resolver import AddressCache, PoolAddress
from metaldata.errors import PoolNotResolved
from metaldata.models import MetaDataFromPool, MetaDataSpec, Metal3Data, Metal3DataTemplate
from metaldata.render.node import NodeAttributes, ObjectKind, host_mac_by_name
from metaldata.utils.serialize import dump_yaml


def _pool_address(addresses: AddressCache, entry: MetaDataFromPool) -> PoolAddress:
    address = addresses.get(entry.name)
    if address is None or not addresses.resolved(entry.name):
        raise PoolNotResolved(f"Pool {entry.name} not found in cache (key {entry.key})")
    return address


def index_value(prefix: str, offset: int, step: int, index: int, suffix: str) -> str:
    if step == 0:
        step = 1
    return f"{prefix}{offset + index * step}{suffix}"


def build_meta_data(
    data: Metal3Data,
    spec: MetaDataSpec,
    addresses: AddressCache,
    node: NodeAttributes,
) -> Dict[str, str]:
    """
    Apply the MetaData rules and return the flat key/value mapping.

    Rules are applied kind by kind (interfaces, pool addresses, prefixes,
    gateways, indexes, namespaces, object names, labels, annotations,
    strings); when two rules share a key the later one wins.
    """
    metadata: Dict[str, str] = {}

    for entry in spec.from_host_interfaces:
        metadata[entry.key] = host_mac_by_name(node.host, entry.interface)

    for entry in spec.ip_addresses_from_pool:
        metadata[entry.key] = _pool_address(addresses, entry).address

    for entry in spec.prefixes_from_pool:
        metadata[entry.key] = str(_pool_address(addresses, entry).prefix)

    for entry in spec.gateways_from_pool:
        metadata[entry.key] = _pool_address(addresses, entry).gateway

    for entry in spec.indexes:
        metadata[entry.key] = index_value(
            entry.prefix, entry.offset, entry.step, data.spec.index, entry.suffix
        )

    for entry in spec.namespaces:
        metadata[entry.key] = data.metadata.namespace

    for entry in spec.object_names:
        metadata[entry.key] = node.name(ObjectKind.parse(entry.object))

    for entry in spec.from_labels:
        metadata[entry.key] = node.label(ObjectKind.parse(entry.object), entry.label)

    for entry in spec.from_annotations:
        metadata[entry.key] = node.annotation(
            ObjectKind.parse(entry.object), entry.annotation
        )

    for entry in spec.strings:
        metadata[entry.key] = entry.value

    return metadata


def render_meta_data(
    data: Metal3Data,
    template: Metal3DataTemplate,
    addresses: AddressCache,
    node: NodeAttributes,
) -> Optional[bytes]:
    if template.spec.meta_data is None:
        return None
    return dump_yaml(build_meta_data(data, template.spec.meta_data, addresses, node))

