# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/render/network_data.py
"""
NetworkData rendering, in the OpenStack network_data.json layout that
cloud-init reads from a config drive.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from metaldata.claims.resolver import AddressCache, PoolAddress
from metaldata.errors import PoolNotResolved
from metaldata.ipam.mask import mask_for
from metaldata.models import (
    BareMetalHost,
    MacAddressSpec,
    Metal3DataTemplate,
    NetworkLinks,
    Networks,
    Route,
    ServicesSpec,
)
from metaldata.render.node import host_mac_by_name
from metaldata.utils.serialize import dump_yaml

Entry = Dict[str, Any]


def _resolved(addresses: AddressCache, pool: str, what: str) -> PoolAddress:
    if not addresses.resolved(pool):
        raise PoolNotResolved(f"Pool {pool} not found in cache ({what})")
    return addresses.get(pool)


def link_mac_address(mac: MacAddressSpec, host: Optional[BareMetalHost]) -> str:
    if mac.string is not None:
        return mac.string
    if mac.from_host_interface is not None:
        return host_mac_by_name(host, mac.from_host_interface)
    return ""


def render_services(services: ServicesSpec) -> List[Entry]:
    return [{"type": "dns", "address": address} for address in services.dns]


def render_links(links: NetworkLinks, host: Optional[BareMetalHost]) -> List[Entry]:
    data: List[Entry] = []

    for link in links.ethernets:
        data.append({
            "type": link.type,
            "id": link.id,
            "mtu": link.mtu,
            "ethernet_mac_address": link_mac_address(link.mac_address, host),
        })

    for link in links.bonds:
        data.append({
            "type": "bond",
            "id": link.id,
            "mtu": link.mtu,
            "ethernet_mac_address": link_mac_address(link.mac_address, host),
            "bond_mode": link.bond_mode,
            "bond_links": list(link.bond_links),
        })

    for link in links.vlans:
        data.append({
            "type": "vlan",
            "id": link.id,
            "mtu": link.mtu,
            "vlan_mac_address": link_mac_address(link.mac_address, host),
            "vlan_id": link.vlan_id,
            "vlan_link": link.vlan_link,
        })

    return data


def render_routes(routes: List[Route], addresses: AddressCache, ipv4: bool) -> List[Entry]:
    data: List[Entry] = []
    for route in routes:
        gateway = ""
        if route.gateway.string is not None:
            gateway = route.gateway.string
        elif route.gateway.from_ip_pool is not None:
            gateway = _resolved(
                addresses, route.gateway.from_ip_pool, f"gateway of route {route.network}"
            ).gateway
        data.append({
            "network": route.network,
            "netmask": mask_for(route.prefix, ipv4),
            "gateway": gateway,
            "services": render_services(route.services),
        })
    return data


def render_networks(networks: Networks, addresses: AddressCache) -> List[Entry]:
    data: List[Entry] = []

    # Static allocation from a pool
    for network, kind, ipv4 in [
        *((n, "ipv4", True) for n in networks.ipv4),
        *((n, "ipv6", False) for n in networks.ipv6),
    ]:
        pool = _resolved(
            addresses, network.ip_address_from_ip_pool, f"{kind} network {network.id}"
        )
        data.append({
            "type": kind,
            "id": network.id,
            "link": network.link,
            "netmask": mask_for(pool.prefix, ipv4),
            "ip_address": pool.address,
            "routes": render_routes(network.routes, addresses, ipv4),
        })

    # DHCP and SLAAC
    for network, kind, ipv4 in [
        *((n, "ipv4_dhcp", True) for n in networks.ipv4_dhcp),
        *((n, "ipv6_dhcp", False) for n in networks.ipv6_dhcp),
        *((n, "ipv6_slaac", False) for n in networks.ipv6_slaac),
    ]:
        data.append({
            "type": kind,
            "id": network.id,
            "link": network.link,
            "routes": render_routes(network.routes, addresses, ipv4),
        })

    return data


def build_network_data(
    template: Metal3DataTemplate,
    addresses: AddressCache,
    host: Optional[BareMetalHost],
) -> Dict[str, List[Entry]]:
    spec = template.spec.network_data
    return {
        "links": render_links(spec.links, host),
        "networks": render_networks(spec.networks, addresses),
        "services": render_services(spec.services),
    }


def render_network_data(
    template: Metal3DataTemplate,
    addresses: AddressCache,
    host: Optional[BareMetalHost],
) -> Optional[bytes]:
    if template.spec.network_data is None:
        return None
    return dump_yaml(build_network_data(template, addresses, host))
