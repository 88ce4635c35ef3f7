# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/claims/references.py
from __future__ import annotations

from typing import Iterable, Iterator, List

from metaldata.models import DynamicNetwork, Metal3DataTemplate, Route, StaticNetwork


def _route_pools(routes: Iterable[Route]) -> Iterator[str]:
    for route in routes:
        if route.gateway.from_ip_pool is not None:
            yield route.gateway.from_ip_pool


def iter_pool_references(template: Metal3DataTemplate) -> Iterator[str]:
    """
    Yield every pool name the template refers to, in a stable order.

    Names are yielded once per reference, so a pool used twice shows up
    twice; callers memoize.
    """
    meta = template.spec.meta_data
    if meta is not None:
        for entry in meta.ip_addresses_from_pool:
            yield entry.name
        for entry in meta.prefixes_from_pool:
            yield entry.name
        for entry in meta.gateways_from_pool:
            yield entry.name

    net = template.spec.network_data
    if net is not None:
        static: List[StaticNetwork] = [*net.networks.ipv4, *net.networks.ipv6]
        for network in static:
            yield network.ip_address_from_ip_pool
            yield from _route_pools(network.routes)

        dynamic: List[DynamicNetwork] = [
            *net.networks.ipv4_dhcp,
            *net.networks.ipv6_dhcp,
            *net.networks.ipv6_slaac,
        ]
        for network in dynamic:
            yield from _route_pools(network.routes)
