# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/ipam/mask.py
from __future__ import annotations

import ipaddress

from metaldata.errors import InvalidPrefixLength


def mask_for(prefix: int, ipv4: bool) -> str:
    """
    Translate a prefix length into a netmask: dotted quad for IPv4
    (24 -> 255.255.255.0), compressed colon form for IPv6
    (64 -> ffff:ffff:ffff:ffff::).
    """
    bits = 32 if ipv4 else 128
    if isinstance(prefix, bool) or not isinstance(prefix, int) or not 0 <= prefix <= bits:
        raise InvalidPrefixLength(
            f"prefix length {prefix!r} outside [0, {bits}] for IPv{4 if ipv4 else 6}"
        )
    value = ((1 << bits) - 1) ^ ((1 << (bits - prefix)) - 1)
    if ipv4:
        return str(ipaddress.IPv4Address(value))
    return str(ipaddress.IPv6Address(value))
