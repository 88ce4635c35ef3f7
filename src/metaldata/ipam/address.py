# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/ipam/address.py
"""
Address arithmetic inside a pool range.

Addresses are handled as fixed-width unsigned integers: 4 bytes for IPv4 and
16 bytes for IPv6. Adding an offset never changes the width, so an IPv4 start
always yields an IPv4 result and running past 255.255.255.255 is an overflow
rather than a silent promotion to IPv6.
"""
from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Optional, Union

from metaldata.errors import AddressOverflow, InvalidPoolSpec, OutOfRange
from metaldata.models import AddressRange

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]

_V4_MAPPED = ipaddress.IPv6Network("::ffff:0:0/96")


@dataclass(frozen=True)
class FixedWidthAddress:
    value: int
    width: int  # bytes, 4 or 16

    def __post_init__(self) -> None:
        if self.width not in (4, 16):
            raise ValueError(f"unsupported address width {self.width}")
        if not 0 <= self.value < self.limit:
            raise AddressOverflow(
                f"value {self.value} does not fit in {self.width} bytes"
            )

    @property
    def limit(self) -> int:
        return 1 << (8 * self.width)

    @classmethod
    def parse(cls, text: str) -> "FixedWidthAddress":
        try:
            ip = ipaddress.ip_address(text.strip())
        except ValueError as e:
            raise InvalidPoolSpec(f"invalid IP address {text!r}") from e
        return cls.from_ip(ip)

    @classmethod
    def from_ip(cls, ip: IPAddress) -> "FixedWidthAddress":
        # ::ffff:a.b.c.d is an IPv4 address in disguise
        if ip.version == 6 and ip.ipv4_mapped is not None:
            ip = ip.ipv4_mapped
        return cls(int(ip), 4 if ip.version == 4 else 16)

    def checked_add(self, offset: int) -> "FixedWidthAddress":
        result = self.value + offset
        if result < 0 or result >= self.limit:
            raise AddressOverflow(
                f"IP address overflow for : {self} + {offset}"
            )
        if self.width == 16:
            # Entering the mapped range would make the result read back as IPv4
            was_mapped = self.value in _mapped_range()
            if result in _mapped_range() and not was_mapped:
                raise AddressOverflow(
                    f"IP address overflow for : {self} + {offset} "
                    "lands in the IPv4-mapped range"
                )
        return FixedWidthAddress(result, self.width)

    def to_ip(self) -> IPAddress:
        if self.width == 4:
            return ipaddress.IPv4Address(self.value)
        return ipaddress.IPv6Address(self.value)

    def __str__(self) -> str:
        return str(self.to_ip())


def _mapped_range() -> range:
    start = int(_V4_MAPPED.network_address)
    return range(start, start + _V4_MAPPED.num_addresses)


def _parse_subnet(subnet: str) -> IPNetwork:
    try:
        return ipaddress.ip_network(subnet.strip(), strict=False)
    except ValueError as e:
        raise InvalidPoolSpec(f"invalid subnet {subnet!r}") from e


def _contains(network: IPNetwork, address: FixedWidthAddress) -> bool:
    ip = address.to_ip()
    if ip.version != network.version:
        return False
    return ip in network


def compute_address(pool: AddressRange, offset: int) -> str:
    """
    Return the address ``offset`` positions into ``pool``.

    With ``start`` set the result is ``start + offset``, bounded by ``end``
    (inclusive) and by ``subnet`` when they are given. Without ``start`` the
    network address of ``subnet`` is reserved, so offset 0 maps to the first
    host address.
    """
    if pool.start is None and pool.subnet is None:
        raise InvalidPoolSpec("Either Start or Subnet is required for ipAddress")

    subnet: Optional[IPNetwork] = None
    if pool.subnet is not None:
        subnet = _parse_subnet(pool.subnet)

    if pool.start is not None:
        base = FixedWidthAddress.parse(pool.start)
        result = base.checked_add(offset)

        if pool.end is not None:
            end = FixedWidthAddress.parse(pool.end)
            if end.width != base.width:
                raise InvalidPoolSpec(
                    f"start {pool.start} and end {pool.end} are of different families"
                )
            if result.value > end.value:
                raise OutOfRange(f"IP address out of bonds for : {result}")
    else:
        base = FixedWidthAddress.from_ip(subnet.network_address)
        result = base.checked_add(offset + 1)

    if subnet is not None and not _contains(subnet, result):
        raise OutOfRange(f"IP address {result} out of bonds of {subnet}")

    return str(result)
