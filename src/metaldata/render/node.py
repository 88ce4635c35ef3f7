# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/render/node.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from metaldata.errors import InterfaceNotFound, UnknownObjectKind
from metaldata.models import BareMetalHost, Machine, Metal3Machine, ObjectMeta


class ObjectKind(str, Enum):
    """Objects a metadata rule may read names, labels and annotations from."""

    METAL3MACHINE = "metal3machine"
    MACHINE = "machine"
    BAREMETALHOST = "baremetalhost"

    @classmethod
    def parse(cls, value: str) -> "ObjectKind":
        try:
            return cls(value.lower())
        except ValueError:
            raise UnknownObjectKind(f"Unknown object type {value!r}") from None


@dataclass(frozen=True)
class NodeAttributes:
    """The machine-side objects a rendering reads from."""

    metal3_machine: Metal3Machine
    machine: Machine
    host: BareMetalHost

    def meta(self, kind: ObjectKind) -> ObjectMeta:
        sources = {
            ObjectKind.METAL3MACHINE: self.metal3_machine,
            ObjectKind.MACHINE: self.machine,
            ObjectKind.BAREMETALHOST: self.host,
        }
        return sources[kind].metadata

    def name(self, kind: ObjectKind) -> str:
        return self.meta(kind).name

    def label(self, kind: ObjectKind, label: str) -> str:
        return self.meta(kind).labels.get(label, "")

    def annotation(self, kind: ObjectKind, annotation: str) -> str:
        return self.meta(kind).annotations.get(annotation, "")


def host_mac_by_name(host: BareMetalHost | None, name: str) -> str:
    """MAC address of the host NIC called ``name``."""
    if host is None or host.status.hardware is None or host.status.hardware.nics is None:
        raise InterfaceNotFound("Nics list not populated")
    for nic in host.status.hardware.nics:
        if nic.name == name:
            return nic.mac
    raise InterfaceNotFound(f"Nic name not found {name}")
