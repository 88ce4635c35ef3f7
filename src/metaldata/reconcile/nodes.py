# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/reconcile/nodes.py
"""
Lookups of the machine-side objects a rendering needs.

Each lookup returns None when the object does not exist (yet): another
controller is expected to create it or to set the reference we follow, so the
caller requeues instead of failing.
"""
from __future__ import annotations

import logging
from typing import Optional, Protocol

from metaldata.config.models import Settings
from metaldata.errors import NotFoundError, TerminalError
from metaldata.models import BareMetalHost, Machine, Metal3Data, Metal3Machine
from metaldata.store.interface import Store

log = logging.getLogger("metaldata")


class NodeLookup(Protocol):
    def metal3_machine(self, data: Metal3Data) -> Optional[Metal3Machine]: ...

    def owner_machine(self, m3m: Metal3Machine) -> Optional[Machine]: ...

    def host(self, m3m: Metal3Machine) -> Optional[BareMetalHost]: ...


class StoreNodeLookup:
    def __init__(self, store: Store, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or Settings()

    def metal3_machine(self, data: Metal3Data) -> Optional[Metal3Machine]:
        ref = data.spec.metal3_machine
        if ref is None:
            return None
        if not ref.name:
            raise TerminalError(f"Metal3Data {data.metadata.name}: Metal3Machine name not set")
        try:
            return self.store.get(Metal3Machine, ref.name, ref.namespace or data.metadata.namespace)
        except NotFoundError:
            log.debug("Metal3Machine %s not found yet", ref.name)
            return None

    def owner_machine(self, m3m: Metal3Machine) -> Optional[Machine]:
        for ref in m3m.metadata.owner_references:
            if ref.kind != "Machine" or not ref.api_version.startswith(f"{Machine.GROUP}/"):
                continue
            try:
                return self.store.get(Machine, ref.name, m3m.metadata.namespace)
            except NotFoundError:
                log.debug("Machine %s not found yet", ref.name)
                return None
        log.info("Waiting for Machine Controller to set OwnerRef on Metal3Machine")
        return None

    def host(self, m3m: Metal3Machine) -> Optional[BareMetalHost]:
        key = m3m.metadata.annotations.get(self.settings.host_annotation)
        if not key:
            log.debug("Metal3Machine %s has no host annotation yet", m3m.metadata.name)
            return None
        namespace, _, name = key.rpartition("/")
        try:
            return self.store.get(BareMetalHost, name, namespace or m3m.metadata.namespace)
        except NotFoundError:
            log.debug("BareMetalHost %s not found yet", key)
            return None
