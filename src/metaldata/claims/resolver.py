# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/claims/resolver.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from metaldata.claims.references import iter_pool_references
from metaldata.claims.ticket import ClaimState, claim_state, ensure_registered, marker_for
from metaldata.errors import ConflictError, NotFoundError, PoolExhausted
from metaldata.models import Metal3Data, Metal3DataTemplate, Metal3IPAddress, Metal3IPPool
from metaldata.store.interface import Store

log = logging.getLogger("metaldata")


@dataclass(frozen=True)
class PoolAddress:
    """Address, prefix and gateway handed out by a pool for one claimant."""

    address: str = ""
    prefix: int = 0
    gateway: str = ""


class AddressCache:
    """Per-pass cache of resolved pool addresses, keyed by pool name."""

    def __init__(self, entries: Optional[Dict[str, PoolAddress]] = None):
        self._entries: Dict[str, PoolAddress] = dict(entries or {})

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, pool: str) -> Optional[PoolAddress]:
        return self._entries.get(pool)

    def resolved(self, pool: str) -> bool:
        entry = self._entries.get(pool)
        return entry is not None and entry.address != ""

    def put(self, pool: str, value: PoolAddress) -> None:
        self._entries[pool] = value


@dataclass
class ResolveResult:
    addresses: AddressCache
    requeue: bool = False
    pending: List[str] = field(default_factory=list)


class PoolResolver:
    """
    Make sure the request holds a claim on every pool the template uses and
    collect the addresses the allocator has handed out so far.

    All pools are visited before deciding whether to requeue, so one pass
    learns as much as it can and the next one only waits on what is left.
    """

    def __init__(self, store: Store):
        self.store = store

    def resolve(
        self,
        data: Metal3Data,
        template: Metal3DataTemplate,
        cache: Optional[AddressCache] = None,
    ) -> ResolveResult:
        result = ResolveResult(addresses=cache if cache is not None else AddressCache())
        for pool_name in iter_pool_references(template):
            if result.addresses.resolved(pool_name) or pool_name in result.pending:
                continue
            if self._resolve_pool(data, pool_name, result.addresses):
                result.requeue = True
                result.pending.append(pool_name)

        if result.requeue:
            log.info(
                "Waiting on IP pools for %s/%s: %s",
                data.metadata.namespace, data.metadata.name, ", ".join(result.pending),
            )
        return result

    def _resolve_pool(self, data: Metal3Data, pool_name: str, cache: AddressCache) -> bool:
        """Resolve one pool into ``cache``. Returns True when we must requeue."""
        namespace = data.metadata.namespace
        cache.put(pool_name, PoolAddress())

        try:
            pool = self.store.get(Metal3IPPool, pool_name, namespace)
        except NotFoundError:
            log.debug("IP pool %s/%s not found yet", namespace, pool_name)
            return True

        if ensure_registered(pool, marker_for(data)):
            log.debug("Adding owner reference of %s on pool %s", data.metadata.name, pool_name)
            try:
                self.store.update(pool)
            except ConflictError:
                log.debug("Conflict updating pool %s, requeuing", pool_name)
                return True

        claim = claim_state(pool, data.metadata.name)
        if claim.state is ClaimState.PENDING:
            log.debug("No allocation for %s in pool %s yet", data.metadata.name, pool_name)
            return True
        if claim.state is ClaimState.EXHAUSTED:
            raise PoolExhausted(f"{pool_name} Unable to allocate IP address, pool exhausted ?")

        try:
            address = self.store.get(Metal3IPAddress, claim.address_name, namespace)
        except NotFoundError:
            log.debug("IP address %s/%s not found yet", namespace, claim.address_name)
            return True

        cache.put(
            pool_name,
            PoolAddress(
                address=address.spec.address,
                prefix=address.spec.prefix,
                gateway=address.spec.gateway or "",
            ),
        )
        return False
