# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/claims/ticket.py
"""
Claim tickets on an IP pool.

A claimant registers interest by adding a non-controller owner reference to
the pool. The allocator later fulfills the claim by writing
``status.allocations[<claimant>] = <Metal3IPAddress name>``. Here we only
query that state and add or remove our own marker; the allocation map is
never written.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from metaldata.models import KubeObject, Metal3IPPool, OwnerReference


class ClaimState(str, Enum):
    PENDING = "pending"
    EXHAUSTED = "exhausted"
    ASSIGNED = "assigned"


@dataclass(frozen=True)
class Claim:
    state: ClaimState
    address_name: Optional[str] = None


def _group(api_version: str) -> str:
    return api_version.split("/", 1)[0] if "/" in api_version else ""


def marker_for(owner: KubeObject) -> OwnerReference:
    return OwnerReference(
        api_version=owner.api_version,
        kind=owner.kind,
        name=owner.metadata.name,
        uid=owner.metadata.uid,
        controller=False,
    )


def find_marker(refs: List[OwnerReference], marker: OwnerReference) -> Optional[int]:
    """Index of the reference matching kind, name and API group (version ignored)."""
    for i, ref in enumerate(refs):
        if (
            ref.kind == marker.kind
            and ref.name == marker.name
            and _group(ref.api_version) == _group(marker.api_version)
        ):
            return i
    return None


def ensure_registered(pool: Metal3IPPool, marker: OwnerReference) -> bool:
    """Append ``marker`` to the pool owners. Returns True when the pool changed."""
    if find_marker(pool.metadata.owner_references, marker) is not None:
        return False
    pool.metadata.owner_references.append(marker)
    return True


def ensure_unregistered(pool: Metal3IPPool, marker: OwnerReference) -> bool:
    """Drop ``marker`` from the pool owners. Returns True when the pool changed."""
    i = find_marker(pool.metadata.owner_references, marker)
    if i is None:
        return False
    del pool.metadata.owner_references[i]
    return True


def claim_state(pool: Metal3IPPool, claimant: str) -> Claim:
    try:
        address_name = pool.status.allocations[claimant]
    except KeyError:
        return Claim(ClaimState.PENDING)
    if address_name == "":
        return Claim(ClaimState.EXHAUSTED)
    return Claim(ClaimState.ASSIGNED, address_name)
