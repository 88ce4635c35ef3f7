# src/metaldata/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict, field
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events of one reconciliation pass
    namespace: str    # Metal3Data namespace
    name: str         # Metal3Data name

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(namespace: str, name: str, run_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "run_id": run_id or str(uuid.uuid4()),
        "namespace": namespace,
        "name": name,
    }


# ---------------------------------------------------------------------
# Reconcile lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class DataReconcileStarted(BaseEvent):
    template: str

@dataclass(frozen=True)
class PoolsPending(BaseEvent):
    pools: List[str] = field(default_factory=list)
    requeue_after: float = 0.0

@dataclass(frozen=True)
class DocumentCreated(BaseEvent):
    secret: str
    key: str          # "metaData" | "networkData"

@dataclass(frozen=True)
class DataReady(BaseEvent):
    rendered: List[str] = field(default_factory=list)

@dataclass(frozen=True)
class DataFailed(BaseEvent):
    error: str


# ---------------------------------------------------------------------
# Release lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class LeasesReleased(BaseEvent):
    pending: bool
