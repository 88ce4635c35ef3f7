# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from .controller import DataReconciler
from .manager import DataManager, DataState, ReconcileResult
from .nodes import NodeLookup, StoreNodeLookup

__all__ = [
    "DataManager",
    "DataReconciler",
    "DataState",
    "NodeLookup",
    "ReconcileResult",
    "StoreNodeLookup",
]
