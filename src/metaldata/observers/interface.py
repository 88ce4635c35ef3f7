# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/observers/interface.py
from __future__ import annotations
from typing import Protocol
from .events import BaseEvent

class Observer(Protocol):
    """
    Receives reconcile and release events from the EventBus.

    notify() runs inline in the reconciling worker; anything it raises is
    logged by the bus and dropped.
    """

    def notify(self, event: BaseEvent) -> None: ...
