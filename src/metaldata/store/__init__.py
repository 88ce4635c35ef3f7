# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from .interface import Store
from .memory import MemoryStore

__all__ = ["Store", "MemoryStore"]
