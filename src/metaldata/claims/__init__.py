# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from .release import ReleaseCoordinator
from .resolver import AddressCache, PoolAddress, PoolResolver, ResolveResult

__all__ = ["AddressCache", "PoolAddress", "PoolResolver", "ReleaseCoordinator", "ResolveResult"]
