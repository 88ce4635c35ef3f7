# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/claims/release.py
from __future__ import annotations

import logging
from typing import Dict

from metaldata.claims.references import iter_pool_references
from metaldata.claims.ticket import ensure_unregistered, marker_for
from metaldata.errors import ConflictError, NotFoundError
from metaldata.models import Metal3Data, Metal3DataTemplate, Metal3IPPool
from metaldata.store.interface import Store

log = logging.getLogger("metaldata")


class ReleaseCoordinator:
    """Remove the request's owner reference from every pool the template uses."""

    def __init__(self, store: Store):
        self.store = store

    def release(self, data: Metal3Data, template: Metal3DataTemplate) -> bool:
        """Returns True when at least one pool could not be released yet."""
        released: Dict[str, bool] = {}
        requeue = False
        for pool_name in iter_pool_references(template):
            if pool_name in released:
                continue
            released[pool_name] = self._release_pool(data, pool_name)
            requeue = requeue or not released[pool_name]
        return requeue

    def _release_pool(self, data: Metal3Data, pool_name: str) -> bool:
        namespace = data.metadata.namespace
        try:
            pool = self.store.get(Metal3IPPool, pool_name, namespace)
        except NotFoundError:
            return True

        if not ensure_unregistered(pool, marker_for(data)):
            return True

        try:
            self.store.update(pool)
        except ConflictError:
            log.debug("Conflict releasing pool %s, requeuing", pool_name)
            return False
        log.info("Released %s from pool %s/%s", data.metadata.name, namespace, pool_name)
        return True
