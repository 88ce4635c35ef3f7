# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/reconcile/controller.py
from __future__ import annotations

import logging
from typing import Optional

from metaldata.config.models import Settings
from metaldata.errors import ConflictError, NotFoundError, TerminalError
from metaldata.models import Metal3Data
from metaldata.observers.dispatcher import EventBus
from metaldata.reconcile.manager import DataManager, DataState, ReconcileResult
from metaldata.reconcile.nodes import NodeLookup, StoreNodeLookup
from metaldata.store.interface import Store

log = logging.getLogger("metaldata")


class DataReconciler:
    """
    Entry point for one reconciliation of a Metal3Data, as a scheduler calls
    it: fetch the object, run the reconcile or release path, write back spec
    and status.
    """

    def __init__(
        self,
        store: Store,
        *,
        nodes: Optional[NodeLookup] = None,
        settings: Optional[Settings] = None,
        bus: Optional[EventBus] = None,
        run_id: Optional[str] = None,
    ):
        self.store = store
        self.settings = settings or Settings()
        self.nodes = nodes or StoreNodeLookup(store, self.settings)
        self.bus = bus
        self.run_id = run_id

    def reconcile(self, namespace: str, name: str) -> ReconcileResult:
        try:
            data = self.store.get(Metal3Data, name, namespace)
        except NotFoundError:
            log.debug("Metal3Data %s/%s is gone, nothing to do", namespace, name)
            return ReconcileResult(state=DataState.READY)

        manager = DataManager(
            self.store, data, nodes=self.nodes, settings=self.settings, bus=self.bus,
            run_id=self.run_id,
        )
        original_spec = data.spec.model_copy(deep=True)

        if data.metadata.deletion_timestamp:
            log.info("Releasing IP pool claims of %s/%s", namespace, name)
            try:
                return manager.release_leases()
            except TerminalError as e:
                return self._persist(
                    data, original_spec, ReconcileResult(state=DataState.ERRORED, error=str(e))
                )

        try:
            result = manager.reconcile()
        except TerminalError as e:
            result = ReconcileResult(state=DataState.ERRORED, error=str(e))

        return self._persist(data, original_spec, result)

    def _persist(self, data: Metal3Data, original_spec, result: ReconcileResult) -> ReconcileResult:
        try:
            if data.spec != original_spec:
                updated = self.store.update(data)
                data.metadata.resource_version = updated.metadata.resource_version
            self.store.update_status(data)
        except ConflictError:
            log.info("Metal3Data %s/%s changed while reconciling, requeuing",
                     data.metadata.namespace, data.metadata.name)
            return ReconcileResult(
                state=result.state,
                requeue_after=self.settings.requeue_after_seconds,
                error=result.error,
            )
        return result
