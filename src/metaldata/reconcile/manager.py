# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/reconcile/manager.py
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from metaldata.claims.release import ReleaseCoordinator
from metaldata.claims.resolver import PoolResolver
from metaldata.config.models import Settings
from metaldata.errors import (
    AlreadyExistsError,
    NotFoundError,
    TemplateClusterMismatch,
    TerminalError,
)
from metaldata.models import (
    Metal3Data,
    Metal3DataTemplate,
    Metal3Machine,
    ObjectRef,
    OwnerReference,
    Secret,
)
from metaldata.observers.dispatcher import EventBus
from metaldata.observers.events import (
    DataFailed,
    DataReady,
    DataReconcileStarted,
    DocumentCreated,
    LeasesReleased,
    PoolsPending,
    new_ctx,
)
from metaldata.reconcile.nodes import NodeLookup, StoreNodeLookup
from metaldata.render import NodeAttributes, render_meta_data, render_network_data
from metaldata.store.interface import Store

log = logging.getLogger("metaldata")

META_DATA_KEY = "metaData"
NETWORK_DATA_KEY = "networkData"


class DataState(str, Enum):
    FRESH = "Fresh"
    PENDING_POOLS = "PendingPools"
    READY = "Ready"
    ERRORED = "Errored"


@dataclass(frozen=True)
class ReconcileResult:
    state: DataState
    requeue_after: Optional[float] = None
    error: Optional[str] = None

    @property
    def requeue(self) -> bool:
        return self.requeue_after is not None


class DataManager:
    """
    Drives one Metal3Data through a single reconciliation pass.

    The pass never sleeps: when it has to wait on the allocator or on another
    controller it returns a result carrying ``requeue_after`` and leaves the
    scheduling to the caller. Terminal errors are recorded on the status and
    re-raised; store failures are raised untouched.
    """

    def __init__(
        self,
        store: Store,
        data: Metal3Data,
        *,
        nodes: Optional[NodeLookup] = None,
        settings: Optional[Settings] = None,
        bus: Optional[EventBus] = None,
        run_id: Optional[str] = None,
    ):
        self.store = store
        self.data = data
        self.settings = settings or Settings()
        self.nodes = nodes or StoreNodeLookup(store, self.settings)
        self.bus = bus
        self.run_id = run_id or str(uuid.uuid4())

    # ------------------------------------------------------------------
    # Status helpers
    # ------------------------------------------------------------------
    def clear_error(self) -> None:
        self.data.status.error = False
        self.data.status.error_message = None

    def set_error(self, msg: str) -> None:
        self.data.status.error = True
        self.data.status.error_message = msg

    def _emit(self, event_cls, **kwargs) -> None:
        if self.bus:
            ctx = new_ctx(self.data.metadata.namespace, self.data.metadata.name, self.run_id)
            self.bus.emit(event_cls(**kwargs, **ctx))

    def _requeue(self, state: DataState) -> ReconcileResult:
        return ReconcileResult(state=state, requeue_after=self.settings.requeue_after_seconds)

    # ------------------------------------------------------------------
    # Reconcile
    # ------------------------------------------------------------------
    def reconcile(self) -> ReconcileResult:
        self.clear_error()
        try:
            return self._create_secrets()
        except TerminalError as e:
            log.error("Metal3Data %s/%s failed: %s",
                      self.data.metadata.namespace, self.data.metadata.name, e)
            self.set_error(str(e))
            self._emit(DataFailed, error=str(e))
            raise

    def _create_secrets(self) -> ReconcileResult:
        template = self._fetch_template()
        if template is None:
            return self._requeue(DataState.FRESH)
        log.info("Fetched Metal3DataTemplate %s", template.metadata.name)
        self._emit(DataReconcileStarted, template=template.metadata.name)

        spec = template.spec
        if spec.meta_data is None and spec.network_data is None:
            return self._ready([])

        m3m: Optional[Metal3Machine] = None
        if self._needs_default_names(template):
            m3m = self.nodes.metal3_machine(self.data)
            if m3m is None:
                log.info("Waiting for Metal3Machine of %s", self.data.metadata.name)
                return self._requeue(DataState.FRESH)
            self._set_default_names(template, m3m)

        need_meta_data = spec.meta_data is not None and not self._secret_exists(
            self.data.spec.meta_data
        )
        need_network_data = spec.network_data is not None and not self._secret_exists(
            self.data.spec.network_data
        )
        if not need_meta_data and not need_network_data:
            log.info("Metal3Data Reconciled")
            return self._ready([])

        # Claim an address on every referenced pool and collect what is allocated
        resolved = PoolResolver(self.store).resolve(self.data, template)
        if resolved.requeue:
            result = self._requeue(DataState.PENDING_POOLS)
            self._emit(PoolsPending, pools=list(resolved.pending),
                       requeue_after=result.requeue_after)
            return result

        node = self._node_attributes(m3m)
        if node is None:
            return self._requeue(DataState.PENDING_POOLS)

        # Render everything first so a rendering error persists nothing
        documents: List[Tuple[ObjectRef, str, bytes]] = []
        if need_meta_data:
            payload = render_meta_data(self.data, template, resolved.addresses, node)
            documents.append((self.data.spec.meta_data, META_DATA_KEY, payload))
        if need_network_data:
            payload = render_network_data(template, resolved.addresses, node.host)
            documents.append((self.data.spec.network_data, NETWORK_DATA_KEY, payload))

        for ref, key, payload in documents:
            log.info("Creating %s secret %s", key, ref.name)
            self._create_secret(template, ref, key, payload)

        log.info("Metal3Data reconciled")
        return self._ready([key for _, key, _ in documents])

    def _ready(self, rendered: List[str]) -> ReconcileResult:
        self.data.status.ready = True
        self._emit(DataReady, rendered=rendered)
        return ReconcileResult(state=DataState.READY)

    # ------------------------------------------------------------------
    # Release
    # ------------------------------------------------------------------
    def release_leases(self) -> ReconcileResult:
        """Drop our claims on every pool the template references."""
        try:
            return self._release()
        except TerminalError as e:
            log.error("Releasing claims of %s/%s failed: %s",
                      self.data.metadata.namespace, self.data.metadata.name, e)
            self.set_error(str(e))
            self._emit(DataFailed, error=str(e))
            raise

    def _release(self) -> ReconcileResult:
        template = self._fetch_template()
        if template is None:
            log.warning("Metal3DataTemplate of %s is gone, no pool to release",
                        self.data.metadata.name)
            self._emit(LeasesReleased, pending=False)
            return ReconcileResult(state=DataState.READY)

        requeue = ReleaseCoordinator(self.store).release(self.data, template)
        self._emit(LeasesReleased, pending=requeue)
        if requeue:
            return self._requeue(DataState.PENDING_POOLS)
        return ReconcileResult(state=DataState.READY)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _fetch_template(self) -> Optional[Metal3DataTemplate]:
        ref = self.data.spec.template
        namespace = ref.namespace or self.data.metadata.namespace
        try:
            template = self.store.get(Metal3DataTemplate, ref.name, namespace)
        except NotFoundError:
            log.info("Metal3DataTemplate %s/%s not found, requeuing", namespace, ref.name)
            return None

        cluster = self.data.metadata.labels.get(self.settings.cluster_label, "")
        if template.spec.cluster_name and cluster and template.spec.cluster_name != cluster:
            raise TemplateClusterMismatch(
                f"Metal3DataTemplate {ref.name} belongs to cluster "
                f"{template.spec.cluster_name}, not {cluster}"
            )
        return template

    def _needs_default_names(self, template: Metal3DataTemplate) -> bool:
        spec = self.data.spec
        return (
            template.spec.meta_data is not None
            and (spec.meta_data is None or not spec.meta_data.name)
        ) or (
            template.spec.network_data is not None
            and (spec.network_data is None or not spec.network_data.name)
        )

    def _set_default_names(self, template: Metal3DataTemplate, m3m: Metal3Machine) -> None:
        spec = self.data.spec
        namespace = self.data.metadata.namespace
        if template.spec.meta_data is not None and (spec.meta_data is None or not spec.meta_data.name):
            spec.meta_data = ObjectRef(
                name=m3m.metadata.name + self.settings.metadata_suffix, namespace=namespace
            )
        if template.spec.network_data is not None and (
            spec.network_data is None or not spec.network_data.name
        ):
            spec.network_data = ObjectRef(
                name=m3m.metadata.name + self.settings.networkdata_suffix, namespace=namespace
            )

    def _secret_exists(self, ref: ObjectRef) -> bool:
        log.info("Checking if secret exists: %s", ref.name)
        try:
            self.store.get(Secret, ref.name, self.data.metadata.namespace)
        except NotFoundError:
            log.info("Secret creation needed: %s", ref.name)
            return False
        return True

    def _node_attributes(self, m3m: Optional[Metal3Machine]) -> Optional[NodeAttributes]:
        if m3m is None:
            m3m = self.nodes.metal3_machine(self.data)
            if m3m is None:
                log.info("Waiting for Metal3Machine of %s", self.data.metadata.name)
                return None

        machine = self.nodes.owner_machine(m3m)
        if machine is None:
            return None
        log.info("Fetched Machine %s", machine.metadata.name)

        host = self.nodes.host(m3m)
        if host is None:
            log.info("Waiting for BareMetalHost of %s", m3m.metadata.name)
            return None
        log.info("Fetched BMH %s", host.metadata.name)

        return NodeAttributes(metal3_machine=m3m, machine=machine, host=host)

    def _create_secret(
        self,
        template: Metal3DataTemplate,
        ref: ObjectRef,
        key: str,
        payload: bytes,
    ) -> None:
        labels = {}
        cluster = template.metadata.labels.get(self.settings.cluster_label)
        if cluster:
            labels[self.settings.cluster_label] = cluster

        owner = OwnerReference(
            api_version=self.data.api_version,
            kind=self.data.kind,
            name=self.data.metadata.name,
            uid=self.data.metadata.uid,
            controller=True,
        )
        secret = Secret.from_payload(
            name=ref.name,
            namespace=self.data.metadata.namespace,
            key=key,
            payload=payload,
            labels=labels,
            owner_references=[owner],
        )
        try:
            self.store.create(secret)
        except AlreadyExistsError:
            # Created by a concurrent pass; the existing document is kept as is
            log.info("Secret %s already exists, leaving it untouched", ref.name)
            return
        self._emit(DocumentCreated, secret=ref.name, key=key)
