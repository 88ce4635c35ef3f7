# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/store/kube.py
"""
Store backed by a Kubernetes API server.

Custom resources (Metal3Data, Metal3IPPool, ...) go through
CustomObjectsApi; Secrets through CoreV1Api. API errors are mapped onto the
store error contract: 404 -> NotFoundError, 409 on create ->
AlreadyExistsError, 409 on update -> ConflictError, anything else ->
StoreError.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Type, TypeVar

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException

from metaldata.errors import AlreadyExistsError, ConflictError, NotFoundError, StoreError
from metaldata.models import KubeObject, Secret

log = logging.getLogger("metaldata")

T = TypeVar("T", bound=KubeObject)


def load_api_client(kube_context: Optional[str] = None) -> client.ApiClient:
    """Kube config from ~/.kube/config (optionally a given context), else in-cluster."""
    try:
        config.load_kube_config(context=kube_context)
    except config.ConfigException:
        if kube_context:
            raise
        config.load_incluster_config()
    return client.ApiClient()


class KubeStore:
    def __init__(
        self,
        api_client: Optional[client.ApiClient] = None,
        *,
        custom_api: Any = None,
        core_api: Any = None,
    ):
        self.api_client = api_client or client.ApiClient()
        self.custom = custom_api or client.CustomObjectsApi(self.api_client)
        self.core = core_api or client.CoreV1Api(self.api_client)

    def _call(self, what: str, fn: Callable[[], Any], *, conflict=ConflictError) -> Any:
        try:
            return fn()
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(f"{what} not found") from e
            if e.status == 409:
                raise conflict(f"{what}: {e.reason}") from e
            raise StoreError(f"{what}: {e.status} {e.reason}") from e

    def _to_model(self, model: Type[T], raw: Any) -> T:
        if not isinstance(raw, dict):
            raw = self.api_client.sanitize_for_serialization(raw)
        return model.model_validate(raw)

    def get(self, model: Type[T], name: str, namespace: str) -> T:
        what = f"{model.KIND} {namespace}/{name}"
        if model is Secret:
            raw = self._call(what, lambda: self.core.read_namespaced_secret(name, namespace))
        else:
            raw = self._call(what, lambda: self.custom.get_namespaced_custom_object(
                model.GROUP, model.VERSION, namespace, model.PLURAL, name,
            ))
        return self._to_model(model, raw)

    def create(self, obj: KubeObject) -> KubeObject:
        what = f"{obj.kind} {obj.metadata.namespace}/{obj.metadata.name}"
        body = obj.to_wire()
        body["metadata"].pop("resourceVersion", None)
        if isinstance(obj, Secret):
            raw = self._call(
                what,
                lambda: self.core.create_namespaced_secret(obj.metadata.namespace, body),
                conflict=AlreadyExistsError,
            )
        else:
            raw = self._call(
                what,
                lambda: self.custom.create_namespaced_custom_object(
                    obj.GROUP, obj.VERSION, obj.metadata.namespace, obj.PLURAL, body,
                ),
                conflict=AlreadyExistsError,
            )
        log.debug("created %s", what)
        return self._to_model(type(obj), raw)

    def update(self, obj: KubeObject) -> KubeObject:
        what = f"{obj.kind} {obj.metadata.namespace}/{obj.metadata.name}"
        body = obj.to_wire()
        if isinstance(obj, Secret):
            raw = self._call(what, lambda: self.core.replace_namespaced_secret(
                obj.metadata.name, obj.metadata.namespace, body,
            ))
        else:
            raw = self._call(what, lambda: self.custom.replace_namespaced_custom_object(
                obj.GROUP, obj.VERSION, obj.metadata.namespace, obj.PLURAL,
                obj.metadata.name, body,
            ))
        updated = self._to_model(type(obj), raw)
        obj.metadata.resource_version = updated.metadata.resource_version
        log.debug("updated %s", what)
        return updated

    def update_status(self, obj: KubeObject) -> KubeObject:
        what = f"{obj.kind} {obj.metadata.namespace}/{obj.metadata.name} status"
        raw = self._call(what, lambda: self.custom.replace_namespaced_custom_object_status(
            obj.GROUP, obj.VERSION, obj.metadata.namespace, obj.PLURAL,
            obj.metadata.name, obj.to_wire(),
        ))
        updated = self._to_model(type(obj), raw)
        obj.metadata.resource_version = updated.metadata.resource_version
        return updated
