# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/store/memory.py
"""
In-memory store used by tests and by the offline CLI.

Objects are kept as deep copies keyed by (kind, namespace, name). Every write
bumps ``metadata.resourceVersion``; a write carrying an older version fails
with ConflictError, the same contract an API server gives us.
"""
from __future__ import annotations

import logging
import uuid
from typing import Dict, Iterable, List, Tuple, Type, TypeVar

from metaldata.errors import AlreadyExistsError, ConflictError, NotFoundError, StoreError
from metaldata.models import KINDS, KubeObject

log = logging.getLogger("metaldata")

T = TypeVar("T", bound=KubeObject)
Key = Tuple[str, str, str]


class MemoryStore:
    def __init__(self, objects: Iterable[KubeObject] = ()):
        self._objects: Dict[Key, KubeObject] = {}
        self._version = 0
        for obj in objects:
            self.create(obj)

    @classmethod
    def from_documents(cls, documents: Iterable[dict]) -> "MemoryStore":
        """Build a store from raw manifests (e.g. a multi-document YAML bundle)."""
        objects: List[KubeObject] = []
        for doc in documents:
            if not doc:
                continue
            kind = doc.get("kind")
            model = KINDS.get(kind)
            if model is None:
                raise StoreError(f"unsupported kind {kind!r}")
            objects.append(model.model_validate(doc))
        return cls(objects)

    @staticmethod
    def _key(kind: str, name: str, namespace: str) -> Key:
        return (kind, namespace, name)

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    def get(self, model: Type[T], name: str, namespace: str) -> T:
        obj = self._objects.get(self._key(model.KIND, name, namespace))
        if obj is None:
            raise NotFoundError(f"{model.KIND} {namespace}/{name} not found")
        return obj.model_copy(deep=True)

    def list(self, model: Type[T], namespace: str | None = None) -> List[T]:
        return [
            obj.model_copy(deep=True)
            for (kind, ns, _), obj in sorted(self._objects.items())
            if kind == model.KIND and (namespace is None or ns == namespace)
        ]

    def create(self, obj: KubeObject) -> KubeObject:
        key = self._key(obj.kind, obj.metadata.name, obj.metadata.namespace)
        if key in self._objects:
            raise AlreadyExistsError(
                f"{obj.kind} {obj.metadata.namespace}/{obj.metadata.name} already exists"
            )
        stored = obj.model_copy(deep=True)
        if not stored.metadata.uid:
            stored.metadata.uid = str(uuid.uuid4())
        stored.metadata.resource_version = self._next_version()
        self._objects[key] = stored
        log.debug("created %s %s/%s", obj.kind, obj.metadata.namespace, obj.metadata.name)
        return stored.model_copy(deep=True)

    def update(self, obj: KubeObject) -> KubeObject:
        key = self._key(obj.kind, obj.metadata.name, obj.metadata.namespace)
        current = self._objects.get(key)
        if current is None:
            raise NotFoundError(
                f"{obj.kind} {obj.metadata.namespace}/{obj.metadata.name} not found"
            )
        if obj.metadata.resource_version != current.metadata.resource_version:
            raise ConflictError(
                f"{obj.kind} {obj.metadata.namespace}/{obj.metadata.name} was modified "
                f"(have {obj.metadata.resource_version}, "
                f"current {current.metadata.resource_version})"
            )
        stored = obj.model_copy(deep=True)
        stored.metadata.resource_version = self._next_version()
        self._objects[key] = stored
        obj.metadata.resource_version = stored.metadata.resource_version
        log.debug("updated %s %s/%s", obj.kind, obj.metadata.namespace, obj.metadata.name)
        return stored.model_copy(deep=True)

    def update_status(self, obj: KubeObject) -> KubeObject:
        return self.update(obj)
