# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/store/interface.py
from __future__ import annotations

from typing import Protocol, Type, TypeVar

from metaldata.models import KubeObject

T = TypeVar("T", bound=KubeObject)


class Store(Protocol):
    """
    Versioned object store with optimistic concurrency.

    get    -> raises NotFoundError
    create -> raises AlreadyExistsError
    update -> raises ConflictError when metadata.resourceVersion is stale
    Any other failure is a StoreError.
    """

    def get(self, model: Type[T], name: str, namespace: str) -> T: ...

    def create(self, obj: KubeObject) -> KubeObject: ...

    def update(self, obj: KubeObject) -> KubeObject: ...

    def update_status(self, obj: KubeObject) -> KubeObject: ...
