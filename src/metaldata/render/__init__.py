# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/render/__init__.py
from __future__ import annotations

from typing import NamedTuple, Optional

from metaldata.claims.resolver import AddressCache
from metaldata.models import Metal3Data, Metal3DataTemplate

from .meta_data import build_meta_data, render_meta_data
from .network_data import build_network_data, render_network_data
from .node import NodeAttributes, ObjectKind


class RenderedDocuments(NamedTuple):
    meta_data: Optional[bytes]
    network_data: Optional[bytes]


def render(
    data: Metal3Data,
    template: Metal3DataTemplate,
    addresses: AddressCache,
    node: NodeAttributes,
) -> RenderedDocuments:
    """Render both documents. A section missing from the template yields None."""
    return RenderedDocuments(
        meta_data=render_meta_data(data, template, addresses, node),
        network_data=render_network_data(template, addresses, node.host),
    )


__all__ = [
    "NodeAttributes",
    "ObjectKind",
    "RenderedDocuments",
    "build_meta_data",
    "build_network_data",
    "render",
    "render_meta_data",
    "render_network_data",
]
