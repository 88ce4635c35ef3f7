# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/utils/serialize.py

from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any

import yaml
from pydantic import BaseModel


def to_jsonable(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(by_alias=True, exclude_none=True, mode="json")

    if is_dataclass(obj):
        return to_jsonable(asdict(obj))

    if isinstance(obj, dict):
        return {k: to_jsonable(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]

    if isinstance(obj, Enum):
        return obj.value

    return obj


def dump_yaml(data: Any) -> bytes:
    """
    Stable YAML rendering: sorted keys, block style, UTF-8. The same input
    always yields the same bytes.
    """
    return yaml.safe_dump(
        to_jsonable(data),
        default_flow_style=False,
        sort_keys=True,
        allow_unicode=True,
    ).encode("utf-8")
