# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from .address import FixedWidthAddress, compute_address
from .mask import mask_for

__all__ = ["FixedWidthAddress", "compute_address", "mask_for"]
