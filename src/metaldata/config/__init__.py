# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from .loader import load_settings
from .models import Settings

__all__ = ["Settings", "load_settings"]
