# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/config/models.py

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class Settings(BaseModel):
    # Fixed delay handed back to the scheduler whenever a pass has to wait
    requeue_after_seconds: float = Field(30.0, gt=0)

    namespace: str = "default"          # default namespace for CLI lookups
    kube_context: Optional[str] = None  # Kubernetes context for KubeStore

    cluster_label: str = "cluster.x-k8s.io/cluster-name"
    host_annotation: str = "metal3.io/BareMetalHost"

    metadata_suffix: str = "-metadata"
    networkdata_suffix: str = "-networkdata"

    log_dir: Optional[Path] = None
