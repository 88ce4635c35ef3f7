# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

#src/metaldata/logging/log.py

from __future__ import annotations

import logging
import re
from pathlib import Path
from datetime import datetime, timezone
import uuid

_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]+")


def reset_logging(name: str = "metaldata") -> logging.Logger:
    """Close and drop every handler of ``name``; propagation is restored."""
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    return logger


def init_logging(
    *,
    base_dir: Path | None = None,
    name: str = "metaldata",
    verbose: bool = False,
    target: str | None = None,
) -> tuple[logging.Logger, str, Path]:
    """
    Initializes logging for one CLI run:
      - full DEBUG trace in a per-run log file, named after ``target``
        (e.g. "default/data-0") when given
      - console output on stderr at INFO (DEBUG with verbose)
      - returns run_id so observers and events can reuse it
    """
    run_id = str(uuid.uuid4())

    if base_dir is None:
        base_dir = Path.home() / ".metaldata" / "logs"
    base_dir = Path(base_dir)
    base_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    stem = f"{name}-{ts}"
    if target:
        stem += "-" + _UNSAFE.sub("_", target)
    log_path = base_dir / f"{stem}-{run_id[:8]}.log"

    logger = reset_logging(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # File = FULL TRACE
    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(formatter)

    # Console = INFO by default, DEBUG when --debug is passed
    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch.setFormatter(formatter)

    logger.addHandler(fh)
    logger.addHandler(ch)

    logger.debug("=== metaldata run started ===")
    logger.debug("run_id=%s target=%s", run_id, target or "-")
    logger.debug("log_file=%s", log_path)

    return logger, run_id, log_path
