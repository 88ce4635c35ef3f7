# src/metaldata/observers/logger.py
from __future__ import annotations
import logging
from .events import BaseEvent, DataFailed, PoolsPending

# identity fields are folded into the "ns/name" prefix
_CTX_FIELDS = ("ts", "run_id", "namespace", "name")


class LoggerObserver:
    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def notify(self, event: BaseEvent) -> None:
        etype = event.__class__.__name__
        fields = ", ".join(
            f"{k}={v}" for k, v in event.dict().items() if k not in _CTX_FIELDS
        )
        level = logging.INFO
        if isinstance(event, DataFailed):
            level = logging.ERROR
        elif isinstance(event, PoolsPending):
            level = logging.DEBUG

        self.logger.log(
            level, "[EVENT] %s %s/%s: %s", etype, event.namespace, event.name, fields
        )
