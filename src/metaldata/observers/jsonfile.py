# src/metaldata/observers/jsonfile.py
from __future__ import annotations
import json
from pathlib import Path
from .interface import Observer
from .events import BaseEvent

class JsonFileObserver(Observer):
    """Append one JSON object per event (JSON lines) to ``path``."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def record(self, event: BaseEvent) -> dict:
        return {"type": event.__class__.__name__, **event.dict()}

    def notify(self, event: BaseEvent) -> None:
        line = json.dumps(self.record(event), sort_keys=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
