"""
Structured record output.

Every anomaly, plan, kill, lock and summary is written as one indented JSON
document. Pollers run on separate threads, so writes are serialized to keep
documents from interleaving.
"""

import dataclasses
import json
import logging
import sys
import threading
from datetime import datetime
from typing import Any, Dict, Optional, TextIO

logger = logging.getLogger(__name__)


def to_jsonable(value: Any) -> Any:
    """Convert dataclasses, containers and timestamps into JSON-ready values."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    return value


class RecordSerializer:
    """Writes records as indented JSON to a text stream (stdout by default)."""

    def __init__(self, stream: Optional[TextIO] = None, indent: int = 2):
        self.stream = stream
        self.indent = indent
        self.records_written = 0
        self._lock = threading.Lock()

    def render(self, event: str, message: str, data: Any = None, **fields: Any) -> str:
        document: Dict[str, Any] = {"event": event, "message": message}
        document.update({k: to_jsonable(v) for k, v in fields.items()})
        if data is not None:
            document["data"] = to_jsonable(data)
        return json.dumps(document, indent=self.indent, default=str)

    def emit(self, event: str, message: str, data: Any = None, **fields: Any) -> None:
        """
        Write one record.

        Args:
            event: Record kind, e.g. "slow_query" or "summary"
            message: Human-readable headline
            data: Payload (dataclass, list or dict)
            **fields: Extra top-level fields such as the poller name
        """
        text = self.render(event, message, data, **fields)
        stream = self.stream or sys.stdout
        with self._lock:
            stream.write(text + "\n")
            stream.flush()
            self.records_written += 1
