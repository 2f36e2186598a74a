"""
Column decoding helpers shared by the readers and EXPLAIN capture.

Depending on the driver build, text columns may arrive as bytes; these
helpers normalize them and raise ValueError for values that cannot be
decoded, which callers turn into QueryError.
"""

from datetime import datetime
from typing import Any, Optional


def text(value: Any) -> Any:
    """Decode bytes returned by the driver for text columns; pass anything else through."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return value


def optional_text(value: Any) -> Optional[str]:
    value = text(value)
    return None if value is None else str(value)


def required_int(value: Any, column: str) -> int:
    if value is None or isinstance(value, bool):
        raise ValueError(f"column {column} is {value!r}, expected an integer")
    return int(text(value))


def optional_int(value: Any) -> Optional[int]:
    value = text(value)
    return None if value is None else int(value)


def optional_float(value: Any) -> Optional[float]:
    value = text(value)
    return None if value is None else float(value)


def timestamp(value: Any, column: str) -> datetime:
    value = text(value)
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    raise ValueError(f"column {column} is {value!r}, expected a timestamp")
