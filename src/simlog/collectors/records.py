"""Structured record extraction from simulator log lines.

Simulator log lines carry an optional free-text prefix (timestamps, logger
names) followed by a JSON object. Console output echoed through the logger is
tagged with ``"logger":"STDOUT"`` and never holds a data record.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

CONSOLE_MARKER = '"logger":"STDOUT"'

_MISSING = object()


def _reject_constant(name: str):
    raise ValueError(f"Non-finite number {name} is not allowed")


_DECODER = json.JSONDecoder(parse_constant=_reject_constant)


class LineStatus(Enum):
    RECORD = "record"
    CONSOLE = "console"
    NO_RECORD = "no_record"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class Extraction:
    """Outcome of extracting a record from one log line."""

    status: LineStatus
    record: dict[str, Any] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is LineStatus.RECORD


def decode_record(text: str) -> Extraction:
    """Decode the leading JSON object of ``text``, reporting failure instead of raising.

    Text after the object is ignored. NaN and Infinity are rejected.
    """
    try:
        value, _ = _DECODER.raw_decode(text.lstrip())
    except ValueError as e:
        return Extraction(LineStatus.MALFORMED, error=str(e))
    if not isinstance(value, dict):
        return Extraction(LineStatus.MALFORMED, error=f"Expected an object, got {type(value).__name__}")
    return Extraction(LineStatus.RECORD, record=value)


def extract_record(line: str) -> Extraction:
    """Extract the trailing JSON record from a raw log line."""
    if CONSOLE_MARKER in line:
        return Extraction(LineStatus.CONSOLE)

    start = line.rfind("{")
    if start < 0:
        return Extraction(LineStatus.NO_RECORD)

    return decode_record(line[start:])


def lookup(record: Any, key_path: str, default: Any = None) -> Any:
    """Look up a dotted key path in a decoded record.

    Returns ``default`` when any step is missing or is not an object.
    """
    node = record
    for key in key_path.split("."):
        if not isinstance(node, dict):
            return default
        node = node.get(key, _MISSING)
        if node is _MISSING:
            return default
    return node
