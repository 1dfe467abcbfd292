"""HTTP access-audit correlation.

Manual heater switches show up in the simulator's access log as
``POST /switch/{roomId}/...`` requests. The same request can be delivered to
the log more than once, so requests are deduplicated on path and timestamp.
"""

import logging
from pathlib import Path
from typing import Any

from ..models import AnalysisContext
from .records import decode_record

logger = logging.getLogger(__name__)

SWITCH_PREFIX = "/switch/"
CANDIDATE_MARKERS = ('"method":"POST"', '"path":"/switch/', '"status":200')
KEY_SEPARATOR = "|"


def is_switch_candidate(line: str) -> bool:
    """Cheap substring check for successful POST /switch/ requests."""
    return all(marker in line for marker in CANDIDATE_MARKERS)


def dedup_key(path: str, timestamp: str) -> str:
    return f"{path}{KEY_SEPARATOR}{timestamp}"


def room_id_from_path(path: str) -> int:
    """Extract the room id from ``/switch/{roomId}/...``.

    Raises ValueError if the segment is missing or not an integer.
    """
    parts = path.split("/")
    if len(parts) < 3:
        raise ValueError(f"No room id in path {path!r}")
    return int(parts[2])


def ingest_audit(ctx: AnalysisContext, record: dict[str, Any]) -> bool:
    """Count one decoded audit record as a user interaction.

    Returns True if the record was a new interaction. Raises ValueError if
    the path does not carry a numeric room id.
    """
    path = record.get("path")
    timestamp = record.get("@timestamp")
    path = path if isinstance(path, str) else ""
    timestamp = str(timestamp) if timestamp is not None else ""

    if not path.startswith(SWITCH_PREFIX) or not timestamp:
        return False

    key = dedup_key(path, timestamp)
    if key in ctx.seen_requests:
        ctx.summary.duplicate_requests += 1
        return False
    ctx.seen_requests.add(key)

    room_id = room_id_from_path(path)
    ctx.room(room_id).user_interactions += 1
    return True


def process_audit_log(ctx: AnalysisContext, log_path: Path) -> None:
    """Run the audit pass over an access log.

    Raises OSError if the file cannot be opened or read.
    """
    summary = ctx.summary
    with open(log_path, encoding="utf-8", errors="replace") as f:
        for line in f:
            summary.http_lines += 1
            if not is_switch_candidate(line):
                continue
            summary.http_candidates += 1

            extraction = decode_record(line.strip())
            if not extraction.ok:
                logger.debug("Skipping undecodable audit line %d: %s", summary.http_lines, extraction.error)
                continue

            try:
                ingest_audit(ctx, extraction.record)
            except ValueError as e:
                logger.debug("Skipping audit line %d: %s", summary.http_lines, e)

    summary.http_log_processed = True
    logger.debug(
        "Audit pass: %d lines, %d switch requests, %d duplicates",
        summary.http_lines,
        summary.http_candidates,
        summary.duplicate_requests,
    )
