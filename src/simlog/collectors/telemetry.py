"""Telemetry log aggregation.

Each qualifying telemetry record carries a room id and a temperature, plus
optional heater state, cumulative energy and tariff counters::

    {"roomId": 1, "T_C": 21.8, "heaterOn": true, "energy_Wh": 1250.0,
     "lowKWh": 0.8, "highKWh": 0.45, "simTimeMs": 60000}

Absent counters carry forward the room's last known value. A tariff tick is
counted each time a cumulative counter strictly increases while the heater is on.
"""

import logging
import math
from pathlib import Path
from typing import Any

from ..models import AnalysisContext
from .records import LineStatus, extract_record

logger = logging.getLogger(__name__)


def as_bool(value: Any) -> bool:
    """Interpret a JSON value as a heater flag."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


def finite_float(value: Any) -> float:
    """Convert a JSON value to a float, rejecting NaN and infinities."""
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"Non-finite number {value!r}")
    return number


def optional_float(record: dict[str, Any], key: str) -> float | None:
    value = record.get(key)
    return finite_float(value) if value is not None else None


def ingest_telemetry(ctx: AnalysisContext, record: dict[str, Any]) -> bool:
    """Fold one decoded telemetry record into the context.

    Returns True if the record qualified for aggregation. Records without
    both ``T_C`` and ``roomId`` are ignored; records whose values cannot be
    read as numbers raise ValueError, TypeError or OverflowError.
    """
    if "T_C" not in record or "roomId" not in record:
        return False

    room_id = int(record["roomId"])
    temp = finite_float(record["T_C"])
    heater_on = as_bool(record.get("heaterOn", False))

    # Read everything before touching state so a bad value leaves the room untouched
    energy_wh = optional_float(record, "energy_Wh")
    low_kwh = optional_float(record, "lowKWh")
    high_kwh = optional_float(record, "highKWh")
    sim_time = record.get("simTimeMs")
    if sim_time is not None:
        sim_time = int(sim_time)

    stats = ctx.room(room_id)

    stats.temperature_samples.append(temp)
    if temp < stats.min_temp:
        stats.min_temp = temp
    if temp > stats.max_temp:
        stats.max_temp = temp

    if heater_on:
        stats.heater_on_count += 1

    if energy_wh is not None:
        stats.last_energy_wh = energy_wh

    if low_kwh is None:
        low_kwh = stats.last_low_kwh
    if high_kwh is None:
        high_kwh = stats.last_high_kwh

    if heater_on:
        if low_kwh > stats.last_low_kwh:
            stats.low_ticks += 1
        if high_kwh > stats.last_high_kwh:
            stats.high_ticks += 1

    stats.last_low_kwh = low_kwh
    stats.last_high_kwh = high_kwh
    stats.total_low_kwh = low_kwh
    stats.total_high_kwh = high_kwh

    if sim_time is not None:
        summary = ctx.summary
        if summary.min_sim_time_ms is None or sim_time < summary.min_sim_time_ms:
            summary.min_sim_time_ms = sim_time
        if summary.max_sim_time_ms is None or sim_time > summary.max_sim_time_ms:
            summary.max_sim_time_ms = sim_time

        if heater_on:
            ctx.buckets.setdefault(sim_time, set()).add(room_id)

    ctx.summary.valid_telemetry_records += 1
    return True


def process_line(ctx: AnalysisContext, line: str) -> None:
    """Count and process a single raw telemetry log line."""
    summary = ctx.summary
    summary.total_lines += 1

    extraction = extract_record(line)
    if extraction.status is LineStatus.CONSOLE:
        summary.console_lines += 1
        return
    if extraction.status is LineStatus.MALFORMED:
        summary.malformed_lines += 1
        logger.debug("Skipping malformed line %d: %s", summary.total_lines, extraction.error)
        return
    if not extraction.ok:
        return

    try:
        ingest_telemetry(ctx, extraction.record)
    except (ValueError, TypeError, OverflowError) as e:
        summary.malformed_lines += 1
        logger.debug("Skipping unreadable record on line %d: %s", summary.total_lines, e)


def process_telemetry_log(ctx: AnalysisContext, log_path: Path) -> None:
    """Run the telemetry pass over a log file.

    Raises OSError if the file cannot be opened or read.
    """
    with open(log_path, encoding="utf-8", errors="replace") as f:
        for line in f:
            process_line(ctx, line.rstrip("\r\n"))

    logger.debug(
        "Telemetry pass: %d lines, %d valid records, %d malformed",
        ctx.summary.total_lines,
        ctx.summary.valid_telemetry_records,
        ctx.summary.malformed_lines,
    )
