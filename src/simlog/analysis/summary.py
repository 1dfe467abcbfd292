"""Generate summaries of an analysis run."""

from ..models import AnalysisContext, RoomStats

COMFORT_BAND_C = 0.5  # ± °C around the expected temperature


def _percent(part: float, whole: float) -> float:
    return round(part / whole * 100, 1) if whole > 0 else 0


def format_duration(duration_ms: int) -> str:
    """Format a duration as ``HHh MMm SSs``."""
    total_seconds = duration_ms / 1000.0
    hours = int(total_seconds // 3600)
    minutes = int((total_seconds % 3600) // 60)
    seconds = int(total_seconds % 60)
    return f"{hours:02d}h {minutes:02d}m {seconds:02d}s"


def comfort_counts(stats: RoomStats, band: float = COMFORT_BAND_C) -> dict:
    """Count samples within, below and above the expected temperature band."""
    low = stats.expected_temp - band
    high = stats.expected_temp + band
    within = below = above = 0
    for temp in stats.temperature_samples:
        if abs(temp - stats.expected_temp) <= band:
            within += 1
        elif temp < low:
            below += 1
        elif temp > high:
            above += 1
    return {"within": within, "below": below, "above": above}


def get_room_summary(room_id: int, stats: RoomStats, band: float = COMFORT_BAND_C) -> dict:
    """Generate the summary for a single room."""
    total = stats.sample_count
    counts = comfort_counts(stats, band)
    ticks = stats.tariff_ticks

    return {
        "room_id": room_id,
        "expected_temp_c": stats.expected_temp,
        "rated_energy_kwh": stats.rated_energy_kwh,
        "samples": total,
        "min_temp_c": round(stats.min_temp, 2) if total else None,
        "max_temp_c": round(stats.max_temp, 2) if total else None,
        "within_percent": _percent(counts["within"], total),
        "below_percent": _percent(counts["below"], total),
        "above_percent": _percent(counts["above"], total),
        "heater_on_percent": _percent(stats.heater_on_count, total),
        "energy_kwh": round(stats.energy_kwh, 3),
        "user_interactions": stats.user_interactions,
        "tariff": {
            "low_ticks": stats.low_ticks,
            "high_ticks": stats.high_ticks,
            "low_percent": _percent(stats.low_ticks, ticks),
            "high_percent": _percent(stats.high_ticks, ticks),
            "low_kwh": round(stats.total_low_kwh, 3),
            "high_kwh": round(stats.total_high_kwh, 3),
        },
    }


def get_site_summary(ctx: AnalysisContext, band: float = COMFORT_BAND_C) -> dict:
    """Generate the site-wide summary for a completed run."""
    summary = ctx.summary
    duration_ms = summary.sim_duration_ms
    budget = summary.max_energy_budget_kwh

    # Rooms that never reported a temperature have nothing to summarize
    rooms = [
        get_room_summary(room_id, stats, band)
        for room_id, stats in sorted(ctx.rooms.items())
        if stats.sample_count > 0
    ]

    return {
        "config": {
            "rooms": [
                {"room_id": room.room_id, "expected_temp_c": room.expected_temp, "energy_kwh": room.rated_energy_kwh}
                for room in ctx.config.rooms.values()
            ],
            "max_energy_kwh": round(budget, 2),
            "skipped_units": ctx.config.skipped_units,
        },
        "lines": {
            "total": summary.total_lines,
            "valid": summary.valid_telemetry_records,
            "console": summary.console_lines,
            "malformed": summary.malformed_lines,
        },
        "simulation": {
            "start_ms": summary.min_sim_time_ms,
            "end_ms": summary.max_sim_time_ms,
            "duration_seconds": round(duration_ms / 1000.0, 1) if duration_ms is not None else None,
            "duration": format_duration(duration_ms) if duration_ms is not None else None,
        },
        "peak": {
            "kwh": round(summary.peak_simultaneous_kwh, 2),
            "sim_time_ms": summary.peak_sim_time_ms,
            "budget_kwh": round(budget, 2),
            "percent_of_budget": _percent(summary.peak_simultaneous_kwh, budget),
        },
        "http": {
            "processed": summary.http_log_processed,
            "lines": summary.http_lines,
            "switch_requests": summary.http_candidates,
            "duplicates": summary.duplicate_requests,
        },
        "comfort_band_c": band,
        "rooms": rooms,
    }


def format_room_summary_text(room: dict) -> str:
    """Format one room's summary as human-readable text."""
    tariff = room["tariff"]
    lines = [
        f"Room {room['room_id']}:",
        f"  - Expected: {room['expected_temp_c']:.1f}°C",
        f"  - Temperature: min={room['min_temp_c']:.2f}°C / max={room['max_temp_c']:.2f}°C",
        f"  - Within expected range: {room['within_percent']:.1f}% | "
        f"Below: {room['below_percent']:.1f}% | Above: {room['above_percent']:.1f}%",
        f"  - Heater on: {room['heater_on_percent']:.1f}%",
        f"  - Cumulative energy: {room['energy_kwh']:.3f} kWh",
        f"  - User interactions (POST): {room['user_interactions']}",
        f"  - Low tariff: {tariff['low_percent']:.1f}% ({tariff['low_ticks']} ticks)",
        f"  - High tariff: {tariff['high_percent']:.1f}% ({tariff['high_ticks']} ticks)",
        f"  - Total low tariff consumption: {tariff['low_kwh']:.3f} kWh",
        f"  - Total high tariff consumption: {tariff['high_kwh']:.3f} kWh",
    ]
    return "\n".join(lines)


def format_site_summary_text(summary: dict) -> str:
    """Format a site summary as human-readable text."""
    lines = ["Configuration:"]
    for room in summary["config"]["rooms"]:
        lines.append(
            f"  - Room {room['room_id']}: expected {room['expected_temp_c']:.1f}°C, "
            f"rated {room['energy_kwh']:.2f} kWh"
        )
    lines.append(f"  - Site energy budget: {summary['config']['max_energy_kwh']:.2f} kWh")

    lines.extend([
        "",
        "Summary:",
        f"  - Lines processed: {summary['lines']['total']} | Valid records: {summary['lines']['valid']}",
    ])
    if summary["lines"]["malformed"]:
        lines.append(f"  - Malformed lines skipped: {summary['lines']['malformed']}")

    sim = summary["simulation"]
    if sim["duration"] is not None:
        lines.append(f"  - Simulated duration: {sim['duration_seconds']:.1f} s ({sim['duration']})")

    peak = summary["peak"]
    lines.append(
        f"  - Peak simultaneous demand: {peak['kwh']:.2f} kWh "
        f"({peak['kwh']:.2f} / {peak['budget_kwh']:.2f} = {peak['percent_of_budget']:.1f}% of budget)"
    )

    if not summary["http"]["processed"]:
        lines.append("  - HTTP log not analyzed, user interactions unavailable")

    for room in summary["rooms"]:
        lines.extend(["", format_room_summary_text(room)])

    return "\n".join(lines)
