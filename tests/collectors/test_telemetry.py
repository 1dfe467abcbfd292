"""Tests for telemetry aggregation."""

import json

import pytest

from simlog.collectors.telemetry import as_bool, ingest_telemetry, process_line, process_telemetry_log
from simlog.models import AnalysisContext, RoomConfig, SiteConfig


@pytest.fixture
def ctx():
    config = SiteConfig(
        rooms={
            1: RoomConfig(room_id=1, expected_temp=22.0, rated_energy_kwh=3.0),
            2: RoomConfig(room_id=2, expected_temp=20.0, rated_energy_kwh=2.0),
        },
        max_energy_kwh=10.0,
    )
    return AnalysisContext.from_config(config)


def test_ingest_requires_room_and_temperature(ctx):
    assert not ingest_telemetry(ctx, {"roomId": 1})
    assert not ingest_telemetry(ctx, {"T_C": 21.0})
    assert ctx.summary.valid_telemetry_records == 0
    assert ctx.rooms[1].sample_count == 0


def test_ingest_temperature_extrema(ctx):
    for temp in (21.8, 22.9, 20.1, 23.6):
        ingest_telemetry(ctx, {"roomId": 1, "T_C": temp})

    stats = ctx.rooms[1]
    assert stats.temperature_samples == [21.8, 22.9, 20.1, 23.6]
    assert stats.min_temp == 20.1
    assert stats.max_temp == 23.6
    assert ctx.summary.valid_telemetry_records == 4


def test_min_max_hold_for_every_prefix(ctx):
    for temp in (19.5, 25.0, 18.2, 22.0, 26.3):
        ingest_telemetry(ctx, {"roomId": 2, "T_C": temp})
        stats = ctx.rooms[2]
        assert all(stats.min_temp <= t <= stats.max_temp for t in stats.temperature_samples)


def test_unknown_room_has_no_configured_attributes(ctx):
    """Rooms seen only in the log get zero expected temperature and capacity."""
    ingest_telemetry(ctx, {"roomId": 7, "T_C": 19.0, "heaterOn": True})

    stats = ctx.rooms[7]
    assert stats.expected_temp == 0.0
    assert stats.rated_energy_kwh == 0.0
    assert stats.heater_on_count == 1


def test_heater_defaults_to_off(ctx):
    ingest_telemetry(ctx, {"roomId": 1, "T_C": 21.0})
    assert ctx.rooms[1].heater_on_count == 0


def test_energy_carries_forward(ctx):
    ingest_telemetry(ctx, {"roomId": 1, "T_C": 21.0, "energy_Wh": 1200.0})
    ingest_telemetry(ctx, {"roomId": 1, "T_C": 21.0})

    assert ctx.rooms[1].last_energy_wh == 1200.0
    assert ctx.rooms[1].energy_kwh == 1.2


def test_tariff_ticks_only_while_heating(ctx):
    records = [
        {"roomId": 1, "T_C": 21.0, "heaterOn": True, "lowKWh": 0.1, "highKWh": 0.0},
        {"roomId": 1, "T_C": 21.2, "heaterOn": True, "lowKWh": 0.2, "highKWh": 0.0},
        {"roomId": 1, "T_C": 21.4, "heaterOn": False, "lowKWh": 0.3, "highKWh": 0.0},
        {"roomId": 1, "T_C": 21.6, "heaterOn": True, "lowKWh": 0.3, "highKWh": 0.1},
        {"roomId": 1, "T_C": 21.8, "heaterOn": True, "lowKWh": 0.3, "highKWh": 0.2},
    ]
    for record in records:
        ingest_telemetry(ctx, record)

    stats = ctx.rooms[1]
    assert stats.low_ticks == 2
    assert stats.high_ticks == 2
    assert stats.total_low_kwh == 0.3
    assert stats.total_high_kwh == 0.2
    assert stats.tariff_ticks <= stats.heater_on_count


def test_missing_counter_carries_forward_without_tick(ctx):
    ingest_telemetry(ctx, {"roomId": 1, "T_C": 21.0, "heaterOn": True, "lowKWh": 0.5, "highKWh": 0.2})
    ingest_telemetry(ctx, {"roomId": 1, "T_C": 21.0, "heaterOn": True})

    stats = ctx.rooms[1]
    assert stats.last_low_kwh == 0.5
    assert stats.last_high_kwh == 0.2
    assert stats.low_ticks == 1
    assert stats.high_ticks == 1


def test_counter_decrease_is_not_a_tick(ctx):
    ingest_telemetry(ctx, {"roomId": 1, "T_C": 21.0, "heaterOn": True, "lowKWh": 5.0})
    ingest_telemetry(ctx, {"roomId": 1, "T_C": 21.0, "heaterOn": True, "lowKWh": 0.1})

    stats = ctx.rooms[1]
    assert stats.low_ticks == 1
    assert stats.last_low_kwh == 0.1
    assert stats.total_low_kwh == 0.1


def test_sim_time_range_and_buckets(ctx):
    ingest_telemetry(ctx, {"roomId": 1, "T_C": 21.0, "heaterOn": True, "simTimeMs": 2000})
    ingest_telemetry(ctx, {"roomId": 2, "T_C": 21.0, "heaterOn": True, "simTimeMs": 2000})
    ingest_telemetry(ctx, {"roomId": 1, "T_C": 21.0, "heaterOn": False, "simTimeMs": 1000})
    ingest_telemetry(ctx, {"roomId": 2, "T_C": 21.0, "heaterOn": True, "simTimeMs": 5000})

    assert ctx.summary.min_sim_time_ms == 1000
    assert ctx.summary.max_sim_time_ms == 5000
    assert ctx.summary.sim_duration_ms == 4000
    assert ctx.buckets == {2000: {1, 2}, 5000: {2}}


def test_bucket_keeps_room_after_heater_off_at_same_instant(ctx):
    ingest_telemetry(ctx, {"roomId": 1, "T_C": 21.0, "heaterOn": True, "simTimeMs": 1000})
    ingest_telemetry(ctx, {"roomId": 1, "T_C": 21.0, "heaterOn": False, "simTimeMs": 1000})

    assert ctx.buckets[1000] == {1}


def test_unreadable_values_raise(ctx):
    with pytest.raises(ValueError):
        ingest_telemetry(ctx, {"roomId": "kitchen", "T_C": 21.0})
    assert 1 not in ctx.rooms or ctx.rooms[1].sample_count == 0


def test_as_bool():
    assert as_bool(True)
    assert as_bool("true")
    assert as_bool(1)
    assert not as_bool(False)
    assert not as_bool("no")
    assert not as_bool(None)


def test_process_line_counts(ctx):
    process_line(ctx, '12:00 INFO {"roomId":1,"T_C":21.0}')
    process_line(ctx, '{"logger":"STDOUT","message":"hello"}')
    process_line(ctx, "plain text")
    process_line(ctx, 'INFO {"roomId":1,"T_C":')
    process_line(ctx, '{"roomId":"x","T_C":21.0}')
    process_line(ctx, '{"event":"tick"}')

    summary = ctx.summary
    assert summary.total_lines == 6
    assert summary.valid_telemetry_records == 1
    assert summary.console_lines == 1
    assert summary.malformed_lines == 2


def test_process_telemetry_log(ctx, tmp_path):
    log_path = tmp_path / "simulator.json.log"
    records = [
        {"roomId": 1, "T_C": 21.8, "heaterOn": True, "simTimeMs": 0},
        {"roomId": 1, "T_C": 22.9, "heaterOn": False, "simTimeMs": 1000},
        {"roomId": 1, "T_C": 23.6, "heaterOn": True, "simTimeMs": 2000},
    ]
    lines = [f"2025-01-10 INFO {json.dumps(r)}" for r in records]
    lines.insert(1, "not json at all")
    log_path.write_text("\n".join(lines) + "\n")

    process_telemetry_log(ctx, log_path)

    assert ctx.summary.total_lines == 4
    assert ctx.summary.valid_telemetry_records == 3
    assert ctx.rooms[1].heater_on_count == 2


def test_process_telemetry_log_missing_file(ctx, tmp_path):
    with pytest.raises(OSError):
        process_telemetry_log(ctx, tmp_path / "missing.log")


def test_non_finite_numbers_are_malformed(ctx, tmp_path):
    """NaN and Infinity lines are skipped and the pass carries on."""
    log_path = tmp_path / "simulator.json.log"
    log_path.write_text(
        '{"roomId":1,"T_C":21.0,"simTimeMs":Infinity}\n'
        '{"roomId":1,"T_C":NaN}\n'
        '{"roomId":1,"T_C":-Infinity,"heaterOn":true}\n'
        '{"roomId":1,"T_C":1e400}\n'
        '{"roomId":1,"T_C":21.0,"lowKWh":1e400}\n'
        '{"roomId":1,"T_C":22.0,"simTimeMs":1e400}\n'
        '{"roomId":1,"T_C":21.5,"simTimeMs":1000}\n'
    )

    process_telemetry_log(ctx, log_path)

    stats = ctx.rooms[1]
    assert ctx.summary.total_lines == 7
    assert ctx.summary.malformed_lines == 6
    assert ctx.summary.valid_telemetry_records == 1
    assert stats.temperature_samples == [21.5]
    assert stats.min_temp <= stats.max_temp
    assert stats.last_low_kwh == 0.0
    assert ctx.summary.min_sim_time_ms == 1000


def test_null_required_fields_are_malformed(ctx):
    process_line(ctx, '{"roomId":1,"T_C":null}')
    process_line(ctx, '{"roomId":null,"T_C":21.0}')

    assert ctx.summary.malformed_lines == 2
    assert ctx.summary.valid_telemetry_records == 0
    assert ctx.rooms[1].sample_count == 0


def test_null_optional_fields_carry_forward(ctx):
    ingest_telemetry(ctx, {"roomId": 1, "T_C": 21.0, "heaterOn": True, "lowKWh": 0.4, "energy_Wh": 500.0})
    ingest_telemetry(
        ctx,
        {"roomId": 1, "T_C": 21.0, "heaterOn": None, "lowKWh": None, "energy_Wh": None, "simTimeMs": None},
    )

    stats = ctx.rooms[1]
    assert stats.last_low_kwh == 0.4
    assert stats.last_energy_wh == 500.0
    assert stats.heater_on_count == 1
    assert ctx.summary.min_sim_time_ms is None
    assert ctx.summary.valid_telemetry_records == 2
