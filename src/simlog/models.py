"""Data models for room configuration, per-room statistics and run state."""

import math
from dataclasses import dataclass, field

DEFAULT_EXPECTED_TEMP = 22.0  # °C
DEFAULT_ROOM_ENERGY_KWH = 2.0  # "2 kWh"

# Rooms seen only in the logs have no configured attributes
UNCONFIGURED_EXPECTED_TEMP = 0.0
UNCONFIGURED_ENERGY_KWH = 0.0


@dataclass(frozen=True)
class RoomConfig:
    """Static attributes of a room from the configuration snapshot."""

    room_id: int
    expected_temp: float = DEFAULT_EXPECTED_TEMP
    rated_energy_kwh: float = DEFAULT_ROOM_ENERGY_KWH


@dataclass
class SiteConfig:
    """The loaded configuration snapshot."""

    rooms: dict[int, RoomConfig]
    max_energy_kwh: float = 0.0
    skipped_units: int = 0


@dataclass
class RoomStats:
    """Running statistics for a single room, accumulated across both log passes."""

    expected_temp: float = UNCONFIGURED_EXPECTED_TEMP
    rated_energy_kwh: float = UNCONFIGURED_ENERGY_KWH
    temperature_samples: list[float] = field(default_factory=list)
    min_temp: float = math.inf
    max_temp: float = -math.inf
    heater_on_count: int = 0
    last_energy_wh: float = 0.0

    # Last known cumulative tariff counters, reused when a record omits them
    last_low_kwh: float = 0.0
    last_high_kwh: float = 0.0
    total_low_kwh: float = 0.0
    total_high_kwh: float = 0.0
    low_ticks: int = 0
    high_ticks: int = 0

    user_interactions: int = 0

    @classmethod
    def from_config(cls, config: RoomConfig) -> "RoomStats":
        return cls(expected_temp=config.expected_temp, rated_energy_kwh=config.rated_energy_kwh)

    @property
    def sample_count(self) -> int:
        return len(self.temperature_samples)

    @property
    def tariff_ticks(self) -> int:
        return self.low_ticks + self.high_ticks

    @property
    def energy_kwh(self) -> float:
        """Most recent cumulative energy reading in kWh."""
        return self.last_energy_wh / 1000.0


@dataclass
class SiteSummary:
    """Site-wide counters and results for one analysis run."""

    max_energy_budget_kwh: float = 0.0
    total_lines: int = 0
    valid_telemetry_records: int = 0
    console_lines: int = 0
    malformed_lines: int = 0
    min_sim_time_ms: int | None = None
    max_sim_time_ms: int | None = None
    peak_simultaneous_kwh: float = 0.0
    peak_sim_time_ms: int | None = None

    # HTTP audit pass
    http_log_processed: bool = False
    http_lines: int = 0
    http_candidates: int = 0
    duplicate_requests: int = 0

    @property
    def sim_duration_ms(self) -> int | None:
        if self.min_sim_time_ms is None or self.max_sim_time_ms is None:
            return None
        return self.max_sim_time_ms - self.min_sim_time_ms


@dataclass
class AnalysisContext:
    """Mutable state owned by a single analysis run and passed to each pass."""

    config: SiteConfig
    rooms: dict[int, RoomStats] = field(default_factory=dict)
    buckets: dict[int, set[int]] = field(default_factory=dict)  # simTimeMs -> heating room ids
    summary: SiteSummary = field(default_factory=SiteSummary)
    seen_requests: set[str] = field(default_factory=set)

    @classmethod
    def from_config(cls, config: SiteConfig) -> "AnalysisContext":
        ctx = cls(config=config)
        ctx.summary.max_energy_budget_kwh = config.max_energy_kwh
        for room_id, room_config in config.rooms.items():
            ctx.rooms[room_id] = RoomStats.from_config(room_config)
        return ctx

    def room(self, room_id: int) -> RoomStats:
        """Get the stats for a room, creating a defaulted entry on first reference."""
        stats = self.rooms.get(room_id)
        if stats is None:
            stats = RoomStats()
            self.rooms[room_id] = stats
        return stats
