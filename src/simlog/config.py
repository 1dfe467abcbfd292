"""Loading of the simulation configuration snapshot.

The snapshot is a JSON document (YAML is accepted too) of the form::

    {
      "simulacion": {"maxEnergy": "12 kWh"},
      "units": [
        {"room": {"id": 1, "expectedTemp": "21,5", "energy": "3 kWh"}},
        ...
      ]
    }
"""

import json
import logging
from pathlib import Path

import yaml

from .collectors.records import lookup
from .models import RoomConfig, SiteConfig
from .units import ParseError, parse_decimal, parse_energy

logger = logging.getLogger(__name__)

DEFAULT_EXPECTED_TEMP_TEXT = "22"
DEFAULT_ENERGY_TEXT = "2 kWh"
DEFAULT_MAX_ENERGY_TEXT = "0"
INVALID_EXPECTED_TEMP = 0.0

YAML_SUFFIXES = (".yaml", ".yml")


class ConfigError(Exception):
    """Raised when the configuration snapshot cannot be loaded."""

    pass


def read_document(config_path: Path) -> dict:
    """Read and decode the configuration file into a dict."""
    try:
        with open(config_path, encoding="utf-8") as f:
            if config_path.suffix.lower() in YAML_SUFFIXES:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Could not read configuration file {config_path}: {e}") from e
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Configuration file {config_path} is not valid: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {config_path} does not contain an object")
    return data


def parse_room(unit: dict) -> RoomConfig | None:
    """Build a RoomConfig from one entry of ``units``, or None if it is unusable."""
    room = lookup(unit, "room")
    if not isinstance(room, dict):
        logger.warning("Skipping unit without a room object: %r", unit)
        return None

    room_id = room.get("id")
    if isinstance(room_id, bool) or not isinstance(room_id, int):
        logger.warning("Skipping room without an integer id: %r", room)
        return None

    try:
        expected_temp = parse_decimal(
            room.get("expectedTemp"), default=parse_decimal(DEFAULT_EXPECTED_TEMP_TEXT)
        )
    except ParseError as e:
        logger.warning("Invalid expected temperature for room %d, using %.1f: %s", room_id, INVALID_EXPECTED_TEMP, e)
        expected_temp = INVALID_EXPECTED_TEMP

    try:
        energy_kwh = parse_energy(room.get("energy"), default=parse_energy(DEFAULT_ENERGY_TEXT))
    except ParseError as e:
        logger.warning("Skipping room %d: %s", room_id, e)
        return None

    return RoomConfig(room_id=room_id, expected_temp=expected_temp, rated_energy_kwh=energy_kwh)


def parse_site_config(data: dict) -> SiteConfig:
    """Build a SiteConfig from a decoded configuration document."""
    rooms: dict[int, RoomConfig] = {}
    skipped = 0

    units = data.get("units")
    if isinstance(units, list):
        for unit in units:
            room = parse_room(unit)
            if room is None:
                skipped += 1
                continue
            rooms[room.room_id] = room

    max_energy_text = lookup(data, "simulacion.maxEnergy")
    try:
        max_energy_kwh = parse_energy(max_energy_text, default=parse_energy(DEFAULT_MAX_ENERGY_TEXT))
    except ParseError as e:
        logger.warning("Invalid site energy budget, using 0 kWh: %s", e)
        max_energy_kwh = 0.0

    return SiteConfig(rooms=rooms, max_energy_kwh=max_energy_kwh, skipped_units=skipped)


def load_site_config(config_path: Path) -> SiteConfig:
    """Load the configuration snapshot from a file."""
    config = parse_site_config(read_document(Path(config_path)))
    logger.debug(
        "Loaded %d room(s) from %s (budget %.2f kWh)",
        len(config.rooms),
        config_path,
        config.max_energy_kwh,
    )
    return config
