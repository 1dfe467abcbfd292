"""End-to-end analysis run: config, telemetry pass, audit pass, peak demand."""

import logging
from pathlib import Path

from .analysis.peak import peak_instant, peak_simultaneous_kwh
from .collectors.http_audit import process_audit_log
from .collectors.telemetry import process_telemetry_log
from .config import load_site_config
from .models import AnalysisContext

logger = logging.getLogger(__name__)


class AnalysisError(Exception):
    """Raised when a required log cannot be read."""

    pass


def run_analysis(
    config_path: Path,
    telemetry_path: Path,
    http_path: Path | None = None,
) -> AnalysisContext:
    """Analyze one simulation run.

    Args:
        config_path: Configuration snapshot (JSON or YAML)
        telemetry_path: Simulator telemetry log
        http_path: Optional HTTP access-audit log

    Returns:
        The populated AnalysisContext

    Raises:
        ConfigError: if the configuration cannot be loaded
        AnalysisError: if the telemetry log cannot be read
    """
    config = load_site_config(Path(config_path))
    ctx = AnalysisContext.from_config(config)

    try:
        process_telemetry_log(ctx, Path(telemetry_path))
    except OSError as e:
        raise AnalysisError(f"Could not read telemetry log {telemetry_path}: {e}") from e

    if http_path is not None and Path(http_path).exists():
        try:
            process_audit_log(ctx, Path(http_path))
        except OSError as e:
            logger.warning("Could not read HTTP log %s, skipping: %s", http_path, e)
    else:
        logger.info("No HTTP log, skipping user interaction analysis")

    ctx.summary.peak_simultaneous_kwh = peak_simultaneous_kwh(ctx.buckets, ctx.rooms)
    ctx.summary.peak_sim_time_ms = peak_instant(ctx.buckets, ctx.rooms)
    ctx.buckets.clear()
    return ctx
