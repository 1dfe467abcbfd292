"""Command-line interface for building-simulation log analysis."""

import json
import logging
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .analysis import summary
from .config import ConfigError, load_site_config
from .pipeline import AnalysisError, run_analysis

# Load environment variables from .env file
load_dotenv()

console = Console()
err_console = Console(stderr=True)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log skipped lines and pass statistics")
@click.pass_context
def cli(ctx, verbose):
    """Building simulation log analysis - comfort, heater duty and peak demand."""
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@cli.command()
@click.option(
    "--config",
    "config_path",
    envvar="SIMLOG_CONFIG",
    type=click.Path(dir_okay=False),
    required=True,
    help="Simulation configuration snapshot (or set SIMLOG_CONFIG)",
)
@click.option(
    "--log",
    "log_path",
    envvar="SIMLOG_TELEMETRY_LOG",
    type=click.Path(dir_okay=False),
    required=True,
    help="Simulator telemetry log (or set SIMLOG_TELEMETRY_LOG)",
)
@click.option(
    "--http-log",
    "http_path",
    envvar="SIMLOG_HTTP_LOG",
    type=click.Path(dir_okay=False),
    help="HTTP access log, optional (or set SIMLOG_HTTP_LOG)",
)
@click.option(
    "--band",
    envvar="SIMLOG_COMFORT_BAND",
    type=float,
    default=summary.COMFORT_BAND_C,
    show_default=True,
    help="Comfort band around the expected temperature in °C",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def analyze(config_path, log_path, http_path, band, as_json):
    """Analyze a simulation run and print the report.

    The configuration and telemetry log are required; the HTTP log is
    optional and only used to count manual heater switches.
    """
    config_path = Path(config_path)
    log_path = Path(log_path)

    if not config_path.exists():
        err_console.print(f"[red]Configuration file not found: {config_path.absolute()}[/red]")
        raise SystemExit(1)
    if not log_path.exists():
        err_console.print(f"[red]Telemetry log not found: {log_path.absolute()}[/red]")
        raise SystemExit(1)

    http = Path(http_path) if http_path else None
    if http is not None and not http.exists():
        err_console.print(f"[yellow]HTTP log not found, skipping interaction analysis: {http}[/yellow]")

    try:
        ctx = run_analysis(config_path, log_path, http)
    except (ConfigError, AnalysisError) as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)

    data = summary.get_site_summary(ctx, band)

    if as_json:
        click.echo(json.dumps(data, indent=2))
    else:
        console.print(summary.format_site_summary_text(data), markup=False, highlight=False, soft_wrap=True)


@cli.command()
@click.option(
    "--config",
    "config_path",
    envvar="SIMLOG_CONFIG",
    type=click.Path(dir_okay=False),
    required=True,
    help="Simulation configuration snapshot (or set SIMLOG_CONFIG)",
)
def rooms(config_path):
    """Show the room configuration and site energy budget."""
    try:
        config = load_site_config(Path(config_path))
    except ConfigError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)

    if not config.rooms:
        console.print("[yellow]No rooms configured[/yellow]")

    table = Table(title="Room Configuration")
    table.add_column("Room", style="cyan")
    table.add_column("Expected Temp", justify="right")
    table.add_column("Rated Energy", justify="right")

    for room in config.rooms.values():
        table.add_row(str(room.room_id), f"{room.expected_temp:.1f}°C", f"{room.rated_energy_kwh:.2f} kWh")

    console.print(table)
    console.print(f"Site energy budget: [bold]{config.max_energy_kwh:.2f} kWh[/bold]")
    if config.skipped_units:
        console.print(f"[yellow]Skipped {config.skipped_units} malformed unit(s)[/yellow]")


if __name__ == "__main__":
    cli()
