"""CLI commands for mgd-monitor."""

import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path

import click
import structlog

from mgd_monitor import __version__
from mgd_monitor.config.loader import ConfigLoader, ConfigValidationError
from mgd_monitor.config.schemas import MgdConfig
from mgd_monitor.fetch.client import StatusFetcher
from mgd_monitor.fetch.config import FetchConfig
from mgd_monitor.gather.accumulator import LineProtocolAccumulator
from mgd_monitor.gather.plugin import MgdInput
from mgd_monitor.observability.logging import configure_logging, parse_log_level
from mgd_monitor.observability.metrics import PollMetrics
from mgd_monitor.settings import AppSettings, get_settings
from mgd_monitor.status.errors import GatherError


logger = structlog.get_logger()


@dataclass
class GatherOptions:
    """Options for the gather command."""

    config_path: Path | None
    servers: tuple[str, ...]
    interval: float
    count: int
    json_logs: bool
    verbose: bool


def _setup_logging(settings: AppSettings, json_logs: bool, verbose: bool) -> None:
    """Configure logging from the environment and CLI flags."""
    if verbose:
        level = logging.DEBUG
    else:
        try:
            level = parse_log_level(settings.mgd_log_level)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="MGD_LOG_LEVEL") from e
    configure_logging(level=level, json_format=json_logs)


def _load_config(config_path: Path) -> MgdConfig:
    """Load a configuration file, exit on failure."""
    loader = ConfigLoader()
    try:
        return loader.load(config_path)
    except ConfigValidationError as e:
        click.echo(f"Configuration in {e.file_path} is invalid:", err=True)
        for error in e.errors:
            click.echo(f"  - {error['loc']}: {error['msg']}", err=True)
        sys.exit(1)


def _resolve_servers(
    options: GatherOptions,
    settings: AppSettings,
) -> tuple[list[str], FetchConfig]:
    """Decide which servers to poll and with which fetch settings.

    Precedence: --server flags, then the config file, then MGD_SERVERS.

    Args:
        options: Gather options.
        settings: Environment settings.

    Returns:
        Tuple of (servers, fetch config).
    """
    config_path = options.config_path or settings.mgd_config
    config = _load_config(config_path) if config_path else MgdConfig()

    if options.servers:
        return list(options.servers), config.fetch
    if config_path:
        return list(config.servers), config.fetch
    return settings.server_list(), config.fetch


def _run_pass(plugin: MgdInput, acc: LineProtocolAccumulator) -> bool:
    """Run one gather pass.

    Returns:
        True if every server was gathered.
    """
    try:
        plugin.gather(acc)
    except GatherError as e:
        click.echo(f"Error: {e.server}: {e.message}", err=True)
        return False
    finally:
        acc.flush()
    return True


def _execute_gather(options: GatherOptions) -> None:
    """Poll the configured servers and write line protocol to stdout."""
    settings = get_settings()
    _setup_logging(settings, options.json_logs, options.verbose)
    servers, fetch_config = _resolve_servers(options, settings)

    log = logger.bind(component="cli", command="gather")
    log.info(
        "gather_started",
        servers=servers,
        interval=options.interval,
        timeout_seconds=fetch_config.timeout_seconds,
    )

    plugin = MgdInput(servers=servers, fetcher=StatusFetcher(fetch_config))
    acc = LineProtocolAccumulator(sys.stdout)

    if options.interval <= 0:
        if not _run_pass(plugin, acc):
            sys.exit(1)
        return

    passes = 0
    try:
        while options.count <= 0 or passes < options.count:
            started = time.monotonic()
            _run_pass(plugin, acc)
            passes += 1
            if options.count > 0 and passes >= options.count:
                break
            time.sleep(max(0.0, options.interval - (time.monotonic() - started)))
    except KeyboardInterrupt:
        log.info(
            "gather_interrupted",
            passes=passes,
            metrics=PollMetrics.get_instance().to_dict(),
        )


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Poll mgd servers and print their status as line protocol."""


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to a YAML configuration file (default: $MGD_CONFIG).",
)
@click.option(
    "--server",
    "servers",
    multiple=True,
    help="Server address (host or host:port); repeatable. Overrides the config.",
)
@click.option(
    "--interval",
    type=click.FloatRange(min=0.0),
    default=0.0,
    show_default=True,
    help="Seconds between passes; 0 runs a single pass.",
)
@click.option(
    "--count",
    type=click.IntRange(min=0),
    default=0,
    help="Stop after this many passes when polling on an interval (0: forever).",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=True,
    help="Use JSON format for logs on stderr (default: true).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
def gather(  # noqa: PLR0913
    config_path: Path | None,
    servers: tuple[str, ...],
    interval: float,
    count: int,
    json_logs: bool,
    verbose: bool,
) -> None:
    """Gather status from mgd servers.

    A single pass exits non-zero if any server fails; the remaining
    servers are not polled. On an interval, a failed pass is reported
    and polling continues.
    """
    options = GatherOptions(
        config_path=config_path,
        servers=servers,
        interval=interval,
        count=count,
        json_logs=json_logs,
        verbose=verbose,
    )
    _execute_gather(options)


@cli.command()
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a YAML configuration file.",
)
def validate(config_path: Path) -> None:
    """Validate a configuration file without polling."""
    configure_logging(json_format=False)
    config = _load_config(config_path)

    click.echo("Configuration is valid!")
    if config.servers:
        click.echo(f"  Servers: {', '.join(config.servers)}")
    else:
        click.echo("  Servers: (none, polls the default address)")
    click.echo(f"  Timeout: {config.fetch.timeout_seconds}s")


@cli.command("sample-config")
def sample_config() -> None:
    """Print a sample configuration file."""
    click.echo(MgdInput.sample_config(), nl=False)
