"""
Typer entry point for the ``prestowatch`` daemon.

Every option can also be set through its environment variable; flags win.

Exit codes:
    0   help printed
    1   bad command-line arguments
    2   fatal configuration error
    10  version printed
"""

from __future__ import annotations

import socket
import sys

import click
import typer
from typer import Typer

from prestowatch import APP_NAME, __version__
from prestowatch.core.errors import ConfigError
from prestowatch.core.settings import load_settings
from prestowatch.framework.logging import configure_logging, get_logger

EXIT_USAGE = 1
EXIT_CONFIG = 2
EXIT_VERSION = 10

app = Typer(
    name=APP_NAME,
    help="Alert on Presto queries that scan more partitions than allowed.",
    add_completion=False,
    rich_markup_mode="rich",
)

logger = get_logger("prestowatch.cli")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{APP_NAME} {__version__} at your service.")
        raise typer.Exit(code=EXIT_VERSION)


@app.command()
def run(
    presto_url: str | None = typer.Option(None, "--url", "-u", help="Presto URL (including scheme and port) [env: PRESTO_URL]"),
    connector: str | None = typer.Option(None, "--connector", "-c", help="Connector name for partitioned tables [env: PRESTO_CONNECTOR]"),
    max_partitions: int | None = typer.Option(None, "--maxpart", "-m", help="Alert when a query scans more than X partitions [env: MAX_PARTITIONS]"),
    update_interval: int | None = typer.Option(None, "--interval", "-i", help="Update interval in seconds [env: UPDATE_INTERVAL]"),
    slack_url: str | None = typer.Option(None, "--slack", "-s", help="Slack webhook URL [env: SLACK_URL]"),
    port: int | None = typer.Option(None, "--port", "-p", help="Health check HTTP server port [env: PORT]"),
    statsd_host: str | None = typer.Option(None, "--statsd", help="StatsD host:port [env: STATSD_HOST]"),
    request_timeout: float | None = typer.Option(None, "--timeout", help="Outbound request timeout in seconds [env: REQUEST_TIMEOUT]"),
    log_format: str | None = typer.Option(None, "--log-format", help="console or json [env: LOG_FORMAT]"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable DEBUG logging"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print alerts instead of posting to Slack"),
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Print version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Poll Presto and alert on queries that scan too many partitions."""
    from prestowatch.service import WatcherService

    try:
        settings = load_settings(
            presto_url=presto_url,
            connector=connector,
            max_partitions=max_partitions,
            update_interval=update_interval,
            slack_url=slack_url,
            port=port,
            statsd_host=statsd_host,
            request_timeout=request_timeout,
            log_format=log_format,
            verbose=verbose or None,
        )
        configure_logging(level=settings.log_level, format=settings.log_format)
        logger.debug("options", **settings.model_dump(exclude={"slack_url"}))
        settings.require(dry_run=dry_run)
        service = WatcherService.from_settings(settings, dry_run=dry_run)
    except ConfigError as e:
        configure_logging()
        logger.critical("fatal_configuration_error", **e.to_dict())
        raise typer.Exit(code=EXIT_CONFIG) from e

    logger.info("starting", app=APP_NAME, version=__version__, host=socket.gethostname())
    service.run()


def main() -> None:
    """Console-script entry point mapping outcomes to exit codes."""
    try:
        rv = app(standalone_mode=False)
    except click.UsageError as e:
        e.show()
        sys.exit(EXIT_USAGE)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        sys.exit(EXIT_USAGE)
    sys.exit(rv if isinstance(rv, int) else 0)


__all__ = ["app", "main"]
