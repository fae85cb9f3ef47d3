"""Runtime settings for the watcher daemon.

Settings are read from environment variables (and an optional ``.env`` file)
using the same names operators already export for the daemon, e.g.
``PRESTO_URL``, ``SLACK_URL``, ``MAX_PARTITIONS``. Command-line flags are
passed in as init overrides and win over the environment.

Fields
──────
presto_url        : Engine base URL including scheme and port (required)
connector         : Connector whose inputs are partition-checked
max_partitions    : Alert when an input scans more than this many partitions
update_interval   : Poll interval in seconds
slack_url         : Slack incoming-webhook URL (required unless dry-run)
slack_icon_emoji  : Emoji shown as the bot avatar, e.g. ``:sql_bandit:`` (optional)
port              : Health check HTTP port
statsd_host       : DogStatsD address, ``host`` or ``host:port``
verbose           : Enable DEBUG logging
request_timeout   : Timeout in seconds for every outbound HTTP call
opt_out_marker    : Token in the query text that disables checking
reporting_user    : Session user of the reporting tool that tags its queries
log_format        : ``console`` or ``json``
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from prestowatch.core.errors import ConfigError, InvalidConfigError, MissingConfigError

DEFAULT_STATSD_PORT = 8125


def _env(name: str) -> AliasChoices:
    return AliasChoices(name.lower(), name)


class WatcherSettings(BaseSettings):
    """Validated watcher configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ── Engine ───────────────────────────────────────────────────
    presto_url: str = Field(default="", validation_alias=_env("PRESTO_URL"))
    connector: str = Field(default="hive", validation_alias=_env("PRESTO_CONNECTOR"))
    max_partitions: int = Field(default=30, ge=0, validation_alias=_env("MAX_PARTITIONS"))
    update_interval: int = Field(default=20, gt=0, validation_alias=_env("UPDATE_INTERVAL"))
    request_timeout: float = Field(default=10.0, gt=0, validation_alias=_env("REQUEST_TIMEOUT"))

    # ── Alerting ─────────────────────────────────────────────────
    slack_url: str = Field(default="", validation_alias=_env("SLACK_URL"))
    slack_username: str = Field(default="SQLBandit", validation_alias=_env("SLACK_USERNAME"))
    slack_icon_emoji: str = Field(default="", validation_alias=_env("SLACK_ICON_EMOJI"))
    opt_out_marker: str = Field(default="sqlbandit:off", min_length=1, validation_alias=_env("OPT_OUT_MARKER"))
    reporting_user: str = Field(default="mode", validation_alias=_env("REPORTING_USER"))

    # ── Health / metrics ─────────────────────────────────────────
    port: int = Field(default=8080, ge=1, le=65535, validation_alias=_env("PORT"))
    statsd_host: str = Field(
        default=f"127.0.0.1:{DEFAULT_STATSD_PORT}", validation_alias=_env("STATSD_HOST")
    )

    # ── Observability ────────────────────────────────────────────
    verbose: bool = Field(default=False, validation_alias=_env("VERBOSE"))
    log_format: Literal["console", "json"] = Field(default="console", validation_alias=_env("LOG_FORMAT"))

    @property
    def log_level(self) -> str:
        return "DEBUG" if self.verbose else "INFO"

    @property
    def statsd_address(self) -> tuple[str, int]:
        """Split ``statsd_host`` into ``(host, port)``.

        Raises:
            InvalidConfigError: If the port part is not an integer.
        """
        host, sep, port = self.statsd_host.rpartition(":")
        if not sep:
            return self.statsd_host, DEFAULT_STATSD_PORT
        try:
            return host, int(port)
        except ValueError as e:
            raise InvalidConfigError("statsd_host", self.statsd_host) from e

    def require(self, *, dry_run: bool = False) -> WatcherSettings:
        """Check that the settings needed to run are present.

        Raises:
            MissingConfigError: If the engine URL, or the Slack URL outside
                dry-run mode, is empty.
        """
        if not self.presto_url:
            raise MissingConfigError("presto_url", "Missing options: the Presto URL is required")
        if not dry_run and not self.slack_url:
            raise MissingConfigError("slack_url", "Missing options: the Slack webhook URL is required")
        return self


def load_settings(**overrides: Any) -> WatcherSettings:
    """Build settings from the environment plus non-``None`` overrides.

    Raises:
        ConfigError: If any value fails validation.
    """
    values = {k: v for k, v in overrides.items() if v is not None}
    try:
        return WatcherSettings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}", cause=e) from e


__all__ = [
    "DEFAULT_STATSD_PORT",
    "WatcherSettings",
    "load_settings",
]
