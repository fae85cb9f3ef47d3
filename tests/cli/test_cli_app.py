"""Tests for the prestowatch command line."""

import sys
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from prestowatch import __version__
from prestowatch.cli import app, main
from prestowatch.cli.app import EXIT_CONFIG, EXIT_USAGE, EXIT_VERSION

runner = CliRunner()

ENV_NAMES = ["PRESTO_URL", "SLACK_URL", "MAX_PARTITIONS", "UPDATE_INTERVAL", "PORT", "STATSD_HOST", "PRESTO_CONNECTOR"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def service(monkeypatch):
    """Replace the service wiring so no thread or server starts."""
    fake = MagicMock()
    from_settings = MagicMock(return_value=fake)
    monkeypatch.setattr("prestowatch.service.WatcherService.from_settings", from_settings)
    return from_settings


class TestCommand:
    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "--maxpart" in result.output

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == EXIT_VERSION
        assert f"prestowatch {__version__} at your service." in result.output

    def test_missing_presto_url(self, service):
        result = runner.invoke(app, ["--slack", "https://hooks.slack.test/x"])
        assert result.exit_code == EXIT_CONFIG
        service.assert_not_called()

    def test_missing_slack_url(self, service):
        result = runner.invoke(app, ["--url", "http://presto:8080"])
        assert result.exit_code == EXIT_CONFIG
        service.assert_not_called()

    def test_invalid_env_value(self, service, monkeypatch):
        monkeypatch.setenv("UPDATE_INTERVAL", "often")
        result = runner.invoke(app, ["--url", "http://presto:8080", "--dry-run"])
        assert result.exit_code == EXIT_CONFIG

    def test_flags_override_env(self, service, monkeypatch):
        monkeypatch.setenv("MAX_PARTITIONS", "45")
        monkeypatch.setenv("SLACK_URL", "https://hooks.slack.test/x")

        result = runner.invoke(app, ["-u", "http://presto:8080", "-m", "10", "-i", "5", "-c", "hive_prod"])

        assert result.exit_code == 0, result.output
        settings = service.call_args.args[0]
        assert settings.max_partitions == 10
        assert settings.update_interval == 5
        assert settings.connector == "hive_prod"
        assert settings.slack_url == "https://hooks.slack.test/x"
        assert service.call_args.kwargs == {"dry_run": False}
        service.return_value.run.assert_called_once_with()

    def test_dry_run_needs_no_slack(self, service):
        result = runner.invoke(app, ["--url", "http://presto:8080", "--dry-run"])
        assert result.exit_code == 0, result.output
        assert service.call_args.kwargs == {"dry_run": True}


class TestMain:
    def _exit_code(self, monkeypatch, *args) -> int:
        monkeypatch.setattr(sys, "argv", ["prestowatch", *args])
        with pytest.raises(SystemExit) as exc:
            main()
        return exc.value.code

    def test_help_exits_zero(self, monkeypatch):
        assert self._exit_code(monkeypatch, "--help") == 0

    def test_version_exit_code(self, monkeypatch):
        assert self._exit_code(monkeypatch, "-V") == EXIT_VERSION

    def test_non_integer_flag_is_usage_error(self, monkeypatch):
        assert self._exit_code(monkeypatch, "--maxpart", "lots") == EXIT_USAGE

    def test_unknown_flag_is_usage_error(self, monkeypatch):
        assert self._exit_code(monkeypatch, "--nope") == EXIT_USAGE

    def test_missing_config_exit_code(self, monkeypatch, service):
        assert self._exit_code(monkeypatch, "--dry-run") == EXIT_CONFIG
