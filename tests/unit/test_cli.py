"""Unit tests for CLI parsing, logging setup, and bootstrap wiring."""

from __future__ import annotations

import logging
from argparse import Namespace

import pytest

from ptr2obs.app import app_logging
from ptr2obs.app.app_cli import arguments_parse, endpoint_validate
from ptr2obs.app.bootstrap import (
    configWithOverrides_load,
    sessionManager_create,
    supervisor_create,
    zoneMonitor_create,
)
from ptr2obs.common.config import Config, ConfigLoader
from ptr2obs.common.types import Position


class TestArgumentsParse:
    """Tests for argument parsing."""

    def test_defaults(self) -> None:
        """No flags leaves every override unset."""
        args = arguments_parse([])
        assert args.config is None
        assert args.endpoint is None
        assert args.display is None
        assert args.log_level is None

    def test_overrides(self) -> None:
        """Flags are parsed into the namespace."""
        args = arguments_parse(
            ["--endpoint", "ws://obs.lan:4455", "--display", ":1", "--log-level", "DEBUG"]
        )
        assert args.endpoint == "ws://obs.lan:4455"
        assert args.display == ":1"
        assert args.log_level == "DEBUG"


class TestEndpointValidate:
    """Tests for endpoint validation."""

    def test_valid(self) -> None:
        """ws:// URIs with a host pass."""
        assert endpoint_validate("ws://localhost:4455") == "ws://localhost:4455"

    @pytest.mark.parametrize(
        "endpoint",
        [
            "localhost:4455",
            "http://localhost:4455",
            "ws://",
            "ws://localhost:99999",
            "ws://localhost:port",
        ],
    )
    def test_invalid(self, endpoint: str) -> None:
        """Wrong scheme, missing host, or a bad port is rejected."""
        with pytest.raises(ValueError):
            endpoint_validate(endpoint)


class TestLoggingSetup:
    """Tests for logging configuration."""

    def test_version_injected(self, monkeypatch) -> None:
        """Format gains the package version after asctime."""
        captured: dict = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))

        app_logging.logging_setup("debug", "%(asctime)s %(message)s", None)

        assert captured["level"] == logging.DEBUG
        assert f"[v{app_logging.__version__}]" in captured["format"]
        assert len(captured["handlers"]) == 1

    def test_unknown_level(self) -> None:
        """Unknown level names are rejected."""
        with pytest.raises(ValueError):
            app_logging.logging_setup("LOUD", "%(message)s", None)


class TestBootstrap:
    """Tests for component wiring."""

    def test_bad_endpoint_exits(self, tmp_path) -> None:
        """An invalid configured endpoint terminates with exit code 1."""
        config_file = tmp_path / "config.yml"
        config_file.write_text("obs:\n  endpoint: localhost:4455\n")
        args = Namespace(config=str(config_file), endpoint=None, display=None, log_level=None)

        with pytest.raises(SystemExit) as excinfo:
            configWithOverrides_load(args)
        assert excinfo.value.code == 1

    def test_out_of_range_port_exits(self, monkeypatch, tmp_path) -> None:
        """An --endpoint with an out-of-range port terminates with exit code 1."""
        monkeypatch.setattr(
            ConfigLoader, "DEFAULT_CONFIG_PATHS", [str(tmp_path / "absent.yml")]
        )
        args = Namespace(
            config=None, endpoint="ws://localhost:99999", display=None, log_level=None
        )

        with pytest.raises(SystemExit) as excinfo:
            configWithOverrides_load(args)
        assert excinfo.value.code == 1

    def test_components_follow_config(self) -> None:
        """Built components use configured endpoint and zone settings."""
        config = Config()
        config.obs.endpoint = "ws://obs.lan:4455"
        config.zones.left_command = "Pan Right"

        manager = sessionManager_create(config)
        supervisor = supervisor_create(config, manager)
        sent: list[str] = []
        monitor = zoneMonitor_create(
            config, lambda: None, lambda command: sent.append(command) or True
        )

        assert manager.endpoint == "ws://obs.lan:4455"
        assert supervisor.attempts_failed == 0
        assert monitor.sample_process(Position(x=1920 + 100, y=500)) == "Pan Right"
        assert sent == ["Pan Right"]
