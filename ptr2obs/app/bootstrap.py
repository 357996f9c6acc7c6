"""Bootstrap helpers for config, display, and session wiring."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable

from Xlib.error import DisplayError

from ptr2obs.app.app_cli import endpoint_validate
from ptr2obs.common.config import Config, ConfigLoader
from ptr2obs.common.layout import RegionLayout
from ptr2obs.session.manager import SessionManager
from ptr2obs.session.supervisor import ReconnectSupervisor
from ptr2obs.x11.display import DisplayManager
from ptr2obs.zones.monitor import PointerSource, ZoneMonitor

logger = logging.getLogger(__name__)


def configWithOverrides_load(args: argparse.Namespace) -> Config:
    """
    Load config and apply CLI overrides, exiting on invalid input.

    Args:
        args: Parsed CLI args.

    Returns:
        Loaded config.
    """
    config_path: Path | None = Path(args.config) if args.config else None
    try:
        config: Config = ConfigLoader.configWithOverrides_load(
            file_path=config_path,
            endpoint=args.endpoint,
            display=args.display,
            log_level=args.log_level,
        )
        endpoint_validate(config.obs.endpoint)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except (ValueError, KeyError, TypeError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)
    return config


def displayConnection_establish(display_manager: DisplayManager) -> None:
    """
    Open the X11 display, exiting when it is unavailable.

    Args:
        display_manager: Display manager.
    """
    try:
        display_manager.connection_establish()
    except (DisplayError, OSError) as e:
        logger.error(f"Unable to open display: {e}")
        sys.exit(1)


def sessionManager_create(config: Config) -> SessionManager:
    """Build the session manager from config."""
    return SessionManager(
        endpoint=config.obs.endpoint,
        connect_timeout=config.obs.connect_timeout,
        handshake_timeout=config.obs.handshake_timeout,
        event_subscriptions=config.obs.event_subscriptions,
    )


def supervisor_create(config: Config, session_manager: SessionManager) -> ReconnectSupervisor:
    """Build the reconnect supervisor from config."""
    return ReconnectSupervisor(
        session_manager,
        backoff_seconds=config.supervisor.backoff_seconds,
        check_interval_seconds=config.supervisor.check_interval_seconds,
    )


def zoneMonitor_create(
    config: Config,
    pointer_source: PointerSource,
    command_sender: Callable[[str], bool],
) -> ZoneMonitor:
    """
    Build the zone monitor from config.

    Args:
        config: Loaded config.
        pointer_source: Pointer position query.
        command_sender: Best-effort command send.

    Returns:
        Zone monitor.
    """
    zones = config.zones
    return ZoneMonitor(
        layout=RegionLayout(config.regions),
        pointer_source=pointer_source,
        command_sender=command_sender,
        trigger_region=zones.trigger_region,
        left_threshold=zones.left_threshold,
        right_threshold=zones.right_threshold,
        left_command=zones.left_command,
        right_command=zones.right_command,
        dead_zone=zones.dead_zone,
        poll_interval_ms=zones.poll_interval_ms,
    )
