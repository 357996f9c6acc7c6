"""
Command-line parsing.

This module contains only argument parsing and endpoint validation.
"""

from __future__ import annotations

import argparse
from typing import Sequence
from urllib.parse import urlparse

from ptr2obs import __version__

__all__ = ["arguments_parse", "endpoint_validate"]


def arguments_parse(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv:
            Argument list, or None for `sys.argv[1:]`.

    Returns:
        Parsed CLI namespace.
    """
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="ptr2obs",
        description="Trigger OBS hotkeys when the pointer crosses screen zones",
    )

    parser.add_argument("--version", action="version", version=f"ptr2obs {__version__}")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config file (default: search standard locations, else built-in defaults)",
    )
    parser.add_argument(
        "--endpoint",
        type=str,
        default=None,
        help="obs-websocket URI (overrides config, e.g., ws://localhost:4455)",
    )
    parser.add_argument(
        "--display",
        type=str,
        default=None,
        help="X11 display name (overrides config)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    return parser.parse_args(argv)


def endpoint_validate(endpoint: str) -> str:
    """
    Validate a WebSocket endpoint URI.

    Args:
        endpoint:
            Endpoint as `ws://host:port` or `wss://host:port`.

    Returns:
        The endpoint unchanged.

    Raises:
        ValueError:
            Raised when scheme or host is missing or unsupported, or the
            port is not a number in 0-65535.
    """
    parsed = urlparse(endpoint)
    if parsed.scheme not in ("ws", "wss"):
        raise ValueError(f"Endpoint must use ws:// or wss://, got {endpoint!r}")
    if not parsed.hostname:
        raise ValueError(f"Endpoint has no host: {endpoint!r}")
    try:
        parsed.port
    except ValueError as e:
        raise ValueError(f"Endpoint has an invalid port: {endpoint!r}") from e
    return endpoint
