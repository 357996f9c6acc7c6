"""
Logging policy.

This module centralizes logging setup and ptr2obs version injection into log
message formats.
"""

from __future__ import annotations

import logging

from ptr2obs import __version__

__all__ = ["logging_setup"]


def logging_setup(level: str, log_format: str, log_file: str | None) -> None:
    """
    Configure logging handlers and format.

    Args:
        level:
            Log level name.
        log_format:
            Base logging format string.
        log_file:
            Optional log-file path.

    Raises:
        ValueError:
            Raised when the level name is unknown.
    """
    numeric_level: object = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    enhanced_format: str = log_format.replace("%(asctime)s", f"%(asctime)s [v{__version__}]")
    logging.basicConfig(
        level=numeric_level,
        format=enhanced_format,
        handlers=handlers,
        force=True,
    )
