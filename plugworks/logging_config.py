"""
Logging Configuration.

Component loggers for plugworks, built on loguru.

Environment variables:
    PLUGWORKS_ENV: "development" turns on the operation trace
    PLUGWORKS_LOG_LEVEL: sink level (TRACE/DEBUG/INFO/WARNING/ERROR/CRITICAL)

Usage:
    from plugworks.logging_config import get_logger, setup_logging

    logger = get_logger("plugin.registry")
    logger.trace("registerPlugin {}", name)

    setup_logging("TRACE")  # show the operation trace on stdout
"""

import contextlib
import os
import sys
import threading
from enum import Enum
from typing import Any

from loguru import logger as _loguru_logger

ROOT_COMPONENT = "plugworks"

FORMAT_CONSOLE = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]: <24}</cyan> | "
    "<level>{message}</level>"
)


class LogLevel(str, Enum):
    """Log level enumeration."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


_setup_lock = threading.Lock()
_sink_id: int | None = None
_sink_level: LogLevel | None = None

# Library records stay silent until the host calls setup_logging().
_loguru_logger.disable(ROOT_COMPONENT)


def is_development() -> bool:
    """True when PLUGWORKS_ENV is set to development."""
    return os.getenv("PLUGWORKS_ENV", "").lower() == "development"


def _get_log_level() -> LogLevel:
    if is_development():
        return LogLevel.TRACE
    level_str = os.getenv("PLUGWORKS_LOG_LEVEL", "INFO").upper()
    try:
        return LogLevel(level_str)
    except ValueError:
        return LogLevel.INFO


def _is_own_record(record: dict) -> bool:
    return record["extra"].get("component", "").startswith(ROOT_COMPONENT)


def current_level() -> LogLevel | None:
    """Level of the installed plugworks sink, or None if none is installed."""
    return _sink_level


def setup_logging(level: LogLevel | str | None = None, force: bool = False) -> None:
    """
    Install the plugworks stdout sink.

    Only records bound through get_logger() reach the sink. Calling again
    is a no-op unless force is set, in which case the sink is replaced.
    The first call also removes loguru's default stderr handler and
    enables plugworks records, which are disabled until then.

    Args:
        level: Sink level; defaults to the environment configuration
        force: Replace an already installed sink
    """
    global _sink_id, _sink_level

    with _setup_lock:
        if _sink_id is not None:
            if not force:
                return
            _loguru_logger.remove(_sink_id)
            _sink_id = None
        else:
            # Handler 0 is loguru's default stderr sink; it may already be gone.
            with contextlib.suppress(ValueError):
                _loguru_logger.remove(0)

        level = LogLevel(level.upper()) if isinstance(level, str) else level
        if level is None:
            level = _get_log_level()

        _loguru_logger.enable(ROOT_COMPONENT)
        _sink_id = _loguru_logger.add(
            sys.stdout,
            format=FORMAT_CONSOLE,
            level=level.value,
            colorize=True,
            filter=_is_own_record,
        )
        _sink_level = level


def get_logger(component: str) -> Any:
    """
    Get a logger bound to a plugworks component.

    Args:
        component: Component name, e.g. "plugin.registry"

    Returns:
        loguru logger with extra["component"] set to "plugworks.<component>"
    """
    return _loguru_logger.bind(component=f"{ROOT_COMPONENT}.{component}")


__all__ = [
    "LogLevel",
    "FORMAT_CONSOLE",
    "current_level",
    "get_logger",
    "is_development",
    "setup_logging",
]
