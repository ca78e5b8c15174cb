"""Centralized logging configuration for jtlreport.

All modules obtain their logger through :func:`get_logger`, which hangs every
logger below the package root ``jtlreport``. The root carries exactly one
handler; its initial level comes from the ``JTLREPORT_LOG_LEVEL`` environment
variable and defaults to INFO.
"""

import logging
import os
import sys
from typing import Optional, Union

LOGGER_NAME = "jtlreport"
LEVEL_ENV_VAR = "JTLREPORT_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Flag to track if we've already set up the root logger
_ROOT_LOGGER_CONFIGURED = False


def parse_log_level(value: Union[int, str, None], default: int = logging.INFO) -> int:
    """Translate a level name or number into a ``logging`` level.

    Args:
        value: Level as int (``logging.DEBUG``) or name (``"debug"``, ``"WARNING"``).
        default: Level returned when ``value`` is empty.

    Returns:
        Numeric logging level.

    Raises:
        ValueError: If ``value`` names an unknown level.
    """
    if value is None or value == "":
        return default
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {value!r}")
    return level


def setup_root_logger(
    level: Optional[int] = None,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Set up the package root logger with a single handler.

    Calling this more than once is a no-op until :func:`reset_logging` runs.

    Args:
        level: Logging level; defaults to ``$JTLREPORT_LOG_LEVEL`` or INFO.
        format_string: Custom format string (optional).
        handler: Custom handler (optional, defaults to a stdout StreamHandler).
    """
    global _ROOT_LOGGER_CONFIGURED

    if _ROOT_LOGGER_CONFIGURED:
        return

    if level is None:
        try:
            level = parse_log_level(os.environ.get(LEVEL_ENV_VAR))
        except ValueError:
            level = logging.INFO

    root_logger = logging.getLogger(LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    root_logger.addHandler(handler)

    # Propagate so pytest's caplog sees package records
    root_logger.propagate = True

    _ROOT_LOGGER_CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a child logger of the package root.

    Names outside the ``jtlreport`` namespace are nested under it so that
    level changes made through :func:`set_global_log_level` always apply.

    Args:
        name: Logger name, typically ``__name__`` of the calling module.

    Returns:
        Logger inheriting level and handler from the package root.
    """
    setup_root_logger()

    if name != LOGGER_NAME and not name.startswith(LOGGER_NAME + "."):
        name = f"{LOGGER_NAME}.{name}"

    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: Union[int, str]) -> None:
    """Set the level of the package root logger and its handlers.

    Args:
        level: Level as int or name.
    """
    setup_root_logger()

    numeric = parse_log_level(level)
    root_logger = logging.getLogger(LOGGER_NAME)
    root_logger.setLevel(numeric)
    for handler in root_logger.handlers:
        handler.setLevel(numeric)


def enable_debug_logging() -> None:
    """Enable debug logging for the entire package."""
    set_global_log_level(logging.DEBUG)


def disable_debug_logging() -> None:
    """Return to INFO level."""
    set_global_log_level(logging.INFO)


def reset_logging() -> None:
    """Drop the root handler and forget the configuration (used by tests)."""
    global _ROOT_LOGGER_CONFIGURED
    _ROOT_LOGGER_CONFIGURED = False

    root_logger = logging.getLogger(LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)


setup_root_logger()
