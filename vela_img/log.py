"""Logging setup for the plugin.

Log records go to stderr through a rich handler so they stay apart from
the child process output echoed on stdout.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger(__name__)

_LEVELS = {
    "t": logging.DEBUG,
    "trace": logging.DEBUG,
    "d": logging.DEBUG,
    "debug": logging.DEBUG,
    "i": logging.INFO,
    "info": logging.INFO,
    "w": logging.WARNING,
    "warn": logging.WARNING,
    "e": logging.ERROR,
    "error": logging.ERROR,
    "f": logging.CRITICAL,
    "fatal": logging.CRITICAL,
    "p": logging.CRITICAL,
    "panic": logging.CRITICAL,
}


def parse_log_level(value: str) -> int:
    """Map a plugin log level string to a logging level.

    Accepts lower, title and upper case spellings; unknown values map to INFO.
    """
    normalized = value.strip()
    if normalized not in {normalized.lower(), normalized.title(), normalized.upper()}:
        return logging.INFO
    return _LEVELS.get(normalized.lower(), logging.INFO)


def setup_logging(level: int | str = logging.INFO) -> None:
    """Configure the root logger with a rich handler on stderr.

    Does nothing beyond setting the level if a handler is already installed.
    """
    if isinstance(level, str):
        level = parse_log_level(level)

    root_logger = logging.getLogger()
    if not any(isinstance(h, RichHandler) for h in root_logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        root_logger.addHandler(handler)
    root_logger.setLevel(level)
    logger.debug("Log level set to %s", logging.getLevelName(level))


__all__ = ["parse_log_level", "setup_logging"]
