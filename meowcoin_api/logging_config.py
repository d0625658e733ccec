"""
Logging setup for the API process.

Writes to the console, to <log_dir>/api.log, and (errors only) to
<log_dir>/error.log.
"""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"

LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

_installed_handlers = []


def to_logging_level(level: str) -> int:
    """Map error/warn/info/debug to a logging level (unknown -> INFO)."""
    return LEVELS.get(level.strip().lower(), logging.INFO)


def configure_logging(level: str = "info", log_dir: Optional[str] = "logs") -> logging.Logger:
    """Install handlers on the package logger, replacing any from a previous call."""
    logger = logging.getLogger("meowcoin_api")
    numeric_level = to_logging_level(level)
    formatter = logging.Formatter(LOG_FORMAT)

    for handler in _installed_handlers:
        logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(numeric_level)
    _installed_handlers.append(console)

    if log_dir:
        logs_path = Path(log_dir)
        logs_path.mkdir(parents=True, exist_ok=True)

        api_log = logging.FileHandler(logs_path / "api.log")
        api_log.setLevel(numeric_level)
        _installed_handlers.append(api_log)

        error_log = logging.FileHandler(logs_path / "error.log")
        error_log.setLevel(logging.ERROR)
        _installed_handlers.append(error_log)

    for handler in _installed_handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(numeric_level)
    logger.propagate = False
    return logger
