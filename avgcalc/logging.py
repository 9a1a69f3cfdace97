"""Logging setup for the average calculator and the uvicorn server hosting it."""

import logging
import logging.handlers
from pathlib import Path
from typing import Any, Dict

SERVICE_FORMAT = '%(asctime)s [%(levelname)-8s] [%(name)s] %(message)s'
ACCESS_FORMAT = '%(asctime)s %(message)s'
CONSOLE_FORMAT = '[%(levelname)-8s] [%(name)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# uvicorn is started with log_config=None, so its loggers are wired here
SERVER_LOGGERS = ("uvicorn", "uvicorn.error")
ACCESS_LOGGER = "uvicorn.access"


def _rotating_handler(path: Path, rotation: Dict[str, Any]) -> logging.Handler:
    """Size-based rotation for when="size", otherwise a timed rotation on that interval."""
    when = rotation.get("when") or "size"
    if when == "size":
        return logging.handlers.RotatingFileHandler(
            path,
            maxBytes=rotation.get("max_bytes", 10485760),
            backupCount=rotation.get("backup_count", 30),
            encoding="utf-8"
        )
    return logging.handlers.TimedRotatingFileHandler(
        path,
        when=when,
        backupCount=rotation.get("backup_count", 30),
        encoding="utf-8"
    )


def setup_logging(config) -> None:
    """
    Route service, server and access logs.

    Service and uvicorn server messages share avgcalc.log and the console.
    Per-request access lines from uvicorn go to access.log only, or nowhere
    when the access log is disabled.

    Args:
        config: Configuration instance with logging settings
    """
    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    file_level = getattr(logging, config.log_level.upper(), logging.INFO)
    console_level = getattr(logging, config.console_level.upper(), logging.INFO)
    rotation = config.log_rotation

    root_logger = logging.getLogger()
    root_logger.setLevel(min(file_level, console_level))
    root_logger.handlers.clear()

    service_handler = _rotating_handler(log_dir / "avgcalc.log", rotation)
    service_handler.setLevel(file_level)
    service_handler.setFormatter(logging.Formatter(SERVICE_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(service_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)

    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.setLevel(root_logger.level)
        server_logger.propagate = True

    access_logger = logging.getLogger(ACCESS_LOGGER)
    access_logger.handlers.clear()
    access_logger.propagate = False
    if config.access_log:
        access_handler = _rotating_handler(log_dir / "access.log", rotation)
        access_handler.setFormatter(logging.Formatter(ACCESS_FORMAT, datefmt=DATE_FORMAT))
        access_logger.addHandler(access_handler)
        access_logger.setLevel(logging.INFO)
    else:
        access_logger.addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific component."""
    return logging.getLogger(name)
