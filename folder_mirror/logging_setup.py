"""Logging setup for the mirror service."""

import getpass
import logging
import logging.handlers
from pathlib import Path

LOGGER_NAME = "mirror"


def setup_logging(
    log_file: str,
    log_level: str = "INFO",
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    rotation_enabled: bool = True,
) -> logging.Logger:
    """Set up logging with file and console handlers.

    Every audit line the synchronizer narrates goes through this logger, so
    the log file doubles as the change journal of both folders.

    Args:
        log_file: Path to log file
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        max_bytes: Max size of log file before rotation (in bytes)
        backup_count: Number of backup files to keep
        rotation_enabled: Whether to enable log rotation

    Returns:
        Configured logger instance
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    level = getattr(logging, log_level.upper())

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    try:
        username = getpass.getuser()
    except Exception:
        username = "unknown"

    if rotation_enabled:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    else:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")

    file_handler.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        f"%(asctime)s - %(name)s - %(levelname)s - [{username}] - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(formatter)
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger


def get_logger() -> logging.Logger:
    """Get the configured mirror logger."""
    return logging.getLogger(LOGGER_NAME)
