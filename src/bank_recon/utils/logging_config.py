"""Logging configuration for the bank reconciliation package."""

from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union
import logging

ROOT_LOGGER_NAME = "bank_recon"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
)


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
    log_format: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the ``bank_recon`` logger hierarchy.

    Module loggers are created with ``logging.getLogger(__name__)`` and
    propagate to the logger configured here.

    Args:
        level: Logging level, either numeric or a name such as "DEBUG"
        log_file: Optional path to a rotating log file
        log_format: Optional console format string

    Returns:
        The configured package logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    # Re-running setup (e.g. from several CLI commands) must not stack handlers
    logger.handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(log_format or DEFAULT_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child logger of the package logger."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
