"""Logging setup for the application."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from ..config import Config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(
    name: str = "myvocab",
    level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the package logger once.

    Modules log through ``logging.getLogger(__name__)``; this attaches the
    handlers to their common parent. Calling it again only updates the level.

    Args:
        name: Logger name (package root by default)
        level: Level name, defaults to Config.LOG_LEVEL
        log_file: Optional file path for a rotating file handler,
                  defaults to Config.LOG_FILE

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel((level or Config.LOG_LEVEL).upper())

    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    log_file = log_file or Config.LOG_FILE
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
