"""
logging_config.py — Logging Setup
===================================
Called once from the app lifespan. Everything else just does
`logging.getLogger(__name__)`.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from daybook.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging() -> logging.Logger:
    """Configure the root logger with a console handler and, optionally, a rotating file."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates on reload
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            settings.log_file,
            maxBytes=10485760,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)

    logger.info(f"Logging initialized. Level: {settings.log_level}")
    logger.info(f"Environment: {settings.environment}")
    return logger
