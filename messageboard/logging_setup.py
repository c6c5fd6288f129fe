"""Logging configuration."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from messageboard.config import Settings

LOG_FORMAT = "[%(asctime)s] [%(name)s] [%(levelname)s]: %(message)s"
LOG_FILE_MAX_BYTES = 100 * 1000 * 1000
LOG_FILE_BACKUPS = 5

# Silence known chatty loggers
CHATTY_LOGGERS = [
    "httpx",
    "httpcore.http11",
    "httpcore.connection",
    "PIL",
]


def configure_logging(settings: Settings) -> None:
    """Install console (and optionally rotating file) handlers on the root logger."""
    level = "DEBUG" if settings.is_development else settings.log_level.upper()

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                settings.log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
            )
        )

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers)

    for logger_name in CHATTY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
