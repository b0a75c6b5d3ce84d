import logging.config
from typing import Any

from app.config import get_settings

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _console_logger(level: str) -> dict[str, Any]:
    return {"handlers": ["console"], "level": level, "propagate": False}


def setup_logging():
    """
    Configure global log format

    Gateway modules log under the "app" namespace. LOG_LEVEL overrides the
    level derived from DEBUG; upstream request lines from httpx are only
    shown while debugging.
    """
    settings = get_settings()
    log_level = settings.LOG_LEVEL or ("DEBUG" if settings.DEBUG else "INFO")

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {"format": LOG_FORMAT, "datefmt": LOG_DATE_FORMAT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {"handlers": ["console"], "level": log_level},
            "loggers": {
                "app": _console_logger(log_level),
                "uvicorn": _console_logger("INFO"),
                "uvicorn.access": _console_logger("INFO"),
                "httpx": _console_logger("DEBUG" if settings.DEBUG else "WARNING"),
            },
        }
    )
