import logging
import logging.config
import os
from typing import Optional

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] [%(filename)s:%(lineno)d] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

_configured = False


def build_logging_config(log_dir: Optional[str] = None, level: str = "INFO") -> dict:
    """
    Build the dictConfig payload.
    Console handler always; rotating app/error file handlers only when log_dir is given.
    """
    handlers = {
        "console": {
            "level": level,
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    }

    if log_dir:
        app_log_dir = os.path.join(log_dir, "app")
        os.makedirs(app_log_dir, exist_ok=True)
        handlers["file_app"] = {
            "level": "DEBUG",
            "class": "logging.handlers.TimedRotatingFileHandler",
            "filename": os.path.join(app_log_dir, "mockmate.log"),
            "when": "midnight",
            "interval": 1,
            "backupCount": 30,
            "encoding": "utf-8",
            "formatter": "standard",
        }
        handlers["file_error"] = {
            "level": "ERROR",
            "class": "logging.handlers.TimedRotatingFileHandler",
            "filename": os.path.join(app_log_dir, "mockmate.error.log"),
            "when": "midnight",
            "interval": 1,
            "backupCount": 30,
            "encoding": "utf-8",
            "formatter": "standard",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": LOG_FORMAT,
                "datefmt": LOG_DATEFMT,
            },
        },
        "handlers": handlers,
        "loggers": {
            "mockmate": {
                "handlers": list(handlers.keys()),
                "level": "DEBUG",
                "propagate": False,
            },
        },
    }


def setup_logging(log_dir: Optional[str] = None, level: str = "INFO") -> None:
    """Apply the MockMate logging configuration."""
    global _configured
    logging.config.dictConfig(build_logging_config(log_dir, level))
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the `mockmate` hierarchy, configuring console logging on first use."""
    if not _configured:
        setup_logging()
    if not name.startswith("mockmate"):
        name = f"mockmate.{name}"
    return logging.getLogger(name)
