"""
Logging Configuration
Console plus a rotating file under ``log_dir``, shared by uvicorn and the
creditdesk loggers.
"""

import os
import sys
import logging
import logging.config
from pathlib import Path

LOG_FILE_NAME = "creditdesk.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Server loggers keep their own level regardless of LOG_LEVEL
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def build_logging_config(log_file_path: str, log_level: str = "INFO") -> dict:
    handlers = ["console", "file"]

    loggers = {
        name: {"handlers": handlers, "level": "INFO", "propagate": False}
        for name in SERVER_LOGGERS
    }
    loggers["creditdesk"] = {"handlers": handlers, "level": log_level, "propagate": False}
    loggers[""] = {"handlers": handlers, "level": log_level}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
                "formatter": "default",
                "level": log_level,
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": log_file_path,
                "maxBytes": 10 * 1024 * 1024,
                "backupCount": 5,
                "formatter": "default",
                "level": log_level,
                "encoding": "utf8",
            },
        },
        "loggers": loggers,
    }


def setup_logging(log_dir: str = "/var/log/creditdesk", log_level: str = "INFO") -> str:
    """Apply the logging config and return the log file path."""
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    log_file_path = os.path.join(log_dir, LOG_FILE_NAME)

    logging.config.dictConfig(build_logging_config(log_file_path, log_level.upper()))

    logging.getLogger("creditdesk").info("Logging to %s", log_file_path)
    return log_file_path
