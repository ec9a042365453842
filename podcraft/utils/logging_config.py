"""
Logging configuration for Podcraft.

Console logging is always on; a rotating file handler is added when LOG_FILE
is configured.
"""
import logging
import logging.config
import sys
from pathlib import Path
from typing import Dict, Any
from podcraft.config import get_settings


def get_logging_config() -> Dict[str, Any]:
    """Build the dictConfig mapping from settings."""
    settings = get_settings()
    log_level = settings.LOG_LEVEL.upper()
    handlers = ["console"]

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            },
            "detailed": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": "standard",
                "stream": sys.stdout
            }
        },
        "loggers": {
            "podcraft": {
                "level": log_level,
                "handlers": handlers,
                "propagate": False
            },
            "uvicorn": {
                "level": "INFO",
                "handlers": ["console"],
                "propagate": False
            },
            "httpx": {
                "level": "WARNING",
                "handlers": ["console"],
                "propagate": False
            },
            "trafilatura": {
                "level": "WARNING",
                "handlers": ["console"],
                "propagate": False
            }
        },
        "root": {
            "level": log_level,
            "handlers": ["console"]
        }
    }

    if settings.LOG_FILE:
        Path(settings.LOG_FILE).parent.mkdir(parents=True, exist_ok=True)
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "INFO",
            "formatter": "detailed",
            "filename": settings.LOG_FILE,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5
        }
        handlers.append("file")

    return config


def setup_logging() -> None:
    """Apply the logging configuration and drop handlers added before it."""
    config = get_logging_config()
    # Module loggers created before setup attach their own stdout handler.
    for name in list(logging.root.manager.loggerDict):
        if name.startswith("podcraft."):
            logger = logging.getLogger(name)
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)
    logging.config.dictConfig(config)
    logging.getLogger("podcraft").info("Logging configured")
