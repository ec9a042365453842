"""
Centralized logging utility for consistent logging across the application.
"""

import logging
import sys
import os


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with consistent configuration."""
    logger = logging.getLogger(name)

    # Once setup_logging() has configured the package logger, module
    # loggers propagate to it instead of adding their own handler.
    if not logger.handlers and not logging.getLogger("podcraft").handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        logger.setLevel(getattr(logging, log_level, logging.INFO))

    return logger
