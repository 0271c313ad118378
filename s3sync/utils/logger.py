"""
Logging Configuration and Utilities

Provides console logging with optional colors or JSON formatting, file
rotation, and module-level logger helpers for the s3sync package.

Author: s3sync Project
License: MIT
"""

import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from pythonjsonlogger import jsonlogger
from typing import Optional

ROOT_LOGGER_NAME = "s3sync"


class ColoredFormatter(logging.Formatter):
    """
    Custom formatter for colored console output.
    """

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record):
        """Format log record with colors."""
        # Work on a copy so other handlers see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        log_color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        record.levelname = f"{log_color}{record.levelname}{self.COLORS['RESET']}"
        return super().format(record)


def setup_logging(
    log_level: str = "INFO",
    log_to_file: bool = False,
    log_file_path: str = "logs/s3sync.log",
    log_rotation_size: int = 10485760,  # 10MB
    log_retention_count: int = 5,
    json_format: bool = False,
    stream=None
) -> logging.Logger:
    """
    Configure logging for the s3sync package.

    Library code never calls this on import; applications embedding the
    sync engine call it once (or configure the "s3sync" logger themselves).

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Enable file logging
        log_file_path: Path to log file
        log_rotation_size: Max log file size before rotation (bytes)
        log_retention_count: Number of backup log files to keep
        json_format: Use JSON formatting for logs
        stream: Console stream (defaults to stdout)

    Returns:
        Configured logger instance
    """
    level = getattr(logging, str(log_level).upper())

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    # Remove existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setLevel(level)

    if json_format:
        console_formatter = jsonlogger.JsonFormatter(
            '%(asctime)s %(name)s %(levelname)s %(message)s'
        )
    else:
        console_formatter = ColoredFormatter(
            '[%(asctime)s] %(levelname)s - %(name)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    # File handler with rotation
    if log_to_file:
        log_path = Path(log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file_path,
            maxBytes=log_rotation_size,
            backupCount=log_retention_count,
            encoding='utf-8'
        )
        file_handler.setLevel(level)

        if json_format:
            file_formatter = jsonlogger.JsonFormatter(
                '%(asctime)s %(name)s %(levelname)s %(module)s %(funcName)s %(lineno)d %(message)s'
            )
        else:
            file_formatter = logging.Formatter(
                '[%(asctime)s] %(levelname)s - %(name)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )

        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # Prevent propagation to root logger
    logger.propagate = False

    logger.debug(f"Logging initialized at {log_level} level")
    if log_to_file:
        logger.debug(f"File logging enabled: {log_file_path}")

    return logger


def setup_logging_from_config(logging_config) -> logging.Logger:
    """
    Configure logging from a LoggingConfig model.

    Args:
        logging_config: s3sync.config.schema.LoggingConfig instance

    Returns:
        Configured logger instance
    """
    return setup_logging(
        log_level=logging_config.log_level,
        log_to_file=logging_config.log_to_file,
        log_file_path=logging_config.log_file_path,
        log_rotation_size=logging_config.log_rotation_size,
        log_retention_count=logging_config.log_retention_count,
        json_format=logging_config.json_format
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
