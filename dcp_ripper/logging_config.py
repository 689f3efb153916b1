#!/usr/bin/env python3
"""
Logging configuration for DCP Ripper.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from .config import get_settings


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_format: Optional[str] = None
):
    """Setup logging configuration."""

    # Use settings if not provided
    settings = get_settings()
    log_level = log_level or settings.LOG_LEVEL
    log_file = log_file or settings.LOG_FILE
    log_format = log_format or settings.LOG_FORMAT

    # Convert string level to logging constant
    level = getattr(logging, log_level.upper(), logging.INFO)

    formatter = logging.Formatter(log_format, datefmt="%H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    # Console handler, stdout is kept for command output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler (if log file specified)
    if log_file:
        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                str(log_path),
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            logging.warning(f"Could not setup file logging: {e}")

    logging.debug(f"Logging configured - Level: {log_level}, File: {log_file or 'console only'}")
    return root_logger
