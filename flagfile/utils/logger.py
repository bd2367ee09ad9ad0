"""
Logging Utilities
=================

Logging setup for the flagfile command-line tool.
"""

import logging
import logging.handlers
import os
import sys
from typing import Optional


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    max_file_size: str = "10MB",
    backup_count: int = 5
) -> logging.Logger:
    """
    Configure the root logger for a flagfile run.

    Console output goes to stderr so settings printed on stdout stay
    parseable.

    Args:
        log_level: Logging level name; unknown names fall back to INFO
        log_file: Optional log file, rotated by size
        max_file_size: Rotation size, e.g. '10MB'
        backup_count: Rotated files to keep

    Returns:
        The 'flagfile' logger
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=_parse_size(max_file_size),
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    app_logger = logging.getLogger('flagfile')
    app_logger.debug(f"Logging initialized - Level: {log_level}, File: {log_file}")
    return app_logger


def _parse_size(size_str: str) -> int:
    """Parse a size such as '512', '64KB', '10MB' or '1GB' to bytes."""
    size_str = size_str.upper().strip()
    for suffix, factor in (('KB', 1024), ('MB', 1024 ** 2), ('GB', 1024 ** 3)):
        if size_str.endswith(suffix):
            return int(float(size_str[:-2]) * factor)
    return int(size_str)
