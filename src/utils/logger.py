"""
Logging configuration with console and rotating file handlers
"""

import logging
import sys
import time
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Generator

LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s'
LOG_FILE_NAME = 'measurement.log'


class MeasurementLogger:
    """
    Centralized logging setup for measurement runs

    Features:
    - Console handler (INFO+)
    - Optional rotating file handler (DEBUG+) when a log directory is given
    """

    def __init__(self, config: dict):
        """
        Initialize logging infrastructure

        Args:
            config: Configuration dictionary with keys:
                - log_level: str (DEBUG, INFO, WARNING, ERROR)
                - log_dir: str or None (directory path for log files)

        Raises:
            ValueError: If log_level is not a valid level name
            OSError: If log directory creation fails
        """
        self.log_level = str(config.get('log_level', 'INFO')).upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"Invalid log level: {self.log_level}")

        log_dir = config.get('log_dir')
        self.log_dir = Path(log_dir) if log_dir else None
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self._setup_logging()

    def _setup_logging(self) -> None:
        """
        Configure root logger with all handlers

        Thread-safe: Uses logging module's built-in thread safety
        """
        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, self.log_level))

        # Clear existing handlers to avoid duplicates
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(console_handler)

        if self.log_dir is None:
            return

        # File Handler - All levels, rotating (10MB max, 5 backups)
        file_handler = RotatingFileHandler(
            self.log_dir / LOG_FILE_NAME,
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(file_handler)


@contextmanager
def log_execution_time(operation: str) -> Generator[None, None, None]:
    """
    Context manager for measuring and logging execution time

    Args:
        operation: Human-readable operation description

    Usage:
        with log_execution_time('count query'):
            samples = executor.query(query, now)

    Logs at DEBUG level: "{operation} completed in {elapsed:.3f}s"
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        logging.getLogger(__name__).debug(f"{operation} completed in {elapsed:.3f}s")
