"""
System Reporter - Centralized component logging.

Provides SystemReporter for context-tagged console/file logging with
verbosity filtering.

Production-ready: Supports stdout logging for container environments.
"""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class SystemReporter:
    """
    Logger with verbose filtering and context tags.

    Supports both file-based logging (development) and stdout logging
    (production containers).

    Verbose Levels:
        0 = Critical only (always visible)
        1 = Important messages (default)
        2 = Detailed information
        3 = Debug/verbose
    """

    def __init__(
        self,
        name: str = "system",
        log_dir: Optional[str] = None,
        level: int = logging.INFO,
        verbose: int = 1,
    ) -> None:
        """
        Initialize SystemReporter.

        Args:
            name: Logger name (used for filename if log_dir provided)
            log_dir: Directory for log files. If None, logs to stdout only.
                    Can be relative ("logs") or absolute ("/app/logs")
            level: Python logging level
            verbose: Verbosity filter (0-3)
        """
        self.name = name
        self.verbose = max(0, min(3, verbose))
        self.log_file: Optional[str] = None

        self._init_logger(name, log_dir, level)

    def _init_logger(
        self, name: str, log_dir: Optional[str], level: int
    ) -> None:
        """
        Initialize logger with file and/or console handlers.

        Args:
            name: Logger name
            log_dir: Log directory path (None = stdout only)
            level: Python logging level
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        self.logger.handlers.clear()

        # Root handlers (JSON formatter in production) must not print twice
        self.logger.propagate = False

        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

        # Always add console handler (stdout)
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if log_dir:
            if os.path.isabs(log_dir):
                log_file = os.path.join(log_dir, f"{name}.log")
            else:
                log_file = os.path.join(os.getcwd(), log_dir, f"{name}.log")

            os.makedirs(os.path.dirname(log_file), exist_ok=True)

            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)
            self.log_file = log_file

    def _should_log(self, verbose_level: int) -> bool:
        """Check if message should be logged."""
        return self.verbose >= verbose_level

    def flush(self) -> None:
        """Flush every handler (called right before process exit)."""
        for handler in self.logger.handlers:
            handler.flush()

    # Core logging methods
    def debug(
        self, msg: str, context: str = "system", verbose_level: int = 3
    ) -> None:
        """Log debug message."""
        if self._should_log(verbose_level):
            self.logger.debug(f"[{context}] {msg}", extra={"context": context})

    def info(
        self, msg: str, context: str = "system", verbose_level: int = 1
    ) -> None:
        """Log info message."""
        if self._should_log(verbose_level):
            self.logger.info(f"[{context}] {msg}", extra={"context": context})

    def warning(
        self, msg: str, context: str = "system", verbose_level: int = 1
    ) -> None:
        """Log warning message."""
        if self._should_log(verbose_level):
            self.logger.warning(f"[{context}] {msg}", extra={"context": context})

    def error(
        self,
        msg: str,
        context: str = "system",
        verbose_level: int = 0,
        exc_info=None,
    ) -> None:
        """Log error message, optionally with traceback."""
        if self._should_log(verbose_level):
            self.logger.error(
                f"[{context}] {msg}", exc_info=exc_info, extra={"context": context}
            )

    def critical(
        self,
        msg: str,
        context: str = "system",
        verbose_level: int = 0,
        exc_info=None,
    ) -> None:
        """Log critical message, optionally with traceback."""
        if self._should_log(verbose_level):
            self.logger.critical(
                f"[{context}] {msg}", exc_info=exc_info, extra={"context": context}
            )
