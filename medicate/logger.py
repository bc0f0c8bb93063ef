"""
Structured logging for the barcode resolver.

Provides centralized logging with console and file outputs, plus
metrics tracking for monitoring search-provider health and how often
barcodes resolve, and with what confidence.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks resolve metrics.
    """

    def __init__(
        self,
        name: str = "medicate",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = False,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to a daily file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()

        self.metrics = {
            "search_calls": 0,
            "resolves_attempted": 0,
            "resolves_successful": 0,
            "resolves_failed": 0,
            "errors_by_type": {},
            "confidence_buckets": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_handler.setFormatter(logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            self.logger.addHandler(console_handler)

        if enable_file:
            self.add_file_handler(log_dir or Path("logs"))

    def add_file_handler(self, log_dir: Path) -> Path:
        """Also write DEBUG and above to a daily file in ``log_dir``."""
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"medicate_{datetime.now().strftime('%Y%m%d')}.log"

        for handler in self.logger.handlers:
            if isinstance(handler, logging.FileHandler) and handler.baseFilename == os.path.abspath(log_file):
                return log_file

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        self.logger.addHandler(file_handler)
        return log_file

    def configure(self, level: str, log_dir: Optional[Path] = None):
        """Apply runtime settings: console level and, with ``log_dir``, a log file."""
        self.set_level(level)
        if log_dir is not None:
            self.add_file_handler(log_dir)

    def set_level(self, level: str):
        """Change the logger and console level; the file handler keeps DEBUG."""
        numeric = getattr(logging, level.upper())
        self.logger.setLevel(numeric)
        for handler in self.logger.handlers:
            if not isinstance(handler, logging.FileHandler):
                handler.setLevel(numeric)

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, kwargs)

    def exception(self, message: str, **kwargs):
        """Log an error with the active exception's traceback."""
        self._log(logging.ERROR, message, kwargs, exc_info=True)

    def _log(self, level: int, message: str, context: dict, exc_info: bool = False):
        if context:
            message = f"{message} | Context: {json.dumps(context, ensure_ascii=False, default=str)}"
        self.logger.log(level, message, exc_info=exc_info)

    # Metric tracking methods

    def record_search_call(self):
        self.metrics["search_calls"] += 1

    def record_resolve_attempt(self):
        self.metrics["resolves_attempted"] += 1

    def record_resolve_success(self, confidence: float):
        """Record a resolved barcode and the confidence it was resolved with."""
        self.metrics["resolves_successful"] += 1
        bucket = f"{confidence:.2f}"
        buckets = self.metrics["confidence_buckets"]
        buckets[bucket] = buckets.get(bucket, 0) + 1

    def record_resolve_failure(self, error_type: str):
        self.metrics["resolves_failed"] += 1
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return a snapshot of the metrics with the overall success rate."""
        snapshot = json.loads(json.dumps(self.metrics))
        attempts = snapshot["resolves_attempted"]
        snapshot["success_rate"] = (
            round(snapshot["resolves_successful"] / attempts, 3) if attempts else 0.0
        )
        return snapshot

    def log_metrics_summary(self):
        metrics = self.get_metrics()

        self.info("=== Resolver Metrics ===")
        self.info(f"Search calls: {metrics['search_calls']}")
        self.info(
            f"Resolves: {metrics['resolves_successful']}/{metrics['resolves_attempted']} "
            f"({metrics['success_rate'] * 100:.1f}% success)"
        )

        if metrics["confidence_buckets"]:
            self.info("Confidence:")
            for bucket, count in sorted(metrics["confidence_buckets"].items()):
                self.info(f"  {bucket}: {count}")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "medicate",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
