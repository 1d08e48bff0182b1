"""
Structured logging for showmatch.

Console and daily file output, plus counters that summarize how a
matching or import session went.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks match outcomes per record source (images, csv, ...).
    """

    def __init__(
        self,
        name: str = "showmatch",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()  # Remove existing handlers

        self.metrics = {
            "records_attempted": 0,
            "high_confidence": 0,
            "low_confidence": 0,
            "unmatched": 0,
            "updates_applied": 0,
            "errors_by_type": {},
            "source_stats": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"showmatch_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_attempt(self, source: str):
        """Record one record being matched from a source."""
        self.metrics["records_attempted"] += 1
        stats = self.metrics["source_stats"].setdefault(
            source, {"attempts": 0, "matches": 0}
        )
        stats["attempts"] += 1

    def record_match(self, source: str, confidence: str):
        """Record the confidence bucket a match landed in."""
        if confidence == "high":
            self.metrics["high_confidence"] += 1
        elif confidence == "low":
            self.metrics["low_confidence"] += 1
        else:
            self.metrics["unmatched"] += 1
            return
        if source in self.metrics["source_stats"]:
            self.metrics["source_stats"][source]["matches"] += 1

    def record_update(self):
        """Increment applied-update counter."""
        self.metrics["updates_applied"] += 1

    def record_error(self, error_type: str):
        """Record a per-record failure."""
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return current metrics."""
        metrics_copy = self.metrics.copy()
        for source, stats in metrics_copy["source_stats"].items():
            if stats["attempts"] > 0:
                stats["match_rate"] = round(
                    stats["matches"] / stats["attempts"], 3
                )

        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Matching Session Metrics ===")
        self.info(f"Records: {metrics['records_attempted']}")
        self.info(
            f"High confidence: {metrics['high_confidence']} | "
            f"Low confidence: {metrics['low_confidence']} | "
            f"Unmatched: {metrics['unmatched']}"
        )
        self.info(f"Updates applied: {metrics['updates_applied']}")

        if metrics["source_stats"]:
            self.info("Match Rates:")
            for source, stats in metrics["source_stats"].items():
                rate = stats.get("match_rate", 0) * 100
                self.info(f"  {source}: {stats['matches']}/{stats['attempts']} ({rate:.1f}%)")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "showmatch",
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
