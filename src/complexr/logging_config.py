"""
Logging configuration for complexr.

Console output goes to stderr because stdout carries sequence data and
tables. Optional JSON formatting and a log file are available for batch runs.
"""

import json
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs as JSON for easy parsing by log aggregation systems.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        return json.dumps(log_data)


class PerformanceLogger:
    """
    Logger for workflow timing and throughput.

    Use as a context manager around a workflow step; call `add_items` as
    records are processed so the throughput can be reported on exit.
    """

    def __init__(self, operation: str, logger_name: str = 'complexr.performance'):
        self.logger = logging.getLogger(logger_name)
        self.operation = operation
        self.items = 0
        self._start: Optional[float] = None

    def add_items(self, count: int = 1) -> None:
        self.items += count

    def __enter__(self) -> "PerformanceLogger":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.perf_counter() - (self._start or time.perf_counter())
        if exc_type is None:
            self.log_throughput(self.items, duration)
        return False

    def log_throughput(self, items: int, duration_seconds: float) -> Dict[str, Any]:
        """
        Log throughput metrics.

        Args:
            items: Number of items processed
            duration_seconds: Time taken

        Returns:
            The metrics that were attached to the log record.
        """
        rate = items / duration_seconds if duration_seconds > 0 else 0
        metrics = {
            'operation': self.operation,
            'duration_seconds': duration_seconds,
            'items_processed': items,
            'items_per_second': rate,
        }
        self.logger.info(
            f"{self.operation} completed in {duration_seconds:.2f}s "
            f"({items} records, {rate:.1f}/s)",
            extra={'extra_fields': metrics},
        )
        return metrics


def setup_logging(
    verbose: bool = False,
    log_file: Optional[Path] = None,
    enable_json: bool = False,
) -> logging.Logger:
    """
    Configure the root logger for a complexr run.

    Args:
        verbose: Log DEBUG messages instead of INFO.
        log_file: Optional path of a file that receives every record at DEBUG level.
        enable_json: Use JSON formatting for structured logs.

    Returns:
        Configured root logger
    """
    level = logging.DEBUG if verbose else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if log_file else level)
    root_logger.handlers.clear()

    if enable_json:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    return root_logger
