# trip_etl/utils/logger.py
"""
Logging setup shared by the reader, the pipeline stages and the CLI

Console output is JSON unless running at DEBUG; with a log directory the
run also writes ``taxi_etl.log`` and an ERROR-only ``errors.log``.
"""

import json
import logging
import logging.handlers
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


# LogRecord attributes that are not ``extra=`` payload
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {'message', 'asctime'}

_DEBUG_FORMAT = '%(asctime)s %(levelname)-8s %(name)s: %(message)s'
_MB = 1024 * 1024


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record

    Row numbers, reason codes and instants passed through ``extra=`` are
    copied to top-level keys so defect and duplicate diagnostics can be
    filtered without parsing the message.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'source': f"{record.module}.{record.funcName}:{record.lineno}",
        }
        payload.update(
            (key, value) for key, value in vars(record).items() if key not in _RESERVED_ATTRS
        )
        if record.exc_info:
            payload['exception'] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def _rotating_handler(path: Path, level: int, max_mb: int, backups: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path, maxBytes=max_mb * _MB, backupCount=backups, encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    return handler


class PipelineLogger:
    """
    Root logger configuration for one ETL process

    Replaces any handlers already on the root logger, so calling it twice
    does not duplicate output.
    """

    def __init__(self, log_level: str = "INFO", log_dir: Optional[Path] = None):
        self.log_level = log_level.upper()
        self.log_dir = Path(log_dir) if log_dir else None
        self._configure_logging()

    def _configure_logging(self) -> None:
        level = getattr(logging, self.log_level)
        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        console = logging.StreamHandler(sys.stdout)
        console.setLevel(level)
        if self.log_level == "DEBUG":
            console.setFormatter(logging.Formatter(_DEBUG_FORMAT, datefmt='%H:%M:%S'))
        else:
            console.setFormatter(JSONFormatter())
        root_logger.addHandler(console)

        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            root_logger.addHandler(
                _rotating_handler(self.log_dir / 'taxi_etl.log', logging.INFO, max_mb=50, backups=10)
            )
            root_logger.addHandler(
                _rotating_handler(self.log_dir / 'errors.log', logging.ERROR, max_mb=10, backups=5)
            )

        # Connector chatter drowns out per-row diagnostics
        for noisy in ('snowflake', 'urllib3'):
            logging.getLogger(noisy).setLevel(logging.WARNING)


class PerformanceLogger:
    """Stage durations and per-run record counts on the ``performance.*`` loggers"""

    def __init__(self, logger_name: str):
        self.logger = logging.getLogger(f"performance.{logger_name}")

    def log_operation(self, operation_name: str, duration: float, **extra_metrics) -> None:
        """Record how long one pipeline stage took"""
        self.logger.info(
            f"Completed operation: {operation_name} in {duration:.3f}s",
            extra={'operation': operation_name, 'duration_seconds': duration, **extra_metrics}
        )

    def log_data_metrics(self, **metrics) -> None:
        """Record the row and load counts of a finished run"""
        self.logger.info("Data metrics", extra={'metrics_type': 'data', **metrics})


def get_logger(name: str) -> logging.Logger:
    """Module logger; handlers live on the root logger set up by setup_pipeline_logging"""
    return logging.getLogger(name)


def setup_pipeline_logging(log_level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """
    Configure root logging once per process

    Args:
        log_level: Logging level name
        log_dir: Directory for rotating log files, console only when None
    """
    PipelineLogger(log_level=log_level, log_dir=Path(log_dir) if log_dir else None)


class timed_operation:
    """
    Context manager timing one pipeline stage

    Usage:
        with timed_operation("bulk_load", logger) as timer:
            loader.bulk_load(trips)
        print(timer.duration)
    """

    def __init__(self, operation_name: str, logger: logging.Logger):
        self.operation_name = operation_name
        self.duration = 0.0
        self.performance_logger = PerformanceLogger(logger.name)
        self._started = None

    def __enter__(self):
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self._started
        self.performance_logger.log_operation(
            self.operation_name,
            self.duration,
            success=exc_type is None,
            error_type=exc_type.__name__ if exc_type else None
        )
        return False
