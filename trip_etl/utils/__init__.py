"""Utility modules"""

from .logger import get_logger, setup_pipeline_logging, PerformanceLogger, timed_operation
from .exceptions import (
    PipelineError, ConfigurationError, DataSourceError, LoaderError,
    TimeConversionError, DuplicateExportError, ErrorCollector
)

__all__ = [
    'get_logger', 'setup_pipeline_logging', 'PerformanceLogger', 'timed_operation',
    'PipelineError', 'ConfigurationError', 'DataSourceError', 'LoaderError',
    'TimeConversionError', 'DuplicateExportError', 'ErrorCollector'
]
