# trip_etl/utils/exceptions.py
"""
Custom exceptions for the taxi trip ETL pipeline
"""

from typing import Optional, Dict, Any, List


class PipelineError(Exception):
    """
    Base exception for all pipeline errors

    Carries a machine-readable code and context so fatal failures
    can be logged and reported uniformly by the CLI.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """
        Initialize pipeline error

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code for categorization
            context: Additional context information
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context,
            'cause': str(self.cause) if self.cause else None
        }

    def __str__(self) -> str:
        """String representation of the error"""
        base_msg = f"{self.error_code}: {self.message}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" (Context: {context_str})"
        if self.cause:
            base_msg += f" (Caused by: {self.cause})"
        return base_msg


class ConfigurationError(PipelineError):
    """
    Raised when there are configuration issues

    Examples:
    - Source time zone cannot be resolved
    - Missing warehouse credentials
    - Invalid option values
    """
    pass


class DataSourceError(PipelineError):
    """
    Raised when the input file cannot be used

    Examples:
    - File missing or unreadable
    - Header lacks a required column
    - Undecodable file encoding
    """
    pass


class LoaderError(PipelineError):
    """
    Raised during warehouse operations

    Examples:
    - Destination unreachable
    - Table creation failures
    - Bulk load rejected for the whole batch
    """
    pass


class TimeConversionError(PipelineError):
    """
    Raised when a local timestamp has no single UTC instant

    Row-scoped: the orchestrator turns it into a rejected row.
    """
    pass


class DuplicateExportError(PipelineError):
    """Raised when the duplicate records file cannot be written"""
    pass


class ErrorCollector:
    """
    Collects row-level rejects and advisory warnings for one run

    Nothing here aborts the run; the collected entries feed the
    end-of-run summary.
    """

    def __init__(self):
        self.errors: List[Dict[str, Any]] = []
        self.warnings: List[Dict[str, Any]] = []

    def add_error(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Add a row-level error to the collection"""
        self.errors.append({'message': message, 'context': context or {}})

    def add_warning(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Add a warning to the collection"""
        self.warnings.append({'message': message, 'context': context or {}})

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def get_summary(self) -> Dict[str, Any]:
        """Get summary of collected errors and warnings"""
        return {
            'error_count': self.error_count,
            'warning_count': self.warning_count,
            'errors': list(self.errors),
            'warnings': list(self.warnings)
        }
