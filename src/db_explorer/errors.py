"""Structured Error Taxonomy for the Database Explorer.

Every failure the Gateway or the Console can surface is one of the
classes below. They all inherit from StructuredError and provide:
- Error category and severity metadata
- A retryability hint (informational only, nothing retries automatically)
- A human-readable message, verbatim from the database driver where
  the failure originated there
- Consistent to_dict() method for JSON serialization

Example:
    >>> try:
    ...     raise QueryExecutionError('relation "nope" does not exist')
    ... except StructuredError as e:
    ...     error_json = e.to_dict()
    ...     print(error_json["category"])
    execution
"""
from enum import Enum
from typing import Optional, Dict, Any
from datetime import datetime, timezone


class ErrorCategory(Enum):
    """Error categories for classification."""
    CONNECTIVITY = "connectivity"    # Database connection missing or dropped
    EXECUTION = "execution"          # Database rejected the statement
    TRANSPORT = "transport"          # Gateway unreachable or unusable reply
    CONFIGURATION = "configuration"  # Invalid settings
    UNKNOWN = "unknown"              # Unclassified errors


class ErrorSeverity(Enum):
    """Error severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class StructuredError(Exception):
    """Base class for all structured errors.

    Attributes:
        message: Human-readable error message
        category: ErrorCategory classification
        severity: ErrorSeverity level
        retryable: Whether the operation may succeed if resubmitted
        details: Additional context (dict)
        timestamp: When the error occurred

    Example:
        >>> error = StructuredError(
        ...     "Something went wrong",
        ...     category=ErrorCategory.EXECUTION,
        ...     details={"sql": "SELECT 1"}
        ... )
        >>> error.to_dict()["error_type"]
        'StructuredError'
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        retryable: bool = False,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.retryable = retryable
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to structured dictionary.

        Returns:
            Dictionary with error details in predictable schema:
            {
                "error_type": "ErrorClassName",
                "message": "Human-readable message",
                "category": "connectivity|execution|transport|...",
                "severity": "info|warning|error|critical",
                "retryable": true|false,
                "details": {...},
                "timestamp": "2024-01-01T12:00:00.000000+00:00"
            }
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "details": self.details,
            "timestamp": self.timestamp.isoformat()
        }


class DatabaseError(StructuredError):
    """Error raised by the Gateway while talking to the database.

    The Gateway turns every DatabaseError into a `{"error": message}`
    payload; none of them crash the process.
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.EXECUTION,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        retryable: bool = False,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            category=category,
            severity=severity,
            retryable=retryable,
            details=details
        )


class QueryExecutionError(DatabaseError):
    """The database rejected the submitted SQL.

    Syntax errors, missing privileges, constraint violations. The message
    is the driver's own text and is not classified further.

    Example:
        >>> raise QueryExecutionError(
        ...     'relation "nonexistent_table" does not exist',
        ...     details={"sqlstate": "42P01"}
        ... )
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.EXECUTION,
            severity=ErrorSeverity.WARNING,
            retryable=False,  # Needs a different statement
            details=details
        )


class ConnectivityError(DatabaseError):
    """The single database connection is missing or has dropped.

    There is no reconnect logic: once raised for a dropped connection it
    keeps being raised until the Gateway process restarts.
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.CONNECTIVITY,
            severity=ErrorSeverity.CRITICAL,
            retryable=True,
            details=details
        )


class TransportError(StructuredError):
    """The Console could not complete a round trip to the Gateway.

    Raised for network/DNS failures, timeouts and replies that carry
    neither a result nor an `error` payload.
    """

    def __init__(
        self,
        message: str,
        retryable: bool = True,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.TRANSPORT,
            severity=ErrorSeverity.ERROR,
            retryable=retryable,
            details=details
        )


class ConfigurationError(StructuredError):
    """Error in system configuration.

    Example:
        >>> raise ConfigurationError(
        ...     "Gateway URL must start with http:// or https://",
        ...     details={"base_url": "sqlapi.example.org"}
        ... )
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.CRITICAL,
            retryable=False,  # Config errors need manual fix
            details=details
        )
