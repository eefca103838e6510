"""
Error Definitions

Defines the exception classes raised by the repository layer, so callers can
branch on the error kind instead of on driver-specific message text.
"""

from typing import Any, Optional


class ModelBaseError(Exception):
    """
    Repository Base Exception

    Base class for all custom exceptions, containing error message, type, and code.
    """

    def __init__(
        self,
        message: str,
        error_type: str = "modelbase_error",
        code: str = "internal_error",
        details: Optional[dict[str, Any]] = None,
    ):
        """
        Initialize exception

        Args:
            message: Error message
            error_type: Error type
            code: Error code
            details: Extra error details (operation, table, ...)
        """
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary format (for structured logging or API responses)

        Returns:
            dict: Error information dictionary
        """
        result = {
            "error": {
                "message": self.message,
                "type": self.error_type,
                "code": self.code,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result


class ConfigurationError(ModelBaseError):
    """
    Configuration Error

    Raised once, at repository construction, when the row type cannot be
    managed (not a mapped class, no table name, no single-column primary key).
    """

    def __init__(
        self,
        message: str = "Invalid repository configuration",
        code: str = "invalid_row_type",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="configuration_error",
            code=code,
            details=details,
        )


class NotFoundError(ModelBaseError):
    """
    Row Not Found Error

    Raised only by lookups that promise a row (get_or_raise). Plain point
    lookups return None and existence checks return False instead.
    """

    def __init__(
        self,
        message: str = "Row not found",
        code: str = "not_found",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="not_found_error",
            code=code,
            details=details,
        )


class ValidationError(ModelBaseError):
    """
    Parameter Validation Error

    Raised when call arguments are rejected before the executor is contacted.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        code: str = "validation_error",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="validation_error",
            code=code,
            details=details,
        )


class InvalidOptionError(ValidationError):
    """Raised when a query option is built with out-of-range values."""

    def __init__(
        self,
        message: str = "Invalid query option",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="invalid_option", details=details)


class MissingPrimaryKeyError(ValidationError):
    """Raised when update/delete receives a row without a primary key."""

    def __init__(
        self,
        message: str = "Row has no primary key",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="missing_primary_key", details=details)


class ExecutorError(ModelBaseError):
    """
    Executor Error

    Raised when the underlying database call fails (connectivity, syntax,
    constraint violations, ...). The driver exception is kept as __cause__.
    """

    def __init__(
        self,
        message: str = "Database operation failed",
        code: str = "executor_error",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="executor_error",
            code=code,
            details=details,
        )


class DuplicateKeyError(ExecutorError):
    """
    Duplicate Key Error

    Raised when an insert violates a primary-key or unique constraint.
    """

    def __init__(
        self,
        message: str = "Duplicate key",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="duplicate_key", details=details)


class QueryTimeoutError(ExecutorError):
    """Raised when an executor call exceeds the repository deadline."""

    def __init__(
        self,
        message: str = "Database operation timed out",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="timeout", details=details)
