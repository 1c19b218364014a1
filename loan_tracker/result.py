"""Result pattern for consistent return types in the Loan Tracker engine.

This module provides a Result class used by the field validators and the
facade so that expected rejections (bad user input, pending warnings) are
values rather than exceptions.
"""
from dataclasses import dataclass, field
from typing import Any, List, Optional, TypeVar, Generic

T = TypeVar('T')


@dataclass
class Result(Generic[T]):
    """Represents the outcome of an operation.

    Attributes:
        success: Whether the operation succeeded.
        value: The return value on success, None on failure.
        error: Error message on failure, None on success.
        error_type: Type/category of error (e.g., "TOO_LOW", "VALIDATION").
        warnings: Advisory (code, message) pairs that never affect success.
        details: Extra payload for the caller, e.g. a ValidationReport.

    Usage:
        # Success case
        return Result.ok(amount)

        # Failure case
        return Result.fail("Amount must be at least $0.01", ErrorType.TOO_LOW)

        # Checking result
        result = validator.validate_amount("12.50")
        if result.success:
            print(f"Value: {result.value}")
        else:
            print(f"Error: {result.error}")
    """
    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    warnings: List[tuple] = field(default_factory=list)
    details: Any = None

    @classmethod
    def ok(cls, value: T = None, warnings: List[tuple] = None) -> 'Result[T]':
        """Create a successful result.

        Args:
            value: The return value.
            warnings: Optional list of (code, message) advisories.

        Returns:
            A Result with success=True and the given value.
        """
        return cls(success=True, value=value, warnings=list(warnings or []))

    @classmethod
    def fail(cls, error: str, error_type: str = None, details: Any = None) -> 'Result[T]':
        """Create a failure result.

        Args:
            error: Error message describing what went wrong.
            error_type: Optional error category for programmatic handling.
            details: Optional payload describing the failure.

        Returns:
            A Result with success=False and error details.
        """
        return cls(success=False, error=error, error_type=error_type, details=details)

    def __bool__(self) -> bool:
        return self.success

    def unwrap(self) -> T:
        """Get the value, raising an exception if the operation failed.

        Raises:
            ValueError: If the operation failed.
        """
        if not self.success:
            raise ValueError(f"Result unwrap failed: {self.error}")
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Get the value or a default if the operation failed."""
        return self.value if self.success else default


# Common error types for consistency
class ErrorType:
    """Standard error and warning code constants."""
    # Field failures
    INVALID_DATE = "INVALID_DATE"
    REQUIRED = "REQUIRED"
    INVALID_NUMBER = "INVALID_NUMBER"
    TOO_LOW = "TOO_LOW"
    TOO_HIGH = "TOO_HIGH"
    INVALID_TYPE = "INVALID_TYPE"
    TOO_LONG = "TOO_LONG"
    # Advisories
    FUTURE_DATE = "FUTURE_DATE"
    DUPLICATE = "DUPLICATE"
    # Operation level
    VALIDATION = "VALIDATION"
    WARNINGS_PENDING = "WARNINGS_PENDING"
