"""
Decision Log - Exceptions.

============================================================
CUSTOM EXCEPTIONS
============================================================

All exceptions for the decision log engine:
- DecisionLogError: Base exception
- FetchError: Transport or network failure
- ParseError: Malformed response body or record
- ConfigurationError: Invalid configuration

An empty record set is NOT an error. Zero records is a
valid, renderable state.

============================================================
FAILURE SAFETY
============================================================

- The Record Store never raises fetch/parse failures past
  its boundary; they become a FAILED status
- A failed refresh never discards previously loaded data
- Only the presentation layer turns a failure into
  something user-visible

============================================================
"""

from typing import Any, Dict, Optional


class DecisionLogError(Exception):
    """
    Base exception for decision log errors.

    All decision log exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        subject_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize exception.

        Args:
            message: Error message
            subject_id: Trader/strategy identifier being viewed
            details: Additional error details
        """
        self.message = message
        self.subject_id = subject_id
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message."""
        if self.subject_id:
            return f"[{self.subject_id}] {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "subject_id": self.subject_id,
            "details": self.details,
        }


class FetchError(DecisionLogError):
    """
    Raised when the records source cannot be reached.

    Network failures, timeouts and non-success HTTP responses.
    """

    def __init__(
        self,
        message: str,
        subject_id: Optional[str] = None,
        recoverable: bool = True,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize exception.

        Args:
            message: Error message
            subject_id: Trader/strategy identifier
            recoverable: Whether a later attempt may succeed
            status_code: HTTP status code, if any
            details: Additional error details
        """
        details = dict(details or {})
        if status_code is not None:
            details["status_code"] = status_code
        details["recoverable"] = recoverable

        super().__init__(message=message, subject_id=subject_id, details=details)

        self.recoverable = recoverable
        self.status_code = status_code


class ParseError(DecisionLogError):
    """
    Raised when a response body or a record is malformed.

    Covers non-JSON bodies, wrong shapes, missing required
    fields and timestamps that do not parse.
    """

    def __init__(
        self,
        message: str,
        subject_id: Optional[str] = None,
        field_name: Optional[str] = None,
        cycle_number: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = dict(details or {})
        if field_name:
            details["field"] = field_name
        if cycle_number is not None:
            details["cycle_number"] = cycle_number

        super().__init__(message=message, subject_id=subject_id, details=details)

        self.field_name = field_name
        self.cycle_number = cycle_number


class ConfigurationError(DecisionLogError):
    """
    Raised when configuration is invalid.

    Should be caught at startup and fixed before use.
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Any = None,
    ) -> None:
        details = {}
        if config_key:
            details["config_key"] = config_key
        if actual_value is not None:
            details["actual"] = str(actual_value)

        super().__init__(message=message, details=details)

        self.config_key = config_key
