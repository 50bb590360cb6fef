"""Custom exception hierarchy for the encoding pipeline.

All pipeline-specific exceptions inherit from EncodingPipelineError,
enabling consistent error handling and structured error logging.

Exception hierarchy:
    EncodingPipelineError (base)
    ├── ConfigurationError
    ├── RemoteCallError
    ├── EncodingFailedError
    └── WaitAbortedError
        ├── WaitTimeoutError
        └── WaitCancelledError
"""

from typing import Any


class EncodingPipelineError(Exception):
    """Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error code for log filtering
        details: Additional context as key-value pairs
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize pipeline error.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (e.g., 'REMOTE_CALL_ERROR')
            details: Additional context for debugging
        """
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for JSON serialization.

        Returns:
            Dictionary with error_code, error_message, and details.
            Note: Uses 'error_message' instead of 'message' to avoid conflicts
            with Python's logging module which reserves 'message' internally.
        """
        return {
            "error_code": self.error_code,
            "error_message": self.message,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.error_code!r}, {self.message!r})"


class ConfigurationError(EncodingPipelineError):
    """Raised when required configuration is missing or invalid.

    Always raised before any remote call is made.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "CONFIGURATION_ERROR", details)


class RemoteCallError(EncodingPipelineError):
    """Raised when a call to the Bitmovin API fails.

    This covers:
    - Authentication failures (invalid API key)
    - Request validation errors
    - Network errors surfaced by the SDK
    """

    def __init__(
        self,
        operation: str,
        original_error: Exception,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize remote call error.

        Args:
            operation: Name of the API operation that failed (e.g., 'create_encoding')
            original_error: The exception raised by the SDK
            details: Additional context
        """
        error_details = details or {}
        error_details["operation"] = operation
        error_details["original_error"] = str(original_error)
        error_details["original_error_type"] = type(original_error).__name__

        super().__init__(
            f"Bitmovin API call '{operation}' failed: {original_error}",
            "REMOTE_CALL_ERROR",
            error_details,
        )
        self.operation = operation
        self.original_error = original_error


class EncodingFailedError(EncodingPipelineError):
    """Raised when a remote job reaches the ERROR terminal status."""

    def __init__(
        self,
        resource_id: str,
        error_messages: list[str] | None = None,
        resource_label: str = "Encoding",
    ) -> None:
        """Initialize encoding failure.

        Args:
            resource_id: Encoding (or manifest) id that failed
            error_messages: Error messages reported by the status task, if any
            resource_label: Kind of job that failed, used in the message
        """
        details = {
            "resource_id": resource_id,
            "resource_label": resource_label,
            "error_messages": error_messages or [],
        }
        super().__init__(f"{resource_label} failed: {resource_id}", "ENCODING_FAILED", details)
        self.resource_id = resource_id


class WaitAbortedError(EncodingPipelineError):
    """Base for waits that stopped before a terminal status was observed."""


class WaitTimeoutError(WaitAbortedError):
    """Raised when a job does not reach a terminal status within the timeout."""

    def __init__(self, resource_id: str, timeout_seconds: float, last_status: str | None) -> None:
        details = {
            "resource_id": resource_id,
            "timeout_seconds": timeout_seconds,
            "last_status": last_status,
        }
        message = (
            f"Timed out after {timeout_seconds}s waiting for {resource_id} "
            f"(last status: {last_status})"
        )
        super().__init__(message, "WAIT_TIMEOUT", details)


class WaitCancelledError(WaitAbortedError):
    """Raised when the caller cancels a wait through its cancel token."""

    def __init__(self, resource_id: str, last_status: str | None) -> None:
        details = {
            "resource_id": resource_id,
            "last_status": last_status,
        }
        super().__init__(f"Wait for {resource_id} was cancelled", "WAIT_CANCELLED", details)
