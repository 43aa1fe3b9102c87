"""
Standardized error handling utilities for the chart assistant.
Provides the user-safe error taxonomy and consistent logging helpers.
"""

import logging
from typing import Optional, Callable, Any

import config

logger = logging.getLogger('chart_assistant.error_handler')


class ErrorSeverity:
    """Error severity levels for consistent logging and handling."""
    CRITICAL = "critical"  # Session cannot continue
    HIGH = "error"        # Major functionality broken
    MEDIUM = "warning"    # Functionality impacted but recoverable
    LOW = "info"          # Minor issues or expected behavior
    DEBUG = "debug"       # Developer-only diagnostics


class ChatAssistantError(Exception):
    """
    Base exception carrying a finished sentence that is safe to show to the user.

    The technical detail (if any) goes to ``detail`` and is only ever logged.
    """

    def __init__(self, user_message: str, detail: Optional[str] = None):
        self.user_message = user_message
        self.detail = detail
        super().__init__(user_message)


class InputValidationError(ChatAssistantError):
    """Raised when a message, history or conversation id is rejected before any network call."""
    pass


class RateLimitExceededError(ChatAssistantError):
    """Raised when a conversation exceeds its request window."""

    def __init__(self, user_message: str, wait_seconds: float):
        self.wait_seconds = wait_seconds
        super().__init__(user_message)


class TransportError(ChatAssistantError):
    """Raised when the backend call fails."""
    pass


class RequestTimeoutError(TransportError):
    """Raised when the backend call exceeds its timeout."""

    def __init__(self, detail: Optional[str] = None):
        super().__init__(config.ERROR_MESSAGES['timeout'], detail)


class BackendHTTPError(TransportError):
    """Raised for non-2xx backend responses."""

    def __init__(self, status: int, detail: Optional[str] = None):
        self.status = status
        super().__init__(user_message_for_status(status), detail)


class ResponseFormatError(TransportError):
    """Raised when the backend answers with an unexpected body shape."""
    pass


class ConfigurationError(ValueError):
    """Raised when the configuration cannot be used (for example, no usable webhook URL)."""
    pass


def user_message_for_status(status: int) -> str:
    """Map an HTTP status to a generic user-facing sentence (never the server body)."""
    if status >= 500:
        return config.ERROR_MESSAGES['server_error']
    if status == 404:
        return config.ERROR_MESSAGES['not_found']
    if status in (401, 403):
        return config.ERROR_MESSAGES['access_denied']
    return config.ERROR_MESSAGES['request_failed']


def log_error_with_context(
    error: Exception,
    context: str,
    severity: str = ErrorSeverity.MEDIUM,
    additional_info: Optional[dict] = None
) -> None:
    """
    Log an error with consistent formatting and context information.

    Args:
        error: The exception that occurred
        context: Description of where/when the error occurred
        severity: Error severity level
        additional_info: Additional context information to log
    """
    error_msg = f"{context}: {str(error)}"

    detail = getattr(error, 'detail', None)
    if detail:
        error_msg += f" | Detail: {detail}"

    if additional_info:
        error_msg += f" | Context: {additional_info}"

    log_func = getattr(logger, severity, logger.error)

    if severity in (ErrorSeverity.CRITICAL, ErrorSeverity.HIGH):
        log_func(error_msg, exc_info=True)
    else:
        log_func(error_msg)


def safe_execute(
    func: Callable,
    *args,
    context: str = "Operation",
    default_return: Any = None,
    severity: str = ErrorSeverity.MEDIUM,
    **kwargs
) -> Any:
    """
    Safely execute a function with standardized error handling.

    Args:
        func: Function to execute
        *args: Positional arguments for the function
        context: Description of the operation for logging
        default_return: Value to return if an error occurs
        severity: Error severity level
        **kwargs: Keyword arguments for the function

    Returns:
        Function result or default_return if an error occurs
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        log_error_with_context(e, context, severity)
        return default_return


class ErrorContext:
    """Context manager for error handling with automatic logging."""

    def __init__(self, context: str, severity: str = ErrorSeverity.MEDIUM,
                 reraise: bool = True):
        self.context = context
        self.severity = severity
        self.reraise = reraise
        self.error = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_val is not None and isinstance(exc_val, Exception):
            self.error = exc_val
            log_error_with_context(exc_val, self.context, self.severity)
            if not self.reraise:
                return True  # Suppress the exception
        return False
