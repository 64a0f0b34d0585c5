"""
Error Handling System for the Question Bank

This module provides the error framework shared by every layer:
1. Custom exception hierarchy mapped onto HTTP status codes
2. Structured error logging and reporting
3. Error tracing decorators for infrastructure calls
4. Error payload generation for the API envelope
"""

import logging
import traceback
import asyncio
import functools
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, Union, cast

# Type variables
F = TypeVar('F', bound=Callable)

logger = logging.getLogger("questionbank.errors")


class ErrorSeverity(Enum):
    """Severity levels for errors"""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCode(Enum):
    """Standard error codes for the question bank"""
    UNKNOWN_ERROR = "unknown_error"
    VALIDATION_ERROR = "validation_error"
    NOT_FOUND_ERROR = "not_found_error"
    QUESTION_NOT_FOUND = "question_not_found"
    ROUTE_NOT_FOUND = "route_not_found"
    DATABASE_ERROR = "database_error"


SEVERITY_LOG_LEVELS = {
    ErrorSeverity.DEBUG: logging.DEBUG,
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


def format_stack(error: BaseException) -> List[str]:
    """Render the traceback attached to an exception as a list of lines."""
    lines = traceback.format_exception(type(error), error, error.__traceback__)
    return "".join(lines).splitlines()


class QuestionBankError(Exception):
    """Base exception class for all question bank errors"""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.severity = severity
        self.details = details or {}
        self.cause = cause
        self.context = context or {}

    @property
    def errors(self) -> List[Dict[str, Any]]:
        """Per-field problems reported to the client; empty for most errors."""
        return []

    def __str__(self) -> str:
        base_str = f"{self.code.value}: {self.message}"
        if self.details:
            base_str += f" (details: {self.details})"
        if self.cause:
            base_str += f" caused by {type(self.cause).__name__}: {str(self.cause)}"
        return base_str


class ValidationError(QuestionBankError):
    """Error raised when input validation fails"""

    status_code = 400

    def __init__(
        self,
        message: str,
        errors: Optional[List[Dict[str, Any]]] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["validation_errors"] = list(errors or [])

        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            severity=ErrorSeverity.WARNING,
            details=details,
            cause=cause,
            context=context
        )

    @property
    def errors(self) -> List[Dict[str, Any]]:
        return self.details["validation_errors"]


class NotFoundError(QuestionBankError):
    """Error raised when a requested resource is not found"""

    status_code = 404

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.NOT_FOUND_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code=code,
            severity=ErrorSeverity.WARNING,
            details=details,
            cause=cause,
            context=context
        )


class QuestionNotFoundError(NotFoundError):
    """Error raised when a question is not found"""

    def __init__(
        self,
        question_id: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["question_id"] = question_id
        self.question_id = question_id

        super().__init__(
            message="Question not found",
            code=ErrorCode.QUESTION_NOT_FOUND,
            details=details,
            cause=cause,
            context=context
        )


class UnexpectedError(QuestionBankError):
    """Error raised for failures nobody anticipated"""

    status_code = 500


class DatabaseError(UnexpectedError):
    """Error raised when the persistence layer fails"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code=ErrorCode.DATABASE_ERROR,
            severity=ErrorSeverity.ERROR,
            details=details,
            cause=cause,
            context=context
        )


def convert_exception(
    exception: Exception,
    default_message: str = "An unexpected error occurred",
    context: Optional[Dict[str, Any]] = None
) -> QuestionBankError:
    """
    Convert a standard exception to a QuestionBankError.

    Args:
        exception: The exception to convert
        default_message: Default message if the exception has no message
        context: Optional additional context

    Returns:
        Converted QuestionBankError
    """
    if isinstance(exception, QuestionBankError):
        if context:
            exception.context.update(context)
        return exception

    error = UnexpectedError(
        message=str(exception) or default_message,
        code=ErrorCode.UNKNOWN_ERROR,
        severity=ErrorSeverity.ERROR,
        cause=exception,
        context=context
    )
    error.__traceback__ = exception.__traceback__
    return error


class AsyncErrorTracer:
    """
    Async context manager for tracing errors.

    Catches exceptions, logs them with a given context,
    and re-raises them as QuestionBankError instances.
    """

    def __init__(
        self,
        operation: str,
        context: Optional[Dict[str, Any]] = None,
        log_level: int = logging.ERROR,
        capture_as: Optional[Type[QuestionBankError]] = None
    ):
        """
        Initialize async error tracer.

        Args:
            operation: Name of the operation being traced
            context: Additional context to include in error reports
            log_level: Logging level for error reports
            capture_as: Optional QuestionBankError subclass to use for capturing
        """
        self.operation = operation
        self.context = dict(context or {})
        self.context["operation"] = operation
        self.log_level = log_level
        self.capture_as = capture_as

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_val is None:
            return False

        # Typed errors already carry their meaning
        if isinstance(exc_val, (QuestionBankError, asyncio.CancelledError)):
            return False

        if self.capture_as is not None:
            error = self.capture_as(
                f"{self.operation} failed: {exc_val}",
                cause=exc_val,
                context=self.context
            )
        else:
            error = convert_exception(exc_val, context=self.context)

        logger.log(self.log_level, f"Error in {self.operation}: {error}", exc_info=exc_val)

        raise error from exc_val


def trace_errors(
    operation: str,
    context: Optional[Dict[str, Any]] = None,
    log_level: int = logging.ERROR,
    capture_as: Optional[Type[QuestionBankError]] = None
):
    """
    Decorator for tracing errors in coroutine functions.

    Args:
        operation: Name of the operation being traced
        context: Additional context to include in error reports
        log_level: Logging level for error reports
        capture_as: Optional QuestionBankError subclass to use for capturing

    Returns:
        Decorated function
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            func_context = dict(context or {})
            func_context["function"] = func.__name__

            async with AsyncErrorTracer(
                operation=operation,
                context=func_context,
                log_level=log_level,
                capture_as=capture_as
            ):
                return await func(*args, **kwargs)

        return cast(F, async_wrapper)

    return decorator


def error_response(
    error: Union[QuestionBankError, Exception],
    include_stack_trace: bool = False
) -> Dict[str, Any]:
    """
    Generate the error envelope for an exception.

    Unexpected errors never leak their message to the client; the generic
    "Internal Server Error" is reported instead.

    Args:
        error: The error to generate a response for
        include_stack_trace: Whether to include stack trace

    Returns:
        Envelope dictionary with success, message and errors keys
    """
    if not isinstance(error, QuestionBankError):
        error = convert_exception(error)

    if isinstance(error, UnexpectedError):
        response: Dict[str, Any] = {
            "success": False,
            "message": "Internal Server Error",
        }
        if include_stack_trace:
            response["error"] = error.message
    else:
        response = {
            "success": False,
            "message": error.message,
            "errors": error.errors,
        }

    if include_stack_trace:
        response["stack"] = format_stack(error.cause or error)

    return response


def log_error(
    error: Union[QuestionBankError, Exception],
    include_stack_trace: bool = False,
    context: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log an error with standardized format, at the level its severity implies.

    Args:
        error: The error to log
        include_stack_trace: Whether to include stack trace
        context: Additional context to include
    """
    if not isinstance(error, QuestionBankError):
        error = convert_exception(error, context=context)
    elif context:
        error.context.update(context)

    message = f"ERROR [{error.code.value}]: {error.message}"

    if error.context:
        context_str = ", ".join(f"{k}={v}" for k, v in error.context.items())
        message += f" (context: {context_str})"

    if error.errors:
        message += f" errors={error.errors}"

    if error.cause:
        message += f" caused by {type(error.cause).__name__}: {str(error.cause)}"

    if include_stack_trace:
        message += "\n" + "\n".join(format_stack(error.cause or error))

    logger.log(SEVERITY_LOG_LEVELS[error.severity], message)
