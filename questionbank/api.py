"""
Shared API utilities for the question bank.

This module provides:
- The standard response envelope
- Exception handlers that render every failure as an envelope
- Registration of those handlers on an application
"""

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from questionbank.common.error_handling import (
    ErrorCode,
    NotFoundError,
    QuestionBankError,
    ValidationError,
    convert_exception,
    error_response,
    log_error,
)
from questionbank.common.logger import app_logger

# Setup module logger
logger = app_logger.getChild("api")


# Standard API response model
class APIResponse:
    """Standard API response structure: ``{success, message, data?, errors?, pagination?}``"""

    @staticmethod
    def success(data: Any = None, message: str = "Success") -> Dict[str, Any]:
        """
        Create a success response.

        Args:
            data: Response data; omitted when None
            message: Success message

        Returns:
            Response dictionary
        """
        response: Dict[str, Any] = {
            "success": True,
            "message": message,
        }
        if data is not None:
            response["data"] = data
        return response

    @staticmethod
    def paginated(data: List[Any], pagination: Dict[str, int], message: str = "Success") -> Dict[str, Any]:
        return {
            "success": True,
            "message": message,
            "data": data,
            "pagination": pagination,
        }

    @staticmethod
    def error(message: str, errors: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        """
        Create an error response.

        Args:
            message: Error message
            errors: Optional per-field problems

        Returns:
            Response dictionary
        """
        response: Dict[str, Any] = {
            "success": False,
            "message": message,
        }
        if errors is not None:
            response["errors"] = errors
        return response


def _include_stack_trace(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return settings is not None and not settings.is_production


def _request_context(request: Request) -> Dict[str, Any]:
    return {"method": request.method, "path": request.url.path}


def _render(request: Request, error: QuestionBankError) -> JSONResponse:
    include_stack_trace = _include_stack_trace(request)
    log_error(error, include_stack_trace=include_stack_trace, context=_request_context(request))
    return JSONResponse(
        status_code=error.status_code,
        content=error_response(error, include_stack_trace=include_stack_trace)
    )


async def question_bank_exception_handler(request: Request, exc: QuestionBankError) -> JSONResponse:
    """Render a domain error with the status code it carries."""
    return _render(request, exc)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle request parsing errors (malformed JSON, missing body) as a 400.

    Args:
        request: The incoming request
        exc: The validation exception

    Returns:
        A JSON response with error details
    """
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", []) if part != "body"]
        errors.append({
            "field": ".".join(location) or "body",
            "message": error.get("msg", "Unknown validation error"),
        })

    return _render(request, ValidationError("Validation failed", errors=errors))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render routing errors raised by Starlette itself."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        error = NotFoundError(f"Route {request.url.path} not found", code=ErrorCode.ROUTE_NOT_FOUND)
        return _render(request, error)

    logger.warning(f"HTTP {exc.status_code} for {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=APIResponse.error(str(exc.detail)),
        headers=getattr(exc, "headers", None)
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render anything unexpected as a 500 without leaking its message."""
    return _render(request, convert_exception(exc, context=_request_context(request)))


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register the envelope-producing exception handlers on an application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(QuestionBankError, question_bank_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
