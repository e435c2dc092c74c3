"""Shared API error payloads and application-wide exception handlers."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def api_error_response(status_code: int, code: str, message: str) -> JSONResponse:
    """Build the shared error payload shape.

    Args:
        status_code: HTTP status code.
        code: Deterministic error code.
        message: Human-readable message.

    Returns:
        JSONResponse: Error response.
    """

    return JSONResponse(
        content={"status": "error", "code": code, "message": message},
        status_code=status_code,
    )


def api_register_exception_handlers(application: FastAPI) -> None:
    """Attach request-validation and catch-all handlers to the application.

    Args:
        application: Application receiving the handlers.

    Returns:
        None: Handlers are registered as a side effect.
    """

    @application.exception_handler(RequestValidationError)
    async def api_handle_validation_error(request: Request, error: RequestValidationError) -> JSONResponse:
        """Answer malformed requests with 400 and the shared error body.

        Returns:
            JSONResponse: 400 error response.
        """

        code = "SUBMISSION_REJECTED" if request.method == "POST" else "INVALID_REQUEST"
        return api_error_response(status.HTTP_400_BAD_REQUEST, code, _api_describe_validation_error(error))

    @application.exception_handler(Exception)
    async def api_handle_unexpected_error(request: Request, error: Exception) -> JSONResponse:
        """Log unexpected failures and answer with a structured 500.

        Returns:
            JSONResponse: 500 error response.
        """

        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=error)
        return api_error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", "internal server error")


def _api_describe_validation_error(error: RequestValidationError) -> str:
    """Flatten validation errors to one `location: message` string.

    Args:
        error: Framework validation error.

    Returns:
        str: Semicolon-separated field errors.
    """

    details = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()) if part != "body")
        message = item.get("msg", "invalid value")
        details.append(f"{location}: {message}" if location else message)
    return "; ".join(details) or "invalid request"
