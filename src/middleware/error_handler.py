# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Error handling: middleware and exception handlers for consistent responses."""

import logging
from collections.abc import Awaitable, Callable
from http import HTTPStatus

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from src.services.errors import BookingServiceError

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware for consistent error handling and logging.

    Catches unhandled exceptions and converts them to appropriate
    JSON responses without exposing sensitive error details.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process request and handle any exceptions.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware or route handler.

        Returns:
            HTTP response.
        """
        try:
            return await call_next(request)
        except HTTPException:
            # Let FastAPI handle HTTP exceptions normally
            raise
        except Exception:
            logger.exception(
                "Unhandled exception for %s %s", request.method, request.url.path
            )

            return create_error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "An internal error occurred. Please try again later.",
                "internal_error",
            )


def create_error_response(
    status_code: int,
    message: str,
    error_type: str = "error",
) -> JSONResponse:
    """Create a standardized error response.

    Args:
        status_code: HTTP status code.
        message: User-facing error message.
        error_type: Error type identifier.

    Returns:
        JSONResponse with error details.
    """
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": message,
            "type": error_type,
        },
    )


async def booking_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Convert a booking core error to its JSON response.

    Args:
        request: Request that failed.
        exc: The BookingServiceError raised.

    Returns:
        JSONResponse with the error's status and type.
    """
    error = exc if isinstance(exc, BookingServiceError) else BookingServiceError(str(exc))
    logger.warning(
        "%s %s rejected: %s (%s)",
        request.method,
        request.url.path,
        error.message,
        error.error_type,
    )
    return create_error_response(error.status_code, error.message, error.error_type)


async def request_validation_handler(request: Request, exc: Exception) -> JSONResponse:
    """Convert request schema failures to the standard error body.

    Args:
        request: Request that failed validation.
        exc: The RequestValidationError raised by FastAPI.

    Returns:
        422 JSONResponse naming each invalid field.
    """
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    problems = [
        f"{'.'.join(str(part) for part in err.get('loc', ()) if part != 'body')}: "
        f"{err.get('msg', 'invalid')}"
        for err in errors
    ]
    message = "; ".join(problems) or "Invalid request"
    logger.debug("Invalid request to %s: %s", request.url.path, message)
    return create_error_response(
        HTTPStatus.UNPROCESSABLE_ENTITY, message, "validation_error"
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on an application.

    Args:
        app: FastAPI application instance.
    """
    app.add_exception_handler(BookingServiceError, booking_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
