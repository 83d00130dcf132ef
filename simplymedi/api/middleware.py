"""
API middleware for SimplyMedi.

Provides:
- Rate limiting
- Bearer token verification
- Request logging
- Error handling
"""

import time
import uuid
from typing import Callable, Optional

from fastapi import Request, Response, HTTPException
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

from simplymedi.api.security import AuthenticationError, verify_access_token
from simplymedi.models.schemas import ErrorResponse
from simplymedi.utils.logger import get_logger

logger = get_logger("middleware")


# Rate limiter using client IP
limiter = Limiter(key_func=get_remote_address)

REQUEST_ID_HEADER = "X-Request-ID"


def get_bearer_token(request: Request) -> Optional[str]:
    """Extract the bearer token from the Authorization header."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def error_response(status_code: int, error: str, message: str, error_code: str) -> JSONResponse:
    """Build a JSON error response in the standard ErrorResponse shape."""
    body = ErrorResponse(error=error, message=message, error_code=error_code)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


class SessionMiddleware(BaseHTTPMiddleware):
    """
    Attaches the caller's session to the request.

    A valid access token sets `request.state.user_id` from its claims.
    Anonymous requests and rejected tokens leave it None; for rejected
    tokens `request.state.auth_error` says why ("Token expired" or
    "Invalid token") so protected routes can answer 401 with it.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable
    ) -> Response:
        request.state.user_id = None
        request.state.auth_error = None

        token = get_bearer_token(request)
        if token is not None:
            try:
                request.state.user_id = verify_access_token(token)
            except AuthenticationError as e:
                request.state.auth_error = e.message

        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request with its status and processing time.

    A request id (taken from `X-Request-ID` or generated) is bound to the
    structlog context for the duration of the request and echoed back in
    the response headers, so service logs of one call can be correlated.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.bind_contextvars(request_id=request_id)
        started = time.perf_counter()

        logger.info(
            "Request received",
            method=request.method,
            path=request.url.path,
            client_ip=get_remote_address(request),
            authenticated=get_bearer_token(request) is not None
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                path=request.url.path,
                error=str(e),
                process_time_ms=int((time.perf_counter() - started) * 1000)
            )
            raise
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        elapsed = time.perf_counter() - started
        logger.info(
            "Request completed",
            path=request.url.path,
            status_code=response.status_code,
            process_time_ms=int(elapsed * 1000),
            request_id=request_id
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Catches unhandled exceptions and returns safe error responses.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable
    ) -> Response:
        try:
            return await call_next(request)

        except HTTPException:
            raise

        except ValueError as e:
            logger.warning("Validation error", error=str(e))
            return error_response(400, "Validation Error", str(e), "VALIDATION_ERROR")

        except Exception as e:
            logger.error("Unhandled exception", error=str(e), exc_info=True)
            return error_response(
                500,
                "Internal Server Error",
                "An unexpected error occurred. Please try again.",
                "INTERNAL_ERROR"
            )


def setup_rate_limiting(app) -> None:
    """Setup rate limiting on the application."""
    app.state.limiter = limiter

    @app.exception_handler(429)
    async def rate_limit_handler(request: Request, exc: Exception):
        return error_response(
            429,
            "Rate Limit Exceeded",
            "Too many requests. Please wait before trying again.",
            "RATE_LIMIT_EXCEEDED"
        )
