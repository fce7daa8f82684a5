"""
Application middleware for observability and error handling.

Includes request and client ID injection and the global exception handlers.
"""

import re
import secrets
import time
import uuid
from collections.abc import Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from reviewzone.core.errors import AppError, ErrorCode, ErrorResponse
from reviewzone.core.logging import client_id_ctx, get_logger, request_id_ctx

logger = get_logger(__name__)


CLIENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{16,64}$")


def new_client_id() -> str:
    return secrets.token_urlsafe(24)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware to inject request ID and the client identifier.

    The client identifier cookie keys all client-scoped state. A missing or
    malformed cookie is replaced with a fresh identifier on the response.
    """

    def __init__(
        self,
        app: FastAPI,
        cookie_name: str = "rz_client_id",
        cookie_max_age: int = 31536000,
        cookie_secure: bool = True,
        cookie_samesite: str = "lax",
    ):
        super().__init__(app)
        self.cookie_name = cookie_name
        self.cookie_max_age = cookie_max_age
        self.cookie_secure = cookie_secure
        self.cookie_samesite = cookie_samesite

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with context injection."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

        client_id = request.cookies.get(self.cookie_name, "")
        issued = not CLIENT_ID_PATTERN.match(client_id)
        if issued:
            client_id = new_client_id()
        request.state.client_id = client_id

        request_id_token = request_id_ctx.set(request_id)
        client_id_token = client_id_ctx.set(client_id)

        start_time = time.perf_counter()

        try:
            response = await call_next(request)

            response.headers["X-Request-ID"] = request_id
            if issued:
                response.set_cookie(
                    key=self.cookie_name,
                    value=client_id,
                    max_age=self.cookie_max_age,
                    httponly=True,
                    secure=self.cookie_secure,
                    samesite=self.cookie_samesite,
                )

            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "Request completed",
                data={
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                },
            )

            return response

        finally:
            request_id_ctx.reset(request_id_token)
            client_id_ctx.reset(client_id_token)


def _error_json(status_code: int, error_response: ErrorResponse) -> JSONResponse:
    request_id = error_response.request_id
    return JSONResponse(
        status_code=status_code,
        content=error_response.to_dict(),
        headers={"X-Request-ID": request_id} if request_id else {},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure global exception handlers for the application."""
    from fastapi.encoders import jsonable_encoder
    from fastapi.exceptions import RequestValidationError
    from starlette.exceptions import HTTPException as StarletteHTTPException

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle validation errors with structured response."""
        error_response = ErrorResponse(
            code=ErrorCode.VALIDATION_ERROR,
            message="Validation error",
            request_id=request_id_ctx.get(),
            details={"errors": jsonable_encoder(exc.errors())},
        )
        return _error_json(422, error_response)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        _request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle HTTP exceptions with structured response."""
        code_map = {
            404: ErrorCode.NOT_FOUND,
            405: ErrorCode.METHOD_NOT_ALLOWED,
            401: ErrorCode.UNAUTHORIZED,
            403: ErrorCode.FORBIDDEN,
            429: ErrorCode.RATE_LIMITED,
        }
        error_response = ErrorResponse(
            code=code_map.get(exc.status_code, ErrorCode.INTERNAL_ERROR),
            message=str(exc.detail) if exc.detail else "HTTP error",
            request_id=request_id_ctx.get(),
        )
        return _error_json(exc.status_code, error_response)

    @app.exception_handler(AppError)
    async def app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
        """Handle application errors with structured response."""
        logger.warning(
            f"Application error: {exc.message}",
            data={"code": exc.code.value, "details": exc.details},
        )
        return _error_json(exc.status_code, exc.to_response(request_id=request_id_ctx.get()))

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected errors without exposing internals."""
        logger.error(
            "Unhandled exception",
            exc_info=exc,
            data={"path": request.url.path, "method": request.method},
        )
        error_response = ErrorResponse(
            code=ErrorCode.INTERNAL_ERROR,
            message="An unexpected error occurred",
            request_id=request_id_ctx.get(),
        )
        return _error_json(500, error_response)
