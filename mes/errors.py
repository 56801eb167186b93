"""
Error Handling

Application exception hierarchy and the FastAPI exception handlers that turn
them into the JSON error envelope {"error": "..."}.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from .config import config

logger = logging.getLogger(__name__)


# ==================== Custom Exceptions ====================

class AppError(Exception):
    """Base exception for application errors."""
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload or {}

    def to_dict(self):
        rv = dict(self.payload)
        rv['error'] = self.message
        return rv


class ValidationError(AppError):
    """Raised when a required request value is absent or malformed."""
    status_code = 400


class AuthenticationError(AppError):
    """Raised when the session credential is missing or invalid."""
    status_code = 401


class AuthorizationError(AppError):
    """Raised when the caller's role is not allowed."""
    status_code = 403


class NotFoundError(AppError):
    """Raised when a resource is not found."""
    status_code = 404


class DatabaseError(AppError):
    """Raised when database operations fail."""
    status_code = 500


# ==================== Error Handlers ====================

def _server_error_body(exc: Exception) -> dict:
    if config.is_production():
        return {'error': 'Internal server error'}
    return {'error': str(exc) or 'Internal server error'}


def register_error_handlers(app: FastAPI):
    """Register all error handlers with the FastAPI app."""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        """Handle custom application errors."""
        if exc.status_code >= 500:
            cause = exc.__cause__ or exc
            logger.error(
                f"{exc.status_code} {request.method} {request.url.path}: {exc.message}",
                exc_info=(type(cause), cause, cause.__traceback__)
            )
            return JSONResponse(status_code=exc.status_code, content=_server_error_body(exc))

        if exc.status_code == 401:
            logger.debug(f"401 {request.method} {request.url.path}: {exc.message}")
        else:
            logger.warning(f"{exc.status_code} {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Report malformed path/query values as 400 naming the offending field."""
        fields = [".".join(str(p) for p in err.get('loc', ()) if p not in ('path', 'query'))
                  for err in exc.errors()]
        message = f"Invalid value for: {', '.join(f for f in fields if f)}" if fields else "Invalid request"
        logger.warning(f"400 {request.method} {request.url.path}: {message}")
        return JSONResponse(status_code=400, content={'error': message})

    @app.exception_handler(HTTPException)
    async def handle_http_exception(request: Request, exc: HTTPException):
        """Handle all other HTTP exceptions."""
        if exc.status_code == 401:
            logger.debug(f"HTTP 401: {request.method} {request.url.path} - {exc.detail}")
        else:
            logger.warning(f"HTTP {exc.status_code}: {request.method} {request.url.path} - {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={'error': exc.detail},
            headers=getattr(exc, 'headers', None)
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all for unhandled errors; full detail stays in the server log."""
        logger.error(
            f"Unhandled Exception: {request.method} {request.url.path}\n"
            f"  Exception Type: {type(exc).__name__}\n"
            f"  Message: {str(exc)}",
            exc_info=True
        )
        return JSONResponse(status_code=500, content=_server_error_body(exc))
