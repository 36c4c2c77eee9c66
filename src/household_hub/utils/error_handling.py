"""
# Error Handling

Client-fault exception type and the FastAPI handlers that turn errors into uniform JSON.

## Taxonomy

| Kind | Raised as | HTTP |
|------|-----------|------|
| Validation fault (bad id, bad features, bad AI settings) | `HttpError.bad_request` | 400 |
| Missing/invalid credentials | `HttpError.unauthorized` | 401 |
| Not a member / wrong role / feature disabled | `HttpError.forbidden` | 403 |
| Missing resource | `HttpError.not_found` | 404 |
| Persistence fault | `pymongo.errors.PyMongoError` (propagated unchanged) | 500 |

Error responses have the shape ``{"error": "<message>", "code": "<ERROR_CODE>"}``.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from household_hub.managers.logging_manager import get_logger

logger = get_logger(prefix="[ERROR_HANDLER]")


class HttpError(Exception):
    """Client-fault error carrying its HTTP status and a stable error code."""

    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: str = None,
        context: Dict[str, Any] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error_code = error_code or "HTTP_ERROR"
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc)

    @classmethod
    def bad_request(cls, message: str, context: Optional[Dict[str, Any]] = None) -> "HttpError":
        return cls(status.HTTP_400_BAD_REQUEST, message, "BAD_REQUEST", context)

    @classmethod
    def unauthorized(cls, message: str = "Authentication required", context: Optional[Dict[str, Any]] = None) -> "HttpError":
        return cls(status.HTTP_401_UNAUTHORIZED, message, "UNAUTHORIZED", context)

    @classmethod
    def forbidden(cls, message: str, context: Optional[Dict[str, Any]] = None) -> "HttpError":
        return cls(status.HTTP_403_FORBIDDEN, message, "FORBIDDEN", context)

    @classmethod
    def not_found(cls, message: str, context: Optional[Dict[str, Any]] = None) -> "HttpError":
        return cls(status.HTTP_404_NOT_FOUND, message, "NOT_FOUND", context)

    def to_response_body(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.error_code}


async def http_error_handler(request: Request, exc: HttpError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_response_body(), headers=headers)


async def persistence_error_handler(request: Request, exc: PyMongoError) -> JSONResponse:
    # Already logged where the query failed.
    logger.debug("%s %s failed with %s", request.method, request.url.path, type(exc).__name__)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "code": "INTERNAL_ERROR"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the `HttpError` and persistence-error handlers to `app`."""
    app.add_exception_handler(HttpError, http_error_handler)
    app.add_exception_handler(PyMongoError, persistence_error_handler)
