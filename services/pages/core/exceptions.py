"""
Custom exception classes.

Represent the terminal errors of the pages resolution pipeline and render
them as client-visible error pages.
"""

import html
import logging
from typing import Dict, Optional

from fastapi import Request, status
from fastapi.responses import HTMLResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

ERROR_CONTENT_TYPE = "text/html; charset=utf-8"


def render_error_body(status_code: int, message: str) -> bytes:
    """
    Build the `"{code} : {message}"` error body.

    `message` must already have any user-supplied text escaped.
    """
    return f"{status_code} : {message}".encode("utf-8")


class PagesError(Exception):
    """Base exception class for request resolution."""

    status_code: int = status.HTTP_404_NOT_FOUND

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        # Added to the rendered error response.
        self.headers = headers or {}
        super().__init__(message)


class InvalidRequestPathError(PagesError):
    """Raised when a request path is malformed, forbidden or traverses."""

    def __init__(self, path: str, status_code: int = status.HTTP_404_NOT_FOUND):
        self.path = path
        super().__init__(f"invalid request URL '{html.escape(path)}'", status_code)


class UnknownTenantError(PagesError):
    """Raised when the owner has no pages repository."""

    def __init__(self, owner: str):
        self.owner = owner
        super().__init__("this user/organization does not have pages")


class ReservedNameError(PagesError):
    """Raised when the owner is an administratively reserved name."""

    def __init__(self, owner: str):
        self.owner = owner
        super().__init__(f"'{html.escape(owner)}' is a reserved name and cannot host pages")


class ArtifactNotFoundError(PagesError):
    """Raised when no file exists at any fallback position."""

    def __init__(self, path: str, headers: Optional[Dict[str, str]] = None):
        self.path = path
        super().__init__(f"no such file in repo: '{html.escape(path)}'", headers=headers)


class UpstreamUnavailableError(PagesError):
    """Raised when the raw-content upstream cannot be reached."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__("raw content upstream is unavailable")


# ===========================================
# Exception Handlers
# ===========================================


async def pages_error_handler(request: Request, exc: PagesError):
    """
    Handler for the resolution error taxonomy.
    """
    logger.info(
        "Request rejected: %s",
        type(exc).__name__,
        extra={"path": request.url.path, "status": exc.status_code},
    )
    return HTMLResponse(
        content=render_error_body(exc.status_code, exc.message),
        status_code=exc.status_code,
        headers=exc.headers,
        media_type=ERROR_CONTENT_TYPE,
    )


async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler for unhandled exceptions.
    """
    logger.error(
        f"Global exception handler caught: {exc}",
        exc_info=True,
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    return HTMLResponse(
        content=render_error_body(500, "Internal Server Error"),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        media_type=ERROR_CONTENT_TYPE,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Handler for HTTPException (405 keeps its Allow header).
    """
    return HTMLResponse(
        content=render_error_body(exc.status_code, html.escape(str(exc.detail))),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
        media_type=ERROR_CONTENT_TYPE,
    )
