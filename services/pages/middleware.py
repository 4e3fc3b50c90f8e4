"""
Where: services/pages/middleware.py
What: HTTP middleware for request ids, access logging and standard response headers.
Why: Isolate cross-cutting request concerns from app assembly.
"""

import logging
import time

from fastapi import Request

from services.common.core.request_context import (
    clear_request_id,
    generate_request_id,
    set_request_id,
)

from .core.tenant import normalize_host

logger = logging.getLogger("pages.main")

REQUEST_ID_HEADER = "X-Request-Id"
SERVER_NAME = "pages-server"
REFERRER_POLICY = "strict-origin-when-cross-origin"
HSTS_VALUE = "max-age=63072000; includeSubdomains; preload"


def hsts_header(host: str, main_domain: str) -> str:
    """HSTS value for hosts under `main_domain`, empty for any other host."""
    hostname = normalize_host(host)
    domain = main_domain.lower().strip(".")
    if domain and (hostname == domain or hostname.endswith("." + domain)):
        return HSTS_VALUE
    return ""


async def request_context_middleware(request: Request, call_next):
    """Middleware for Request ID propagation and structured access logging."""
    start_time = time.perf_counter()

    incoming_id = request.headers.get(REQUEST_ID_HEADER)
    req_id = set_request_id(incoming_id) if incoming_id else generate_request_id()

    try:
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = req_id

        process_time_ms = round((time.perf_counter() - start_time) * 1000, 2)

        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "request_id": req_id,
                "method": request.method,
                "host": request.headers.get("host"),
                "path": request.url.path,
                "status": response.status_code,
                "latency_ms": process_time_ms,
                "user_agent": request.headers.get("user-agent"),
                "client_ip": request.client.host if request.client else None,
            },
        )

        return response
    finally:
        clear_request_id()


async def response_headers_middleware(request: Request, call_next):
    """Middleware adding the headers every pages response carries."""
    pages_config = request.app.state.config
    response = await call_next(request)

    response.headers["Server"] = SERVER_NAME
    response.headers["Referrer-Policy"] = REFERRER_POLICY
    response.headers.setdefault("Cache-Control", pages_config.CACHE_CONTROL)

    if pages_config.ENABLE_HSTS:
        hsts = hsts_header(request.headers.get("host", ""), pages_config.MAIN_DOMAIN)
        if hsts:
            response.headers["Strict-Transport-Security"] = hsts

    return response
