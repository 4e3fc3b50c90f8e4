"""
Raw-content proxy.

Requests on the reserved `raw` subdomain are forwarded to the repository
hosting API instead of being resolved locally:

    raw.{domain}/{owner}/{repo}/{path} → GET {upstream}/api/v1/repos/{owner}/{repo}/raw/{path}

The upstream response is relayed with cookies dropped, HTML downgraded to
plain text and a sandboxing Content-Security-Policy added.
"""

import logging
import re
from dataclasses import dataclass
from typing import AsyncIterator, Dict, Optional
from urllib.parse import unquote

import httpx
from fastapi import status

from ..core.exceptions import InvalidRequestPathError, UpstreamUnavailableError
from ..models import RoutingTable

logger = logging.getLogger("pages.raw_proxy")

RAW_CONTENT_SECURITY_POLICY = "default-src 'none'; style-src 'unsafe-inline'; sandbox"

# Framing is redone by the ASGI server; cookies never pass through.
_DROPPED_HEADERS = frozenset(
    {"set-cookie", "connection", "keep-alive", "transfer-encoding", "proxy-connection"}
)

_DUPLICATE_SLASHES = re.compile(r"/{2,}")
# "." or ".." as a whole segment, including at the very end.
_DOT_SEGMENT = re.compile(r"/\.{1,2}(/|$)")

BLOB_PREFIX = "blob/"
REF_MARKER = "@"


@dataclass
class UpstreamRelay:
    """Upstream response prepared for relaying to the client."""

    status_code: int
    headers: Dict[str, str]
    response: httpx.Response

    async def iter_body(self) -> AsyncIterator[bytes]:
        """Stream the upstream body unmodified, then release the connection."""
        try:
            async for chunk in self.response.aiter_raw():
                yield chunk
        finally:
            await self.response.aclose()


def relay_headers(upstream_headers: httpx.Headers) -> Dict[str, str]:
    """
    Filter and rewrite upstream headers for the client.
    """
    headers: Dict[str, str] = {}
    for name, value in upstream_headers.multi_items():
        key = name.lower()
        if key in _DROPPED_HEADERS:
            continue
        if key == "content-type" and "text/html" in value.lower():
            value = re.sub("text/html", "text/plain", value, flags=re.IGNORECASE)
        if key in headers:
            headers[key] = f"{headers[key]}, {value}"
        else:
            headers[key] = value

    headers["access-control-allow-origin"] = "*"
    headers["content-security-policy"] = RAW_CONTENT_SECURITY_POLICY
    return headers


class RawProxyForwarder:
    def __init__(
        self,
        client: httpx.AsyncClient,
        upstream_url: str,
        routing_table: Optional[RoutingTable] = None,
        timeout: float = 10.0,
    ):
        self.client = client
        self.upstream_url = upstream_url.rstrip("/")
        self.routing_table = routing_table or RoutingTable()
        self.timeout = timeout

    def build_upstream_path(self, request_target: str) -> str:
        """
        Map `/{owner}/{repo}/{path}[?query]` to the upstream raw-content API path.

        Args:
            request_target: undecoded request path including the query string

        Raises:
            InvalidRequestPathError: 403 for traversal, short paths, UI paths
                and platform-reserved owners
        """
        path_only, separator, query = request_target.partition("?")
        path_only = _DUPLICATE_SLASHES.sub("/", path_only)
        if _DOT_SEGMENT.search(path_only) or _DOT_SEGMENT.search(unquote(path_only)):
            raise InvalidRequestPathError(request_target, status.HTTP_403_FORBIDDEN)

        parts = path_only.lstrip("/").split("/", 2)
        if len(parts) < 3:
            raise InvalidRequestPathError(request_target, status.HTTP_403_FORBIDDEN)

        owner, repo, remainder = parts
        if remainder.startswith(REF_MARKER):
            remainder = remainder[1:]

        if remainder.startswith(BLOB_PREFIX) or self.routing_table.is_raw_reserved(unquote(owner)):
            raise InvalidRequestPathError(request_target, status.HTTP_403_FORBIDDEN)

        return f"/api/v1/repos/{owner}/{repo}/raw/{remainder}{separator}{query}"

    async def forward(self, request_target: str) -> UpstreamRelay:
        """
        Issue the upstream GET and prepare the response for streaming.

        Raises:
            InvalidRequestPathError: rejected request target (403)
            UpstreamUnavailableError: the upstream could not be reached
        """
        upstream_path = self.build_upstream_path(request_target)
        url = f"{self.upstream_url}{upstream_path}"

        request = self.client.build_request("GET", url, timeout=self.timeout)
        try:
            response = await self.client.send(request, stream=True)
        except httpx.RequestError as e:
            logger.error(
                "Raw content upstream request failed",
                extra={
                    "upstream_path": upstream_path,
                    "error_type": type(e).__name__,
                    "error_detail": str(e),
                },
            )
            raise UpstreamUnavailableError(e) from e

        logger.debug(
            "Relaying raw content",
            extra={"upstream_path": upstream_path, "status": response.status_code},
        )
        return UpstreamRelay(
            status_code=response.status_code,
            headers=relay_headers(response.headers),
            response=response,
        )
