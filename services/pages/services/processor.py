"""
Pages Request Processor - Service Layer

Standardizes the flow: PageRequest -> tenant -> sanitized path -> artifact -> response.
Each stage either continues or short-circuits with a terminal result.
"""

import logging
from typing import Union

from ..core.sanitizer import sanitize_path
from ..core.tenant import TenantResolver
from ..models import Continue, PageRequest, PageResponse, RawProxy, Redirect, Respond
from .locator import ArtifactLocator
from .raw_proxy import RawProxyForwarder, UpstreamRelay
from .responder import ConditionalFetchResponder

logger = logging.getLogger("pages.processor")

CORS_ALLOWED_METHODS = "GET, HEAD"


class PagesRequestProcessor:
    """
    Orchestrates the resolution of one request.

    Holds no request-spanning state; a single instance serves all requests.
    """

    def __init__(
        self,
        resolver: TenantResolver,
        locator: ArtifactLocator,
        responder: ConditionalFetchResponder,
        forwarder: RawProxyForwarder,
    ):
        self.resolver = resolver
        self.locator = locator
        self.responder = responder
        self.forwarder = forwarder

    async def process_request(self, request: PageRequest) -> Union[PageResponse, UpstreamRelay]:
        """
        Resolve `request` into a local response or an upstream relay.

        Raises:
            PagesError: any terminal resolution error
        """
        resolution = self.resolver.resolve(request)

        if isinstance(resolution, RawProxy):
            return await self.forwarder.forward(_request_target(request))
        if isinstance(resolution, Redirect):
            return PageResponse.from_redirect(resolution)
        if isinstance(resolution, Respond):
            return PageResponse.from_respond(resolution)

        return await self._serve(request, resolution)

    async def _serve(self, request: PageRequest, resolution: Continue) -> PageResponse:
        tenant = resolution.tenant
        path = sanitize_path(resolution.path, original_path=request.path)

        located = await self.locator.locate(tenant, path, request.path, request.query_suffix)
        if isinstance(located, Redirect):
            return _with_cors(PageResponse.from_redirect(located), tenant.cors_allowed)

        result = await self.responder.respond(located, request.if_none_match, request.path)
        if isinstance(result, Redirect):
            result = PageResponse.from_redirect(result)

        logger.debug(
            "Resolved page",
            extra={"owner": tenant.owner, "path": located.path, "status": result.status_code},
        )
        return _with_cors(result, tenant.cors_allowed)


def _request_target(request: PageRequest) -> str:
    """Undecoded path plus query string, as sent by the client."""
    target = request.raw_path or request.path
    return f"{target}{request.query_suffix}"


def _with_cors(response: PageResponse, cors_allowed: bool) -> PageResponse:
    if cors_allowed:
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = CORS_ALLOWED_METHODS
    return response
