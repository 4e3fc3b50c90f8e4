"""
Conditional-fetch responder.

Turns a located artifact into a response: cache validator, 304
short-circuit, MIME type and the fallback fetch chain

    {path} → {path}.html → _redirects → 404.html → generic 404

All fetches use the revision the artifact was located at.
"""

import logging
from typing import Iterable, Optional, Union

from fastapi import status

from ..core.exceptions import ArtifactNotFoundError
from ..core.mime import DEFAULT_MIME_TYPE, mime_type_for_path
from ..models import PageResponse, Redirect
from .locator import LocatedArtifact
from .redirects import REDIRECTS_FILE, match_redirect, parse_redirects
from .repository_store import AsyncRepositoryReader

logger = logging.getLogger("pages.responder")

HTML_CONTENT_TYPE = "text/html"
NOT_FOUND_PAGE = "404.html"
HTML_SUFFIX = ".html"


def parse_entity_tags(if_none_match: Optional[str]) -> list:
    """Split an If-None-Match value into bare tags (weak prefix and quotes removed)."""
    if not if_none_match:
        return []
    tags = []
    for candidate in if_none_match.split(","):
        tag = candidate.strip()
        if tag.startswith("W/"):
            tag = tag[2:]
        tags.append(tag.strip('"'))
    return tags


def etag_matches(if_none_match: Optional[str], revision: str) -> bool:
    return revision in parse_entity_tags(if_none_match)


class ConditionalFetchResponder:
    def __init__(
        self,
        reader: AsyncRepositoryReader,
        default_mime_type: str = DEFAULT_MIME_TYPE,
        forbidden_mime_types: Iterable[str] = (),
    ):
        self.reader = reader
        self.default_mime_type = default_mime_type
        self.forbidden_mime_types = frozenset(forbidden_mime_types)

    async def respond(
        self,
        artifact: LocatedArtifact,
        if_none_match: Optional[str] = None,
        request_path: str = "/",
    ) -> Union[PageResponse, Redirect]:
        """
        Serve `artifact`.

        Args:
            artifact: located path and revision snapshot
            if_none_match: client's If-None-Match header
            request_path: original request path, matched against `_redirects`

        Raises:
            ArtifactNotFoundError: nothing exists at any fallback position
        """
        owner, repository = artifact.tenant.owner, artifact.tenant.repository
        revision = artifact.revision

        headers = {}
        if revision:
            headers["ETag"] = f'"{revision}"'
            # Cache hit: answer before reading any content.
            if etag_matches(if_none_match, revision):
                return PageResponse(status_code=status.HTTP_304_NOT_MODIFIED, headers=headers)

        content_type = mime_type_for_path(
            artifact.path, self.default_mime_type, self.forbidden_mime_types
        )

        body = await self.reader.read_blob(owner, repository, artifact.path, revision)
        if body is not None:
            headers["Content-Type"] = content_type
            return PageResponse(status_code=status.HTTP_200_OK, body=body, headers=headers)

        body = await self.reader.read_blob(
            owner, repository, artifact.path + HTML_SUFFIX, revision
        )
        if body is not None:
            headers["Content-Type"] = HTML_CONTENT_TYPE
            return PageResponse(status_code=status.HTTP_200_OK, body=body, headers=headers)

        redirect = await self._match_redirects(artifact, request_path)
        if redirect is not None:
            return redirect

        body = await self.reader.read_blob(owner, repository, NOT_FOUND_PAGE, revision)
        if body is not None:
            headers["Content-Type"] = HTML_CONTENT_TYPE
            return PageResponse(status_code=status.HTTP_404_NOT_FOUND, body=body, headers=headers)

        logger.info(
            "No file at any fallback position", extra={"owner": owner, "path": artifact.path}
        )
        raise ArtifactNotFoundError(artifact.path, headers=headers)

    async def _match_redirects(
        self, artifact: LocatedArtifact, request_path: str
    ) -> Optional[Redirect]:
        content = await self.reader.read_blob(
            artifact.tenant.owner, artifact.tenant.repository, REDIRECTS_FILE, artifact.revision
        )
        if not content:
            return None

        rule = match_redirect(parse_redirects(content), request_path)
        if rule is None:
            return None
        return Redirect(location=rule.target, status_code=rule.status_code)
