"""
Repository artifact locator.

Decides whether a sanitized path names a directory or a file in the tenant
repository at its latest revision and computes the concrete path to fetch.
"""

import logging
from typing import Optional, Union
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict

from ..core.exceptions import UnknownTenantError
from ..models import Redirect, TenantIdentity
from .repository_store import AsyncRepositoryReader

logger = logging.getLogger("pages.locator")

INDEX_PAGE = "index.html"


class LocatedArtifact(BaseModel):
    """
    Final path to fetch plus the revision it was located at.

    `revision` is None when the repository has no pages branch yet.
    """

    model_config = ConfigDict(frozen=True)

    tenant: TenantIdentity
    path: str
    requested_path: str
    revision: Optional[str] = None


class ArtifactLocator:
    def __init__(self, reader: AsyncRepositoryReader):
        self.reader = reader

    async def locate(
        self,
        tenant: TenantIdentity,
        path: str,
        request_path: str,
        query_suffix: str = "",
    ) -> Union[LocatedArtifact, Redirect]:
        """
        Locate `path` inside the tenant repository.

        Args:
            tenant: resolved tenant
            path: sanitized in-repository path ("" for the root)
            request_path: original request path, used for the slash redirect
            query_suffix: "?query" preserved on redirects

        Returns:
            LocatedArtifact, or a Redirect adding the trailing slash to a
            directory URL

        Raises:
            UnknownTenantError: the tenant has no repository
        """
        if not await self.reader.repository_exists(tenant.owner, tenant.repository):
            raise UnknownTenantError(tenant.owner)

        revision = await self.reader.latest_revision_id(tenant.owner, tenant.repository)

        final_path = path
        if await self.reader.is_directory(tenant.owner, tenant.repository, path, revision):
            if not request_path.endswith("/"):
                # Relative links inside the served index need the slash.
                return Redirect(location=f"{quote(request_path)}/{query_suffix}")
            final_path = f"{path}/{INDEX_PAGE}" if path else INDEX_PAGE

        logger.debug(
            "Located artifact",
            extra={"owner": tenant.owner, "path": final_path, "revision": revision},
        )
        return LocatedArtifact(
            tenant=tenant, path=final_path, requested_path=path, revision=revision
        )
