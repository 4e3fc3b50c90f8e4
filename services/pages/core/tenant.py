"""
Tenant resolution.

Derives the owning account and repository of a request from its host and
path. Two routing modes exist:

- single_tld: one fixed root domain, the owner is always the subdomain
  (`alice.codeberg.page/blog/` → owner `alice`). The subdomain `raw` belongs
  to the raw-content proxy.
- multi_tld: organization-style domains. Known subdomains map to fixed
  tenants through the routing table, other subdomains are owners, and
  path-style requests on the bare domain (`codeberg.eu/alice/blog/`) are
  redirected to their subdomain form.
"""

import html
import logging
import re
from typing import Tuple
from urllib.parse import quote

from ..models import Continue, RawProxy, Redirect, Respond, RoutingTable, TenantIdentity
from ..models.context import PageRequest
from ..models.result import TenantResolution
from .exceptions import ReservedNameError
from .sanitizer import validate_request_path

logger = logging.getLogger("pages.tenant")

RAW_OWNER = "raw"

SINGLE_TLD = "single_tld"
MULTI_TLD = "multi_tld"

# First path segment and everything after it.
_FIRST_SEGMENT = re.compile(r"/*([^/]+)(.*)", re.DOTALL)


def normalize_host(host: str) -> str:
    """Lower-case a Host header value and strip the port and trailing dot."""
    hostname = host.strip().lower()
    if hostname.startswith("["):
        hostname = hostname.split("]", 1)[0] + "]"
    else:
        hostname = hostname.split(":", 1)[0]
    return hostname.rstrip(".")


def split_host(host: str) -> Tuple[str, str]:
    """
    Split a Host header value into (subdomain, base domain).

    The base domain is the two rightmost labels; the subdomain is everything
    before them and may be empty or contain several labels.
    """
    hostname = normalize_host(host)
    labels = hostname.split(".")
    if len(labels) <= 2:
        return "", hostname
    return ".".join(labels[:-2]), ".".join(labels[-2:])


def dotted_owner_notice(owner: str) -> bytes:
    return (
        f"Your pages owner name '{html.escape(owner)}' contains a dot, which cannot be "
        "served from a subdomain. Please rename your user or organization to a name "
        "without dots."
    ).encode("utf-8")


class TenantResolver:
    """
    Resolves (owner, repository, path) for a request.

    All routing data is passed in at construction and never mutated.
    """

    def __init__(
        self,
        routing_table: RoutingTable,
        mode: str = SINGLE_TLD,
        default_repository: str = "pages",
        canonical_root_url: str = "https://codeberg.org/",
        scheme: str = "https",
        landing_page: bytes = b"",
    ):
        if mode not in (SINGLE_TLD, MULTI_TLD):
            raise ValueError(f"Unknown routing mode: {mode}")
        self.routing_table = routing_table
        self.mode = mode
        self.default_repository = default_repository
        self.canonical_root_url = canonical_root_url
        self.scheme = scheme
        self.landing_page = landing_page

    def resolve(self, request: PageRequest) -> TenantResolution:
        """
        Resolve the tenant of `request`.

        Returns:
            Continue with the tenant and in-repository path, or a terminal
            Redirect/Respond, or RawProxy for the raw-content upstream.

        Raises:
            ReservedNameError: owner is administratively reserved
        """
        subdomain, base_domain = split_host(request.host)

        if self.mode == MULTI_TLD:
            return self._resolve_multi_tld(request, subdomain, base_domain)
        return self._resolve_single_tld(request, subdomain, base_domain)

    def _resolve_single_tld(
        self, request: PageRequest, subdomain: str, base_domain: str
    ) -> TenantResolution:
        owner = subdomain
        if not owner:
            return Respond(status_code=200, body=self.landing_page)

        if owner == RAW_OWNER:
            return RawProxy()

        if "." in owner:
            logger.info("Owner with dot rejected", extra={"owner": owner})
            return Respond(status_code=200, body=dotted_owner_notice(owner))

        return Continue(tenant=self._user_tenant(owner, request.host), path=request.path)

    def _resolve_multi_tld(
        self, request: PageRequest, subdomain: str, base_domain: str
    ) -> TenantResolution:
        entry = self.routing_table.subdomains.get(subdomain)
        if entry is not None:
            return Continue(tenant=entry.to_identity(), path=request.path)

        if subdomain:
            return Continue(tenant=self._user_tenant(subdomain, request.host), path=request.path)

        # Path-style access on the bare domain: /{owner}/{rest}
        match = _FIRST_SEGMENT.fullmatch(request.path)
        if match is None:
            return Redirect(location=self.canonical_root_url)

        owner = match.group(1).lower()
        rest = match.group(2) or "/"

        if "." not in owner:
            validate_request_path(request.path)
            self._check_reserved(owner)
            location = f"{self.scheme}://{owner}.{base_domain}{quote(rest)}{request.query_suffix}"
            return Redirect(location=location)

        # Custom-domain style owner, served in place.
        return Continue(tenant=self._user_tenant(owner, request.host), path=rest)

    def _user_tenant(self, owner: str, host: str) -> TenantIdentity:
        self._check_reserved(owner)
        return TenantIdentity(
            owner=owner,
            repository=self.default_repository,
            cors_allowed=normalize_host(host) in self.routing_table.allowed_cors_domains,
        )

    def _check_reserved(self, owner: str) -> None:
        if self.routing_table.is_reserved(owner):
            raise ReservedNameError(owner)
