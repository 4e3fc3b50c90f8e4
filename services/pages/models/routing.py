"""
Routing table model.

Static routing data (subdomain table, reserved names, CORS domains) loaded
once at start-up and shared read-only by all requests.
"""

from typing import Dict, FrozenSet

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .tenant import SubdomainTenant

# Administrative and system subdomains that can never be a tenant.
DEFAULT_RESERVED_NAMES: FrozenSet[str] = frozenset(
    {
        "abuse",
        "account",
        "accounts",
        "admin",
        "administrator",
        "api",
        "app",
        "assets",
        "auth",
        "autoconfig",
        "autodiscover",
        "billing",
        "blog",
        "cdn",
        "ci",
        "codeberg",
        "contact",
        "dashboard",
        "dev",
        "dns",
        "docs",
        "fonts",
        "ftp",
        "git",
        "gitea",
        "help",
        "hostmaster",
        "imap",
        "info",
        "login",
        "mail",
        "mailer-daemon",
        "media",
        "mx",
        "no-reply",
        "noreply",
        "ns",
        "ns1",
        "ns2",
        "pages",
        "pop",
        "pop3",
        "postmaster",
        "registry",
        "root",
        "secure",
        "security",
        "smtp",
        "ssh",
        "staging",
        "static",
        "status",
        "support",
        "test",
        "webmail",
        "webmaster",
        "www",
    }
)

# First path segments the upstream hosting platform reserves for itself.
DEFAULT_RAW_RESERVED_NAMES: FrozenSet[str] = frozenset(
    {
        "-",
        "admin",
        "api",
        "assets",
        "attachments",
        "avatars",
        "captcha",
        "commits",
        "debug",
        "error",
        "explore",
        "ghost",
        "help",
        "install",
        "issues",
        "login",
        "metrics",
        "milestones",
        "new",
        "notifications",
        "org",
        "plugins",
        "pulls",
        "raw",
        "repo",
        "repo-avatars",
        "search",
        "serviceworker.js",
        "swagger.v1.json",
        "user",
        "v2",
    }
)


class RoutingTable(BaseModel):
    """
    Immutable routing configuration.

    Names are stored lower-cased; lookups are expected to pass lower-cased keys.
    """

    model_config = ConfigDict(frozen=True)

    subdomains: Dict[str, SubdomainTenant] = Field(default_factory=dict)
    reserved_names: FrozenSet[str] = DEFAULT_RESERVED_NAMES
    raw_reserved_names: FrozenSet[str] = DEFAULT_RAW_RESERVED_NAMES
    allowed_cors_domains: FrozenSet[str] = frozenset()

    @field_validator("subdomains", mode="before")
    @classmethod
    def _lower_subdomains(cls, value):
        if isinstance(value, dict):
            return {str(k).lower(): v for k, v in value.items()}
        return value

    @field_validator("reserved_names", "raw_reserved_names", "allowed_cors_domains", mode="before")
    @classmethod
    def _lower_names(cls, value):
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(str(v).lower() for v in value)
        return value

    def is_reserved(self, owner: str) -> bool:
        return owner in self.reserved_names

    def is_raw_reserved(self, owner: str) -> bool:
        return owner.lower() in self.raw_reserved_names
