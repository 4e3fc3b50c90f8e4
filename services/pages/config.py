"""
Pages server configuration definition.

Loads configuration from environment variables and provides a Pydantic model.
Uses pydantic-settings for type safety and defaults.
"""

import sys
from typing import List, Literal

from pydantic import Field
from services.common.core.config import BaseAppConfig


class PagesConfig(BaseAppConfig):
    """
    Configuration management for the pages server.
    """

    # Server settings
    UVICORN_WORKERS: int = Field(default=4, description="Number of worker processes")
    UVICORN_BIND_ADDR: str = Field(default="0.0.0.0:8000", description="Listen address")

    # Routing
    ROUTING_MODE: Literal["single_tld", "multi_tld"] = Field(
        default="single_tld",
        description="single_tld: subdomain owners; multi_tld: table and path-style owners",
    )
    ROUTING_CONFIG_PATH: str = Field(
        default="/app/config/routing.yml",
        description="Subdomain table and reserved-name definition file path",
    )
    MAIN_DOMAIN: str = Field(default="codeberg.page", description="Domain served with HSTS")
    PUBLIC_SCHEME: str = Field(default="https", description="Scheme used in generated redirects")
    CANONICAL_ROOT_URL: str = Field(
        default="https://codeberg.org/",
        description="Redirect target for path-style requests without an owner",
    )
    LANDING_PAGE_PATH: str = Field(
        default="", description="File served for the bare domain (built-in page when empty)"
    )

    # Repository storage
    STORAGE_ROOT: str = Field(
        default="/data/git/gitea-repositories", description="Root of the bare repositories"
    )
    DEFAULT_REPOSITORY: str = Field(default="pages", description="Repository name per tenant")
    PAGES_BRANCH: str = Field(default="master", description="Branch holding the site content")
    REPOSITORY_QUERY_TIMEOUT: float = Field(
        default=5.0, description="Timeout for a single repository query (seconds)"
    )

    # Raw-content upstream
    UPSTREAM_API_URL: str = Field(
        default="http://localhost:3000", description="Repository hosting API for raw content"
    )
    UPSTREAM_TIMEOUT: float = Field(default=10.0, description="Upstream request timeout (seconds)")

    # Response policy
    DEFAULT_MIME_TYPE: str = Field(
        default="application/octet-stream", description="MIME type for unknown extensions"
    )
    FORBIDDEN_MIME_TYPES: List[str] = Field(
        default_factory=list, description="MIME types replaced by DEFAULT_MIME_TYPE"
    )
    BLACKLISTED_PATHS: List[str] = Field(
        default_factory=lambda: ["/.well-known/acme-challenge/"],
        description="Path prefixes answered with 403",
    )
    CACHE_CONTROL: str = Field(
        default="public, max-age=600", description="Cache-Control header on every response"
    )
    ENABLE_HSTS: bool = Field(default=True, description="Send HSTS for MAIN_DOMAIN hosts")

    # FastAPI settings
    root_path: str = Field(default="", description="API root path (for proxy)")


# Load config as a singleton.
# pydantic-settings reads environment variables during instantiation.
try:
    config = PagesConfig()
except Exception as e:
    sys.stderr.write(f"Failed to load configuration: {e}\n")
    raise
