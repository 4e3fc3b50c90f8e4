"""
Data model definitions package.

Aggregates Pydantic models for use in other modules.
"""

from .context import PageRequest
from .result import Continue, PageResponse, RawProxy, Redirect, Respond, TenantResolution
from .routing import RoutingTable
from .tenant import SubdomainTenant, TenantIdentity

__all__ = [
    "PageRequest",
    "Continue",
    "PageResponse",
    "RawProxy",
    "Redirect",
    "Respond",
    "TenantResolution",
    "RoutingTable",
    "SubdomainTenant",
    "TenantIdentity",
]
