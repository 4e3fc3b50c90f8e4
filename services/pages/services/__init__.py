"""
Services package.

Provides resolution logic and external integrations.
"""

from .locator import ArtifactLocator
from .processor import PagesRequestProcessor
from .raw_proxy import RawProxyForwarder
from .repository_store import AsyncRepositoryReader, DulwichRepositoryStore
from .responder import ConditionalFetchResponder
from .routing_table import load_routing_table

__all__ = [
    "ArtifactLocator",
    "PagesRequestProcessor",
    "RawProxyForwarder",
    "AsyncRepositoryReader",
    "DulwichRepositoryStore",
    "ConditionalFetchResponder",
    "load_routing_table",
]
