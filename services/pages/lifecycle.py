"""
Where: services/pages/lifecycle.py
What: Pages server startup/shutdown orchestration for shared resources.
Why: Keep main.py focused on app assembly while preserving lifecycle behavior.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from services.common.core.http_client import HttpClientFactory

from .config import PagesConfig
from .core.landing import load_landing_page
from .core.tenant import TenantResolver
from .services.locator import ArtifactLocator
from .services.processor import PagesRequestProcessor
from .services.raw_proxy import RawProxyForwarder
from .services.repository_store import AsyncRepositoryReader, DulwichRepositoryStore
from .services.responder import ConditionalFetchResponder
from .services.routing_table import load_routing_table

logger = logging.getLogger("pages.main")


@asynccontextmanager
async def manage_lifespan(app: FastAPI, pages_config: PagesConfig) -> AsyncIterator[None]:
    """Manage application lifecycle."""
    factory = HttpClientFactory(pages_config)
    factory.configure_global_settings()
    client = factory.create_async_client(timeout=pages_config.UPSTREAM_TIMEOUT)

    try:
        routing_table = load_routing_table(pages_config.ROUTING_CONFIG_PATH)

        store = DulwichRepositoryStore(pages_config.STORAGE_ROOT, branch=pages_config.PAGES_BRANCH)
        reader = AsyncRepositoryReader(store, timeout=pages_config.REPOSITORY_QUERY_TIMEOUT)

        resolver = TenantResolver(
            routing_table,
            mode=pages_config.ROUTING_MODE,
            default_repository=pages_config.DEFAULT_REPOSITORY,
            canonical_root_url=pages_config.CANONICAL_ROOT_URL,
            scheme=pages_config.PUBLIC_SCHEME,
            landing_page=load_landing_page(pages_config.LANDING_PAGE_PATH),
        )
        forwarder = RawProxyForwarder(
            client,
            pages_config.UPSTREAM_API_URL,
            routing_table=routing_table,
            timeout=pages_config.UPSTREAM_TIMEOUT,
        )
        responder = ConditionalFetchResponder(
            reader,
            default_mime_type=pages_config.DEFAULT_MIME_TYPE,
            forbidden_mime_types=pages_config.FORBIDDEN_MIME_TYPES,
        )

        app.state.http_client = client
        app.state.routing_table = routing_table
        app.state.processor = PagesRequestProcessor(
            resolver, ArtifactLocator(reader), responder, forwarder
        )

        logger.info(
            "Pages server initialized",
            extra={
                "routing_mode": pages_config.ROUTING_MODE,
                "storage_root": pages_config.STORAGE_ROOT,
                "branch": pages_config.PAGES_BRANCH,
            },
        )
        yield
    finally:
        logger.info("Pages server shutting down, closing http client.")
        await client.aclose()
