"""
Pages Server - static sites served straight from git repositories

Resolves the tenant from the Host header, locates the requested file in the
tenant's pages repository and serves it with revision-based cache
validation. The reserved `raw` subdomain is relayed to the hosting API.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import Response, StreamingResponse
from starlette.background import BackgroundTask

from .api.deps import ConfigDep, PageRequestDep, ProcessorDep
from .config import PagesConfig, config
from .core.exceptions import InvalidRequestPathError
from .core.logging_config import setup_logging
from .exceptions import register_exception_handlers
from .lifecycle import manage_lifespan
from .middleware import request_context_middleware, response_headers_middleware
from .models import PageResponse

# Logger setup
setup_logging()
logger = logging.getLogger("pages.main")

ALLOWED_METHODS = "GET, HEAD, OPTIONS"


def create_app(pages_config: Optional[PagesConfig] = None) -> FastAPI:
    """
    Assemble the pages application.

    Interactive docs stay disabled: every path belongs to a tenant site.
    """
    pages_config = pages_config or config

    def lifespan(app: FastAPI):
        return manage_lifespan(app, pages_config)

    app = FastAPI(
        title="Pages Server",
        version="1.0.0",
        lifespan=lifespan,
        root_path=pages_config.root_path,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.config = pages_config

    # Registered last runs first: the request id wraps every other layer.
    app.middleware("http")(response_headers_middleware)
    app.middleware("http")(request_context_middleware)

    register_exception_handlers(app)

    @app.api_route("/{path:path}", methods=["GET", "HEAD", "OPTIONS"])
    async def pages_handler(
        request: Request,
        path: str,
        page_request: PageRequestDep,
        processor: ProcessorDep,
        app_config: ConfigDep,
    ):
        """
        Catch-all route: every path is resolved against the tenant repository.
        """
        if request.method == "OPTIONS":
            return Response(
                status_code=status.HTTP_204_NO_CONTENT, headers={"Allow": ALLOWED_METHODS}
            )

        if any(page_request.path.startswith(prefix) for prefix in app_config.BLACKLISTED_PATHS):
            raise InvalidRequestPathError(page_request.path, status.HTTP_403_FORBIDDEN)

        result = await processor.process_request(page_request)

        if isinstance(result, PageResponse):
            return Response(
                content=result.body,
                status_code=result.status_code,
                headers=result.headers,
            )

        return StreamingResponse(
            result.iter_body(),
            status_code=result.status_code,
            headers=result.headers,
            background=BackgroundTask(result.response.aclose),
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    host, _, port = config.UVICORN_BIND_ADDR.rpartition(":")
    uvicorn.run(
        "services.pages.main:app",
        host=host or "0.0.0.0",
        port=int(port),
        workers=config.UVICORN_WORKERS,
    )
