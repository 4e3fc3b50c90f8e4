"""
Dependency Injection for the pages API.

Manage request handler dependencies using FastAPI Depends.
"""

from typing import Annotated

from fastapi import Depends, Request

from ..config import PagesConfig
from ..models import PageRequest
from ..services.processor import PagesRequestProcessor


# ==========================================
# 1. Service Accessors
# ==========================================


def get_config(request: Request) -> PagesConfig:
    return request.app.state.config


def get_processor(request: Request) -> PagesRequestProcessor:
    return request.app.state.processor


ConfigDep = Annotated[PagesConfig, Depends(get_config)]
ProcessorDep = Annotated[PagesRequestProcessor, Depends(get_processor)]


# ==========================================
# 2. Request Decoding
# ==========================================


async def build_page_request(request: Request) -> PageRequest:
    """
    Build the PageRequest the pipeline works on.

    `path` is the percent-decoded path (spaces preserved); `raw_path` is the
    path exactly as the client sent it, without the query string.
    """
    raw_path = request.scope.get("raw_path") or b""
    if isinstance(raw_path, bytes):
        raw_path = raw_path.decode("latin-1")

    return PageRequest(
        method=request.method,
        host=request.headers.get("host", ""),
        path=request.scope.get("path") or "/",
        raw_path=raw_path.partition("?")[0],
        query_string=request.url.query,
        if_none_match=request.headers.get("if-none-match"),
    )


PageRequestDep = Annotated[PageRequest, Depends(build_page_request)]
