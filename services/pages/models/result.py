"""
Pipeline result models.

Every resolution stage returns one of these instead of writing to the
response directly, so the request handler decides how to answer.
"""

from typing import Dict, Union

from pydantic import BaseModel, ConfigDict, Field

from .tenant import TenantIdentity


class Continue(BaseModel):
    """Resolution proceeds with this tenant and in-repository path."""

    model_config = ConfigDict(frozen=True)

    tenant: TenantIdentity
    path: str


class Redirect(BaseModel):
    """Terminal redirect."""

    model_config = ConfigDict(frozen=True)

    location: str
    status_code: int = 302


class Respond(BaseModel):
    """Terminal response with a fixed body (landing page, notices)."""

    model_config = ConfigDict(frozen=True)

    status_code: int = 200
    body: bytes = b""
    content_type: str = "text/html; charset=utf-8"


class RawProxy(BaseModel):
    """The request belongs to the raw-content upstream."""

    model_config = ConfigDict(frozen=True)


TenantResolution = Union[Continue, Redirect, Respond, RawProxy]


class PageResponse(BaseModel):
    """
    Final result of a local resolution pass.

    Used to decouple the pipeline from FastAPI Response objects.
    """

    status_code: int
    body: bytes = b""
    headers: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_redirect(cls, redirect: Redirect) -> "PageResponse":
        return cls(status_code=redirect.status_code, headers={"Location": redirect.location})

    @classmethod
    def from_respond(cls, respond: Respond) -> "PageResponse":
        return cls(
            status_code=respond.status_code,
            body=respond.body,
            headers={"Content-Type": respond.content_type},
        )
