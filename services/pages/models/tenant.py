"""
Tenant models.

Identity of the account whose repository serves a request.
"""

from pydantic import BaseModel, ConfigDict


class TenantIdentity(BaseModel):
    """
    Owner and repository resolved from host and path.

    Derived once per request and never mutated.
    """

    model_config = ConfigDict(frozen=True)

    owner: str
    repository: str
    cors_allowed: bool = False


class SubdomainTenant(BaseModel):
    """Routing-table entry mapping a fixed subdomain to a tenant."""

    model_config = ConfigDict(frozen=True)

    owner: str
    repository: str
    cors: bool = False

    def to_identity(self) -> TenantIdentity:
        return TenantIdentity(
            owner=self.owner.lower(), repository=self.repository, cors_allowed=self.cors
        )
