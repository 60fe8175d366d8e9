"""Principal (authenticated actor) for request authorization."""

from dataclasses import dataclass
from typing import AbstractSet, Mapping

from app.models.permission import Permission
from app.models.role import Role, TenantType


@dataclass(frozen=True)
class Principal:
    """
    The authenticated actor making a request.

    Built from identity-provider claims and only ever read by the access
    core. Used throughout the application for permission checks and tenant
    isolation.

    Attributes:
        id: Identity-provider user id ('sub' claim)
        role: The principal's role in its active tenant
        tenant_id: Active tenant id, None for platform-level principals
        tenant_type: Business type of the active tenant
        permission_overrides: Per-user grants (True) or revocations (False)
            that win over the role catalog, or a plain set of grants
    """

    id: str
    role: Role
    tenant_id: str | None = None
    tenant_type: TenantType | None = None
    permission_overrides: Mapping[Permission, bool] | AbstractSet[Permission] | None = None

    def is_super_admin(self) -> bool:
        return self.role == Role.SUPER_ADMIN

    def is_owner(self) -> bool:
        """Check if principal owns its tenant."""
        return self.role == Role.OWNER

    def __repr__(self) -> str:
        return f"<Principal(id={self.id}, tenant_id={self.tenant_id}, role={self.role.value})>"
