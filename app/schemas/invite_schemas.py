from datetime import datetime

from pydantic import BaseModel, Field

from app.config import settings
from app.models.invite_code import InviteState, InviteStatus
from app.models.role import Role


class InviteCreate(BaseModel):
    """Generate an invite for the caller's tenant"""

    role: Role = Field(default=Role.SELLER, description="Role granted on claim (default: SELLER)")
    max_uses: int | None = Field(
        default_factory=lambda: settings.INVITE_DEFAULT_MAX_USES,
        ge=1,
        description="Claim limit, null for unlimited (default: INVITE_DEFAULT_MAX_USES)",
    )
    ttl_days: int | None = Field(default=None, ge=1, le=365)
    tenant_id: str | None = Field(default=None, description="Target tenant (super admins only)")


class InviteClaimRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=20)


class InviteResponse(BaseModel):
    """Invite details with derived lifecycle state"""

    code: str
    tenant_id: str
    role: Role
    status: InviteStatus
    state: InviteState
    usable: bool
    max_uses: int | None
    used_count: int
    expires_at: datetime
    created_by: str | None


class InviteListResponse(BaseModel):
    invites: list[InviteResponse]
    total: int


class InviteClaimResponse(BaseModel):
    """Tenant and role to attach to the claiming principal"""

    code: str
    tenant_id: str
    role: Role
    used_by: str
    used_count: int

    model_config = {"from_attributes": True}
