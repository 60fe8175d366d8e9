from pydantic import BaseModel, Field

from app.models.decision import DecisionOutcome, RedirectHint
from app.models.permission import Permission
from app.models.reason import ReasonCode
from app.models.role import Role, TenantType


class DecisionRequestBody(BaseModel):
    """Requirements to evaluate against the calling principal"""

    auth_loading: bool = False
    allow_unauthenticated: bool = False
    required_roles: list[Role] | None = None
    required_permission: Permission | None = None
    required_tenant_type: TenantType | None = None
    resource: str | None = Field(None, max_length=500)


class DecisionResponse(BaseModel):
    outcome: DecisionOutcome
    reason_code: ReasonCode
    redirect_hint: RedirectHint | None = None

    model_config = {"from_attributes": True}


class PrincipalResponse(BaseModel):
    """The calling principal and what it can do"""

    id: str
    role: Role
    tenant_id: str | None
    tenant_type: TenantType | None
    permissions: list[Permission]


class PermissionDefinitionResponse(BaseModel):
    key: Permission
    label: str
    description: str
    risk: str
    scope: str
    roles: list[Role]

    model_config = {"from_attributes": True}
