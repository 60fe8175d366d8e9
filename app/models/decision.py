"""Decision request / verdict value objects for the access pipeline."""

from dataclasses import dataclass
from enum import Enum as PyEnum

from app.models.permission import Permission
from app.models.principal import Principal
from app.models.reason import ReasonCode
from app.models.role import Role, TenantType


class DecisionOutcome(str, PyEnum):
    ALLOW = "allow"
    DENY = "deny"
    # Identity still loading; callers must never treat this as ALLOW
    PENDING = "pending"


class RedirectHint(str, PyEnum):
    LOGIN = "login"
    ACCESS_DENIED = "access_denied"


@dataclass
class DecisionRequest:
    """
    Everything the pipeline needs for one verdict.

    Empty or missing requirements mean "no requirement". ``resource`` only
    describes what was requested and ends up in audit details.
    """

    principal: Principal | None = None
    auth_loading: bool = False
    is_authenticated: bool = False
    required_roles: frozenset[Role] | None = None
    required_permission: Permission | str | None = None
    required_tenant_type: TenantType | None = None
    allow_unauthenticated: bool = False
    resource: str | None = None

    def __post_init__(self):
        if isinstance(self.required_roles, (Role, str)):
            self.required_roles = frozenset({self.required_roles})
        elif self.required_roles is not None:
            self.required_roles = frozenset(self.required_roles)
        if not self.required_roles:
            self.required_roles = None
        if not self.required_permission:
            self.required_permission = None
        if not self.required_tenant_type:
            self.required_tenant_type = None


@dataclass(frozen=True)
class Decision:
    outcome: DecisionOutcome
    reason_code: ReasonCode
    redirect_hint: RedirectHint | None = None

    @property
    def allowed(self) -> bool:
        return self.outcome == DecisionOutcome.ALLOW

    @classmethod
    def allow(cls, reason_code: ReasonCode = ReasonCode.GRANTED) -> "Decision":
        return cls(DecisionOutcome.ALLOW, reason_code)

    @classmethod
    def deny(cls, reason_code: ReasonCode, redirect_hint: RedirectHint) -> "Decision":
        return cls(DecisionOutcome.DENY, reason_code, redirect_hint)

    @classmethod
    def pending(cls) -> "Decision":
        return cls(DecisionOutcome.PENDING, ReasonCode.AUTH_LOADING)
