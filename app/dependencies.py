from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.exceptions import AccessDeniedException, UnauthorizedException
from app.core.permissions import parse_overrides
from app.core.security import decode_jwt
from app.database import get_db
from app.models.decision import DecisionRequest
from app.models.permission import Permission
from app.models.principal import Principal
from app.models.reason import ReasonCode
from app.models.role import Role, TenantType
from app.services.access_decision_service import AccessDecisionService
from app.services.audit_trail_service import ClientInfo

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthState:
    """What the identity provider tells us about the caller"""

    principal: Principal | None
    is_authenticated: bool
    # Tokens are verified synchronously, so identity is never "loading" here
    auth_loading: bool = False


def principal_from_claims(payload: dict) -> Principal:
    """
    Build a Principal from identity-provider JWT claims.

    Claims: 'sub', 'role', optional 'tenant_id', 'tenant_type' and
    'permissions' (a ``{name: bool}`` override map).

    Raises:
        UnauthorizedException: If role or tenant type claims are invalid
    """
    try:
        role = Role(payload.get("role"))
    except ValueError:
        raise UnauthorizedException("Token missing or invalid role")

    tenant_type = payload.get("tenant_type")
    try:
        tenant_type = TenantType(tenant_type) if tenant_type is not None else None
    except ValueError:
        raise UnauthorizedException("Token has invalid tenant type")

    tenant_id = payload.get("tenant_id")
    overrides = payload.get("permissions")

    return Principal(
        id=str(payload["sub"]),
        role=role,
        tenant_id=str(tenant_id) if tenant_id is not None else None,
        tenant_type=tenant_type,
        permission_overrides=parse_overrides(overrides),
    )


async def get_auth_state(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AuthState:
    """
    FastAPI dependency resolving the caller's identity.

    Flow:
    1. No Authorization: Bearer header -> unauthenticated (public routes still work)
    2. Validate JWT using shared SECRET_KEY
    3. Build the Principal from its claims

    Raises:
        UnauthorizedException: If a token is present but invalid or expired
    """
    if credentials is None:
        return AuthState(principal=None, is_authenticated=False)

    payload = decode_jwt(credentials.credentials)
    return AuthState(principal=principal_from_claims(payload), is_authenticated=True)


def get_client_info(request: Request) -> ClientInfo:
    return ClientInfo(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


def require_access(
    *,
    roles: set[Role] | None = None,
    permission: Permission | None = None,
    tenant_type: TenantType | None = None,
):
    """
    Build a dependency that gates a route through the decision pipeline.

    Usage:
        @router.post("", dependencies=[Depends(require_access(permission=Permission.MANAGE_INVITES))])

    The dependency returns the allowed Principal.
    """

    async def dependency(
        request: Request,
        auth: AuthState = Depends(get_auth_state),
        client: ClientInfo = Depends(get_client_info),
        db: Session = Depends(get_db),
    ) -> Principal:
        decision = AccessDecisionService(db, client=client).evaluate(
            DecisionRequest(
                principal=auth.principal,
                auth_loading=auth.auth_loading,
                is_authenticated=auth.is_authenticated,
                required_roles=roles,
                required_permission=permission,
                required_tenant_type=tenant_type,
                resource=f"{request.method} {request.url.path}",
            )
        )
        if decision.reason_code == ReasonCode.AUTH_REQUIRED:
            raise UnauthorizedException("Authentication required")
        # PENDING is never treated as ALLOW
        if not decision.allowed:
            raise AccessDeniedException(decision)
        return auth.principal

    return dependency


get_current_principal = require_access()
