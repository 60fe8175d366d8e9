from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.permissions import granted_permissions
from app.database import get_db
from app.dependencies import AuthState, get_auth_state, get_client_info, get_current_principal
from app.models.decision import DecisionRequest
from app.models.permission import PERMISSION_DEFINITIONS, ROLE_PERMISSIONS
from app.models.principal import Principal
from app.schemas.access_schemas import (
    DecisionRequestBody,
    DecisionResponse,
    PrincipalResponse,
    PermissionDefinitionResponse,
)
from app.services.access_decision_service import AccessDecisionService
from app.services.audit_trail_service import ClientInfo

router = APIRouter()


@router.post("/evaluate", response_model=DecisionResponse)
async def evaluate_access(
    body: DecisionRequestBody,
    auth: AuthState = Depends(get_auth_state),
    client: ClientInfo = Depends(get_client_info),
    db: Session = Depends(get_db),
):
    """
    Evaluate route/action requirements against the calling principal.

    Used by route guards in the UI: the response says whether to render,
    wait (pending) or redirect. Denials are recorded in the audit trail.
    Works without a token (the caller is then unauthenticated).
    """
    service = AccessDecisionService(db, client=client)
    return service.evaluate(
        DecisionRequest(
            principal=auth.principal,
            auth_loading=body.auth_loading,
            is_authenticated=auth.is_authenticated,
            required_roles=body.required_roles,
            required_permission=body.required_permission,
            required_tenant_type=body.required_tenant_type,
            allow_unauthenticated=body.allow_unauthenticated,
            resource=body.resource,
        )
    )


@router.get("/me", response_model=PrincipalResponse)
async def get_me(principal: Principal = Depends(get_current_principal)):
    """Return the calling principal with its effective permissions."""
    return PrincipalResponse(
        id=principal.id,
        role=principal.role,
        tenant_id=principal.tenant_id,
        tenant_type=principal.tenant_type,
        permissions=sorted(granted_permissions(principal), key=lambda p: p.value),
    )


@router.get("/permissions", response_model=list[PermissionDefinitionResponse])
async def list_permissions(principal: Principal = Depends(get_current_principal)):
    """List the permission catalog with the roles granting each entry."""
    return [
        PermissionDefinitionResponse(
            key=definition.key,
            label=definition.label,
            description=definition.description,
            risk=definition.risk,
            scope=definition.scope,
            roles=[role for role, granted in ROLE_PERMISSIONS.items() if definition.key in granted],
        )
        for definition in PERMISSION_DEFINITIONS
    ]
