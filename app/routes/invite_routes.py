from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.exceptions import ForbiddenException, InviteNotFoundException, ValidationException
from app.core.permissions import can_assign_role
from app.database import get_db
from app.dependencies import get_client_info, get_current_principal, require_access
from app.models.invite_code import InviteCode
from app.models.permission import Permission
from app.models.principal import Principal
from app.schemas.invite_schemas import (
    InviteCreate,
    InviteClaimRequest,
    InviteClaimResponse,
    InviteListResponse,
    InviteResponse,
)
from app.services.audit_trail_service import ClientInfo
from app.services.invite_service import InviteService

router = APIRouter()

can_manage_invites = require_access(permission=Permission.MANAGE_INVITES)


def _to_response(service: InviteService, invite: InviteCode) -> InviteResponse:
    return InviteResponse(
        code=invite.code,
        tenant_id=invite.tenant_id,
        role=invite.role,
        status=invite.status,
        state=service.state(invite),
        usable=service.is_usable(invite),
        max_uses=invite.max_uses,
        used_count=invite.used_count,
        expires_at=invite.expires_at,
        created_by=invite.created_by,
    )


def _get_tenant_invite(service: InviteService, code: str, principal: Principal) -> InviteCode:
    """Invites of other tenants look exactly like unknown codes"""
    invite = service.get(code)
    if not principal.is_super_admin() and invite.tenant_id != principal.tenant_id:
        raise InviteNotFoundException(f"Invite code {invite.code} not found")
    return invite


@router.post("", response_model=InviteResponse, status_code=status.HTTP_201_CREATED)
async def create_invite(
    data: InviteCreate,
    principal: Principal = Depends(can_manage_invites),
    client: ClientInfo = Depends(get_client_info),
    db: Session = Depends(get_db),
):
    """
    Generate an invite code for the caller's tenant.

    - **Requires manage_invites**
    - Only roles below your own can be granted (owners may grant any role
      except super_admin)
    """
    tenant_id = principal.tenant_id
    if data.tenant_id is not None and data.tenant_id != tenant_id:
        if not principal.is_super_admin():
            raise ForbiddenException("Cannot create invites for another tenant")
        tenant_id = data.tenant_id
    if tenant_id is None:
        raise ValidationException("No tenant to invite into")

    if not can_assign_role(principal, data.role):
        raise ForbiddenException(f"Role {principal.role.value} cannot invite as {data.role.value}")

    service = InviteService(db, client=client)
    invite = service.generate(
        tenant_id=tenant_id,
        role=data.role,
        created_by=principal.id,
        max_uses=data.max_uses,
        ttl_days=data.ttl_days,
    )
    return _to_response(service, invite)


@router.get("", response_model=InviteListResponse)
async def list_invites(
    principal: Principal = Depends(can_manage_invites),
    db: Session = Depends(get_db),
):
    """List invites of the caller's tenant, newest first."""
    service = InviteService(db)
    invites = service.list_for_tenant(principal.tenant_id) if principal.tenant_id else []
    return InviteListResponse(invites=[_to_response(service, i) for i in invites], total=len(invites))


@router.post("/claim", response_model=InviteClaimResponse)
async def claim_invite(
    data: InviteClaimRequest,
    principal: Principal = Depends(get_current_principal),
    client: ClientInfo = Depends(get_client_info),
    db: Session = Depends(get_db),
):
    """
    Claim an invite code.

    Returns the tenant and role the identity provider should attach to the
    caller. Fails with 404 (unknown) or 410 (expired, revoked, used up).
    """
    service = InviteService(db, client=client)
    return service.claim(data.code, principal.id)


@router.get("/{code}", response_model=InviteResponse)
async def get_invite(
    code: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Preview an invite (state and usability) before claiming it."""
    service = InviteService(db)
    return _to_response(service, service.get(code))


@router.post("/{code}/revoke", response_model=InviteResponse)
async def revoke_invite(
    code: str,
    principal: Principal = Depends(can_manage_invites),
    client: ClientInfo = Depends(get_client_info),
    db: Session = Depends(get_db),
):
    """
    Revoke an invite of the caller's tenant.

    - **Requires manage_invites**
    - Idempotent: revoking a revoked invite returns it unchanged
    """
    service = InviteService(db, client=client)
    invite = _get_tenant_invite(service, code, principal)
    return _to_response(service, service.revoke(invite.code, revoked_by=principal.id))
