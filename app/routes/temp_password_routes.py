from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.exceptions import UnauthorizedException
from app.database import get_db
from app.dependencies import get_client_info, require_access
from app.models.permission import Permission
from app.models.principal import Principal
from app.schemas.temp_password_schemas import (
    TempPasswordIssueRequest,
    TempPasswordIssueResponse,
    TempPasswordCheckRequest,
    TempPasswordCheckResponse,
)
from app.services.audit_trail_service import ClientInfo
from app.services.temp_password_service import TempPasswordService

router = APIRouter()


@router.post("", response_model=TempPasswordIssueResponse, status_code=status.HTTP_201_CREATED)
async def issue_temp_password(
    data: TempPasswordIssueRequest,
    principal: Principal = Depends(require_access(permission=Permission.ISSUE_TEMP_PASSWORDS)),
    client: ClientInfo = Depends(get_client_info),
    db: Session = Depends(get_db),
):
    """
    Issue a one-time password for a user.

    - **Requires issue_temp_passwords**
    - Replaces any earlier temporary password of that user issued within
      your tenant (super admins may replace any)
    - The secret is only ever returned by this call
    """
    service = TempPasswordService(db, client=client)
    secret = service.issue(
        data.user_id,
        ttl_hours=data.ttl_hours,
        issued_by=principal.id,
        tenant_id=principal.tenant_id,
        cross_tenant=principal.is_super_admin(),
    )
    return TempPasswordIssueResponse(
        user_id=data.user_id,
        tenant_id=principal.tenant_id,
        temp_password=secret,
        expires_at=service.get_expiry(data.user_id),
    )


@router.post("/validate", response_model=TempPasswordCheckResponse)
async def validate_temp_password(
    data: TempPasswordCheckRequest,
    db: Session = Depends(get_db),
):
    """Check a temporary password without consuming it."""
    service = TempPasswordService(db)
    return service.validate(data.user_id, data.temp_password)


@router.post("/redeem", response_model=TempPasswordCheckResponse)
async def redeem_temp_password(
    data: TempPasswordCheckRequest,
    client: ClientInfo = Depends(get_client_info),
    db: Session = Depends(get_db),
):
    """
    Consume a temporary password.

    Returns 401 with the failure reason when the password cannot be used.
    On success the response names the tenant the login is scoped to.
    """
    service = TempPasswordService(db, client=client)
    result = service.redeem(data.user_id, data.temp_password)
    if not result.valid:
        raise UnauthorizedException("Temporary password rejected", reason_code=result.reason)
    return result
