from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_access
from app.models.permission import Permission
from app.models.principal import Principal
from app.schemas.audit_schemas import AuditLogListResponse
from app.services.audit_trail_service import AuditTrailService

router = APIRouter()


@router.get("", response_model=AuditLogListResponse)
async def query_audit_logs(
    user_id: str | None = None,
    tenant_id: str | None = None,
    action: str | None = None,
    limit: int = Query(100, ge=1, le=1000),
    principal: Principal = Depends(require_access(permission=Permission.VIEW_AUDIT_LOGS)),
    db: Session = Depends(get_db),
):
    """
    Query the audit trail, newest first.

    - **Requires view_audit_logs**
    - Everyone except super admins only sees their own tenant
    """
    if not principal.is_super_admin():
        if principal.tenant_id is None:
            return AuditLogListResponse(entries=[], total=0)
        tenant_id = principal.tenant_id

    service = AuditTrailService(db)
    entries = service.query(user_id=user_id, tenant_id=tenant_id, action=action, limit=limit)
    return AuditLogListResponse(entries=entries, total=len(entries))
