from datetime import datetime

from pydantic import BaseModel


class AuditLogResponse(BaseModel):
    id: int
    user_id: str | None
    tenant_id: str | None
    action: str
    details: dict
    timestamp: datetime
    ip_address: str | None
    user_agent: str | None

    model_config = {"from_attributes": True}


class AuditLogListResponse(BaseModel):
    entries: list[AuditLogResponse]
    total: int
