from datetime import datetime

from pydantic import BaseModel, Field

from app.models.reason import ReasonCode


class TempPasswordIssueRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=255)
    ttl_hours: int | None = Field(default=None, ge=1, le=24 * 30)


class TempPasswordIssueResponse(BaseModel):
    """The secret is returned exactly once"""

    user_id: str
    tenant_id: str | None
    temp_password: str
    expires_at: datetime


class TempPasswordCheckRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=255)
    temp_password: str = Field(..., min_length=1, max_length=255)


class TempPasswordCheckResponse(BaseModel):
    valid: bool
    reason: ReasonCode | None = None
    tenant_id: str | None = None

    model_config = {"from_attributes": True}
