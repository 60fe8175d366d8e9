"""Invitation codes that let a user join a tenant with a given role."""

from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

from sqlalchemy import String, Integer, DateTime, Enum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin
from app.models.role import Role

if TYPE_CHECKING:
    from app.models.invite_claim import InviteClaim


class InviteStatus(str, PyEnum):
    """Stored status; expiry and exhaustion are derived, never stored"""

    ACTIVE = "active"
    REVOKED = "revoked"


class InviteState(str, PyEnum):
    """Lifecycle state as seen at a given instant"""

    ACTIVE = "active"
    USED = "used"
    REVOKED = "revoked"
    EXPIRED = "expired"


class InviteCode(Base, TimestampMixin):
    """
    A consumable credential granting a role within a tenant.

    Mutated only by claim (used_count += 1) or revoke (status = REVOKED).
    Rows are never deleted so audit history can always resolve them.
    The version column makes every update a compare-and-swap.
    """

    __tablename__ = "invite_codes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(8), unique=True, nullable=False)
    tenant_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    role: Mapped[Role] = mapped_column(
        Enum(Role, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    max_uses: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # None = unlimited
    used_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[InviteStatus] = mapped_column(
        Enum(InviteStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=InviteStatus.ACTIVE,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    claims: Mapped[list["InviteClaim"]] = relationship(
        "InviteClaim", back_populates="invite", order_by="InviteClaim.id"
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (Index("ix_invite_codes_tenant_created", "tenant_id", "created_at"),)

    def __repr__(self) -> str:
        return f"<InviteCode(code={self.code}, tenant_id={self.tenant_id}, role={self.role.value})>"
