from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base

if TYPE_CHECKING:
    from app.models.invite_code import InviteCode


class InviteClaim(Base):
    """One successful claim of an invite code (who used it and when)."""

    __tablename__ = "invite_claims"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    invite_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("invite_codes.id"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    claimed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    invite: Mapped["InviteCode"] = relationship("InviteCode", back_populates="claims")

    def __repr__(self) -> str:
        return f"<InviteClaim(invite_id={self.invite_id}, user_id={self.user_id})>"
