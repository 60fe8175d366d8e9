from datetime import datetime

from sqlalchemy import String, Integer, DateTime, Boolean
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin


class TempPasswordRecord(Base, TimestampMixin):
    """
    Latest one-time password issued to a user.

    Keyed by user id: a new issuance overwrites the previous record, so only
    the latest secret is ever valid. Only the argon2 hash is stored. The
    record belongs to the tenant of whoever issued it.
    ``used`` flips False -> True exactly once per issuance.
    """

    __tablename__ = "temp_passwords"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    tenant_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    # Issuer's tenant; None when issued by a platform-level super admin
    secret_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    issued_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<TempPasswordRecord(user_id={self.user_id}, used={self.used})>"
