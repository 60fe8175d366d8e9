from sqlalchemy.orm import Session

from app.models.temp_password import TempPasswordRecord


class TempPasswordRepository:
    """Repository for TempPasswordRecord model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_user_id(self, user_id: str) -> TempPasswordRecord | None:
        """Get the current record for a user"""
        return self.db.get(TempPasswordRecord, user_id)

    def add(self, record: TempPasswordRecord) -> TempPasswordRecord:
        """Stage a new record (first issuance for this user)"""
        self.db.add(record)
        return record
