"""Repository for AuditLogEntry model operations."""

from sqlalchemy.orm import Session

from app.models.audit_log import AuditLogEntry


class AuditLogRepository:
    """Repository for AuditLogEntry model operations"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, entry: AuditLogEntry) -> AuditLogEntry:
        """
        Stage an entry and flush so it gets its sequence id.

        Args:
            entry: AuditLogEntry to append

        Returns:
            The entry with ``id`` populated
        """
        self.db.add(entry)
        self.db.flush()
        return entry

    def evict_beyond(self, max_entries: int) -> int:
        """
        Delete the oldest entries so at most ``max_entries`` remain.

        Args:
            max_entries: Ring capacity

        Returns:
            Number of evicted entries
        """
        cutoff = (
            self.db.query(AuditLogEntry.id)
            .order_by(AuditLogEntry.id.desc())
            .offset(max_entries)
            .limit(1)
            .scalar()
        )
        if cutoff is None:
            return 0
        return (
            self.db.query(AuditLogEntry)
            .filter(AuditLogEntry.id <= cutoff)
            .delete(synchronize_session=False)
        )

    def query(
        self,
        user_id: str | None = None,
        tenant_id: str | None = None,
        action: str | None = None,
        limit: int | None = None,
    ) -> list[AuditLogEntry]:
        """
        Get entries matching every given filter, newest first.

        Args:
            user_id: Only entries about this user
            tenant_id: Only entries for this tenant
            action: Only entries with this action name
            limit: Maximum number of entries

        Returns:
            List of AuditLogEntry objects
        """
        query = self.db.query(AuditLogEntry)

        if user_id is not None:
            query = query.filter(AuditLogEntry.user_id == user_id)
        if tenant_id is not None:
            query = query.filter(AuditLogEntry.tenant_id == tenant_id)
        if action is not None:
            query = query.filter(AuditLogEntry.action == action)

        query = query.order_by(AuditLogEntry.id.desc())
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count(self) -> int:
        return self.db.query(AuditLogEntry).count()
