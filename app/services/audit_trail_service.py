import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.core.clock import Clock, utcnow
from app.core.exceptions import AuditAppendException
from app.models.audit_log import AuditLogEntry
from app.repositories.audit_log_repository import AuditLogRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientInfo:
    """Where a request came from, stamped on every audit entry"""

    ip_address: str | None = None
    user_agent: str | None = None


class AuditTrailService:
    """Service layer for the bounded, append-only audit trail"""

    def __init__(self, db: Session, client: ClientInfo | None = None, clock: Clock = utcnow):
        self.db = db
        self.client = client or ClientInfo()
        self.clock = clock
        self.audit_repo = AuditLogRepository(db)

    def append(
        self,
        action: str,
        user_id: str | None = None,
        tenant_id: str | None = None,
        details: dict | None = None,
        commit: bool = True,
    ) -> AuditLogEntry:
        """
        Append an entry and evict the oldest ones beyond the ring capacity.

        Args:
            action: Action name, e.g. ``access_denied``
            user_id: Acting or affected user
            tenant_id: Tenant the action belongs to
            details: JSON-serialisable context
            commit: False to leave the commit to the caller's transaction

        Returns:
            The persisted entry

        Raises:
            AuditAppendException: If the entry could not be stored. Entries
                are never dropped silently.
        """
        entry = AuditLogEntry(
            user_id=user_id,
            tenant_id=tenant_id,
            action=action,
            details=details or {},
            timestamp=self.clock(),
            ip_address=self.client.ip_address,
            user_agent=self.client.user_agent,
        )
        try:
            self.audit_repo.add(entry)
            self.audit_repo.evict_beyond(settings.AUDIT_LOG_MAX_ENTRIES)
            if commit:
                self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to append audit entry %r", action)
            raise AuditAppendException(f"Could not record audit entry '{action}'") from exc

        return entry

    def query(
        self,
        user_id: str | None = None,
        tenant_id: str | None = None,
        action: str | None = None,
        limit: int | None = None,
    ) -> list[AuditLogEntry]:
        """
        Query entries, newest first.

        Args:
            user_id: Filter by user
            tenant_id: Filter by tenant
            action: Filter by action name
            limit: Maximum number of entries

        Returns:
            Matching entries
        """
        return self.audit_repo.query(
            user_id=user_id, tenant_id=tenant_id, action=action, limit=limit
        )
