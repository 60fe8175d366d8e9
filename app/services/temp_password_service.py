import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.config import settings
from app.core.clock import Clock, ensure_utc, utcnow
from app.core.exceptions import ForbiddenException, StorageConflictException, ValidationException
from app.core.security import generate_secret, hash_secret, verify_secret
from app.database import commit_or_conflict
from app.models.reason import ReasonCode
from app.models.temp_password import TempPasswordRecord
from app.repositories.temp_password_repository import TempPasswordRepository
from app.services.audit_trail_service import AuditTrailService, ClientInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TempPasswordResult:
    valid: bool
    reason: ReasonCode | None = None
    # Tenant the login should be scoped to, set only for valid results
    tenant_id: str | None = None


class TempPasswordService:
    """Service layer for short-lived, single-use passwords"""

    def __init__(self, db: Session, client: ClientInfo | None = None, clock: Clock = utcnow):
        self.db = db
        self.clock = clock
        self.temp_password_repo = TempPasswordRepository(db)
        self.audit = AuditTrailService(db, client=client, clock=clock)

    def issue(
        self,
        user_id: str,
        ttl_hours: int | None = None,
        issued_by: str | None = None,
        tenant_id: str | None = None,
        cross_tenant: bool = False,
    ) -> str:
        """
        Issue a new temporary password, replacing any previous one.

        Args:
            user_id: User the password is for
            ttl_hours: Lifetime in hours (default TEMP_PASSWORD_TTL_HOURS)
            issued_by: Issuing user
            tenant_id: Issuer's tenant; the record and its audit entries
                belong to it
            cross_tenant: True to replace a record held by another tenant
                (super admins only)

        Returns:
            The plaintext secret. Only its hash is stored, so this is the
            one and only time it can be read.

        Raises:
            ValidationException: If ttl_hours is not positive
            ForbiddenException: If the user's current record belongs to
                another tenant and cross_tenant is False
            StorageConflictException: If retries ran out
        """
        ttl = settings.TEMP_PASSWORD_TTL_HOURS if ttl_hours is None else ttl_hours
        if ttl <= 0:
            raise ValidationException("ttl_hours must be positive")

        secret = generate_secret()
        secret_hash = hash_secret(secret)

        attempts = settings.STORAGE_CONFLICT_RETRIES
        for attempt in range(1, attempts + 1):
            now = self.clock()
            record = self.temp_password_repo.get_by_user_id(user_id)
            if record is not None and record.tenant_id != tenant_id and not cross_tenant:
                raise ForbiddenException(
                    f"Temporary password for user {user_id} is managed by another tenant"
                )

            self.audit.append(
                "temp_password_issued",
                user_id=user_id,
                tenant_id=tenant_id,
                details={"issued_by": issued_by, "ttl_hours": ttl},
                commit=False,
            )
            if record is None:
                record = self.temp_password_repo.add(TempPasswordRecord(user_id=user_id))
            record.tenant_id = tenant_id
            record.secret_hash = secret_hash
            record.issued_by = issued_by
            record.issued_at = now
            record.expires_at = now + timedelta(hours=ttl)
            record.used = False
            record.used_at = None
            try:
                commit_or_conflict(self.db)
            except StorageConflictException:
                logger.warning("Issue for %s lost a write race (attempt %d/%d)", user_id, attempt, attempts)
                if attempt == attempts:
                    raise
                continue
            logger.info("Issued temporary password for user %s (ttl %dh)", user_id, ttl)
            return secret

        raise StorageConflictException("Temporary password could not be issued")

    def validate(self, user_id: str, secret: str) -> TempPasswordResult:
        """
        Check a secret without consuming it.

        The first failing check wins: not found, already used, expired,
        mismatch.
        """
        record = self.temp_password_repo.get_by_user_id(user_id)
        return self._check(record, secret)

    def _check(self, record: TempPasswordRecord | None, secret: str) -> TempPasswordResult:
        if record is None:
            return TempPasswordResult(False, ReasonCode.TEMP_PASSWORD_NOT_FOUND)
        if record.used:
            return TempPasswordResult(False, ReasonCode.TEMP_PASSWORD_ALREADY_USED)
        if self.clock() > ensure_utc(record.expires_at):
            return TempPasswordResult(False, ReasonCode.TEMP_PASSWORD_EXPIRED)
        if not secret or not verify_secret(secret, record.secret_hash):
            return TempPasswordResult(False, ReasonCode.TEMP_PASSWORD_MISMATCH)
        return TempPasswordResult(True, tenant_id=record.tenant_id)

    def redeem(self, user_id: str, secret: str) -> TempPasswordResult:
        """
        Validate and consume a temporary password in one step.

        The used flag is written under the record's version guard; a caller
        that loses the race re-reads and gets ALREADY_USED.

        Returns:
            The check result; a valid one carries the tenant the login is
            scoped to

        Raises:
            StorageConflictException: If retries ran out
        """
        attempts = settings.STORAGE_CONFLICT_RETRIES
        for attempt in range(1, attempts + 1):
            record = self.temp_password_repo.get_by_user_id(user_id)
            result = self._check(record, secret)
            if not result.valid:
                logger.info("Temporary password rejected for %s: %s", user_id, result.reason.value)
                return result

            self.audit.append(
                "temp_password_redeemed", user_id=user_id, tenant_id=record.tenant_id, commit=False
            )
            record.used = True
            record.used_at = self.clock()
            try:
                commit_or_conflict(self.db)
            except StorageConflictException:
                logger.warning("Redeem for %s lost a write race (attempt %d/%d)", user_id, attempt, attempts)
                if attempt == attempts:
                    raise
                continue
            logger.info("Temporary password redeemed for user %s", user_id)
            return result

        raise StorageConflictException("Temporary password could not be redeemed")

    def get_expiry(self, user_id: str) -> datetime | None:
        record = self.temp_password_repo.get_by_user_id(user_id)
        return ensure_utc(record.expires_at) if record else None
