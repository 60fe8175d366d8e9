import logging
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.orm import Session

from app.config import settings
from app.core.clock import Clock, ensure_utc, utcnow
from app.core.codes import generate_invite_code, is_valid_invite_code, normalize_invite_code
from app.core.exceptions import (
    InviteExhaustedException,
    InviteExpiredException,
    InviteNotFoundException,
    InviteRevokedException,
    StorageConflictException,
    ValidationException,
)
from app.database import commit_or_conflict
from app.models.invite_claim import InviteClaim
from app.models.invite_code import InviteCode, InviteState, InviteStatus
from app.models.role import Role
from app.repositories.invite_repository import InviteRepository
from app.services.audit_trail_service import AuditTrailService, ClientInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InviteClaimResult:
    """What the claiming principal should be attached to"""

    code: str
    tenant_id: str
    role: Role
    used_by: str
    used_count: int


class InviteService:
    """Service layer for the invitation-code lifecycle"""

    def __init__(self, db: Session, client: ClientInfo | None = None, clock: Clock = utcnow):
        self.db = db
        self.clock = clock
        self.invite_repo = InviteRepository(db)
        self.audit = AuditTrailService(db, client=client, clock=clock)

    # Derived state -----------------------------------------------------

    def is_expired(self, invite: InviteCode) -> bool:
        """Expiry is always recomputed from the clock, never stored."""
        return self.clock() > ensure_utc(invite.expires_at)

    def is_exhausted(self, invite: InviteCode) -> bool:
        return invite.max_uses is not None and invite.used_count >= invite.max_uses

    def is_usable(self, invite: InviteCode) -> bool:
        return (
            invite.status == InviteStatus.ACTIVE
            and not self.is_expired(invite)
            and not self.is_exhausted(invite)
        )

    def state(self, invite: InviteCode) -> InviteState:
        if invite.status == InviteStatus.REVOKED:
            return InviteState.REVOKED
        if self.is_exhausted(invite):
            return InviteState.USED
        if self.is_expired(invite):
            return InviteState.EXPIRED
        return InviteState.ACTIVE

    # Queries -----------------------------------------------------------

    def get(self, code: str) -> InviteCode:
        """
        Look up an invite by code (case-insensitive).

        Raises:
            InviteNotFoundException: If the code is malformed or unknown
        """
        normalized = normalize_invite_code(code)
        invite = self.invite_repo.get_by_code(normalized) if is_valid_invite_code(normalized) else None
        if invite is None:
            raise InviteNotFoundException(f"Invite code {normalized or code!r} not found")
        return invite

    def list_for_tenant(self, tenant_id: str) -> list[InviteCode]:
        """List a tenant's invites, newest first."""
        return self.invite_repo.get_tenant_invites(tenant_id)

    # Transitions -------------------------------------------------------

    def generate(
        self,
        tenant_id: str,
        role: Role,
        created_by: str | None = None,
        max_uses: int | None = settings.INVITE_DEFAULT_MAX_USES,
        ttl_days: int | None = None,
    ) -> InviteCode:
        """
        Create a new invite code for a tenant.

        Collisions are not pre-checked; a unique-key violation from storage
        triggers a fresh code, up to STORAGE_CONFLICT_RETRIES attempts.

        Args:
            tenant_id: Tenant the invite joins
            role: Role granted on claim
            created_by: Inviting user
            max_uses: Claim limit, None for unlimited
            ttl_days: Lifetime in days (default INVITE_TTL_DAYS)

        Returns:
            Created InviteCode

        Raises:
            ValidationException: If the role or limits are invalid
            StorageConflictException: If no unique code could be stored
        """
        if Role(role) == Role.SUPER_ADMIN:
            raise ValidationException("Invites cannot grant the super_admin role")
        if max_uses is not None and max_uses < 1:
            raise ValidationException("max_uses must be at least 1")
        ttl = settings.INVITE_TTL_DAYS if ttl_days is None else ttl_days
        if ttl < 1:
            raise ValidationException("ttl_days must be at least 1")

        attempts = settings.STORAGE_CONFLICT_RETRIES
        for attempt in range(1, attempts + 1):
            candidate = generate_invite_code()
            # Audit first: its flush must not carry the insert that may collide
            self.audit.append(
                "invite_created",
                user_id=created_by,
                tenant_id=tenant_id,
                details={"code": candidate, "role": Role(role).value, "max_uses": max_uses},
                commit=False,
            )
            invite = self.invite_repo.add(
                InviteCode(
                    code=candidate,
                    tenant_id=tenant_id,
                    role=Role(role),
                    created_by=created_by,
                    expires_at=self.clock() + timedelta(days=ttl),
                    max_uses=max_uses,
                    used_count=0,
                    status=InviteStatus.ACTIVE,
                )
            )
            try:
                commit_or_conflict(self.db)
            except StorageConflictException:
                logger.warning("Invite code collision (attempt %d/%d)", attempt, attempts)
                if attempt == attempts:
                    raise
                continue
            logger.info("Generated invite %s for tenant %s (%s)", candidate, tenant_id, invite.role.value)
            return invite

        raise StorageConflictException("Could not generate a unique invite code")

    def claim(self, code: str, user_id: str) -> InviteClaimResult:
        """
        Consume one use of an invite.

        Check order: unknown -> expired -> revoked -> exhausted. On success
        the use counter, the claim record and the audit entry commit
        together. A lost compare-and-swap re-reads and re-checks, so a
        losing concurrent claim on a single-use code ends as exhausted.

        Args:
            code: Invite code as typed by the user
            user_id: Claiming user

        Returns:
            Tenant and role to attach to the claiming principal

        Raises:
            InviteNotFoundException, InviteExpiredException,
            InviteRevokedException, InviteExhaustedException: Business-rule
                failures, never retried
            StorageConflictException: If retries ran out
        """
        attempts = settings.STORAGE_CONFLICT_RETRIES
        for attempt in range(1, attempts + 1):
            try:
                return self._claim_once(code, user_id)
            except StorageConflictException:
                logger.warning("Claim of %s lost a write race (attempt %d/%d)", code, attempt, attempts)
                if attempt == attempts:
                    raise
        raise StorageConflictException("Claim could not be applied")

    def _claim_once(self, code: str, user_id: str) -> InviteClaimResult:
        invite = self.get(code)

        if self.is_expired(invite):
            raise InviteExpiredException(f"Invite code {invite.code} has expired")
        if invite.status == InviteStatus.REVOKED:
            raise InviteRevokedException(f"Invite code {invite.code} has been revoked")
        if self.is_exhausted(invite):
            raise InviteExhaustedException(f"Invite code {invite.code} has no uses left")

        new_count = invite.used_count + 1
        # Audit first: its flush must not carry the versioned update
        self.audit.append(
            "invite_claimed",
            user_id=user_id,
            tenant_id=invite.tenant_id,
            details={"code": invite.code, "role": invite.role.value, "used_count": new_count},
            commit=False,
        )
        invite.used_count = new_count
        self.invite_repo.add_claim(InviteClaim(invite=invite, user_id=user_id, claimed_at=self.clock()))
        commit_or_conflict(self.db)

        logger.info("User %s claimed invite %s (%d uses)", user_id, invite.code, new_count)
        return InviteClaimResult(
            code=invite.code,
            tenant_id=invite.tenant_id,
            role=invite.role,
            used_by=user_id,
            used_count=new_count,
        )

    def revoke(self, code: str, revoked_by: str | None = None) -> InviteCode:
        """
        Revoke an invite. Idempotent: revoking twice is not an error.

        Raises:
            InviteNotFoundException: If the code is unknown
            StorageConflictException: If retries ran out
        """
        attempts = settings.STORAGE_CONFLICT_RETRIES
        for attempt in range(1, attempts + 1):
            invite = self.get(code)
            if invite.status == InviteStatus.REVOKED:
                return invite

            self.audit.append(
                "invite_revoked",
                user_id=revoked_by,
                tenant_id=invite.tenant_id,
                details={"code": invite.code},
                commit=False,
            )
            invite.status = InviteStatus.REVOKED
            try:
                commit_or_conflict(self.db)
            except StorageConflictException:
                logger.warning("Revoke of %s lost a write race (attempt %d/%d)", code, attempt, attempts)
                if attempt == attempts:
                    raise
                continue
            logger.info("Invite %s revoked by %s", invite.code, revoked_by)
            return invite

        raise StorageConflictException("Revoke could not be applied")
