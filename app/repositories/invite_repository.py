"""Repository for InviteCode and InviteClaim model operations."""

from sqlalchemy.orm import Session

from app.models.invite_claim import InviteClaim
from app.models.invite_code import InviteCode


class InviteRepository:
    """
    Repository for InviteCode model operations.

    Write methods only stage changes in the session. The calling service
    commits, so a claim and its audit entry land in one transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_code(self, code: str) -> InviteCode | None:
        """
        Get invite by its code.

        Args:
            code: Normalised invite code (``ABC-1234``)

        Returns:
            InviteCode object or None if not found
        """
        return self.db.query(InviteCode).filter(InviteCode.code == code).first()

    def get_tenant_invites(self, tenant_id: str) -> list[InviteCode]:
        """
        Get all invites for a tenant, newest first.

        Args:
            tenant_id: Tenant ID

        Returns:
            List of InviteCode objects for the tenant
        """
        return (
            self.db.query(InviteCode)
            .filter(InviteCode.tenant_id == tenant_id)
            .order_by(InviteCode.id.desc())
            .all()
        )

    def add(self, invite: InviteCode) -> InviteCode:
        """Stage a new invite."""
        self.db.add(invite)
        return invite

    def add_claim(self, claim: InviteClaim) -> InviteClaim:
        """Stage a claim record for an invite."""
        self.db.add(claim)
        return claim

    def get_claims(self, invite: InviteCode) -> list[InviteClaim]:
        """Get every recorded claim of an invite, oldest first."""
        return (
            self.db.query(InviteClaim)
            .filter(InviteClaim.invite_id == invite.id)
            .order_by(InviteClaim.id)
            .all()
        )
