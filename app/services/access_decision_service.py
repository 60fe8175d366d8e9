import logging

from sqlalchemy.orm import Session

from app.core import access_policy
from app.core.clock import Clock, utcnow
from app.models.decision import Decision, DecisionOutcome, DecisionRequest
from app.services.audit_trail_service import AuditTrailService, ClientInfo

logger = logging.getLogger(__name__)


class AccessDecisionService:
    """Runs the access pipeline and records every denial"""

    def __init__(self, db: Session, client: ClientInfo | None = None, clock: Clock = utcnow):
        self.db = db
        self.audit = AuditTrailService(db, client=client, clock=clock)

    def evaluate(self, request: DecisionRequest) -> Decision:
        """
        Evaluate a request and append DENY outcomes to the audit trail.

        ALLOW and PENDING are not logged here; callers log the downstream
        action themselves.

        Args:
            request: Principal context plus requirements

        Returns:
            The pipeline's Decision

        Raises:
            AuditAppendException: If a denial could not be recorded. This is
                a storage failure and is never turned into a Decision.
        """
        decision = access_policy.evaluate(request)

        if decision.outcome == DecisionOutcome.DENY:
            principal = request.principal
            logger.info(
                "Access denied (%s) for %s on %s",
                decision.reason_code.value,
                principal.id if principal else "anonymous",
                request.resource or "-",
            )
            self.audit.append(
                "access_denied",
                user_id=principal.id if principal else None,
                tenant_id=principal.tenant_id if principal else None,
                details=_denial_details(request, decision),
            )

        return decision


def _denial_details(request: DecisionRequest, decision: Decision) -> dict:
    return {
        "reason": decision.reason_code.value,
        "resource": request.resource,
        "role": _value(request.principal.role) if request.principal else None,
        "required_roles": sorted(str(_value(r)) for r in request.required_roles or ()),
        "required_permission": _value(request.required_permission),
        "required_tenant_type": _value(request.required_tenant_type),
    }


def _value(item):
    return getattr(item, "value", item)
