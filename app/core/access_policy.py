"""
The ordered access pipeline.

``evaluate`` is pure and total: every request maps to a Decision and the
function never raises. The first step that produces a verdict wins:

1. identity still loading        -> PENDING
2. public resource               -> ALLOW
3. not authenticated             -> DENY AUTH_REQUIRED (login)
4. SUPER_ADMIN                   -> ALLOW (bypasses everything below)
5. tenant type differs, not OWNER -> DENY TENANT_TYPE_MISMATCH
6. permission not effective       -> DENY PERMISSION_DENIED
7. role not required, not OWNER   -> DENY ROLE_MISMATCH
8.                                -> ALLOW
"""

from app.core.permissions import effective_permission
from app.models.decision import Decision, DecisionRequest, RedirectHint
from app.models.reason import ReasonCode


def evaluate(request: DecisionRequest) -> Decision:
    if request.auth_loading:
        return Decision.pending()

    if request.allow_unauthenticated:
        return Decision.allow(ReasonCode.PUBLIC_ACCESS)

    principal = request.principal
    if not request.is_authenticated or principal is None:
        return Decision.deny(ReasonCode.AUTH_REQUIRED, RedirectHint.LOGIN)

    if principal.is_super_admin():
        return Decision.allow(ReasonCode.SUPER_ADMIN_BYPASS)

    # Owners administer cross-type resources on their own tenant
    if (
        request.required_tenant_type is not None
        and principal.tenant_type != request.required_tenant_type
        and not principal.is_owner()
    ):
        return Decision.deny(ReasonCode.TENANT_TYPE_MISMATCH, RedirectHint.ACCESS_DENIED)

    if request.required_permission is not None and not effective_permission(
        principal, request.required_permission
    ):
        return Decision.deny(ReasonCode.PERMISSION_DENIED, RedirectHint.ACCESS_DENIED)

    if (
        request.required_roles is not None
        and principal.role not in request.required_roles
        and not principal.is_owner()
    ):
        return Decision.deny(ReasonCode.ROLE_MISMATCH, RedirectHint.ACCESS_DENIED)

    return Decision.allow()
