from app.models.reason import ReasonCode


class AccessControlException(Exception):
    """Base exception for the access-control service"""

    reason_code: ReasonCode | None = None

    def __init__(self, message: str = "", reason_code: ReasonCode | None = None):
        super().__init__(message)
        if reason_code is not None:
            self.reason_code = reason_code


class UnauthorizedException(AccessControlException):
    """Raised when JWT validation fails or authentication is missing"""

    reason_code = ReasonCode.AUTH_REQUIRED


class NotFoundException(AccessControlException):
    """Raised when resource not found"""

    pass


class ForbiddenException(AccessControlException):
    """Raised when a principal is not allowed to perform an action"""

    reason_code = ReasonCode.PERMISSION_DENIED


class ValidationException(AccessControlException):
    """Raised for business logic validation errors"""

    pass


class GoneException(AccessControlException):
    """Raised when a consumable credential can no longer be used"""

    pass


class ConflictException(AccessControlException):
    """Raised when a write collides with another writer"""

    pass


class StorageException(AccessControlException):
    """Raised when the persistence layer fails"""

    pass


class AccessDeniedException(ForbiddenException):
    """Raised when the decision engine denies a protected operation"""

    def __init__(self, decision):
        super().__init__(
            f"Access denied: {decision.reason_code.value}", reason_code=decision.reason_code
        )
        self.decision = decision


class InviteNotFoundException(NotFoundException):
    reason_code = ReasonCode.INVITE_NOT_FOUND


class InviteExpiredException(GoneException):
    reason_code = ReasonCode.INVITE_EXPIRED


class InviteRevokedException(GoneException):
    reason_code = ReasonCode.INVITE_REVOKED


class InviteExhaustedException(GoneException):
    reason_code = ReasonCode.INVITE_EXHAUSTED


class StorageConflictException(ConflictException):
    """Raised when a compare-and-swap lost; safe to retry"""

    reason_code = ReasonCode.STORAGE_CONFLICT


class AuditAppendException(StorageException):
    """Raised when an audit entry could not be persisted"""

    reason_code = ReasonCode.AUDIT_APPEND_FAILED


class CatalogError(Exception):
    """Raised at startup when the permission catalog is inconsistent"""

    pass
