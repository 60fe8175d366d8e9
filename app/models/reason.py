"""Machine-readable reason codes shared by decisions, errors and results."""

from enum import Enum as PyEnum


class ReasonCode(str, PyEnum):
    # Non-deny decision reasons
    AUTH_LOADING = "AUTH_LOADING"
    PUBLIC_ACCESS = "PUBLIC_ACCESS"
    SUPER_ADMIN_BYPASS = "SUPER_ADMIN_BYPASS"
    GRANTED = "GRANTED"

    # Access denials (recoverable by redirect / re-auth)
    AUTH_REQUIRED = "AUTH_REQUIRED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    TENANT_TYPE_MISMATCH = "TENANT_TYPE_MISMATCH"
    ROLE_MISMATCH = "ROLE_MISMATCH"

    # Invitation codes (terminal per attempt)
    INVITE_NOT_FOUND = "INVITE_NOT_FOUND"
    INVITE_EXPIRED = "INVITE_EXPIRED"
    INVITE_REVOKED = "INVITE_REVOKED"
    INVITE_EXHAUSTED = "INVITE_EXHAUSTED"

    # Temporary passwords (terminal per attempt)
    TEMP_PASSWORD_NOT_FOUND = "TEMP_PASSWORD_NOT_FOUND"
    TEMP_PASSWORD_ALREADY_USED = "TEMP_PASSWORD_ALREADY_USED"
    TEMP_PASSWORD_EXPIRED = "TEMP_PASSWORD_EXPIRED"
    TEMP_PASSWORD_MISMATCH = "TEMP_PASSWORD_MISMATCH"

    # Storage
    STORAGE_CONFLICT = "STORAGE_CONFLICT"
    AUDIT_APPEND_FAILED = "AUDIT_APPEND_FAILED"
