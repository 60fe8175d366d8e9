"""Invite-code and tenant-code formats."""

import re
import secrets
import string

from app.models.role import TenantType

INVITE_CODE_PATTERN = re.compile(r"^[A-Z]{3}-\d{4}$")
TENANT_CODE_PATTERN = re.compile(r"^[A-Z]+-\d{4,6}$")

TENANT_CODE_PREFIXES: dict[TenantType, str] = {
    TenantType.RETAIL: "RETAIL",
    TenantType.AGENCY: "AGENCY",
    TenantType.EDUCATION: "EDU",
    TenantType.SERVICE: "SERVICE",
    TenantType.FREELANCER: "FREE",
    TenantType.OTHER: "BIZ",
}


def generate_invite_code() -> str:
    """Three uniform uppercase letters, a dash, four uniform digits (e.g. ``QXT-0472``)."""
    letters = "".join(secrets.choice(string.ascii_uppercase) for _ in range(3))
    digits = "".join(secrets.choice(string.digits) for _ in range(4))
    return f"{letters}-{digits}"


def normalize_invite_code(code: str | None) -> str:
    if not code:
        return ""
    return code.strip().upper()


def is_valid_invite_code(code: str | None) -> bool:
    """Format check, case-insensitive so users may type codes in lowercase."""
    return bool(INVITE_CODE_PATTERN.match(normalize_invite_code(code)))


def generate_tenant_code(tenant_type: TenantType | str | None) -> str:
    """Human-friendly tenant code such as ``RETAIL-8842``."""
    try:
        prefix = TENANT_CODE_PREFIXES[TenantType(tenant_type)]
    except ValueError:
        prefix = TENANT_CODE_PREFIXES[TenantType.OTHER]
    return f"{prefix}-{1000 + secrets.randbelow(9000)}"


def is_valid_tenant_code(code: str | None) -> bool:
    return bool(code) and bool(TENANT_CODE_PATTERN.match(code))
