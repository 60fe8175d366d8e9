"""Role and tenant-type enums for role-based access control."""

from enum import Enum as PyEnum


class Role(str, PyEnum):
    """
    Roles with a fixed, total order.

    Role Hierarchy (highest to lowest):
    1. SUPER_ADMIN - Platform operator, bypasses every tenant check
    2. OWNER - Owns a tenant, exempt from tenant-type and role checks
    3. MANAGER - Runs day-to-day operations, can invite staff
    4. SELLER - Records sales and manages own customers
    5. VIEWER - Read-only access

    Rank decides bypass semantics only. Permissions are never inherited by
    rank; they are looked up per role in the permission catalog.
    """

    SUPER_ADMIN = "super_admin"
    OWNER = "owner"
    MANAGER = "manager"
    SELLER = "seller"
    VIEWER = "viewer"


ROLE_HIERARCHY: dict[Role, int] = {
    Role.SUPER_ADMIN: 5,
    Role.OWNER: 4,
    Role.MANAGER: 3,
    Role.SELLER: 2,
    Role.VIEWER: 1,
}


class TenantType(str, PyEnum):
    """Business type of a tenant"""

    RETAIL = "retail"
    SERVICE = "service"
    AGENCY = "agency"
    FREELANCER = "freelancer"
    EDUCATION = "education"
    OTHER = "other"
