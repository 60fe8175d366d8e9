"""
Pure role/permission lookups.

Nothing here touches storage or raises for unknown input: unknown permission
names are simply not granted, which keeps the decision pipeline total.
"""

import logging
from typing import Iterable, Mapping

from app.core.exceptions import CatalogError
from app.models.permission import Permission, PERMISSION_DEFINITIONS, ROLE_PERMISSIONS
from app.models.principal import Principal
from app.models.role import Role, ROLE_HIERARCHY

logger = logging.getLogger(__name__)


def role_rank(role: Role) -> int:
    """Rank in the fixed hierarchy, higher = more privileged."""
    return ROLE_HIERARCHY[Role(role)]


def is_at_least(role: Role, threshold: Role) -> bool:
    return role_rank(role) >= role_rank(threshold)


def parse_permission(name: str | Permission | None) -> Permission | None:
    """
    Resolve a permission name against the closed catalog.

    Returns None for unknown names so callers can tell "unknown permission"
    apart from "permission denied".
    """
    if name is None:
        return None
    try:
        return Permission(name)
    except ValueError:
        return None


def role_grants(role: Role, permission: Permission | str) -> bool:
    """Catalog lookup; unknown roles or permission names grant nothing."""
    resolved = parse_permission(permission)
    if resolved is None:
        return False
    try:
        return resolved in ROLE_PERMISSIONS[Role(role)]
    except (KeyError, ValueError):
        return False


def effective_permission(principal: Principal, permission: Permission | str) -> bool:
    """
    Check a permission for a principal, honouring per-user overrides.

    An explicit override wins over the role catalog. This lets an owner give
    a seller one extra capability without a promotion. A mapping carries
    grants (True) and revocations (False); a plain set only grants.
    """
    resolved = parse_permission(permission)
    if resolved is None:
        return False

    overrides = principal.permission_overrides or ()
    if resolved in overrides:
        if isinstance(overrides, Mapping):
            return bool(overrides[resolved])
        return True

    return role_grants(principal.role, resolved)


def granted_permissions(principal: Principal) -> frozenset[Permission]:
    """Every permission the principal effectively holds."""
    return frozenset(p for p in Permission if effective_permission(principal, p))


def parse_overrides(raw: Mapping[str, object] | Iterable[str] | None) -> dict[Permission, bool] | None:
    """
    Turn a ``permissions`` claim into typed overrides.

    Accepts either a mapping of ``{name: bool}`` (grant or revoke) or a list
    of names, each of which is an explicit grant. Unknown names and other
    shapes are dropped (and logged) rather than failing the request.
    """
    if not raw:
        return None

    if isinstance(raw, Mapping):
        items = raw.items()
    elif isinstance(raw, (list, tuple, set, frozenset)):
        items = ((name, True) for name in raw)
    else:
        logger.warning("Ignoring permission overrides of type %s", type(raw).__name__)
        return None

    overrides: dict[Permission, bool] = {}
    for name, value in items:
        permission = parse_permission(name) if isinstance(name, str) else None
        if permission is None:
            logger.warning("Ignoring override for unknown permission %r", name)
            continue
        overrides[permission] = bool(value)
    return overrides or None


def can_assign_role(actor: Principal, role: Role) -> bool:
    """
    Check whether ``actor`` may hand out ``role`` (e.g. through an invite).

    SUPER_ADMIN is never assignable. Owners and super admins may assign any
    other role; everybody else only roles strictly below their own.
    """
    if role == Role.SUPER_ADMIN:
        return False
    if actor.role in (Role.SUPER_ADMIN, Role.OWNER):
        return True
    return role_rank(role) < role_rank(actor.role)


def validate_catalog() -> None:
    """
    Check the static catalog for consistency. Called once at startup.

    Raises:
        CatalogError: If a permission lacks a definition, a role lacks a
            catalog row, or a global permission leaks below SUPER_ADMIN
    """
    defined = {d.key for d in PERMISSION_DEFINITIONS}
    missing = set(Permission) - defined
    if missing:
        raise CatalogError(f"Permissions without definition: {sorted(p.value for p in missing)}")
    if len(defined) != len(PERMISSION_DEFINITIONS):
        raise CatalogError("Duplicate permission definitions")

    for role in Role:
        if role not in ROLE_PERMISSIONS:
            raise CatalogError(f"Role {role.value} has no catalog entry")
        unknown = {p for p in ROLE_PERMISSIONS[role] if not isinstance(p, Permission)}
        if unknown:
            raise CatalogError(f"Role {role.value} references unknown permissions {unknown}")

    if ROLE_PERMISSIONS[Role.SUPER_ADMIN] != frozenset(Permission):
        raise CatalogError("SUPER_ADMIN must hold every permission")

    global_permissions = {d.key for d in PERMISSION_DEFINITIONS if d.scope == "global"}
    for role, granted in ROLE_PERMISSIONS.items():
        if role != Role.SUPER_ADMIN and granted & global_permissions:
            raise CatalogError(f"Role {role.value} holds global permissions")

    logger.debug("Permission catalog validated: %d permissions, %d roles", len(defined), len(Role))
