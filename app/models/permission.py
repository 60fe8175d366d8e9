"""Closed permission catalog and per-role grants."""

from dataclasses import dataclass
from enum import Enum as PyEnum
from typing import Literal

from app.models.role import Role

RiskLevel = Literal["low", "medium", "high"]
PermissionScope = Literal["tenant", "global"]


class Permission(str, PyEnum):
    """Named capabilities checked by the decision engine"""

    # Sales & customers
    VIEW_DASHBOARD = "view_dashboard"
    CREATE_SALES = "create_sales"
    VIEW_OWN_SALES = "view_own_sales"
    MANAGE_SALES = "manage_sales"
    MANAGE_CUSTOMERS = "manage_customers"
    MANAGE_COLLECTIONS = "manage_collections"
    MANAGE_OWN_COLLECTIONS = "manage_own_collections"
    OVERRIDE_PRICE = "override_price"

    # Inventory
    MANAGE_PRODUCTS = "manage_products"
    DELETE_PRODUCTS = "delete_products"
    MANAGE_INVENTORY = "manage_inventory"
    VIEW_COST = "view_cost"

    # Finance
    VIEW_REPORTS = "view_reports"
    VIEW_FINANCIALS = "view_financials"
    MANAGE_EXPENSES = "manage_expenses"
    VIEW_COMMISSIONS = "view_commissions"
    EDIT_COMMISSIONS = "edit_commissions"

    # Agency / service / education
    MANAGE_PROJECTS = "manage_projects"
    MANAGE_TASKS = "manage_tasks"
    MANAGE_STUDENTS = "manage_students"
    MANAGE_FEES = "manage_fees"

    # Tenant administration
    MANAGE_TEAM = "manage_team"
    MANAGE_ROLES = "manage_roles"
    MANAGE_SETTINGS = "manage_settings"
    MANAGE_INVITES = "manage_invites"
    ISSUE_TEMP_PASSWORDS = "issue_temp_passwords"
    VIEW_AUDIT_LOGS = "view_audit_logs"

    # Platform
    MANAGE_ALL_BUSINESSES = "manage_all_businesses"
    MANAGE_ALL_USERS = "manage_all_users"
    SYSTEM_SETTINGS = "system_settings"


@dataclass(frozen=True)
class PermissionDefinition:
    """Describes a permission entry in the registry."""

    key: Permission
    label: str
    description: str
    risk: RiskLevel
    scope: PermissionScope = "tenant"


PERMISSION_DEFINITIONS: tuple[PermissionDefinition, ...] = (
    PermissionDefinition(Permission.VIEW_DASHBOARD, "View dashboard", "Open the tenant dashboard", "low"),
    PermissionDefinition(Permission.CREATE_SALES, "Create sales", "Create new sales records", "low"),
    PermissionDefinition(Permission.VIEW_OWN_SALES, "View own sales", "View sales recorded by yourself", "low"),
    PermissionDefinition(Permission.MANAGE_SALES, "Manage sales", "View and edit all sales", "medium"),
    PermissionDefinition(Permission.MANAGE_CUSTOMERS, "Manage customers", "Create and manage customer records", "low"),
    PermissionDefinition(Permission.MANAGE_COLLECTIONS, "Manage collections", "Manage payment collections", "medium"),
    PermissionDefinition(
        Permission.MANAGE_OWN_COLLECTIONS, "Manage own collections", "Manage collections for your own sales", "low"
    ),
    PermissionDefinition(Permission.OVERRIDE_PRICE, "Override price", "Override product prices at point of sale", "medium"),
    PermissionDefinition(Permission.MANAGE_PRODUCTS, "Manage products", "Add and edit products", "low"),
    PermissionDefinition(Permission.DELETE_PRODUCTS, "Delete products", "Delete products and sales records", "high"),
    PermissionDefinition(Permission.MANAGE_INVENTORY, "Manage inventory", "Manage stock levels", "low"),
    PermissionDefinition(Permission.VIEW_COST, "View cost", "View product costs and margins", "medium"),
    PermissionDefinition(Permission.VIEW_REPORTS, "View reports", "View business reports", "medium"),
    PermissionDefinition(Permission.VIEW_FINANCIALS, "View financials", "View financial reports and profit margins", "high"),
    PermissionDefinition(Permission.MANAGE_EXPENSES, "Manage expenses", "Record and edit business expenses", "medium"),
    PermissionDefinition(Permission.VIEW_COMMISSIONS, "View commissions", "View commission details", "low"),
    PermissionDefinition(Permission.EDIT_COMMISSIONS, "Edit commissions", "Edit commission structures for users", "high"),
    PermissionDefinition(Permission.MANAGE_PROJECTS, "Manage projects", "Create and manage projects", "low"),
    PermissionDefinition(Permission.MANAGE_TASKS, "Manage tasks", "Create and manage tasks", "low"),
    PermissionDefinition(Permission.MANAGE_STUDENTS, "Manage students", "Manage student records and enrollment", "low"),
    PermissionDefinition(Permission.MANAGE_FEES, "Manage fees", "Manage fee collection and payments", "medium"),
    PermissionDefinition(Permission.MANAGE_TEAM, "Manage team", "Add, edit, or remove team members", "medium"),
    PermissionDefinition(Permission.MANAGE_ROLES, "Manage roles", "Assign roles and permission overrides", "high"),
    PermissionDefinition(Permission.MANAGE_SETTINGS, "Manage settings", "Modify business settings", "high"),
    PermissionDefinition(Permission.MANAGE_INVITES, "Manage invites", "Generate and revoke invite codes", "medium"),
    PermissionDefinition(
        Permission.ISSUE_TEMP_PASSWORDS, "Issue temporary passwords", "Issue one-time passwords to team members", "high"
    ),
    PermissionDefinition(Permission.VIEW_AUDIT_LOGS, "View audit logs", "Inspect the audit trail", "medium"),
    PermissionDefinition(
        Permission.MANAGE_ALL_BUSINESSES, "Manage all businesses", "Administer every tenant", "high", "global"
    ),
    PermissionDefinition(Permission.MANAGE_ALL_USERS, "Manage all users", "Administer every user", "high", "global"),
    PermissionDefinition(Permission.SYSTEM_SETTINGS, "System settings", "Modify platform-wide settings", "high", "global"),
)

_SELLER = frozenset(
    {
        Permission.VIEW_DASHBOARD,
        Permission.CREATE_SALES,
        Permission.VIEW_OWN_SALES,
        Permission.MANAGE_CUSTOMERS,
        Permission.MANAGE_OWN_COLLECTIONS,
        Permission.VIEW_COMMISSIONS,
    }
)

_MANAGER = _SELLER | {
    Permission.MANAGE_SALES,
    Permission.MANAGE_PRODUCTS,
    Permission.MANAGE_INVENTORY,
    Permission.VIEW_COST,
    Permission.VIEW_REPORTS,
    Permission.MANAGE_EXPENSES,
    Permission.MANAGE_COLLECTIONS,
    Permission.MANAGE_PROJECTS,
    Permission.MANAGE_TASKS,
    Permission.MANAGE_STUDENTS,
    Permission.MANAGE_INVITES,
}

_GLOBAL = frozenset(d.key for d in PERMISSION_DEFINITIONS if d.scope == "global")

ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.SUPER_ADMIN: frozenset(Permission),
    Role.OWNER: frozenset(Permission) - _GLOBAL,
    Role.MANAGER: frozenset(_MANAGER),
    Role.SELLER: _SELLER,
    Role.VIEWER: frozenset({Permission.VIEW_DASHBOARD, Permission.VIEW_REPORTS}),
}
