"""
Role-based access control.

Roles, their permissions and the navigation route table are immutable and
built once at import time. Request handlers never consult these tables
directly: they receive a ``PermissionMatrix`` through the
``get_permission_matrix`` dependency, so tests and alternative deployments
can inject a different matrix through ``app.dependency_overrides``.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, Mapping, FrozenSet, Optional, Tuple

ADMIN = "ADMIN"
ACCOUNTANT = "ACCOUNTANT"
CONTACT = "CONTACT"

ROLES = (ADMIN, ACCOUNTANT, CONTACT)

_ADMIN_PERMISSIONS = (
    # Dashboard - full KPIs overview
    "dashboard:view_full",
    # Contacts - Full CRUD + Archive
    "contacts:create",
    "contacts:edit",
    "contacts:delete",
    "contacts:archive",
    "contacts:view_all",
    # Products - Full CRUD
    "products:create",
    "products:edit",
    "products:delete",
    "products:archive",
    "products:view",
    # Taxes
    "taxes:create",
    "taxes:edit",
    "taxes:delete",
    "taxes:view",
    # Chart of Accounts - Full control
    "coa:create",
    "coa:edit",
    "coa:delete",
    "coa:view",
    "coa:full_control",
    # Transactions - Full control
    "transactions:purchase_orders:create",
    "transactions:purchase_orders:edit",
    "transactions:purchase_orders:delete",
    "transactions:purchase_orders:view",
    "transactions:vendor_bills:create",
    "transactions:vendor_bills:edit",
    "transactions:vendor_bills:delete",
    "transactions:vendor_bills:view",
    "transactions:sales_orders:create",
    "transactions:sales_orders:edit",
    "transactions:sales_orders:delete",
    "transactions:sales_orders:view",
    "transactions:customer_invoices:create",
    "transactions:customer_invoices:edit",
    "transactions:customer_invoices:delete",
    "transactions:customer_invoices:view",
    "transactions:payments:create",
    "transactions:payments:edit",
    "transactions:payments:delete",
    "transactions:payments:view",
    "transactions:payments:full_control",
    # Reports
    "reports:profit_loss",
    "reports:stock_report",
    "reports:partner_ledger",
    "reports:view_all",
    # User Management
    "users:create",
    "users:edit",
    "users:delete",
    "users:view",
    "users:assign_roles",
    # Settings
    "settings:system_config",
    "settings:archive_data",
    "settings:general",
    "settings:view",
    # Profile
    "profile:edit_own",
    "profile:view_own",
)

_ACCOUNTANT_PERMISSIONS = (
    "dashboard:view_full",
    # Contacts - Create/Edit (no delete/archive)
    "contacts:create",
    "contacts:edit",
    "contacts:view_all",
    # Products - Create/Edit (no delete/archive)
    "products:create",
    "products:edit",
    "products:view",
    "taxes:create",
    "taxes:edit",
    "taxes:view",
    # Chart of Accounts - Add and edit accounts
    "coa:create",
    "coa:edit",
    "coa:view",
    # Transactions - operational access, no deletes
    "transactions:purchase_orders:create",
    "transactions:purchase_orders:edit",
    "transactions:purchase_orders:view",
    "transactions:vendor_bills:create",
    "transactions:vendor_bills:edit",
    "transactions:vendor_bills:view",
    "transactions:sales_orders:create",
    "transactions:sales_orders:edit",
    "transactions:sales_orders:view",
    "transactions:customer_invoices:create",
    "transactions:customer_invoices:edit",
    "transactions:customer_invoices:view",
    "transactions:payments:create",
    "transactions:payments:edit",
    "transactions:payments:view",
    "reports:profit_loss",
    "reports:stock_report",
    "reports:partner_ledger",
    "reports:view_all",
    "profile:edit_own",
    "profile:view_own",
)

_CONTACT_PERMISSIONS = (
    # Limited dashboard (own invoices/bills status)
    "dashboard:view_limited",
    # Own data only
    "contacts:view_own",
    "transactions:vendor_bills:view_own",
    "transactions:customer_invoices:view_own",
    "transactions:payments:view_own",
    "profile:edit_own",
    "profile:view_own",
)

ROLE_PERMISSIONS: Mapping[str, FrozenSet[str]] = MappingProxyType({
    ADMIN: frozenset(_ADMIN_PERMISSIONS),
    ACCOUNTANT: frozenset(_ACCOUNTANT_PERMISSIONS),
    CONTACT: frozenset(_CONTACT_PERMISSIONS),
})


@dataclass(frozen=True)
class NavigationItem:
    title: str
    href: str
    permissions: Tuple[str, ...]
    children: Tuple["NavigationItem", ...] = ()


NAVIGATION_CONFIG: Tuple[NavigationItem, ...] = (
    NavigationItem("Dashboard", "/dashboard", ("dashboard:view_full", "dashboard:view_limited")),
    NavigationItem("Contacts", "/dashboard/contacts", ("contacts:view_all", "contacts:view_own")),
    NavigationItem("Products", "/dashboard/products", ("products:view",)),
    NavigationItem("Taxes", "/dashboard/taxes", ("taxes:view",)),
    NavigationItem("Chart of Accounts", "/dashboard/settings/chart-of-accounts", ("coa:view",)),
    NavigationItem(
        "Transactions",
        "/dashboard/transactions",
        (
            "transactions:purchase_orders:view",
            "transactions:vendor_bills:view",
            "transactions:vendor_bills:view_own",
            "transactions:sales_orders:view",
            "transactions:customer_invoices:view",
            "transactions:customer_invoices:view_own",
            "transactions:payments:view",
            "transactions:payments:view_own",
        ),
        children=(
            NavigationItem("Purchase Orders", "/dashboard/transactions/purchase-orders",
                           ("transactions:purchase_orders:view",)),
            NavigationItem("Vendor Bills", "/dashboard/transactions/vendor-bills",
                           ("transactions:vendor_bills:view", "transactions:vendor_bills:view_own")),
            NavigationItem("Sales Orders", "/dashboard/transactions/sales-orders",
                           ("transactions:sales_orders:view",)),
            NavigationItem("Customer Invoices", "/dashboard/transactions/customer-invoices",
                           ("transactions:customer_invoices:view", "transactions:customer_invoices:view_own")),
            NavigationItem("Payments", "/dashboard/transactions/payments",
                           ("transactions:payments:view", "transactions:payments:view_own")),
        ),
    ),
    NavigationItem(
        "Reports",
        "/dashboard/reports",
        ("reports:view_all",),
        children=(
            NavigationItem("Profit & Loss", "/dashboard/reports/profit-loss", ("reports:profit_loss",)),
            NavigationItem("Stock Report", "/dashboard/reports/stock-report", ("reports:stock_report",)),
            NavigationItem("Partner Ledger", "/dashboard/reports/partner-ledger", ("reports:partner_ledger",)),
        ),
    ),
    NavigationItem("Settings", "/dashboard/settings", ("settings:view", "users:view")),
)


class PermissionMatrix:
    """Read-only lookup answering "does role R hold permission P"."""

    def __init__(
        self,
        role_permissions: Mapping[str, FrozenSet[str]] = ROLE_PERMISSIONS,
        navigation: Tuple[NavigationItem, ...] = NAVIGATION_CONFIG,
        allow_undeclared_routes: bool = False,
    ):
        self._role_permissions = role_permissions
        self._navigation = navigation
        self.allow_undeclared_routes = allow_undeclared_routes

    def has_permission(self, role: str, permission: str) -> bool:
        return permission in self._role_permissions.get(role, frozenset())

    def has_any_permission(self, role: str, permissions: Iterable[str]) -> bool:
        return any(self.has_permission(role, p) for p in permissions)

    def has_all_permissions(self, role: str, permissions: Iterable[str]) -> bool:
        return all(self.has_permission(role, p) for p in permissions)

    def get_user_permissions(self, role: str) -> FrozenSet[str]:
        return self._role_permissions.get(role, frozenset())

    def find_route(self, route: str) -> Optional[NavigationItem]:
        def _find(items):
            for item in items:
                if item.href == route:
                    return item
                found = _find(item.children)
                if found:
                    return found
            return None

        return _find(self._navigation)

    def can_access_route(self, role: str, route: str) -> bool:
        nav_item = self.find_route(route)
        if nav_item is None:
            # Routes missing from the navigation table follow the configured policy
            return self.allow_undeclared_routes
        return self.has_any_permission(role, nav_item.permissions)


@lru_cache(maxsize=1)
def get_permission_matrix() -> PermissionMatrix:
    """FastAPI dependency returning the process-wide permission matrix.

    ``RBAC_UNDECLARED_ROUTES=allow`` makes routes absent from the navigation
    table accessible to every role; the default denies them.
    """
    policy = os.getenv("RBAC_UNDECLARED_ROUTES", "deny").strip().lower()
    return PermissionMatrix(allow_undeclared_routes=(policy == "allow"))
