from typing import Optional

from ..schemas.access import (
    DEFAULT_TENANT,
    Permission,
    PermissionCategory,
    PermissionInstance,
    PermissionLevel,
    Role,
)

POS = PermissionCategory.POS
INVENTORY = PermissionCategory.INVENTORY
SUPPLIERS = PermissionCategory.SUPPLIERS
EMPLOYEES = PermissionCategory.EMPLOYEES
REPORTS = PermissionCategory.REPORTS
SETTINGS = PermissionCategory.SETTINGS
PROMOTIONS = PermissionCategory.PROMOTIONS
LOYALTY = PermissionCategory.LOYALTY

READ = PermissionLevel.READ
WRITE = PermissionLevel.WRITE
ADMIN = PermissionLevel.ADMIN

# (id, name, description, category, level)
_DEFINITIONS: tuple[tuple[str, str, str, PermissionCategory, PermissionLevel], ...] = (
    # Point of sale
    ("pos.access", "POS access", "Use the point-of-sale module", POS, READ),
    ("pos.refunds", "Refunds", "Allow refunds at the till", POS, WRITE),
    ("pos.discounts", "Discounts", "Apply discounts to sales", POS, WRITE),
    ("pos.void", "Voids", "Cancel transactions", POS, ADMIN),
    ("pos", "POS screen", "Open the point-of-sale screen", POS, READ),
    ("process_sale", "Process sale", "Ring up sales", POS, WRITE),
    ("apply_discount", "Apply discount", "Apply discounts on a sale", POS, WRITE),
    ("process_refund", "Process refund", "Handle customer refunds", POS, WRITE),
    ("void_transaction", "Void transaction", "Cancel existing transactions", POS, ADMIN),
    ("sales_history", "Sales history", "Browse past sales", POS, READ),
    # Inventory
    ("inventory.view", "View inventory", "Browse products and stock levels", INVENTORY, READ),
    ("inventory.add", "Add products", "Create new products", INVENTORY, WRITE),
    ("inventory.edit", "Edit products", "Change product details", INVENTORY, WRITE),
    ("inventory.delete", "Delete products", "Remove products from the inventory", INVENTORY, ADMIN),
    ("inventory.adjust", "Adjust stock", "Change stock quantities", INVENTORY, WRITE),
    ("inventory_management", "Stock management", "Open the stock management screen", INVENTORY, ADMIN),
    ("add_product", "Add product", "Add new products", INVENTORY, WRITE),
    ("edit_product", "Edit product", "Edit existing products", INVENTORY, WRITE),
    ("delete_product", "Delete product", "Delete products", INVENTORY, ADMIN),
    ("adjust_stock", "Adjust stock levels", "Adjust stock levels", INVENTORY, WRITE),
    # Suppliers
    ("suppliers.view", "View suppliers", "Browse the supplier list", SUPPLIERS, READ),
    ("suppliers.add", "Add suppliers", "Create new suppliers", SUPPLIERS, WRITE),
    ("suppliers.edit", "Edit suppliers", "Change supplier details", SUPPLIERS, WRITE),
    ("suppliers.delete", "Delete suppliers", "Remove suppliers", SUPPLIERS, ADMIN),
    ("suppliers.orders", "Supplier orders", "Manage supplier orders", SUPPLIERS, WRITE),
    ("supplier_orders", "Supplier orders screen", "Open the supplier orders screen", SUPPLIERS, WRITE),
    # Employees
    ("employees.view", "View employees", "Browse the staff list", EMPLOYEES, READ),
    ("employees.add", "Add employees", "Create new employees", EMPLOYEES, ADMIN),
    ("employees.edit", "Edit employees", "Change employee details", EMPLOYEES, ADMIN),
    ("employees.delete", "Delete employees", "Remove employees", EMPLOYEES, ADMIN),
    ("employees.shifts", "Shifts", "Manage working hours", EMPLOYEES, WRITE),
    (
        "employees.change_own_password",
        "Change own password",
        "Let employees change their own password",
        EMPLOYEES,
        READ,
    ),
    ("employee_management", "Employee management", "Open the employee management screen", EMPLOYEES, ADMIN),
    ("add_employee", "Add employee", "Add new employees", EMPLOYEES, WRITE),
    ("edit_employee", "Edit employee", "Edit existing employees", EMPLOYEES, WRITE),
    ("delete_employee", "Delete employee", "Delete employees", EMPLOYEES, ADMIN),
    ("manage_shifts", "Manage shifts", "Plan employee shifts", EMPLOYEES, ADMIN),
    # Reports
    ("reports.sales", "Sales reports", "Read sales reports", REPORTS, READ),
    ("reports.inventory", "Inventory reports", "Read inventory reports", REPORTS, READ),
    ("reports.employees", "Employee reports", "Read employee reports", REPORTS, READ),
    ("reports.financial", "Financial reports", "Read financial reports", REPORTS, ADMIN),
    ("reports.export", "Export reports", "Export reports to files", REPORTS, WRITE),
    ("reports", "Reports screen", "Open the reports screen", REPORTS, ADMIN),
    ("view_sales_reports", "View sales reports", "View sales reports", REPORTS, READ),
    ("view_inventory_reports", "View inventory reports", "View inventory reports", REPORTS, READ),
    ("view_employee_reports", "View employee reports", "View employee reports", REPORTS, READ),
    ("export_reports", "Export reports data", "Export report data", REPORTS, WRITE),
    # Settings
    ("settings.view", "View settings", "Read system settings", SETTINGS, READ),
    ("settings.edit", "Edit settings", "Change system settings", SETTINGS, ADMIN),
    ("settings.taxes", "Taxes", "Configure VAT rates", SETTINGS, ADMIN),
    ("settings.payment", "Payment methods", "Configure payment methods", SETTINGS, ADMIN),
    ("settings.backup", "Backups", "Manage system backups", SETTINGS, ADMIN),
    ("settings", "Settings screen", "Open the settings screen", SETTINGS, READ),
    ("manage_settings", "Manage settings", "Modify application settings", SETTINGS, ADMIN),
    ("manage_taxes", "Manage taxes", "Modify tax settings", SETTINGS, ADMIN),
    # Promotions
    ("promotions.view", "View promotions", "Browse promotions", PROMOTIONS, READ),
    ("promotions.add", "Add promotions", "Create promotions", PROMOTIONS, WRITE),
    ("promotions.edit", "Edit promotions", "Change promotions", PROMOTIONS, WRITE),
    ("promotions.delete", "Delete promotions", "Remove promotions", PROMOTIONS, ADMIN),
    ("promotions", "Promotions screen", "Open the promotions screen", PROMOTIONS, WRITE),
    # Loyalty
    ("loyalty.view", "View loyalty cards", "Browse loyalty cards", LOYALTY, READ),
    ("loyalty.create_card", "Create loyalty cards", "Issue new loyalty cards", LOYALTY, WRITE),
    ("loyalty.edit_card", "Edit loyalty cards", "Change loyalty card details", LOYALTY, WRITE),
    ("loyalty.delete_card", "Delete loyalty cards", "Remove loyalty cards", LOYALTY, ADMIN),
    ("loyalty.settings", "Loyalty settings", "Configure the loyalty programme", LOYALTY, ADMIN),
    ("loyalty.export", "Export loyalty data", "Export loyalty data", LOYALTY, ADMIN),
    ("manage_loyalty", "Loyalty programme", "Open the loyalty programme screen", LOYALTY, WRITE),
)

PERMISSION_CATALOG: tuple[Permission, ...] = tuple(
    Permission(id=pid, name=name, description=description, category=category, level=level)
    for pid, name, description, category, level in _DEFINITIONS
)

PERMISSIONS_BY_ID: dict[str, Permission] = {perm.id: perm for perm in PERMISSION_CATALOG}

# Admin-level permissions managers keep anyway.
MANAGER_ADMIN_OVERRIDES: frozenset[str] = frozenset(
    {
        "employee_management",
        "inventory_management",
        "reports",
        "manage_shifts",
    }
)

CASHIER_PERMISSIONS: frozenset[str] = frozenset(
    {
        "pos.access",
        "pos.refunds",
        "pos.discounts",
        "pos",
        "process_sale",
        "apply_discount",
        "process_refund",
        "sales_history",
        "inventory.view",
        "loyalty.create_card",
    }
)

# View key -> permission required to open it. "pos" is open to every active employee.
VIEW_PERMISSIONS: dict[str, str] = {
    "pos": "pos",
    "history": "sales_history",
    "orders": "supplier_orders",
    "promotions": "promotions",
    "employees": "employee_management",
    "stock": "inventory_management",
    "reports": "reports",
    "settings": "settings",
    "loyalty": "manage_loyalty",
}

ACTION_PERMISSIONS: dict[str, str] = {
    # POS
    "process_sale": "process_sale",
    "apply_discount": "apply_discount",
    "process_refund": "process_refund",
    "void_transaction": "void_transaction",
    # Inventory
    "add_product": "add_product",
    "edit_product": "edit_product",
    "delete_product": "delete_product",
    "adjust_stock": "adjust_stock",
    # Employees
    "add_employee": "add_employee",
    "edit_employee": "edit_employee",
    "delete_employee": "delete_employee",
    "manage_shifts": "manage_shifts",
    # Reports
    "view_sales_reports": "view_sales_reports",
    "view_inventory_reports": "view_inventory_reports",
    "view_employee_reports": "view_employee_reports",
    "export_reports": "export_reports",
    # Settings
    "manage_settings": "manage_settings",
    "manage_loyalty": "manage_loyalty",
    "manage_taxes": "manage_taxes",
}


def list_all_permissions() -> list[Permission]:
    return list(PERMISSION_CATALOG)


def get_permission(permission_id: str) -> Optional[Permission]:
    return PERMISSIONS_BY_ID.get(permission_id)


def _preset_ids(role: str) -> list[str]:
    if role == Role.ADMIN:
        return [perm.id for perm in PERMISSION_CATALOG]
    if role == Role.MANAGER:
        return [
            perm.id
            for perm in PERMISSION_CATALOG
            if perm.level != PermissionLevel.ADMIN or perm.id in MANAGER_ADMIN_OVERRIDES
        ]
    return [perm.id for perm in PERMISSION_CATALOG if perm.id in CASHIER_PERMISSIONS]


def resolve_preset(role: str, tenant_id: Optional[str]) -> list[PermissionInstance]:
    """Default permissions for a new employee of ``role`` in ``tenant_id``.

    Unknown roles get the cashier preset. A missing tenant yields instances
    in the universal ``"default"`` scope instead of failing.
    """
    scope = tenant_id or DEFAULT_TENANT
    return [PERMISSIONS_BY_ID[pid].stamp(scope) for pid in _preset_ids(role)]
