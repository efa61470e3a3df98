import logging

from pos_access.core.authorization import (
    can_access_view,
    can_perform_action,
    can_view_module_item,
    evaluate_access,
    has_permission,
    is_admin,
    is_manager,
)
from pos_access.core.normalization import normalize
from pos_access.core.permissions import ACTION_PERMISSIONS, VIEW_PERMISSIONS, get_permission, resolve_preset
from pos_access.schemas import Employee


def make_employee(role="cashier", permissions=(), tenant_id="biz1", active=True):
    return Employee(
        id=f"{role}-1",
        tenant_id=tenant_id,
        role=role,
        active=active,
        permissions=normalize(list(permissions), tenant_id),
    )


def with_preset(role, tenant_id="biz1"):
    return Employee(id=f"{role}-1", tenant_id=tenant_id, role=role, permissions=resolve_preset(role, tenant_id))


def test_admin_has_every_permission_without_grants():
    admin = make_employee("admin")
    assert admin.permissions == []
    assert has_permission(admin, "anything")
    assert can_access_view(admin, "settings")
    assert can_perform_action(admin, "manage_taxes")
    assert is_admin(admin)
    assert not is_manager(admin)


def test_inactive_or_missing_employee_is_denied():
    inactive_admin = make_employee("admin", active=False)
    inactive_cashier = make_employee("cashier", ["pos", "process_sale"], active=False)

    for employee in (None, inactive_admin, inactive_cashier):
        assert not has_permission(employee, "pos")
        assert not can_access_view(employee, "pos")
        assert not can_perform_action(employee, "process_sale")
        assert not can_view_module_item(employee, "pos.access", "pos.refunds")


def test_pos_view_is_open_to_every_active_employee():
    cashier = make_employee("cashier")
    assert can_access_view(cashier, "pos")
    assert not can_access_view(cashier, "settings")


def test_settings_view_needs_tenant_scoped_grant():
    assert can_access_view(make_employee("cashier", ["settings"]), "settings")

    foreign = Employee(id="c1", tenant_id="biz1", permissions=[get_permission("settings").stamp("biz2")])
    assert not can_access_view(foreign, "settings")

    universal = Employee(id="c1", tenant_id="biz1", permissions=[get_permission("settings").stamp(None)])
    assert can_access_view(universal, "settings")


def test_manager_preset_decisions():
    manager = with_preset("manager")
    assert is_manager(manager)
    assert can_access_view(manager, "employees")
    assert can_access_view(manager, "reports")
    assert can_perform_action(manager, "add_employee")
    assert can_perform_action(manager, "manage_shifts")
    assert not can_perform_action(manager, "manage_settings")
    assert not can_perform_action(manager, "void_transaction")


def test_cashier_preset_decisions():
    cashier = with_preset("cashier")
    assert can_perform_action(cashier, "process_sale")
    assert can_perform_action(cashier, "process_refund")
    assert can_access_view(cashier, "history")
    assert not can_access_view(cashier, "stock")
    assert not can_access_view(cashier, "loyalty")
    assert not can_perform_action(cashier, "manage_loyalty")
    assert not can_perform_action(cashier, "void_transaction")
    assert not can_access_view(cashier, "reports")
    assert not can_access_view(cashier, "employees")


def test_unmapped_keys_are_denied(caplog):
    manager = with_preset("manager")
    with caplog.at_level(logging.WARNING, logger="pos_access"):
        assert not can_access_view(manager, "dashboard")
        assert not can_perform_action(manager, "launch_rockets")

    assert "dashboard" in caplog.text
    assert "launch_rockets" in caplog.text


def test_module_item_needs_both_permissions():
    assert can_view_module_item(make_employee("admin"), "reports", "reports.financial")
    assert can_view_module_item(make_employee("manager", ["reports", "reports.sales"]), "reports", "reports.sales")
    assert not can_view_module_item(make_employee("manager", ["reports"]), "reports", "reports.financial")
    assert not can_view_module_item(make_employee("manager", ["reports.sales"]), "reports", "reports.sales")


def test_evaluate_access_lists_every_key():
    access = evaluate_access(with_preset("cashier"))

    assert set(access["views"]) == set(VIEW_PERMISSIONS)
    assert set(access["actions"]) == set(ACTION_PERMISSIONS)
    assert access["views"]["pos"] is True
    assert access["views"]["settings"] is False
    assert access["actions"]["process_sale"] is True
