import asyncio

from pos_access.core.permissions import CASHIER_PERMISSIONS, resolve_preset
from pos_access.services import employees as employee_service


def run(coro):
    return asyncio.run(coro)


def test_create_uses_role_preset_and_forces_tenant(store):
    employee = run(
        employee_service.create_employee(
            store, {"first_name": "Ana", "role": "manager", "pin": "4321", "tenant_id": "intruder"}, "biz1"
        )
    )

    stored = store.records[employee.id]
    assert stored["tenant_id"] == "biz1"
    assert stored["active"] is True
    assert stored["permissions"] == [perm.id for perm in resolve_preset("manager", "biz1")]
    assert all(isinstance(entry, str) for entry in stored["permissions"])
    assert employee.tenant_id == "biz1"
    assert all(perm.tenant_id == "biz1" for perm in employee.permissions)


def test_create_defaults_to_cashier(store):
    employee = run(employee_service.create_employee(store, {"pin": "1111"}, "biz1"))
    assert employee.role == "cashier"
    assert {perm.id for perm in employee.permissions} == CASHIER_PERMISSIONS


def test_create_with_explicit_permissions(store):
    employee = run(
        employee_service.create_employee(
            store, {"role": "cashier", "permissions": ["reports", {"id": "settings", "tenantId": "biz2"}, 5]}, "biz1"
        )
    )
    assert store.records[employee.id]["permissions"] == ["reports", "settings"]


def test_get_and_list_are_tenant_scoped(store):
    mine = run(employee_service.create_employee(store, {"pin": "1111"}, "biz1"))
    theirs = run(employee_service.create_employee(store, {"pin": "2222", "active": False}, "biz2"))

    assert run(employee_service.get_employee(store, "biz1", mine.id)).id == mine.id
    assert run(employee_service.get_employee(store, "biz1", theirs.id)) is None
    assert [e.id for e in run(employee_service.list_employees(store, "biz1"))] == [mine.id]
    assert run(employee_service.list_employees(store, "biz2", active_only=True)) == []


def test_list_skips_unusable_documents(store):
    run(employee_service.create_employee(store, {"pin": "1111"}, "biz1"))
    store.records["broken"] = {"id": "broken", "tenant_id": "biz1", "active": "maybe?"}

    assert len(run(employee_service.list_employees(store, "biz1"))) == 1


def test_update_never_recomputes_permissions(store):
    employee = run(employee_service.create_employee(store, {"role": "cashier", "permissions": ["reports"]}, "biz1"))

    updated = run(employee_service.update_employee(store, "biz1", employee.id, {"role": "manager", "last_name": "B"}))

    assert updated.role == "manager"
    assert updated.last_name == "B"
    assert [perm.id for perm in updated.permissions] == ["reports"]


def test_update_with_explicit_permissions(store):
    employee = run(employee_service.create_employee(store, {"pin": "1111"}, "biz1"))

    updated = run(employee_service.update_employee(store, "biz1", employee.id, {"permissions": ["settings"]}))

    assert [perm.id for perm in updated.permissions] == ["settings"]
    assert store.records[employee.id]["permissions"] == ["settings"]


def test_update_other_tenant_is_not_found(store):
    employee = run(employee_service.create_employee(store, {"pin": "1111"}, "biz2"))
    assert run(employee_service.update_employee(store, "biz1", employee.id, {"active": False})) is None
    assert store.records[employee.id]["active"] is True


def test_change_role_resets_to_preset(store):
    employee = run(employee_service.create_employee(store, {"permissions": ["reports"]}, "biz1"))

    promoted = run(employee_service.change_role(store, "biz1", employee.id, "manager"))

    assert promoted.role == "manager"
    assert [perm.id for perm in promoted.permissions] == [perm.id for perm in resolve_preset("manager", "biz1")]
    assert run(employee_service.change_role(store, "biz2", employee.id, "admin")) is None


def test_rewrite_stored_permissions(store):
    run(store.put_employee({"id": "old", "tenant_id": "biz1", "permissions": [{"id": "pos", "tenantId": "default"}, 3]}))
    run(store.put_employee({"id": "clean", "tenant_id": "biz1", "permissions": ["pos"]}))

    assert run(employee_service.rewrite_stored_permissions(store, "biz1")) == 1
    assert store.records["old"]["permissions"] == ["pos"]
    assert run(employee_service.rewrite_stored_permissions(store, "biz1")) == 0


def test_update_ignores_null_for_required_fields(store):
    employee = run(employee_service.create_employee(store, {"first_name": "Ana", "role": "manager"}, "biz1"))

    updated = run(
        employee_service.update_employee(
            store, "biz1", employee.id, {"role": None, "active": None, "is_main_admin": None, "first_name": None}
        )
    )

    assert updated.role == "manager"
    assert updated.active is True
    assert updated.first_name is None
    assert store.records[employee.id]["role"] == "manager"
    assert store.records[employee.id]["active"] is True
