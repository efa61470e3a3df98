"""Employee administration inside one business.

Permissions are seeded from the role preset on creation and replaced on an
explicit role change. Ordinary edits never recompute them, even when the
role field changes, so hand-tuned grants survive.
"""

import logging
from typing import Any, Awaitable, Mapping, Optional, TypeVar

from pydantic import ValidationError

from ..core.config import get_settings
from ..core.normalization import employee_from_record, normalize, to_stored_ids
from ..core.permissions import resolve_preset
from ..schemas.access import Employee, Role
from .backends import EmployeeDocument, EmployeeStore, call_remote

logger = logging.getLogger(__name__)

T = TypeVar("T")

EDITABLE_FIELDS = (
    "email",
    "first_name",
    "last_name",
    "role",
    "active",
    "is_main_admin",
    "pin",
    "provider_password",
)

# Stored columns that cannot hold null.
REQUIRED_FIELDS = ("role", "active", "is_main_admin")


async def _remote(awaitable: Awaitable[T]) -> T:
    return await call_remote(awaitable, get_settings().remote_call_timeout_seconds)


async def _load_in_tenant(store: EmployeeStore, tenant_id: str, employee_id: str) -> Optional[EmployeeDocument]:
    record = await _remote(store.get_employee_by_id(employee_id))
    if record is None or record.get("tenant_id") != tenant_id:
        return None
    return record


async def create_employee(store: EmployeeStore, data: Mapping[str, Any], tenant_id: str) -> Employee:
    """Persist a new employee of ``tenant_id``.

    Any business id in ``data`` is ignored. An explicit permission list wins
    over the role preset.
    """
    role = data.get("role") or Role.CASHIER.value
    requested = data.get("permissions")
    permissions = normalize(requested, tenant_id) if requested else resolve_preset(role, tenant_id)

    record: EmployeeDocument = {key: data[key] for key in EDITABLE_FIELDS if key in data}
    record.update(
        tenant_id=tenant_id,
        role=role,
        active=data.get("active", True),
        permissions=to_stored_ids(permissions),
    )
    stored = await _remote(store.put_employee(record))
    logger.info("Created %s %s in business %s with %d permissions", role, stored["id"], tenant_id, len(permissions))
    return employee_from_record(stored)


async def get_employee(store: EmployeeStore, tenant_id: str, employee_id: str) -> Optional[Employee]:
    record = await _load_in_tenant(store, tenant_id, employee_id)
    return employee_from_record(record) if record else None


async def list_employees(store: EmployeeStore, tenant_id: str, active_only: bool = False) -> list[Employee]:
    employees = []
    for record in await _remote(store.list_employees(tenant_id)):
        if active_only and not record.get("active", True):
            continue
        try:
            employees.append(employee_from_record(record))
        except ValidationError:
            logger.error("Skipping invalid employee document %s", record.get("id"))
    return employees


async def update_employee(
    store: EmployeeStore, tenant_id: str, employee_id: str, changes: Mapping[str, Any]
) -> Optional[Employee]:
    record = await _load_in_tenant(store, tenant_id, employee_id)
    if record is None:
        return None
    for key in EDITABLE_FIELDS:
        if key not in changes:
            continue
        if changes[key] is None and key in REQUIRED_FIELDS:
            logger.warning("Ignoring null %s for employee %s", key, employee_id)
            continue
        record[key] = changes[key]
    if changes.get("permissions") is not None:
        record["permissions"] = to_stored_ids(normalize(changes["permissions"], tenant_id))
    return employee_from_record(await _remote(store.put_employee(record)))


async def change_role(store: EmployeeStore, tenant_id: str, employee_id: str, role: str) -> Optional[Employee]:
    record = await _load_in_tenant(store, tenant_id, employee_id)
    if record is None:
        return None
    record["role"] = role
    record["permissions"] = to_stored_ids(resolve_preset(role, tenant_id))
    logger.info("Employee %s is now %s, permissions reset to the preset", employee_id, role)
    return employee_from_record(await _remote(store.put_employee(record)))


async def rewrite_stored_permissions(store: EmployeeStore, tenant_id: str) -> int:
    """Rewrite every stored permission list of a business as canonical ids.

    Returns how many documents changed.
    """
    changed = 0
    for record in await _remote(store.list_employees(tenant_id)):
        canonical = to_stored_ids(normalize(record.get("permissions"), tenant_id))
        if record.get("permissions") != canonical:
            record["permissions"] = canonical
            await _remote(store.put_employee(record))
            changed += 1
    return changed
