"""Canonicalize stored employee permissions.

Employee documents carry permissions in several shapes: bare identifiers
(what the back office persists), full permission records (older documents,
sometimes copied between businesses) and occasionally garbage. This module
is the only place that looks at those shapes; everything downstream works on
:class:`PermissionInstance` lists scoped to one business.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import BaseModel, ValidationError

from ..schemas.access import DEFAULT_TENANT, Employee, PermissionCategory, PermissionInstance, PermissionLevel
from .permissions import get_permission

logger = logging.getLogger(__name__)

FALLBACK_DESCRIPTION = "Permission"


@dataclass(frozen=True)
class PermissionRef:
    """A bare permission identifier."""

    permission_id: str


@dataclass(frozen=True)
class PermissionRecord:
    """A stored permission object carrying at least an ``id``."""

    permission_id: str
    data: Mapping[str, Any]


@dataclass(frozen=True)
class MalformedPermission:
    raw: Any


StoredPermission = Union[PermissionRef, PermissionRecord, MalformedPermission]


def classify(raw: Any) -> StoredPermission:
    if isinstance(raw, str):
        return PermissionRef(raw) if raw.strip() else MalformedPermission(raw)
    if isinstance(raw, BaseModel):
        raw = raw.model_dump()
    if isinstance(raw, Mapping):
        permission_id = raw.get("id")
        if isinstance(permission_id, str) and permission_id.strip():
            return PermissionRecord(permission_id, raw)
    return MalformedPermission(raw)


def _from_catalog(permission_id: str, tenant_id: str) -> PermissionInstance:
    known = get_permission(permission_id)
    if known is not None:
        return known.stamp(tenant_id)
    logger.info("Unknown permission id %r, synthesizing a read-only placeholder", permission_id)
    return PermissionInstance(
        id=permission_id,
        name=permission_id,
        description=FALLBACK_DESCRIPTION,
        category=PermissionCategory.ADMIN,
        level=PermissionLevel.READ,
        tenant_id=tenant_id,
    )


def _from_record(record: PermissionRecord, tenant_id: str) -> PermissionInstance:
    base = _from_catalog(record.permission_id, tenant_id)
    fields = {key: record.data[key] for key in ("name", "description", "category", "level") if record.data.get(key)}
    try:
        # The stored tenant stamp is ignored: the live employee's business wins.
        return PermissionInstance(**{**base.model_dump(), **fields, "tenant_id": tenant_id})
    except ValidationError:
        logger.warning("Stored permission %r has invalid fields, using catalog values", record.permission_id)
        return base


def _to_instance(stored: StoredPermission, tenant_id: str) -> Optional[PermissionInstance]:
    if isinstance(stored, PermissionRef):
        return _from_catalog(stored.permission_id, tenant_id)
    if isinstance(stored, PermissionRecord):
        return _from_record(stored, tenant_id)
    logger.warning("Dropping malformed stored permission of type %s", type(stored.raw).__name__)
    return None


def normalize(stored: Any, tenant_id: Optional[str]) -> list[PermissionInstance]:
    """Turn a stored permission list into instances scoped to ``tenant_id``.

    Never raises. Malformed entries are dropped, unknown identifiers become
    read-only placeholders, and duplicate ids collapse with the last one
    winning.
    """
    scope = tenant_id or DEFAULT_TENANT
    if stored is None:
        return []
    if isinstance(stored, (str, Mapping)) or not isinstance(stored, Iterable):
        logger.warning("Stored permissions are not a list (%s), ignoring them", type(stored).__name__)
        return []

    by_id: dict[str, PermissionInstance] = {}
    for raw in stored:
        instance = _to_instance(classify(raw), scope)
        if instance is not None:
            by_id[instance.id] = instance
    return list(by_id.values())


def to_stored_ids(permissions: Iterable[PermissionInstance]) -> list[str]:
    """Persisted form of a permission list: identifiers only."""
    return [perm.id for perm in permissions]


def ensure_tenant_scope(employee: Employee) -> Employee:
    """Stamp every instance with the employee's own business.

    Instances scoped to another business are logged as errors before being
    re-stamped.
    """
    scoped = []
    for perm in employee.permissions:
        if not perm.applies_to(employee.tenant_id):
            logger.error(
                "Permission %r of employee %s was scoped to another business, re-stamping",
                perm.id,
                employee.id,
            )
        if perm.tenant_id != employee.tenant_id:
            perm = perm.stamp(employee.tenant_id)
        scoped.append(perm)
    return employee.model_copy(update={"permissions": scoped})


def employee_from_record(record: Mapping[str, Any]) -> Employee:
    """Build an :class:`Employee` from a stored document.

    Permissions are normalized against the document's own business. Raises
    ``pydantic.ValidationError`` when the document itself is unusable.
    """
    data = {key: value for key, value in record.items() if key != "permissions"}
    employee = Employee.model_validate(data)
    employee.permissions = normalize(record.get("permissions"), employee.tenant_id)
    return employee
