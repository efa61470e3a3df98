from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...core.authorization import is_admin
from ...db import get_db
from ...schemas import Employee, EmployeeCreate, EmployeeSummary, EmployeeUpdate, Role, RoleChange
from ...services import employees as employee_service
from ...services.audit import record_audit
from ...services.backends import RemoteServiceError, SqlEmployeeStore
from ..deps import get_current_employee, get_employee_store, require_action, require_view, service_unavailable

router = APIRouter(prefix="/employees", tags=["employees"])

SECRET_FIELDS = ("pin", "provider_password")


def _audit_values(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if key not in SECRET_FIELDS}


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")


def _forbidden() -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")


def _check_admin_grant(current_employee: Employee, role: Any) -> None:
    if role == Role.ADMIN and not is_admin(current_employee):
        raise _forbidden()


def _check_admin_target(current_employee: Employee, target: Employee) -> None:
    # Only admins may touch an admin account.
    if (is_admin(target) or target.is_main_admin) and not is_admin(current_employee):
        raise _forbidden()


@router.get("/", response_model=List[Employee])
async def list_employees(
    store: SqlEmployeeStore = Depends(get_employee_store),
    current_employee: Employee = Depends(require_view("employees")),
):
    try:
        return await employee_service.list_employees(store, current_employee.tenant_id)
    except RemoteServiceError as exc:
        raise service_unavailable() from exc


@router.get("/active", response_model=List[EmployeeSummary])
async def list_active_employees(
    store: SqlEmployeeStore = Depends(get_employee_store),
    current_employee: Employee = Depends(get_current_employee),
):
    try:
        return await employee_service.list_employees(store, current_employee.tenant_id, active_only=True)
    except RemoteServiceError as exc:
        raise service_unavailable() from exc


@router.post("/", response_model=Employee, status_code=status.HTTP_201_CREATED)
async def create_employee(
    employee_in: EmployeeCreate,
    store: SqlEmployeeStore = Depends(get_employee_store),
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(require_action("add_employee")),
) -> Employee:
    _check_admin_grant(current_employee, employee_in.role)
    data = employee_in.model_dump(mode="json", exclude_none=True)
    try:
        employee = await employee_service.create_employee(store, data, current_employee.tenant_id)
    except RemoteServiceError as exc:
        raise service_unavailable() from exc

    record_audit(
        db,
        tenant_id=current_employee.tenant_id,
        actor_id=current_employee.id,
        action="CREATE",
        resource_type="employees",
        resource_id=employee.id,
        new_values=_audit_values(data),
    )
    return employee


@router.get("/{employee_id}", response_model=Employee)
async def read_employee(
    employee_id: str,
    store: SqlEmployeeStore = Depends(get_employee_store),
    current_employee: Employee = Depends(require_view("employees")),
) -> Employee:
    try:
        employee = await employee_service.get_employee(store, current_employee.tenant_id, employee_id)
    except RemoteServiceError as exc:
        raise service_unavailable() from exc
    if employee is None:
        raise _not_found()
    return employee


@router.patch("/{employee_id}", response_model=Employee)
async def update_employee(
    employee_id: str,
    updates: EmployeeUpdate,
    store: SqlEmployeeStore = Depends(get_employee_store),
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(require_action("edit_employee")),
) -> Employee:
    data = updates.model_dump(mode="json", exclude_unset=True)
    _check_admin_grant(current_employee, data.get("role"))
    try:
        before = await employee_service.get_employee(store, current_employee.tenant_id, employee_id)
        if before is None:
            raise _not_found()
        _check_admin_target(current_employee, before)
        employee = await employee_service.update_employee(store, current_employee.tenant_id, employee_id, data)
    except RemoteServiceError as exc:
        raise service_unavailable() from exc
    if employee is None:
        raise _not_found()

    old_values = before.model_dump(mode="json", include=set(data) - set(SECRET_FIELDS))
    record_audit(
        db,
        tenant_id=current_employee.tenant_id,
        actor_id=current_employee.id,
        action="UPDATE",
        resource_type="employees",
        resource_id=employee_id,
        old_values=old_values,
        new_values=_audit_values(data),
    )
    return employee


@router.post("/{employee_id}/role", response_model=Employee)
async def change_employee_role(
    employee_id: str,
    payload: RoleChange,
    store: SqlEmployeeStore = Depends(get_employee_store),
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(require_action("edit_employee")),
) -> Employee:
    _check_admin_grant(current_employee, payload.role)
    try:
        before = await employee_service.get_employee(store, current_employee.tenant_id, employee_id)
        if before is None:
            raise _not_found()
        _check_admin_target(current_employee, before)
        employee = await employee_service.change_role(
            store, current_employee.tenant_id, employee_id, payload.role.value
        )
    except RemoteServiceError as exc:
        raise service_unavailable() from exc
    if employee is None:
        raise _not_found()

    record_audit(
        db,
        tenant_id=current_employee.tenant_id,
        actor_id=current_employee.id,
        action="ROLE_CHANGE",
        resource_type="employees",
        resource_id=employee_id,
        old_values={"role": before.role},
        new_values={"role": employee.role, "permissions": [perm.id for perm in employee.permissions]},
    )
    return employee
