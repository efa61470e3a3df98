from typing import List

from fastapi import APIRouter, Depends

from ...core.permissions import list_all_permissions, resolve_preset
from ...schemas import Employee, Permission, PermissionPreset, Role
from ..deps import get_current_employee, require_view

router = APIRouter(prefix="/permissions", tags=["permissions"])


@router.get("/", response_model=List[Permission])
def list_permissions(current_employee: Employee = Depends(get_current_employee)):
    return list_all_permissions()


@router.get("/presets/{role}", response_model=PermissionPreset)
def read_preset(role: Role, current_employee: Employee = Depends(require_view("employees"))) -> PermissionPreset:
    return PermissionPreset(role=role, permissions=resolve_preset(role.value, current_employee.tenant_id))
