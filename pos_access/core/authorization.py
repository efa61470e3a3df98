import logging
from typing import Optional

from ..schemas.access import Employee, Role
from .permissions import ACTION_PERMISSIONS, VIEW_PERMISSIONS

logger = logging.getLogger(__name__)

# Every active employee may open the till.
UNIVERSAL_VIEW = "pos"


def _is_active(employee: Optional[Employee]) -> bool:
    return employee is not None and employee.active


def is_admin(employee: Optional[Employee]) -> bool:
    return employee is not None and employee.role == Role.ADMIN


def is_manager(employee: Optional[Employee]) -> bool:
    return employee is not None and employee.role == Role.MANAGER


def has_permission(employee: Optional[Employee], permission_id: str) -> bool:
    if not _is_active(employee):
        return False
    if is_admin(employee):
        return True
    for perm in employee.permissions:
        if perm.id == permission_id and perm.applies_to(employee.tenant_id):
            return True
    logger.debug("Employee %s lacks permission %r", employee.id, permission_id)
    return False


def can_access_view(employee: Optional[Employee], view: str) -> bool:
    if not _is_active(employee):
        return False
    if is_admin(employee) or view == UNIVERSAL_VIEW:
        return True
    required = VIEW_PERMISSIONS.get(view)
    if required is None:
        logger.warning("No permission is mapped to view %r, denying access", view)
        return False
    allowed = has_permission(employee, required)
    logger.debug("View %r for employee %s: %s", view, employee.id, "allowed" if allowed else "denied")
    return allowed


def can_perform_action(employee: Optional[Employee], action: str) -> bool:
    if not _is_active(employee):
        return False
    if is_admin(employee):
        return True
    required = ACTION_PERMISSIONS.get(action)
    if required is None:
        logger.warning("No permission is mapped to action %r, denying it", action)
        return False
    return has_permission(employee, required)


def can_view_module_item(employee: Optional[Employee], module_permission: str, item_permission: str) -> bool:
    """Partial access inside a module: both the module and the item permission are needed."""
    if is_admin(employee):
        return _is_active(employee)
    return has_permission(employee, module_permission) and has_permission(employee, item_permission)


def evaluate_access(employee: Optional[Employee]) -> dict[str, dict[str, bool]]:
    """Every view and action decision for one employee, for menus and button guards."""
    return {
        "views": {view: can_access_view(employee, view) for view in VIEW_PERMISSIONS},
        "actions": {action: can_perform_action(employee, action) for action in ACTION_PERMISSIONS},
    }
