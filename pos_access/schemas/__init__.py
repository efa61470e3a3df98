from .access import (
    DEFAULT_TENANT,
    Employee,
    Permission,
    PermissionCategory,
    PermissionInstance,
    PermissionLevel,
    Role,
)
from .pos import (
    AccessMap,
    AuditLogBase,
    EmployeeCreate,
    EmployeeSummary,
    EmployeeUpdate,
    LoginResponse,
    PermissionPreset,
    PinLoginRequest,
    RefreshTokenRequest,
    RoleChange,
    Token,
)
