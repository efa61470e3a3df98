from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from .access import Employee, PermissionInstance, Role


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class Token(ORMModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(Token):
    employee: Employee


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class PinLoginRequest(BaseModel):
    employee_id: str = Field(min_length=1)
    pin: str = Field(min_length=1, max_length=32)


# Stored permissions may be bare ids or full records.
StoredPermissionInput = Union[str, dict[str, Any]]


class EmployeeCreate(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Role = Role.CASHIER
    active: bool = True
    pin: str = Field(min_length=4, max_length=32)
    provider_password: Optional[str] = Field(default=None, max_length=72)
    permissions: Optional[List[StoredPermissionInput]] = None


class EmployeeUpdate(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[Role] = None
    active: Optional[bool] = None
    pin: Optional[str] = Field(default=None, min_length=4, max_length=32)
    provider_password: Optional[str] = Field(default=None, max_length=72)
    permissions: Optional[List[StoredPermissionInput]] = None

    @field_validator("role", "active", mode="before")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class RoleChange(BaseModel):
    role: Role


class AccessMap(BaseModel):
    views: dict[str, bool]
    actions: dict[str, bool]


class PermissionPreset(BaseModel):
    role: Role
    permissions: List[PermissionInstance]


class AuditLogBase(ORMModel):
    id: str
    tenant_id: str
    actor_id: Optional[str] = None
    action: str
    resource_type: str
    resource_id: Optional[str] = None
    old_values: Optional[dict[str, Any]] = None
    new_values: Optional[dict[str, Any]] = None
    created_at: Optional[datetime] = None


class EmployeeSummary(ORMModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
