from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator

# Legacy marker for permissions that were never stamped with a business.
DEFAULT_TENANT = "default"

_TENANT_KEYS = AliasChoices("tenant_id", "tenantId", "businessId")


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    CASHIER = "cashier"


class PermissionCategory(str, Enum):
    POS = "pos"
    INVENTORY = "inventory"
    SUPPLIERS = "suppliers"
    EMPLOYEES = "employees"
    REPORTS = "reports"
    SETTINGS = "settings"
    PROMOTIONS = "promotions"
    LOYALTY = "loyalty"
    # Only used for identifiers that are missing from the catalog.
    ADMIN = "admin"


class PermissionLevel(str, Enum):
    READ = "read"
    WRITE = "write"
    ADMIN = "admin"


class Permission(BaseModel):
    """Tenant-neutral catalog entry."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    description: str
    category: PermissionCategory
    level: PermissionLevel

    def stamp(self, tenant_id: Optional[str]) -> "PermissionInstance":
        data = {field: getattr(self, field) for field in Permission.model_fields}
        return PermissionInstance(**data, tenant_id=tenant_id)


class PermissionInstance(Permission):
    """A catalog permission granted by one business.

    ``tenant_id`` of ``None`` is the universal scope: the instance applies
    inside whichever business evaluates it. It is read from and written as
    the legacy ``"default"`` marker.
    """

    tenant_id: Optional[str] = Field(
        default=None,
        validation_alias=_TENANT_KEYS,
    )

    @field_validator("tenant_id", mode="before")
    @classmethod
    def _parse_scope(cls, value: Any) -> Optional[str]:
        if value is None or value == "" or value == DEFAULT_TENANT:
            return None
        return str(value)

    @field_serializer("tenant_id")
    def _dump_scope(self, value: Optional[str]) -> str:
        return value or DEFAULT_TENANT

    @property
    def is_universal(self) -> bool:
        return self.tenant_id is None

    def applies_to(self, tenant_id: Optional[str]) -> bool:
        return self.tenant_id is None or self.tenant_id == tenant_id


class Employee(BaseModel):
    """Employee as seen by authorization checks.

    ``permissions`` must come out of :func:`pos_access.core.normalization.normalize`.
    The stored PIN and provider credential are never copied here.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    tenant_id: str = Field(default=DEFAULT_TENANT, validation_alias=_TENANT_KEYS)
    role: str = Role.CASHIER.value
    active: bool = True
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_main_admin: bool = False
    permissions: list[PermissionInstance] = Field(default_factory=list)

    @field_validator("tenant_id", mode="before")
    @classmethod
    def _default_tenant(cls, value: Any) -> str:
        return str(value) if value else DEFAULT_TENANT
