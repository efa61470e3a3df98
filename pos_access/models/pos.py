import uuid

from sqlalchemy import Boolean, Column, DateTime, JSON, String
from sqlalchemy.sql import func

from .base import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class EmployeeRecord(Base):
    """Stored employee document. ``permissions`` keeps whatever shape was written."""

    __tablename__ = "employees"

    id = Column(String(64), primary_key=True, default=_new_id)
    tenant_id = Column(String, nullable=False, index=True)
    email = Column(String, nullable=True, index=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    role = Column(String, nullable=False, default="cashier", server_default="cashier")
    active = Column(Boolean, nullable=False, default=True, server_default="true")
    is_main_admin = Column(Boolean, nullable=False, default=False, server_default="false")
    pin = Column(String, nullable=True)
    provider_password = Column(String, nullable=True)
    permissions = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class ProviderAccount(Base):
    """Identity known to the authentication provider. ``uid`` doubles as the business id of its owner."""

    __tablename__ = "provider_accounts"

    uid = Column(String(64), primary_key=True, default=_new_id)
    email = Column(String, unique=True, nullable=False, index=True)
    hashed_password = Column(String, nullable=False)
    disabled = Column(Boolean, nullable=False, default=False, server_default="false")
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(String(64), primary_key=True, default=_new_id)
    tenant_id = Column(String, nullable=False, index=True)
    actor_id = Column(String(64), nullable=True)
    action = Column(String, nullable=False)
    resource_type = Column(String, nullable=False)
    resource_id = Column(String(64), nullable=True)
    old_values = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
