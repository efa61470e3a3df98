from .base import Base
from .pos import AuditLog, EmployeeRecord, ProviderAccount
