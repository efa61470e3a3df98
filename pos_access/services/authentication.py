import logging
from typing import Any, Awaitable, Mapping, Optional, TypeVar

from pydantic import ValidationError

from ..core.config import get_settings
from ..core.normalization import employee_from_record, ensure_tenant_scope
from ..core.security import pins_match
from ..schemas.access import Employee, Role
from .backends import AuthProvider, EmployeeStore, RemoteServiceError, call_remote

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EmployeeAuthenticator:
    """Log employees in against the document store and the authentication provider.

    Both entry points answer ``None`` for every authentication failure and
    only let :class:`RemoteServiceError` escape.
    """

    def __init__(self, store: EmployeeStore, provider: AuthProvider, timeout: Optional[float] = None) -> None:
        self.store = store
        self.provider = provider
        self.timeout = get_settings().remote_call_timeout_seconds if timeout is None else timeout

    async def _remote(self, awaitable: Awaitable[T]) -> T:
        return await call_remote(awaitable, self.timeout)

    async def _reject(self, reason: str, *args: Any) -> None:
        logger.warning("Login rejected: " + reason, *args)
        await self._remote(self.provider.sign_out())

    def _load(self, record: Mapping[str, Any]) -> Optional[Employee]:
        try:
            return employee_from_record(record)
        except ValidationError:
            logger.error("Employee document %s is invalid", record.get("id"))
            return None

    async def login_by_email_and_credential(self, email: str, credential: str) -> Optional[Employee]:
        identity = await self._remote(self.provider.verify_credential(email, credential))
        if identity is None:
            logger.info("Provider refused credentials for a login attempt")
            return None

        record = await self._remote(self.store.get_employee_by_email(email))
        if record is None:
            await self._reject("no employee document for provider account %s", identity.uid)
            return None

        employee = self._load(record)
        if employee is None:
            await self._reject("unusable employee document for provider account %s", identity.uid)
            return None
        if employee.tenant_id != identity.tenant_id:
            await self._reject(
                "employee %s belongs to business %s, provider account is %s",
                employee.id,
                employee.tenant_id,
                identity.tenant_id,
            )
            return None
        if not employee.active:
            await self._reject("employee %s is inactive", employee.id)
            return None
        return ensure_tenant_scope(employee)

    async def login_by_identifier_and_pin(self, employee_id: str, pin: str) -> Optional[Employee]:
        record = await self._remote(self.store.get_employee_by_id(employee_id))
        if record is None:
            logger.info("PIN login for unknown employee id")
            return None
        if not pins_match(pin, record.get("pin")):
            logger.info("PIN mismatch for employee %s", employee_id)
            return None

        employee = self._load(record)
        if employee is None or not employee.active:
            logger.info("PIN login refused for employee %s", employee_id)
            return None

        if employee.role == Role.ADMIN and employee.email and record.get("provider_password"):
            if not await self._provider_sign_in(employee, record["provider_password"]):
                return None
        return ensure_tenant_scope(employee)

    async def _provider_sign_in(self, employee: Employee, secret: str) -> bool:
        """Best-effort provider session for administrators.

        Returns ``False`` only when the provider session belongs to another
        business; provider failures are logged and the PIN login stands.
        """
        try:
            identity = await self._remote(self.provider.verify_credential(employee.email, secret))
        except RemoteServiceError:
            logger.warning("Provider sign-in failed for admin %s, keeping PIN session", employee.id, exc_info=True)
            return True
        if identity is None:
            logger.warning("Provider refused the stored credential of admin %s", employee.id)
            return True
        if identity.tenant_id != employee.tenant_id:
            await self._reject(
                "admin %s belongs to business %s, provider account is %s",
                employee.id,
                employee.tenant_id,
                identity.tenant_id,
            )
            return False
        return True
