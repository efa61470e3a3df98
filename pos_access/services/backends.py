"""Document store and authentication provider seams.

The authorization code only talks to these two protocols. The SQL-backed
implementations are what the HTTP layer wires in; tests use in-memory fakes.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Optional, Protocol, TypeVar

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.security import verify_password
from ..models import EmployeeRecord, ProviderAccount

logger = logging.getLogger(__name__)

T = TypeVar("T")

EmployeeDocument = dict[str, Any]

RECORD_FIELDS = (
    "id",
    "tenant_id",
    "email",
    "first_name",
    "last_name",
    "role",
    "active",
    "is_main_admin",
    "pin",
    "provider_password",
    "permissions",
)


class RemoteServiceError(Exception):
    """The document store or the authentication provider could not be reached."""


@dataclass(frozen=True)
class ProviderIdentity:
    uid: str
    email: str

    @property
    def tenant_id(self) -> str:
        # Administrator accounts are keyed by the business they own.
        return self.uid


class EmployeeStore(Protocol):
    async def get_employee_by_email(self, email: str) -> Optional[EmployeeDocument]: ...

    async def get_employee_by_id(self, employee_id: str) -> Optional[EmployeeDocument]: ...

    async def put_employee(self, record: EmployeeDocument) -> EmployeeDocument: ...

    async def list_employees(self, tenant_id: str) -> list[EmployeeDocument]: ...


class AuthProvider(Protocol):
    async def verify_credential(self, email: str, secret: str) -> Optional[ProviderIdentity]: ...

    def current_provider_identity(self) -> Optional[ProviderIdentity]: ...

    async def sign_out(self) -> None: ...


async def call_remote(awaitable: Awaitable[T], timeout: Optional[float]) -> T:
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError as exc:
        raise RemoteServiceError(f"Remote call timed out after {timeout}s") from exc


def _to_document(row: EmployeeRecord) -> EmployeeDocument:
    return {field: getattr(row, field) for field in RECORD_FIELDS}


class SqlEmployeeStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _run(self, operation: str, fn, *args):
        try:
            return fn(*args)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RemoteServiceError(f"Employee store failed during {operation}") from exc

    def _by_email(self, email: str) -> Optional[EmployeeDocument]:
        row = self.db.query(EmployeeRecord).filter(EmployeeRecord.email == email).first()
        return _to_document(row) if row else None

    def _by_id(self, employee_id: str) -> Optional[EmployeeDocument]:
        row = self.db.query(EmployeeRecord).filter(EmployeeRecord.id == employee_id).first()
        return _to_document(row) if row else None

    def _put(self, record: EmployeeDocument) -> EmployeeDocument:
        row = None
        if record.get("id"):
            row = self.db.query(EmployeeRecord).filter(EmployeeRecord.id == record["id"]).first()
        if row is None:
            row = EmployeeRecord()
            self.db.add(row)
        for field in RECORD_FIELDS:
            if field in record and (field != "id" or record[field]):
                setattr(row, field, record[field])
        self.db.commit()
        self.db.refresh(row)
        return _to_document(row)

    def _list(self, tenant_id: str) -> list[EmployeeDocument]:
        rows = (
            self.db.query(EmployeeRecord)
            .filter(EmployeeRecord.tenant_id == tenant_id)
            .order_by(EmployeeRecord.created_at.desc())
            .limit(500)
            .all()
        )
        return [_to_document(row) for row in rows]

    async def get_employee_by_email(self, email: str) -> Optional[EmployeeDocument]:
        return await run_in_threadpool(self._run, "get_employee_by_email", self._by_email, email)

    async def get_employee_by_id(self, employee_id: str) -> Optional[EmployeeDocument]:
        return await run_in_threadpool(self._run, "get_employee_by_id", self._by_id, employee_id)

    async def put_employee(self, record: EmployeeDocument) -> EmployeeDocument:
        return await run_in_threadpool(self._run, "put_employee", self._put, record)

    async def list_employees(self, tenant_id: str) -> list[EmployeeDocument]:
        return await run_in_threadpool(self._run, "list_employees", self._list, tenant_id)


class SqlAuthProvider:
    """Password accounts kept next to the employee documents.

    One instance lives for one request, so the signed-in identity is per-request state.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self._current: Optional[ProviderIdentity] = None

    def _verify(self, email: str, secret: str) -> Optional[ProviderIdentity]:
        try:
            account = self.db.query(ProviderAccount).filter(ProviderAccount.email == email).first()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RemoteServiceError("Authentication provider unavailable") from exc
        if account is None or account.disabled:
            return None
        try:
            valid = verify_password(secret, account.hashed_password)
        except ValueError:
            valid = False
        if not valid:
            return None
        return ProviderIdentity(uid=account.uid, email=account.email)

    async def verify_credential(self, email: str, secret: str) -> Optional[ProviderIdentity]:
        identity = await run_in_threadpool(self._verify, email, secret)
        if identity is not None:
            self._current = identity
        return identity

    def current_provider_identity(self) -> Optional[ProviderIdentity]:
        return self._current

    async def sign_out(self) -> None:
        if self._current is not None:
            logger.info("Signing provider account %s out", self._current.uid)
        self._current = None
