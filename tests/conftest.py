import asyncio
import copy
from typing import Any, Optional

import pytest

from pos_access.services.backends import ProviderIdentity, RemoteServiceError


class InMemoryEmployeeStore:
    """Employee documents kept in a dict, keyed by id."""

    def __init__(self, records=()):
        self.records: dict[str, dict[str, Any]] = {}
        self.hang = False
        self._next_id = 1
        for record in records:
            self.records[record["id"]] = copy.deepcopy(record)

    async def _call(self):
        if self.hang:
            await asyncio.sleep(5)

    async def get_employee_by_email(self, email: str) -> Optional[dict[str, Any]]:
        await self._call()
        for record in self.records.values():
            if record.get("email") == email:
                return copy.deepcopy(record)
        return None

    async def get_employee_by_id(self, employee_id: str) -> Optional[dict[str, Any]]:
        await self._call()
        record = self.records.get(employee_id)
        return copy.deepcopy(record) if record else None

    async def put_employee(self, record: dict[str, Any]) -> dict[str, Any]:
        await self._call()
        record = copy.deepcopy(record)
        if not record.get("id"):
            record["id"] = f"emp{self._next_id}"
            self._next_id += 1
        self.records[record["id"]] = record
        return copy.deepcopy(record)

    async def list_employees(self, tenant_id: str) -> list[dict[str, Any]]:
        await self._call()
        return [copy.deepcopy(r) for r in self.records.values() if r.get("tenant_id") == tenant_id]


class FakeAuthProvider:
    """Provider accounts as ``email -> (secret, uid)``; counts sign-outs."""

    def __init__(self, accounts=None):
        self.accounts = dict(accounts or {})
        self.unavailable = False
        self.sign_out_calls = 0
        self.verify_calls = 0
        self._current: Optional[ProviderIdentity] = None

    async def verify_credential(self, email: str, secret: str) -> Optional[ProviderIdentity]:
        self.verify_calls += 1
        if self.unavailable:
            raise RemoteServiceError("provider down")
        account = self.accounts.get(email)
        if account is None or account[0] != secret:
            return None
        self._current = ProviderIdentity(uid=account[1], email=email)
        return self._current

    def current_provider_identity(self) -> Optional[ProviderIdentity]:
        return self._current

    async def sign_out(self) -> None:
        self.sign_out_calls += 1
        self._current = None


@pytest.fixture
def store():
    return InMemoryEmployeeStore()


@pytest.fixture
def provider():
    return FakeAuthProvider()
