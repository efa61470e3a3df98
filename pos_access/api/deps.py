from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..core.authorization import can_access_view, can_perform_action
from ..core.normalization import employee_from_record
from ..core.security import decode_token
from ..db import get_db
from ..schemas import Employee
from ..services.authentication import EmployeeAuthenticator
from ..services.backends import RemoteServiceError, SqlAuthProvider, SqlEmployeeStore

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def get_employee_store(db: Session = Depends(get_db)) -> SqlEmployeeStore:
    return SqlEmployeeStore(db)


def get_auth_provider(db: Session = Depends(get_db)) -> SqlAuthProvider:
    return SqlAuthProvider(db)


def get_authenticator(
    store: SqlEmployeeStore = Depends(get_employee_store),
    provider: SqlAuthProvider = Depends(get_auth_provider),
) -> EmployeeAuthenticator:
    return EmployeeAuthenticator(store, provider)


def service_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Backend temporarily unavailable",
    )


async def get_current_employee(
    token: str = Depends(oauth2_scheme),
    store: SqlEmployeeStore = Depends(get_employee_store),
) -> Employee:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(token)
        if payload.get("type") != "access":
            raise credentials_exception
        employee_id: Optional[str] = payload.get("sub")
        tenant_id: Optional[str] = payload.get("tenant")
        if employee_id is None or tenant_id is None:
            raise credentials_exception
    except ValueError:
        raise credentials_exception

    try:
        record = await store.get_employee_by_id(employee_id)
    except RemoteServiceError as exc:
        raise service_unavailable() from exc
    if record is None:
        raise credentials_exception
    try:
        employee = employee_from_record(record)
    except ValidationError:
        raise credentials_exception
    if employee.tenant_id != tenant_id or not employee.active:
        raise credentials_exception
    return employee


def _forbidden() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Insufficient permissions",
    )


def require_view(view: str) -> Callable[[Employee], Employee]:
    def _view_guard(current_employee: Employee = Depends(get_current_employee)) -> Employee:
        if not can_access_view(current_employee, view):
            raise _forbidden()
        return current_employee

    return _view_guard


def require_action(action: str) -> Callable[[Employee], Employee]:
    def _action_guard(current_employee: Employee = Depends(get_current_employee)) -> Employee:
        if not can_perform_action(current_employee, action):
            raise _forbidden()
        return current_employee

    return _action_guard
