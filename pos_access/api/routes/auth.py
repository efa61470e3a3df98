from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from ...core.authorization import evaluate_access
from ...core.security import create_access_token, create_refresh_token, decode_token
from ...db import get_db
from ...schemas import AccessMap, Employee, LoginResponse, PinLoginRequest, RefreshTokenRequest, Token
from ...services.audit import record_audit
from ...services.authentication import EmployeeAuthenticator
from ...services.backends import RemoteServiceError, SqlAuthProvider, SqlEmployeeStore
from ..deps import (
    get_auth_provider,
    get_authenticator,
    get_current_employee,
    get_employee_store,
    service_unavailable,
)

router = APIRouter(prefix="/auth", tags=["auth"])

LOGIN_FAILED = "Incorrect credentials"


def _issue_tokens(employee: Employee) -> LoginResponse:
    return LoginResponse(
        access_token=create_access_token(employee.id, employee.tenant_id),
        refresh_token=create_refresh_token(employee.id, employee.tenant_id),
        employee=employee,
    )


def _login_failed() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=LOGIN_FAILED,
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    authenticator: EmployeeAuthenticator = Depends(get_authenticator),
    db: Session = Depends(get_db),
) -> LoginResponse:
    try:
        employee = await authenticator.login_by_email_and_credential(form_data.username, form_data.password)
    except RemoteServiceError as exc:
        raise service_unavailable() from exc
    if employee is None:
        raise _login_failed()

    record_audit(
        db,
        tenant_id=employee.tenant_id,
        actor_id=employee.id,
        action="LOGIN",
        resource_type="employees",
        resource_id=employee.id,
        new_values={"method": "email"},
    )
    return _issue_tokens(employee)


@router.post("/pin-login", response_model=LoginResponse)
async def pin_login(
    payload: PinLoginRequest,
    authenticator: EmployeeAuthenticator = Depends(get_authenticator),
    db: Session = Depends(get_db),
) -> LoginResponse:
    try:
        employee = await authenticator.login_by_identifier_and_pin(payload.employee_id, payload.pin)
    except RemoteServiceError as exc:
        raise service_unavailable() from exc
    if employee is None:
        raise _login_failed()

    record_audit(
        db,
        tenant_id=employee.tenant_id,
        actor_id=employee.id,
        action="LOGIN",
        resource_type="employees",
        resource_id=employee.id,
        new_values={"method": "pin"},
    )
    return _issue_tokens(employee)


@router.post("/logout", status_code=status.HTTP_200_OK)
async def logout(
    current_employee: Employee = Depends(get_current_employee),
    provider: SqlAuthProvider = Depends(get_auth_provider),
    db: Session = Depends(get_db),
) -> dict[str, str]:
    await provider.sign_out()
    record_audit(
        db,
        tenant_id=current_employee.tenant_id,
        actor_id=current_employee.id,
        action="LOGOUT",
        resource_type="employees",
        resource_id=current_employee.id,
    )
    return {"detail": "Signed out"}


@router.get("/me", response_model=Employee)
def read_current_employee(current_employee: Employee = Depends(get_current_employee)) -> Employee:
    return current_employee


@router.get("/access", response_model=AccessMap)
def read_access(current_employee: Employee = Depends(get_current_employee)) -> AccessMap:
    return AccessMap(**evaluate_access(current_employee))


@router.post("/refresh", response_model=Token, summary="Refresh access token")
async def refresh_token(
    payload: RefreshTokenRequest,
    store: SqlEmployeeStore = Depends(get_employee_store),
) -> Token:
    try:
        token_data = decode_token(payload.refresh_token)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")
    if token_data.get("type") != "refresh":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token type")

    employee_id = token_data.get("sub")
    tenant_id = token_data.get("tenant")
    try:
        record = await store.get_employee_by_id(employee_id) if employee_id else None
    except RemoteServiceError as exc:
        raise service_unavailable() from exc
    if not record or record.get("tenant_id") != tenant_id or not record.get("active", True):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")

    return Token(
        access_token=create_access_token(record["id"], tenant_id),
        refresh_token=create_refresh_token(record["id"], tenant_id),
    )
