from fastapi import APIRouter

from .routes import audit_logs, auth, employees, health, permissions

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(employees.router)
api_router.include_router(permissions.router)
api_router.include_router(audit_logs.router)
