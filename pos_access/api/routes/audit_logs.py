from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...db import get_db
from ...models import AuditLog
from ...schemas import AuditLogBase, Employee
from ..deps import require_action

router = APIRouter(prefix="/audit-logs", tags=["audit"])


@router.get("/", response_model=List[AuditLogBase])
def list_audit_logs(
    limit: int = 200,
    resource_type: Optional[str] = None,
    actor_id: Optional[str] = None,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(require_action("manage_settings")),
):
    limit = max(1, min(limit, 500))
    query = db.query(AuditLog).filter(AuditLog.tenant_id == current_employee.tenant_id)
    if resource_type:
        query = query.filter(AuditLog.resource_type == resource_type)
    if actor_id:
        query = query.filter(AuditLog.actor_id == actor_id)
    return query.order_by(AuditLog.created_at.desc()).limit(limit).all()
