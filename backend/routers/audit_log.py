from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from database import get_db
from crud.audit_log import get_audit_logs
from schemas.audit_log import AuditLog
from utils.auth_utils import require_permission
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/audit-log", tags=["Audit Log"])

@router.get("/{table_name}/{record_id}", response_model=List[AuditLog])
def read_audit_log(
    table_name: str,
    record_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("settings:view")),
    tenant_id: str = Depends(get_tenant_id)
):
    """Change history of one record, oldest first."""
    return get_audit_logs(db, tenant_id, table_name, record_id)
