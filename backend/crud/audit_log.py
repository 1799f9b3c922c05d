from sqlalchemy.orm import Session
from models.audit_log import AuditLog
from schemas.audit_log import AuditLogCreate

def create_audit_log(db: Session, log_entry: AuditLogCreate):
    """Stage an audit row in the caller's transaction; the caller commits."""
    db_log_entry = AuditLog(**log_entry.model_dump())
    db.add(db_log_entry)
    db.flush()
    return db_log_entry

def get_audit_logs(db: Session, tenant_id: str, table_name: str, record_id: int):
    return db.query(AuditLog).filter(
        AuditLog.tenant_id == tenant_id,
        AuditLog.table_name == table_name,
        AuditLog.record_id == record_id,
    ).order_by(AuditLog.id.asc()).all()
