"""Human-readable document numbers.

Orders and invoices are numbered ``<PREFIX>-<YYYYMM>-<NNNN>`` with the
sequence restarting every month per tenant and prefix; payments are
numbered ``<YYYY>-<NNNN>`` per tenant and year.
"""

from datetime import date
from sqlalchemy.orm import Session


def _next_sequence(db: Session, column, tenant_column, tenant_id: str, stem: str) -> int:
    # Compare numerically; text order puts "-10000" before "-9999". Numbers
    # with a non-numeric suffix (typed in by hand) are skipped.
    numbers = db.query(column).filter(tenant_column == tenant_id, column.like(f"{stem}%")).all()
    last_sequence = 0
    for (number,) in numbers:
        suffix = number[len(stem):]
        if suffix.isdigit():
            last_sequence = max(last_sequence, int(suffix))
    return last_sequence + 1


def generate_document_number(db: Session, model, column_name: str, tenant_id: str, prefix: str, on_date: date) -> str:
    column = getattr(model, column_name)
    stem = f"{prefix}-{on_date.year}{on_date.month:02d}-"
    sequence = _next_sequence(db, column, model.tenant_id, tenant_id, stem)
    return f"{stem}{sequence:04d}"


def generate_payment_number(db: Session, model, tenant_id: str, on_date: date) -> str:
    stem = f"{on_date.year}-"
    sequence = _next_sequence(db, model.payment_number, model.tenant_id, tenant_id, stem)
    return f"{stem}{sequence:04d}"
