import logging
from datetime import date, datetime
from typing import Optional

import pytz
from sqlalchemy.orm import Session

from database import SessionLocal
from models.invoices import Invoice, InvoiceStatus

logger = logging.getLogger(__name__)

def mark_overdue_invoices(db: Session, today: date, tenant_id: Optional[str] = None) -> int:
    """
    Flags open invoices whose due date has passed as OVERDUE.

    Only UNPAID and PARTIAL invoices with a positive balance are touched. The
    caller owns the transaction.

    Args:
        db: Session to work in.
        today: Invoices due strictly before this date are overdue.
        tenant_id: Restrict the sweep to one tenant; all tenants when omitted.

    Returns:
        Number of invoices moved to OVERDUE.
    """
    query = db.query(Invoice).filter(
        Invoice.status.in_([InvoiceStatus.UNPAID, InvoiceStatus.PARTIAL]),
        Invoice.due_date.isnot(None),
        Invoice.due_date < today,
        Invoice.balance_amount > 0,
    )
    if tenant_id:
        query = query.filter(Invoice.tenant_id == tenant_id)

    overdue = query.all()
    for invoice in overdue:
        logger.debug(f"Invoice {invoice.invoice_number} ({invoice.tenant_id}) due {invoice.due_date} is overdue")
        invoice.status = InvoiceStatus.OVERDUE
        invoice.updated_by = "system"
    db.flush()
    return len(overdue)

def run_overdue_sweep():
    """Nightly job: open its own session, mark overdue invoices, commit."""
    today = datetime.now(pytz.timezone('Asia/Kolkata')).date()
    logger.info(f"Starting overdue invoice sweep for {today}.")
    db: Session = SessionLocal()
    try:
        count = mark_overdue_invoices(db, today)
        db.commit()
        logger.info(f"Overdue sweep finished: {count} invoice(s) marked OVERDUE.")
    except Exception as e:
        logger.error(f"Error during overdue invoice sweep: {e}", exc_info=True)
        db.rollback()
    finally:
        db.close()
