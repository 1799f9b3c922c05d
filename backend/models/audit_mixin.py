from sqlalchemy import Column, DateTime, String
from datetime import datetime
import pytz


def now_ist():
    return datetime.now(pytz.timezone('Asia/Kolkata'))


class TimestampMixin:
    """Mixin that provides created/updated timestamps and user info.

    Ledger rows (orders, invoices, payments) are hard-deleted when removed, so
    no soft-delete columns live here. Deletions are traced through the audit log.
    """
    # Use timezone-aware timestamps to ensure all dates are stored in the desired timezone (Asia/Kolkata).
    # DateTime(timezone=True) ensures the timezone info is persisted in the database.
    created_at = Column(DateTime(timezone=True), default=now_ist)
    updated_at = Column(DateTime(timezone=True), onupdate=now_ist)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)
