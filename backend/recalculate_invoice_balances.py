#!/usr/bin/env python3
"""
Script to rebuild paid_amount, balance_amount and status of existing invoices
from their recorded payments.

Usage:
    python recalculate_invoice_balances.py [tenant_id]
"""

import sys
from typing import Optional

from sqlalchemy.orm import Session
from database import SessionLocal
from models.invoices import Invoice
from crud.invoice_balance import recalculate_invoice

def recalculate_invoice_balances(tenant_id: Optional[str] = None):
    """Recompute the balance columns of every invoice (optionally one tenant only)."""
    db: Session = SessionLocal()
    try:
        query = db.query(Invoice)
        if tenant_id:
            query = query.filter(Invoice.tenant_id == tenant_id)

        updated_count = 0
        for invoice in query.order_by(Invoice.id).all():
            before = (invoice.paid_amount, invoice.balance_amount, invoice.status)
            recalculate_invoice(db, invoice)
            after = (invoice.paid_amount, invoice.balance_amount, invoice.status)
            if before != after:
                updated_count += 1
                print(f"Invoice {invoice.invoice_number}: paid {after[0]}, balance {after[1]}, status {after[2].value}")

        db.commit()
        print(f"\nSuccessfully recalculated invoices; {updated_count} changed.")
        return updated_count

    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        raise
    finally:
        db.close()

if __name__ == "__main__":
    recalculate_invoice_balances(sys.argv[1] if len(sys.argv) > 1 else None)
