"""
Invoice balance engine.

Keeps ``paid_amount``, ``balance_amount`` and ``status`` of an invoice in step
with its payments. Every payment mutation locks the owning invoice row,
changes the payment and the invoice in the same session, and leaves the
commit to the caller so both land together.

This module only ever writes PAID, PARTIAL or UNPAID. OVERDUE is set by the
nightly sweep in ``tasks.overdue_tasks`` and CANCELLED by invoice cancellation.
"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from crud.document_numbers import generate_payment_number
from exceptions import (
    InvoiceCancelled,
    InvoiceNotFound,
    DuplicatePaymentNumber,
    NonPositiveAmount,
    PaymentExceedsBalance,
    PaymentNotFound,
)
from models.invoices import Invoice, InvoiceStatus
from models.payments import Payment
from schemas.payments import PaymentCreate, PaymentUpdate
from utils.formatting import to_money, format_indian_currency

logger = logging.getLogger("invoice_balance")

ZERO = Decimal("0.00")


def derive_status(paid_amount: Decimal, total_amount: Decimal) -> InvoiceStatus:
    if paid_amount >= total_amount:
        return InvoiceStatus.PAID
    if paid_amount > 0:
        return InvoiceStatus.PARTIAL
    return InvoiceStatus.UNPAID


def apply_paid_amount(invoice: Invoice, paid_amount) -> Invoice:
    """Store a new cumulative paid amount and derive balance and status from it."""
    paid = max(ZERO, to_money(paid_amount))
    total = to_money(invoice.total_amount)
    invoice.paid_amount = paid
    invoice.balance_amount = max(ZERO, total - paid)
    invoice.status = derive_status(paid, total)
    return invoice


def get_invoice(db: Session, invoice_id: int, tenant_id: str, for_update: bool = False) -> Invoice:
    query = db.query(Invoice).filter(Invoice.id == invoice_id, Invoice.tenant_id == tenant_id)
    if for_update:
        query = query.with_for_update().populate_existing()
    invoice = query.first()
    if invoice is None:
        raise InvoiceNotFound(invoice_id)
    return invoice


def get_payment(db: Session, payment_id: int, tenant_id: str, for_update: bool = False) -> Payment:
    query = db.query(Payment).filter(Payment.id == payment_id, Payment.tenant_id == tenant_id)
    if for_update:
        query = query.with_for_update().populate_existing()
    payment = query.first()
    if payment is None:
        raise PaymentNotFound(payment_id)
    return payment


def lock_payment(db: Session, payment_id: int, tenant_id: str):
    """Lock the owning invoice, then the payment, and return both freshly read.

    The invoice is always locked first so concurrent edits of its payments
    queue up behind the same row.
    """
    invoice_id = get_payment(db, payment_id, tenant_id).invoice_id
    invoice = get_invoice(db, invoice_id, tenant_id, for_update=True)
    payment = get_payment(db, payment_id, tenant_id, for_update=True)
    return payment, invoice


def _check_amount(amount) -> Decimal:
    if amount is None or to_money(amount) <= 0:
        raise NonPositiveAmount(amount)
    return to_money(amount)


def create_payment(db: Session, payment_in: PaymentCreate, tenant_id: str, created_by: Optional[str] = None) -> Payment:
    invoice = get_invoice(db, payment_in.invoice_id, tenant_id, for_update=True)
    amount = _check_amount(payment_in.amount)

    if invoice.status == InvoiceStatus.CANCELLED:
        raise InvoiceCancelled(invoice.id)

    balance = to_money(invoice.total_amount) - to_money(invoice.paid_amount)
    if amount > balance:
        raise PaymentExceedsBalance(amount, balance)

    payment_data = payment_in.model_dump()
    payment_data["amount"] = amount
    if not payment_data.get("payment_number"):
        payment_data["payment_number"] = generate_payment_number(db, Payment, tenant_id, payment_in.payment_date)
    elif db.query(Payment.id).filter(
        Payment.tenant_id == tenant_id, Payment.payment_number == payment_data["payment_number"]
    ).first():
        raise DuplicatePaymentNumber(payment_data["payment_number"])

    db_payment = Payment(**payment_data, tenant_id=tenant_id, created_by=created_by)
    db.add(db_payment)

    apply_paid_amount(invoice, to_money(invoice.paid_amount) + amount)
    db.flush()

    logger.info(
        f"Payment {db_payment.payment_number} of {format_indian_currency(amount)} applied to invoice {invoice.invoice_number}; "
        f"paid {invoice.paid_amount}, balance {invoice.balance_amount}, status {invoice.status.value}"
    )
    return db_payment


def update_payment(db: Session, payment_id: int, payment_update: PaymentUpdate, tenant_id: str, updated_by: Optional[str] = None) -> Payment:
    db_payment, invoice = lock_payment(db, payment_id, tenant_id)

    update_data = payment_update.model_dump(exclude_unset=True)
    new_number = update_data.get("payment_number")
    if new_number and new_number != db_payment.payment_number and db.query(Payment.id).filter(
        Payment.tenant_id == tenant_id, Payment.payment_number == new_number
    ).first():
        raise DuplicatePaymentNumber(new_number)
    old_amount = to_money(db_payment.amount)
    delta = ZERO
    if update_data.get("amount") is not None:
        new_amount = _check_amount(update_data["amount"])
        delta = new_amount - old_amount
        update_data["amount"] = new_amount
        new_paid = to_money(invoice.paid_amount) + delta
        if new_paid > to_money(invoice.total_amount):
            raise PaymentExceedsBalance(new_amount, to_money(invoice.balance_amount) + old_amount)
    else:
        update_data.pop("amount", None)

    for key, value in update_data.items():
        setattr(db_payment, key, value)
    db_payment.updated_by = updated_by

    if delta != 0:
        apply_paid_amount(invoice, to_money(invoice.paid_amount) + delta)
    db.flush()

    logger.info(
        f"Payment {db_payment.id} on invoice {invoice.invoice_number} updated (delta {delta}); "
        f"paid {invoice.paid_amount}, balance {invoice.balance_amount}, status {invoice.status.value}"
    )
    return db_payment


def delete_payment(db: Session, payment_id: int, tenant_id: str) -> Payment:
    db_payment, invoice = lock_payment(db, payment_id, tenant_id)

    amount = to_money(db_payment.amount)
    apply_paid_amount(invoice, max(ZERO, to_money(invoice.paid_amount) - amount))
    db.delete(db_payment)
    db.flush()

    logger.info(
        f"Payment {payment_id} of {format_indian_currency(amount)} removed from invoice {invoice.invoice_number}; "
        f"paid {invoice.paid_amount}, balance {invoice.balance_amount}, status {invoice.status.value}"
    )
    return db_payment


def recalculate_invoice(db: Session, invoice: Invoice) -> Invoice:
    """Rebuild paid/balance/status from the stored payments.

    OVERDUE and CANCELLED invoices keep their status; only the amounts move.
    """
    total_paid = db.query(func.coalesce(func.sum(Payment.amount), 0)).filter(
        Payment.invoice_id == invoice.id
    ).scalar()
    previous_status = invoice.status
    apply_paid_amount(invoice, total_paid)
    if previous_status in (InvoiceStatus.CANCELLED, InvoiceStatus.OVERDUE) and invoice.status != InvoiceStatus.PAID:
        invoice.status = previous_status
    return invoice
