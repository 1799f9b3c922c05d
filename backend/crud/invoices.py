"""
Invoice lifecycle outside of payments: creation (directly or from a
purchase/sales order), header edits, cancellation and listing.

Vendor bills (PURCHASE) are numbered BILL-YYYYMM-NNNN, customer invoices
(SALES) INV-YYYYMM-NNNN. Invoice lines are stored as order items of type
INVOICE so the same line arithmetic applies everywhere.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from crud import contacts as contacts_crud
from crud import order_status
from crud.document_numbers import generate_document_number
from crud.invoice_balance import apply_paid_amount, get_invoice
from exceptions import DuplicateInvoice, ValidationError
from models.invoices import Invoice, InvoiceStatus, InvoiceType
from models.order_items import OrderItem, OrderStatus, OrderType
from models.payments import Payment
from schemas.invoices import InvoiceCreate, InvoiceUpdate, ConvertOrderRequest
from utils.formatting import to_money

logger = logging.getLogger("invoices")

INVOICE_PREFIXES = {
    InvoiceType.PURCHASE: "BILL",
    InvoiceType.SALES: "INV",
}

ORDER_TYPE_FOR_INVOICE = {
    InvoiceType.PURCHASE: OrderType.PURCHASE,
    InvoiceType.SALES: OrderType.SALES,
}

CONVERTIBLE_ORDER_STATUSES = (OrderStatus.CONFIRMED, OrderStatus.IN_PROGRESS, OrderStatus.COMPLETED)


def _contact_for(db: Session, invoice_type: InvoiceType, contact_id: int, tenant_id: str):
    if invoice_type == InvoiceType.PURCHASE:
        return contacts_crud.get_vendor(db, contact_id, tenant_id)
    return contacts_crud.get_customer(db, contact_id, tenant_id)


def _totals(items):
    """sub_total, tax, discount and grand total of a set of lines."""
    sub_total = sum((Decimal(i.quantity) * Decimal(i.unit_price) for i in items), Decimal("0"))
    tax_amount = sum((Decimal(i.tax_amount or 0) for i in items), Decimal("0"))
    discount_amount = sum((Decimal(i.discount_amount or 0) for i in items), Decimal("0"))
    total_amount = sum((Decimal(i.total_amount) for i in items), Decimal("0"))
    return to_money(sub_total), to_money(tax_amount), to_money(discount_amount), to_money(total_amount)


def _new_invoice(db: Session, invoice_type: InvoiceType, tenant_id: str, invoice_date: date, **fields) -> Invoice:
    invoice_number = generate_document_number(
        db, Invoice, "invoice_number", tenant_id, INVOICE_PREFIXES[invoice_type], invoice_date
    )
    invoice = Invoice(
        invoice_number=invoice_number,
        type=invoice_type,
        invoice_date=invoice_date,
        status=InvoiceStatus.UNPAID,
        tenant_id=tenant_id,
        **fields,
    )
    apply_paid_amount(invoice, Decimal("0"))
    db.add(invoice)
    db.flush()
    return invoice


def _copy_items(db: Session, invoice: Invoice, lines, tenant_id: str):
    db.add_all([
        OrderItem(
            order_id=invoice.id,
            order_type=OrderType.INVOICE,
            product_id=line.product_id,
            quantity=line.quantity,
            unit_price=line.unit_price,
            tax_amount=line.tax_amount or Decimal("0"),
            discount_amount=line.discount_amount or Decimal("0"),
            total_amount=line.total_amount,
            tenant_id=tenant_id,
        )
        for line in lines
    ])
    db.flush()
    db.expire(invoice, ["items"])


def create_invoice(db: Session, invoice_in: InvoiceCreate, tenant_id: str, created_by: Optional[str] = None) -> Invoice:
    _contact_for(db, invoice_in.type, invoice_in.contact_id, tenant_id)
    if invoice_in.order_id is not None:
        order_status.get_order(db, ORDER_TYPE_FOR_INVOICE[invoice_in.type], invoice_in.order_id, tenant_id)

    # Build and validate every line before anything is written
    lines = [order_status.build_item(db, 0, OrderType.INVOICE, item, tenant_id) for item in invoice_in.items]

    supplied = (invoice_in.sub_total, invoice_in.tax_amount, invoice_in.discount_amount, invoice_in.total_amount)
    if all(value is not None for value in supplied):
        sub_total, tax_amount, discount_amount, total_amount = (to_money(v) for v in supplied)
    else:
        sub_total, tax_amount, discount_amount, total_amount = _totals(lines)

    if total_amount < 0:
        raise ValidationError("Invoice total cannot be negative")

    invoice = _new_invoice(
        db,
        invoice_in.type,
        tenant_id,
        invoice_in.invoice_date,
        contact_id=invoice_in.contact_id,
        order_id=invoice_in.order_id,
        due_date=invoice_in.due_date,
        sub_total=sub_total,
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        total_amount=total_amount,
        currency=invoice_in.currency,
        notes=invoice_in.notes,
        created_by=created_by,
    )
    _copy_items(db, invoice, lines, tenant_id)

    logger.info(f"Invoice {invoice.invoice_number} created for contact {invoice.contact_id} (total {invoice.total_amount})")
    return invoice


def convert_order(db: Session, order_type: OrderType, request: ConvertOrderRequest, tenant_id: str,
                  created_by: Optional[str] = None) -> Invoice:
    """Raise a vendor bill from a purchase order or a customer invoice from a sales order."""
    invoice_type = InvoiceType.PURCHASE if order_type == OrderType.PURCHASE else InvoiceType.SALES
    order = order_status.get_order(db, order_type, request.order_id, tenant_id, for_update=True)

    if order.status not in CONVERTIBLE_ORDER_STATUSES:
        raise ValidationError(
            f"{order_type.value.capitalize()} order must be CONFIRMED, IN_PROGRESS or COMPLETED to convert "
            f"(order is {order.status.value})"
        )

    existing = db.query(Invoice.id).filter(
        Invoice.tenant_id == tenant_id,
        Invoice.type == invoice_type,
        Invoice.order_id == order.id,
    ).first()
    if existing:
        raise DuplicateInvoice(order.id)

    lines = list(order.items)
    if not lines:
        raise ValidationError(f"No items found in {order_type.value.lower()} order {order.id}")

    sub_total, tax_amount, discount_amount, total_amount = _totals(lines)
    invoice = _new_invoice(
        db,
        invoice_type,
        tenant_id,
        request.invoice_date,
        contact_id=order.contact_id,
        order_id=order.id,
        due_date=request.due_date,
        sub_total=sub_total,
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        total_amount=total_amount,
        notes=request.notes if request.notes is not None else order.notes,
        created_by=created_by,
    )
    _copy_items(db, invoice, lines, tenant_id)

    if order.status == OrderStatus.CONFIRMED:
        order_status.transition(db, order, OrderStatus.IN_PROGRESS, changed_by=created_by)

    logger.info(f"{order_type.value} order {order.number} converted to invoice {invoice.invoice_number}")
    return invoice


def update_invoice(db: Session, invoice_id: int, invoice_update: InvoiceUpdate, tenant_id: str,
                   updated_by: Optional[str] = None) -> Invoice:
    invoice = get_invoice(db, invoice_id, tenant_id, for_update=True)
    for key, value in invoice_update.model_dump(exclude_unset=True).items():
        setattr(invoice, key, value)
    invoice.updated_by = updated_by
    db.flush()
    return invoice


def cancel_invoice(db: Session, invoice_id: int, tenant_id: str, updated_by: Optional[str] = None) -> Invoice:
    invoice = get_invoice(db, invoice_id, tenant_id, for_update=True)

    if invoice.status == InvoiceStatus.CANCELLED:
        raise ValidationError(f"Invoice {invoice.invoice_number} is already cancelled")

    has_payments = db.query(Payment.id).filter(Payment.invoice_id == invoice.id).first()
    if has_payments:
        raise ValidationError("Cannot cancel an invoice that has payments. Delete the payments first.")

    invoice.status = InvoiceStatus.CANCELLED
    invoice.updated_by = updated_by
    db.flush()

    logger.info(f"Invoice {invoice.invoice_number} cancelled")
    return invoice


def get_invoices(db: Session, tenant_id: str, invoice_types: Optional[Iterable[InvoiceType]] = None,
                 status: Optional[InvoiceStatus] = None, contact_id: Optional[int] = None,
                 skip: int = 0, limit: int = 100):
    query = db.query(Invoice).filter(Invoice.tenant_id == tenant_id)
    if invoice_types is not None:
        query = query.filter(Invoice.type.in_(list(invoice_types)))
    if status:
        query = query.filter(Invoice.status == status)
    if contact_id is not None:
        query = query.filter(Invoice.contact_id == contact_id)
    return query.order_by(Invoice.invoice_date.desc(), Invoice.id.desc()).offset(skip).limit(limit).all()
