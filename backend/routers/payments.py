from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
from utils.auth_utils import require_permission, get_user_identifier, own_contact_scope
from utils.rbac import PermissionMatrix, get_permission_matrix
from utils.tenancy import get_tenant_id
from crud.audit_log import create_audit_log
from crud import invoice_balance
from schemas.audit_log import AuditLogCreate
from utils import sqlalchemy_to_dict

from database import get_db
from models.invoices import Invoice as InvoiceModel
from models.payments import Payment as PaymentModel, PaymentMethod
from schemas.payments import Payment, PaymentCreate, PaymentUpdate

router = APIRouter(prefix="/payments", tags=["Payments"])
logger = logging.getLogger("payments")

VIEW_ALL = "transactions:payments:view"
VIEW_OWN = "transactions:payments:view_own"

@router.post("/", response_model=Payment, status_code=status.HTTP_201_CREATED)
def create_payment(
    payment: PaymentCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("transactions:payments:create")),
    tenant_id: str = Depends(get_tenant_id)
):
    """Record a payment against an invoice and roll it into the invoice balance."""
    db_payment = invoice_balance.create_payment(db, payment, tenant_id, created_by=get_user_identifier(user))
    db.commit()
    db.refresh(db_payment)

    logger.info(f"Payment {db_payment.payment_number} of {payment.amount} recorded for Invoice ID {payment.invoice_id} by user {get_user_identifier(user)} for tenant {tenant_id}")
    return db_payment

@router.get("/", response_model=List[Payment])
def read_payments(
    skip: int = 0,
    limit: int = 100,
    invoice_id: Optional[int] = None,
    payment_status: Optional[str] = None,
    payment_method: Optional[PaymentMethod] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission(VIEW_ALL, VIEW_OWN)),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
    tenant_id: str = Depends(get_tenant_id)
):
    """List payments, newest first. Contacts only see payments on their own invoices."""
    query = db.query(PaymentModel).filter(PaymentModel.tenant_id == tenant_id)

    contact_id = own_contact_scope(user, matrix, VIEW_ALL)
    if contact_id is not None:
        query = query.join(InvoiceModel, PaymentModel.invoice_id == InvoiceModel.id).filter(
            InvoiceModel.contact_id == contact_id
        )
    if invoice_id:
        query = query.filter(PaymentModel.invoice_id == invoice_id)
    if payment_status:
        query = query.filter(PaymentModel.status == payment_status)
    if payment_method:
        query = query.filter(PaymentModel.payment_method == payment_method)

    return query.order_by(PaymentModel.payment_date.desc(), PaymentModel.id.desc()).offset(skip).limit(limit).all()

@router.get("/by-invoice/{invoice_id}", response_model=List[Payment])
def get_payments_for_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission(VIEW_ALL, VIEW_OWN)),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
    tenant_id: str = Depends(get_tenant_id)
):
    """Retrieve all payments for a specific invoice."""
    db_invoice = invoice_balance.get_invoice(db, invoice_id, tenant_id)
    contact_id = own_contact_scope(user, matrix, VIEW_ALL)
    if contact_id is not None and db_invoice.contact_id != contact_id:
        raise HTTPException(status_code=404, detail=f"Invoice {invoice_id} not found")
    return db_invoice.payments

@router.get("/{payment_id}", response_model=Payment)
def read_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission(VIEW_ALL, VIEW_OWN)),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
    tenant_id: str = Depends(get_tenant_id)
):
    db_payment = invoice_balance.get_payment(db, payment_id, tenant_id)
    contact_id = own_contact_scope(user, matrix, VIEW_ALL)
    if contact_id is not None and db_payment.invoice.contact_id != contact_id:
        raise HTTPException(status_code=404, detail=f"Payment {payment_id} not found")
    return db_payment

@router.put("/{payment_id}", response_model=Payment)
def update_payment(
    payment_id: int,
    payment_update: PaymentUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("transactions:payments:edit")),
    tenant_id: str = Depends(get_tenant_id)
):
    """Update a payment; an amount change moves the invoice balance by the difference."""
    db_payment, _ = invoice_balance.lock_payment(db, payment_id, tenant_id)
    old_values = sqlalchemy_to_dict(db_payment)

    db_payment = invoice_balance.update_payment(db, payment_id, payment_update, tenant_id, updated_by=get_user_identifier(user))

    log_entry = AuditLogCreate(
        table_name='payments',
        record_id=payment_id,
        changed_by=get_user_identifier(user),
        action='UPDATE',
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_payment),
        tenant_id=tenant_id
    )
    create_audit_log(db=db, log_entry=log_entry)
    db.commit()
    db.refresh(db_payment)

    logger.info(f"Payment (ID: {payment_id}) updated by user {get_user_identifier(user)} for tenant {tenant_id}")
    return db_payment

@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("transactions:payments:delete")),
    tenant_id: str = Depends(get_tenant_id)
):
    """Delete a payment and take its amount back off the invoice."""
    db_payment, _ = invoice_balance.lock_payment(db, payment_id, tenant_id)
    old_values = sqlalchemy_to_dict(db_payment)

    invoice_balance.delete_payment(db, payment_id, tenant_id)

    log_entry = AuditLogCreate(
        table_name='payments',
        record_id=payment_id,
        changed_by=get_user_identifier(user),
        action='DELETE',
        old_values=old_values,
        new_values=None,
        tenant_id=tenant_id
    )
    create_audit_log(db=db, log_entry=log_entry)
    db.commit()
    logger.info(f"Payment (ID: {payment_id}) deleted by user {get_user_identifier(user)} for tenant {tenant_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
