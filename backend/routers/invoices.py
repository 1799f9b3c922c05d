from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, selectinload
from typing import List, Optional
import logging

from database import get_db
from crud import invoices as invoices_crud
from crud.audit_log import create_audit_log
from crud.invoice_balance import get_invoice
from models.invoices import Invoice as InvoiceModel, InvoiceStatus, InvoiceType
from models.order_items import OrderType
from schemas.audit_log import AuditLogCreate
from schemas.invoices import (
    Invoice as InvoiceSchema,
    InvoiceSummary,
    InvoiceCreate,
    InvoiceUpdate,
    ConvertOrderRequest,
)
from utils import sqlalchemy_to_dict
from utils.auth_utils import get_current_user, get_user_identifier
from utils.rbac import PermissionMatrix, get_permission_matrix
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/invoices", tags=["Invoices"])
logger = logging.getLogger("invoices")

# Vendor bills and customer invoices are guarded by separate permission families
PERMISSION_FAMILIES = {
    InvoiceType.PURCHASE: "transactions:vendor_bills",
    InvoiceType.SALES: "transactions:customer_invoices",
}

def _forbidden():
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You do not have permission to perform this action",
    )

def _require(matrix: PermissionMatrix, user: dict, invoice_type: InvoiceType, action: str):
    if not matrix.has_permission(user["role"], f"{PERMISSION_FAMILIES[invoice_type]}:{action}"):
        raise _forbidden()

def _view_scope(matrix: PermissionMatrix, user: dict, invoice_type: InvoiceType):
    """
    Returns (allowed, contact_id) for viewing invoices of ``invoice_type``.
    contact_id is set when the role may only see its own contact's invoices.
    """
    family = PERMISSION_FAMILIES[invoice_type]
    if matrix.has_permission(user["role"], f"{family}:view"):
        return True, None
    if matrix.has_permission(user["role"], f"{family}:view_own"):
        contact_id = user.get("contact_id")
        if contact_id is None:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Token is not linked to a contact")
        return True, int(contact_id)
    return False, None

def _load(db: Session, invoice_id: int, tenant_id: str):
    return db.query(InvoiceModel).options(
        selectinload(InvoiceModel.items),
        selectinload(InvoiceModel.payments)
    ).filter(InvoiceModel.id == invoice_id, InvoiceModel.tenant_id == tenant_id).first()

@router.post("/", response_model=InvoiceSchema, status_code=status.HTTP_201_CREATED)
def create_invoice(
    invoice: InvoiceCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
    tenant_id: str = Depends(get_tenant_id)
):
    """Create a vendor bill (PURCHASE) or customer invoice (SALES) with its lines."""
    _require(matrix, user, invoice.type, "create")
    db_invoice = invoices_crud.create_invoice(db, invoice, tenant_id, created_by=get_user_identifier(user))
    db.commit()

    logger.info(f"Invoice {db_invoice.invoice_number} created by user {get_user_identifier(user)} for tenant {tenant_id}")
    return _load(db, db_invoice.id, tenant_id)

@router.get("/", response_model=List[InvoiceSummary])
def read_invoices(
    skip: int = 0,
    limit: int = 100,
    type: Optional[InvoiceType] = None,
    status: Optional[InvoiceStatus] = None,
    contact_id: Optional[int] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
    tenant_id: str = Depends(get_tenant_id)
):
    """List invoices the caller may see, newest first."""
    types = [type] if type else list(PERMISSION_FAMILIES)
    scopes = {t: _view_scope(matrix, user, t) for t in types}
    visible = [t for t, (allowed, _) in scopes.items() if allowed]
    if not visible:
        raise _forbidden()

    own_contacts = {scope_contact for allowed, scope_contact in scopes.values() if allowed and scope_contact is not None}
    if own_contacts:
        # Restricted roles never see other contacts' invoices, whatever filter they pass
        own_contact = own_contacts.pop()
        if contact_id is not None and contact_id != own_contact:
            return []
        contact_id = own_contact

    return invoices_crud.get_invoices(
        db, tenant_id, invoice_types=visible, status=status, contact_id=contact_id, skip=skip, limit=limit
    )

@router.get("/{invoice_id}", response_model=InvoiceSchema)
def read_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
    tenant_id: str = Depends(get_tenant_id)
):
    """Retrieve an invoice with its lines and payments."""
    db_invoice = get_invoice(db, invoice_id, tenant_id)
    allowed, own_contact = _view_scope(matrix, user, db_invoice.type)
    if not allowed:
        raise _forbidden()
    if own_contact is not None and db_invoice.contact_id != own_contact:
        raise HTTPException(status_code=404, detail=f"Invoice {invoice_id} not found")
    return _load(db, invoice_id, tenant_id)

@router.put("/{invoice_id}", response_model=InvoiceSchema)
def update_invoice(
    invoice_id: int,
    invoice_update: InvoiceUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
    tenant_id: str = Depends(get_tenant_id)
):
    """Update due date and notes. Amounts and status are maintained by payments."""
    db_invoice = get_invoice(db, invoice_id, tenant_id, for_update=True)
    _require(matrix, user, db_invoice.type, "edit")
    old_values = sqlalchemy_to_dict(db_invoice)

    db_invoice = invoices_crud.update_invoice(db, invoice_id, invoice_update, tenant_id, updated_by=get_user_identifier(user))

    create_audit_log(db=db, log_entry=AuditLogCreate(
        table_name='invoices',
        record_id=invoice_id,
        changed_by=get_user_identifier(user),
        action='UPDATE',
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_invoice),
        tenant_id=tenant_id
    ))
    db.commit()

    logger.info(f"Invoice (ID: {invoice_id}) updated by user {get_user_identifier(user)} for tenant {tenant_id}")
    return _load(db, invoice_id, tenant_id)

@router.delete("/{invoice_id}")
def cancel_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
    tenant_id: str = Depends(get_tenant_id)
):
    """Cancel an invoice. Invoices with payments must have them removed first."""
    db_invoice = get_invoice(db, invoice_id, tenant_id, for_update=True)
    _require(matrix, user, db_invoice.type, "delete")
    old_values = sqlalchemy_to_dict(db_invoice)

    db_invoice = invoices_crud.cancel_invoice(db, invoice_id, tenant_id, updated_by=get_user_identifier(user))

    create_audit_log(db=db, log_entry=AuditLogCreate(
        table_name='invoices',
        record_id=invoice_id,
        changed_by=get_user_identifier(user),
        action='UPDATE',
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_invoice),
        tenant_id=tenant_id
    ))
    db.commit()

    logger.info(f"Invoice (ID: {invoice_id}) cancelled by user {get_user_identifier(user)} for tenant {tenant_id}")
    return {"message": "Invoice cancelled successfully"}

def _convert(order_type: OrderType, invoice_type: InvoiceType, request: ConvertOrderRequest,
             db: Session, user: dict, matrix: PermissionMatrix, tenant_id: str):
    _require(matrix, user, invoice_type, "create")
    db_invoice = invoices_crud.convert_order(db, order_type, request, tenant_id, created_by=get_user_identifier(user))
    db.commit()

    logger.info(f"{order_type.value} order {request.order_id} converted to invoice {db_invoice.invoice_number} by user {get_user_identifier(user)} for tenant {tenant_id}")
    return _load(db, db_invoice.id, tenant_id)

@router.post("/convert-purchase-order", response_model=InvoiceSchema, status_code=status.HTTP_201_CREATED)
def convert_purchase_order(
    request: ConvertOrderRequest,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
    tenant_id: str = Depends(get_tenant_id)
):
    """Raise a vendor bill from a confirmed purchase order."""
    return _convert(OrderType.PURCHASE, InvoiceType.PURCHASE, request, db, user, matrix, tenant_id)

@router.post("/convert-sales-order", response_model=InvoiceSchema, status_code=status.HTTP_201_CREATED)
def convert_sales_order(
    request: ConvertOrderRequest,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
    tenant_id: str = Depends(get_tenant_id)
):
    """Raise a customer invoice from a confirmed sales order."""
    return _convert(OrderType.SALES, InvoiceType.SALES, request, db, user, matrix, tenant_id)
