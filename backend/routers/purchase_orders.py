# backend/routers/purchase_orders.py

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session, selectinload
from typing import List, Optional
import logging
from datetime import date
from utils.auth_utils import require_permission, get_user_identifier
from utils.tenancy import get_tenant_id
from crud.audit_log import create_audit_log
from crud import orders as orders_crud
from crud import order_status
from schemas.audit_log import AuditLogCreate
from utils import sqlalchemy_to_dict

from database import get_db
from models.order_items import OrderStatus, OrderType
from models.purchase_orders import PurchaseOrder as PurchaseOrderModel
from schemas.purchase_orders import (
    PurchaseOrder as PurchaseOrderSchema,
    PurchaseOrderCreate,
    PurchaseOrderUpdate,
)

router = APIRouter(prefix="/purchase-orders", tags=["Purchase Orders"])
logger = logging.getLogger("purchase_orders")


def _load(db: Session, po_id: int, tenant_id: str):
    return db.query(PurchaseOrderModel).options(
        selectinload(PurchaseOrderModel.items)
    ).filter(PurchaseOrderModel.id == po_id, PurchaseOrderModel.tenant_id == tenant_id).first()


@router.post("/", response_model=PurchaseOrderSchema, status_code=status.HTTP_201_CREATED)
def create_purchase_order(
    po: PurchaseOrderCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("transactions:purchase_orders:create")),
    tenant_id: str = Depends(get_tenant_id)
):
    """Create a new DRAFT purchase order, optionally with items."""
    db_po = orders_crud.create_order(db, OrderType.PURCHASE, po, tenant_id, created_by=get_user_identifier(user))
    db.commit()

    logger.info(f"Purchase Order {db_po.po_number} (ID: {db_po.id}) created for Vendor ID {db_po.vendor_id} by user {get_user_identifier(user)} for tenant {tenant_id}")
    return _load(db, db_po.id, tenant_id)

@router.get("/", response_model=List[PurchaseOrderSchema])
def read_purchase_orders(
    skip: int = 0,
    limit: int = 100,
    vendor_id: Optional[int] = None,
    status: Optional[OrderStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("transactions:purchase_orders:view")),
    tenant_id: str = Depends(get_tenant_id)
):
    """Retrieve a list of purchase orders with various filters."""
    return orders_crud.get_orders(
        db, OrderType.PURCHASE, tenant_id,
        status=status, contact_id=vendor_id, start_date=start_date, end_date=end_date,
        skip=skip, limit=limit,
    )

@router.get("/{po_id}", response_model=PurchaseOrderSchema)
def read_purchase_order(
    po_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("transactions:purchase_orders:view")),
    tenant_id: str = Depends(get_tenant_id)
):
    """Retrieve a single purchase order by ID."""
    order_status.get_order(db, OrderType.PURCHASE, po_id, tenant_id)
    return _load(db, po_id, tenant_id)

@router.put("/{po_id}", response_model=PurchaseOrderSchema)
def update_purchase_order(
    po_id: int,
    po_update: PurchaseOrderUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("transactions:purchase_orders:edit")),
    tenant_id: str = Depends(get_tenant_id)
):
    """Update status, notes and/or items of a purchase order.
    Items are replaced only when the same request confirms a DRAFT order."""
    db_po = order_status.get_order(db, OrderType.PURCHASE, po_id, tenant_id, for_update=True)
    old_values = sqlalchemy_to_dict(db_po)

    db_po = orders_crud.update_order(db, OrderType.PURCHASE, po_id, po_update, tenant_id, updated_by=get_user_identifier(user))

    log_entry = AuditLogCreate(
        table_name='purchase_orders',
        record_id=po_id,
        changed_by=get_user_identifier(user),
        action='UPDATE',
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_po),
        tenant_id=tenant_id
    )
    create_audit_log(db=db, log_entry=log_entry)
    db.commit()

    logger.info(f"Purchase Order (ID: {po_id}) updated by user {get_user_identifier(user)} for tenant {tenant_id}")
    return _load(db, po_id, tenant_id)

@router.delete("/{po_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_purchase_order(
    po_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("transactions:purchase_orders:delete")),
    tenant_id: str = Depends(get_tenant_id)
):
    """Delete a purchase order and its items. Only DRAFT POs can be deleted;
    others should be cancelled (status change)."""
    db_po = order_status.get_order(db, OrderType.PURCHASE, po_id, tenant_id, for_update=True)
    old_values = sqlalchemy_to_dict(db_po)

    orders_crud.delete_order(db, OrderType.PURCHASE, po_id, tenant_id)

    log_entry = AuditLogCreate(
        table_name='purchase_orders',
        record_id=po_id,
        changed_by=get_user_identifier(user),
        action='DELETE',
        old_values=old_values,
        new_values=None,
        tenant_id=tenant_id
    )
    create_audit_log(db=db, log_entry=log_entry)
    db.commit()
    logger.info(f"Purchase Order (ID: {po_id}) deleted by user {get_user_identifier(user)} for tenant {tenant_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
