# backend/routers/sales_orders.py

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
from models.sales_orders import SalesOrder as SalesOrderModel
from schemas.sales_orders import (
    SalesOrder as SalesOrderSchema,
    SalesOrderCreate,
    SalesOrderUpdate,
)

router = APIRouter(prefix="/sales-orders", tags=["Sales Orders"])
logger = logging.getLogger("sales_orders")


def _load(db: Session, so_id: int, tenant_id: str):
    return db.query(SalesOrderModel).options(
        selectinload(SalesOrderModel.items)
    ).filter(SalesOrderModel.id == so_id, SalesOrderModel.tenant_id == tenant_id).first()


@router.post("/", response_model=SalesOrderSchema, status_code=status.HTTP_201_CREATED)
def create_sales_order(
    so: SalesOrderCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("transactions:sales_orders:create")),
    tenant_id: str = Depends(get_tenant_id)
):
    """Create a new DRAFT sales order, optionally with items."""
    db_so = orders_crud.create_order(db, OrderType.SALES, so, tenant_id, created_by=get_user_identifier(user))
    db.commit()

    logger.info(f"Sales Order {db_so.so_number} (ID: {db_so.id}) created for Customer ID {db_so.customer_id} by user {get_user_identifier(user)} for tenant {tenant_id}")
    return _load(db, db_so.id, tenant_id)

@router.get("/", response_model=List[SalesOrderSchema])
def read_sales_orders(
    skip: int = 0,
    limit: int = 100,
    customer_id: Optional[int] = None,
    status: Optional[OrderStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("transactions:sales_orders:view")),
    tenant_id: str = Depends(get_tenant_id)
):
    """Retrieve a list of sales orders with various filters."""
    return orders_crud.get_orders(
        db, OrderType.SALES, tenant_id,
        status=status, contact_id=customer_id, start_date=start_date, end_date=end_date,
        skip=skip, limit=limit,
    )

@router.get("/{so_id}", response_model=SalesOrderSchema)
def read_sales_order(
    so_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("transactions:sales_orders:view")),
    tenant_id: str = Depends(get_tenant_id)
):
    """Retrieve a single sales order by ID."""
    order_status.get_order(db, OrderType.SALES, so_id, tenant_id)
    return _load(db, so_id, tenant_id)

@router.put("/{so_id}", response_model=SalesOrderSchema)
def update_sales_order(
    so_id: int,
    so_update: SalesOrderUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("transactions:sales_orders:edit")),
    tenant_id: str = Depends(get_tenant_id)
):
    """Update status, notes and/or items of a sales order.
    Items are replaced only when the same request confirms a DRAFT order."""
    db_so = order_status.get_order(db, OrderType.SALES, so_id, tenant_id, for_update=True)
    old_values = sqlalchemy_to_dict(db_so)

    db_so = orders_crud.update_order(db, OrderType.SALES, so_id, so_update, tenant_id, updated_by=get_user_identifier(user))

    log_entry = AuditLogCreate(
        table_name='sales_orders',
        record_id=so_id,
        changed_by=get_user_identifier(user),
        action='UPDATE',
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_so),
        tenant_id=tenant_id
    )
    create_audit_log(db=db, log_entry=log_entry)
    db.commit()

    logger.info(f"Sales Order (ID: {so_id}) updated by user {get_user_identifier(user)} for tenant {tenant_id}")
    return _load(db, so_id, tenant_id)

@router.delete("/{so_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_sales_order(
    so_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("transactions:sales_orders:delete")),
    tenant_id: str = Depends(get_tenant_id)
):
    """Delete a sales order and its items. Only DRAFT SOs can be deleted;
    others should be cancelled (status change)."""
    db_so = order_status.get_order(db, OrderType.SALES, so_id, tenant_id, for_update=True)
    old_values = sqlalchemy_to_dict(db_so)

    orders_crud.delete_order(db, OrderType.SALES, so_id, tenant_id)

    log_entry = AuditLogCreate(
        table_name='sales_orders',
        record_id=so_id,
        changed_by=get_user_identifier(user),
        action='DELETE',
        old_values=old_values,
        new_values=None,
        tenant_id=tenant_id
    )
    create_audit_log(db=db, log_entry=log_entry)
    db.commit()
    logger.info(f"Sales Order (ID: {so_id}) deleted by user {get_user_identifier(user)} for tenant {tenant_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
