from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from database import get_db
from crud import order_status
from crud.audit_log import create_audit_log
from models.order_items import OrderType
from schemas.audit_log import AuditLogCreate
from schemas.orders import OrderStatusUpdate, OrderStatusInfo
from utils import sqlalchemy_to_dict
from utils.auth_utils import get_current_user, get_user_identifier
from utils.rbac import PermissionMatrix, get_permission_matrix
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/orders", tags=["Order Status"])
logger = logging.getLogger("orders")

ORDER_TYPES = {
    "purchase": OrderType.PURCHASE,
    "sales": OrderType.SALES,
}

def resolve_order_type(order_type: str) -> OrderType:
    resolved = ORDER_TYPES.get(order_type.lower())
    if resolved is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid order type. Must be 'purchase' or 'sales'"
        )
    return resolved

def _check(matrix: PermissionMatrix, user: dict, order_type: OrderType, action: str):
    table = "purchase_orders" if order_type == OrderType.PURCHASE else "sales_orders"
    if not matrix.has_permission(user["role"], f"transactions:{table}:{action}"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to perform this action",
        )

@router.put("/{order_type}/{order_id}/status")
def update_order_status(
    order_type: str,
    order_id: int,
    status_update: OrderStatusUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
    tenant_id: str = Depends(get_tenant_id)
):
    """Move a purchase or sales order along DRAFT -> CONFIRMED -> IN_PROGRESS -> COMPLETED (or CANCELLED)."""
    resolved = resolve_order_type(order_type)
    _check(matrix, user, resolved, "edit")

    order = order_status.get_order(db, resolved, order_id, tenant_id, for_update=True)
    old_values = sqlalchemy_to_dict(order)

    order_status.transition(db, order, status_update.status, notes=status_update.notes, changed_by=get_user_identifier(user))

    create_audit_log(db=db, log_entry=AuditLogCreate(
        table_name=order.__tablename__,
        record_id=order.id,
        changed_by=get_user_identifier(user),
        action='UPDATE',
        old_values=old_values,
        new_values=sqlalchemy_to_dict(order),
        tenant_id=tenant_id
    ))
    db.commit()
    db.refresh(order)

    logger.info(f"{resolved.value} order {order.number} status set to {order.status.value} by user {get_user_identifier(user)} for tenant {tenant_id}")
    return {
        "message": f"Order status updated to {order.status.value}",
        "order": sqlalchemy_to_dict(order),
    }

@router.get("/{order_type}/{order_id}/status", response_model=OrderStatusInfo)
def get_order_status(
    order_type: str,
    order_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
    tenant_id: str = Depends(get_tenant_id)
):
    resolved = resolve_order_type(order_type)
    _check(matrix, user, resolved, "view")
    order = order_status.get_order(db, resolved, order_id, tenant_id)
    return OrderStatusInfo(
        order_id=order.id,
        current_status=order.status,
        last_updated=order.updated_at or order.created_at,
    )
