from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
import logging

from database import get_db
from crud import order_status
from models.order_items import OrderType
from schemas.order_items import OrderItem, OrderItemCreate, OrderItemUpdate
from utils.auth_utils import get_current_user, get_user_identifier
from utils.rbac import PermissionMatrix, get_permission_matrix
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/order-items", tags=["Order Items"])
logger = logging.getLogger("order_items")

EDIT_PERMISSIONS = {
    OrderType.PURCHASE: "transactions:purchase_orders:edit",
    OrderType.SALES: "transactions:sales_orders:edit",
}

def _require_edit(matrix: PermissionMatrix, user: dict, order_type: OrderType):
    if not matrix.has_permission(user["role"], EDIT_PERMISSIONS[order_type]):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to perform this action",
        )

@router.post("/", response_model=OrderItem, status_code=status.HTTP_201_CREATED)
def create_order_item(
    item: OrderItemCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
    tenant_id: str = Depends(get_tenant_id)
):
    """Add a line to a DRAFT purchase or sales order and re-total the order."""
    order_type = OrderType(item.order_type)
    _require_edit(matrix, user, order_type)

    order = order_status.get_order(db, order_type, item.order_id, tenant_id, for_update=True)
    db_item = order_status.add_item(db, order, item, tenant_id)
    order.updated_by = get_user_identifier(user)
    db.commit()
    db.refresh(db_item)

    logger.info(f"Item {db_item.id} added to {order_type.value} order {order.id} (order total {order.total_amount}) by user {get_user_identifier(user)} for tenant {tenant_id}")
    return db_item

@router.put("/{item_id}", response_model=OrderItem)
def update_order_item(
    item_id: int,
    item_update: OrderItemUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
    tenant_id: str = Depends(get_tenant_id)
):
    """Change a line of a DRAFT order. Omitted fields keep their stored value."""
    db_item = order_status.get_item(db, item_id, tenant_id)
    _require_edit(matrix, user, db_item.order_type)

    order = order_status.get_order(db, db_item.order_type, db_item.order_id, tenant_id, for_update=True)
    db_item = order_status.get_item(db, item_id, tenant_id, for_update=True)
    order_status.update_item(db, order, db_item, item_update.model_dump(exclude_unset=True), tenant_id)
    order.updated_by = get_user_identifier(user)
    db.commit()
    db.refresh(db_item)

    logger.info(f"Item {item_id} of {db_item.order_type.value} order {order.id} updated by user {get_user_identifier(user)} for tenant {tenant_id}")
    return db_item

@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order_item(
    item_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
    tenant_id: str = Depends(get_tenant_id)
):
    db_item = order_status.get_item(db, item_id, tenant_id)
    _require_edit(matrix, user, db_item.order_type)

    order = order_status.get_order(db, db_item.order_type, db_item.order_id, tenant_id, for_update=True)
    db_item = order_status.get_item(db, item_id, tenant_id, for_update=True)
    order_status.delete_item(db, order, db_item)
    order.updated_by = get_user_identifier(user)
    db.commit()

    logger.info(f"Item {item_id} removed from {order.order_type.value} order {order.id} by user {get_user_identifier(user)} for tenant {tenant_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
