"""
Order status machine for purchase and sales orders.

Orders move DRAFT -> CONFIRMED -> IN_PROGRESS -> COMPLETED, and may be
CANCELLED from any non-terminal state. Items can only change while the order
is DRAFT, and every item change re-sums the order total.

None of the functions here commit: the router owns the transaction, so a
failure anywhere in a multi-step change (e.g. delete-then-insert of items)
rolls back as a whole.
"""

import logging
from decimal import Decimal
from types import MappingProxyType
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from exceptions import (
    EmptyOrder,
    InvalidTransition,
    NegativeLineTotal,
    OrderItemNotFound,
    OrderLocked,
    OrderNotFound,
    ProductNotFound,
)
from models.audit_mixin import now_ist
from models.order_items import OrderItem, OrderStatus, OrderType
from models.products import Product
from models.purchase_orders import PurchaseOrder
from models.sales_orders import SalesOrder
from utils.formatting import to_money

logger = logging.getLogger("order_status")

ALLOWED_TRANSITIONS = MappingProxyType({
    OrderStatus.DRAFT: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
})

ORDER_MODELS = MappingProxyType({
    OrderType.PURCHASE: PurchaseOrder,
    OrderType.SALES: SalesOrder,
})


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def get_order(db: Session, order_type: OrderType, order_id: int, tenant_id: str, for_update: bool = False):
    model = ORDER_MODELS[order_type]
    query = db.query(model).filter(model.id == order_id, model.tenant_id == tenant_id)
    if for_update:
        # Reload from the locked row, not from a copy already in the session
        query = query.with_for_update().populate_existing()
    order = query.first()
    if order is None:
        raise OrderNotFound(order_type.value, order_id)
    return order


def count_items(db: Session, order) -> int:
    return db.query(func.count(OrderItem.id)).filter(
        OrderItem.order_id == order.id,
        OrderItem.order_type == order.order_type,
    ).scalar() or 0


def transition(db: Session, order, target: OrderStatus, notes: Optional[str] = None, changed_by: Optional[str] = None):
    """Move ``order`` to ``target``. Touches status, notes and updated_at only."""
    current = order.status
    if not can_transition(current, target):
        raise InvalidTransition(current.value, target.value)

    if target == OrderStatus.CONFIRMED and count_items(db, order) == 0:
        raise EmptyOrder()

    order.status = target
    if notes is not None:
        order.notes = notes
    order.updated_at = now_ist()
    if changed_by:
        order.updated_by = changed_by
    db.flush()

    logger.info(f"{order.order_type.value} order {order.id} moved from {current.value} to {target.value}")
    return order


def ensure_draft(order) -> None:
    if order.status != OrderStatus.DRAFT:
        raise OrderLocked(order.status.value)


def compute_line_total(quantity, unit_price, tax_amount=None, discount_amount=None) -> Decimal:
    """quantity * unit_price + tax - discount, rounded to paise."""
    total = to_money(
        Decimal(quantity) * Decimal(unit_price)
        + Decimal(tax_amount or 0)
        - Decimal(discount_amount or 0)
    )
    if total < 0:
        raise NegativeLineTotal(total)
    return total


def ensure_product(db: Session, product_id: int, tenant_id: str) -> Product:
    product = db.query(Product).filter(Product.id == product_id, Product.tenant_id == tenant_id).first()
    if product is None:
        raise ProductNotFound(product_id)
    return product


def build_item(db: Session, order_id: int, order_type: OrderType, item_data, tenant_id: str) -> OrderItem:
    """Validate one requested line and return an unsaved OrderItem."""
    ensure_product(db, item_data.product_id, tenant_id)
    tax_amount = item_data.tax_amount or Decimal("0")
    discount_amount = item_data.discount_amount or Decimal("0")
    return OrderItem(
        order_id=order_id,
        order_type=order_type,
        product_id=item_data.product_id,
        quantity=item_data.quantity,
        unit_price=item_data.unit_price,
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        total_amount=compute_line_total(item_data.quantity, item_data.unit_price, tax_amount, discount_amount),
        tenant_id=tenant_id,
    )


def recompute_total(db: Session, order) -> Decimal:
    """Re-sum every item of the order and store it as the order total."""
    db.flush()
    total = db.query(func.coalesce(func.sum(OrderItem.total_amount), 0)).filter(
        OrderItem.order_id == order.id,
        OrderItem.order_type == order.order_type,
    ).scalar()
    order.total_amount = to_money(total)
    order.updated_at = now_ist()
    db.flush()
    return order.total_amount


def replace_items(db: Session, order, new_items: Iterable, tenant_id: str):
    """Swap every item of a DRAFT order for ``new_items`` and recompute the total."""
    ensure_draft(order)

    # Validate everything before touching the stored items
    prepared = [build_item(db, order.id, order.order_type, item, tenant_id) for item in new_items]

    db.query(OrderItem).filter(
        OrderItem.order_id == order.id,
        OrderItem.order_type == order.order_type,
    ).delete(synchronize_session=False)
    db.add_all(prepared)
    recompute_total(db, order)
    db.expire(order, ["items"])

    logger.info(f"{order.order_type.value} order {order.id} items replaced ({len(prepared)} items, total {order.total_amount})")
    return order


def get_item(db: Session, item_id: int, tenant_id: str, for_update: bool = False) -> OrderItem:
    """Fetch a purchase or sales order item; invoice lines are not editable here."""
    query = db.query(OrderItem).filter(
        OrderItem.id == item_id,
        OrderItem.tenant_id == tenant_id,
        OrderItem.order_type.in_([OrderType.PURCHASE, OrderType.SALES]),
    )
    if for_update:
        query = query.with_for_update().populate_existing()
    item = query.first()
    if item is None:
        raise OrderItemNotFound(item_id)
    return item


def add_item(db: Session, order, item_data, tenant_id: str) -> OrderItem:
    ensure_draft(order)
    item = build_item(db, order.id, order.order_type, item_data, tenant_id)
    db.add(item)
    recompute_total(db, order)
    return item


def update_item(db: Session, order, item: OrderItem, update_data: dict, tenant_id: str) -> OrderItem:
    """Apply a partial update; omitted fields keep their stored value."""
    ensure_draft(order)
    if update_data.get("product_id") is not None:
        ensure_product(db, update_data["product_id"], tenant_id)
        item.product_id = update_data["product_id"]

    for field in ("quantity", "unit_price", "tax_amount", "discount_amount"):
        if update_data.get(field) is not None:
            setattr(item, field, update_data[field])

    item.total_amount = compute_line_total(item.quantity, item.unit_price, item.tax_amount, item.discount_amount)
    recompute_total(db, order)
    return item


def delete_item(db: Session, order, item: OrderItem) -> None:
    ensure_draft(order)
    db.delete(item)
    recompute_total(db, order)
