"""Purchase and sales order CRUD on top of the status machine in ``crud.order_status``."""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from crud import contacts as contacts_crud
from crud import order_status
from crud.document_numbers import generate_document_number
from exceptions import ValidationError
from models.order_items import OrderItem, OrderStatus, OrderType

logger = logging.getLogger("orders")

ORDER_NUMBERING = {
    OrderType.PURCHASE: ("po_number", "PO"),
    OrderType.SALES: ("so_number", "SO"),
}

CONTACT_FIELDS = {
    OrderType.PURCHASE: "vendor_id",
    OrderType.SALES: "customer_id",
}


def _validate_contact(db: Session, order_type: OrderType, contact_id: int, tenant_id: str):
    if order_type == OrderType.PURCHASE:
        return contacts_crud.get_vendor(db, contact_id, tenant_id)
    return contacts_crud.get_customer(db, contact_id, tenant_id)


def create_order(db: Session, order_type: OrderType, order_in, tenant_id: str, created_by: Optional[str] = None):
    """Create a DRAFT order with optional items and a freshly generated number."""
    model = order_status.ORDER_MODELS[order_type]
    contact_field = CONTACT_FIELDS[order_type]
    _validate_contact(db, order_type, getattr(order_in, contact_field), tenant_id)

    # Validate every item before creating anything
    items = [order_status.build_item(db, 0, order_type, item, tenant_id) for item in order_in.items]

    number_field, prefix = ORDER_NUMBERING[order_type]
    number = generate_document_number(db, model, number_field, tenant_id, prefix, order_in.order_date)

    db_order = model(
        **{number_field: number, contact_field: getattr(order_in, contact_field)},
        order_date=order_in.order_date,
        status=OrderStatus.DRAFT,
        notes=order_in.notes,
        total_amount=0,
        created_by=created_by,
        tenant_id=tenant_id,
    )
    db.add(db_order)
    db.flush() # Flush to get db_order.id before adding items

    for item in items:
        item.order_id = db_order.id
    db.add_all(items)
    order_status.recompute_total(db, db_order)
    db.expire(db_order, ["items"])

    logger.info(f"{order_type.value} order {number} created with {len(items)} item(s) for tenant {tenant_id}")
    return db_order


def get_orders(db: Session, order_type: OrderType, tenant_id: str, status: Optional[OrderStatus] = None,
               contact_id: Optional[int] = None, start_date: Optional[date] = None, end_date: Optional[date] = None,
               skip: int = 0, limit: int = 100):
    model = order_status.ORDER_MODELS[order_type]
    query = db.query(model).filter(model.tenant_id == tenant_id)

    if status:
        query = query.filter(model.status == status)
    if contact_id:
        query = query.filter(getattr(model, CONTACT_FIELDS[order_type]) == contact_id)
    if start_date:
        query = query.filter(model.order_date >= start_date)
    if end_date:
        query = query.filter(model.order_date <= end_date)

    return query.order_by(model.order_date.desc(), model.id.desc()).options(
        selectinload(model.items)
    ).offset(skip).limit(limit).all()


def update_order(db: Session, order_type: OrderType, order_id: int, order_update, tenant_id: str,
                 updated_by: Optional[str] = None):
    """
    Apply a ``{status?, notes?, items?}`` update.

    Items are only replaced when the update also confirms the order, so a
    DRAFT order can be filled and confirmed in a single request. In every
    other case ``items`` is ignored and only status and notes change.
    Status changes always go through ``order_status.transition``.
    """
    db_order = order_status.get_order(db, order_type, order_id, tenant_id, for_update=True)
    update_data = order_update.model_dump(exclude_unset=True)

    if update_data.get("status") == OrderStatus.CONFIRMED and order_update.items is not None:
        order_status.replace_items(db, db_order, order_update.items, tenant_id)

    if update_data.get("status") is not None:
        order_status.transition(db, db_order, update_data["status"], notes=update_data.get("notes"), changed_by=updated_by)
    elif "notes" in update_data:
        db_order.notes = update_data["notes"]

    db_order.updated_by = updated_by
    db.flush()
    return db_order


def delete_order(db: Session, order_type: OrderType, order_id: int, tenant_id: str):
    """Hard-delete a DRAFT order together with its items."""
    db_order = order_status.get_order(db, order_type, order_id, tenant_id, for_update=True)
    if db_order.status != OrderStatus.DRAFT:
        raise ValidationError(
            f"Order status is '{db_order.status.value}'. Only DRAFT orders can be deleted; cancel it instead."
        )

    db.query(OrderItem).filter(
        OrderItem.order_id == db_order.id,
        OrderItem.order_type == order_type,
    ).delete(synchronize_session=False)
    db.delete(db_order)
    db.flush()

    logger.info(f"{order_type.value} order {db_order.number} deleted for tenant {tenant_id}")
    return db_order
