from pydantic import BaseModel
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from models.order_items import OrderStatus
from schemas.order_items import OrderItem, OrderItemCreateRequest

class PurchaseOrderBase(BaseModel):
    vendor_id: int
    order_date: date
    notes: Optional[str] = None

class PurchaseOrderCreate(PurchaseOrderBase):
    # New orders always start as DRAFT; items may be attached now or later
    items: List[OrderItemCreateRequest] = []

class PurchaseOrderUpdate(BaseModel):
    status: Optional[OrderStatus] = None
    notes: Optional[str] = None
    # Replaces every item when the same update confirms a DRAFT order; ignored otherwise
    items: Optional[List[OrderItemCreateRequest]] = None
    # total_amount is system-calculated, not updated directly

class PurchaseOrder(PurchaseOrderBase):
    id: int
    po_number: str
    status: OrderStatus
    total_amount: Decimal
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    items: List[OrderItem] = []

    class Config:
        from_attributes = True
