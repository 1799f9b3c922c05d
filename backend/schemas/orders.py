from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from models.order_items import OrderStatus

class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    notes: Optional[str] = None

class OrderStatusInfo(BaseModel):
    order_id: int
    current_status: OrderStatus
    last_updated: Optional[datetime] = None
