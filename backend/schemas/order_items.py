from pydantic import BaseModel, Field
from typing import Optional, Literal
from decimal import Decimal
from models.order_items import OrderType

class OrderItemBase(BaseModel):
    product_id: int
    quantity: Decimal = Field(ge=0)
    unit_price: Decimal = Field(ge=0)
    tax_amount: Decimal = Field(Decimal("0"), ge=0)
    discount_amount: Decimal = Field(Decimal("0"), ge=0)

class OrderItemCreateRequest(OrderItemBase):
    # Used when items are part of an order or invoice request body
    pass

class OrderItemCreate(OrderItemBase):
    # Used by the standalone order-items endpoint
    order_id: int
    order_type: Literal["PURCHASE", "SALES"]

class OrderItemUpdate(BaseModel):
    # Omitted fields keep their stored value
    product_id: Optional[int] = None
    quantity: Optional[Decimal] = Field(None, ge=0)
    unit_price: Optional[Decimal] = Field(None, ge=0)
    tax_amount: Optional[Decimal] = Field(None, ge=0)
    discount_amount: Optional[Decimal] = Field(None, ge=0)

class OrderItem(OrderItemBase):
    id: int
    order_id: int
    order_type: OrderType
    total_amount: Decimal

    class Config:
        from_attributes = True
