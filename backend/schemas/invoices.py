from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from models.invoices import InvoiceType, InvoiceStatus
from schemas.order_items import OrderItem, OrderItemCreateRequest
from schemas.payments import Payment

class InvoiceCreate(BaseModel):
    type: InvoiceType
    contact_id: int
    order_id: Optional[int] = None
    invoice_date: date
    due_date: Optional[date] = None
    items: List[OrderItemCreateRequest] = Field(min_length=1)
    # Header amounts are derived from the items unless all four are supplied
    sub_total: Optional[Decimal] = None
    tax_amount: Optional[Decimal] = None
    discount_amount: Optional[Decimal] = None
    total_amount: Optional[Decimal] = None
    currency: str = "INR"
    notes: Optional[str] = None

class InvoiceUpdate(BaseModel):
    # Amounts and payment status are owned by the balance engine
    due_date: Optional[date] = None
    notes: Optional[str] = None

class ConvertOrderRequest(BaseModel):
    order_id: int
    invoice_date: date
    due_date: Optional[date] = None
    notes: Optional[str] = None

class InvoiceSummary(BaseModel):
    id: int
    invoice_number: str
    type: InvoiceType
    contact_id: int
    order_id: Optional[int] = None
    invoice_date: date
    due_date: Optional[date] = None
    status: InvoiceStatus
    sub_total: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    balance_amount: Decimal
    currency: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class Invoice(InvoiceSummary):
    items: List[OrderItem] = []
    payments: List[Payment] = []
