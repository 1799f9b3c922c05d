from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from models.payments import PaymentMethod

class PaymentBase(BaseModel):
    invoice_id: int
    payment_date: date
    amount: Decimal
    payment_method: PaymentMethod = PaymentMethod.CASH
    reference: Optional[str] = None
    bank_account: Optional[str] = None
    cheque_date: Optional[date] = None
    clearance_date: Optional[date] = None
    currency: str = "INR"
    notes: Optional[str] = None

class PaymentCreate(PaymentBase):
    payment_number: Optional[str] = None # generated as YYYY-NNNN when omitted
    status: str = "COMPLETED"

class PaymentUpdate(BaseModel):
    payment_date: Optional[date] = None
    amount: Optional[Decimal] = None
    payment_method: Optional[PaymentMethod] = None
    reference: Optional[str] = None
    bank_account: Optional[str] = None
    cheque_date: Optional[date] = None
    clearance_date: Optional[date] = None
    status: Optional[str] = None
    notes: Optional[str] = None

class Payment(PaymentBase):
    id: int
    payment_number: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    tenant_id: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    class Config:
        from_attributes = True
