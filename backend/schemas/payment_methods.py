from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime

VALID_METHOD_TYPES = ["CASH", "BANK", "CARD", "DIGITAL"]

class PaymentMethodBase(BaseModel):
    name: str = Field(..., min_length=1)
    type: str  # CASH, BANK, CARD, DIGITAL
    account_id: Optional[int] = None
    description: Optional[str] = None

    @field_validator('type')
    @classmethod
    def validate_method_type(cls, v):
        v = v.upper()
        if v not in VALID_METHOD_TYPES:
            raise ValueError(f"type must be one of {VALID_METHOD_TYPES}")
        return v

class PaymentMethodCreate(PaymentMethodBase):
    pass

class PaymentMethodUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    type: Optional[str] = None
    account_id: Optional[int] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator('type')
    @classmethod
    def validate_method_type(cls, v):
        if v is None:
            return v
        v = v.upper()
        if v not in VALID_METHOD_TYPES:
            raise ValueError(f"type must be one of {VALID_METHOD_TYPES}")
        return v

class PaymentMethod(PaymentMethodBase):
    id: int
    tenant_id: str
    is_active: bool
    account_name: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
