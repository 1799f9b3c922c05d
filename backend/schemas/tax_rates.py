from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

TAX_TYPES = ["exclusive", "inclusive"]
TAX_CATEGORIES = ["sales", "purchase", "both"]
ROUNDING_METHODS = ["round", "floor", "ceil"]

def _one_of(value, allowed, field):
    if value is None:
        return value
    value = value.lower()
    if value not in allowed:
        raise ValueError(f"{field} must be one of {allowed}")
    return value

class TaxRateBase(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    rate: Decimal = Field(..., ge=0, le=100)
    type: str = "exclusive"
    category: str = "both"
    hsn_codes: List[str] = []
    is_default: bool = False
    is_active: bool = True

    @field_validator('type')
    @classmethod
    def validate_type(cls, v):
        return _one_of(v, TAX_TYPES, "type")

    @field_validator('category')
    @classmethod
    def validate_category(cls, v):
        return _one_of(v, TAX_CATEGORIES, "category")

class TaxRateCreate(TaxRateBase):
    pass

class TaxRateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    rate: Optional[Decimal] = Field(None, ge=0, le=100)
    type: Optional[str] = None
    category: Optional[str] = None
    hsn_codes: Optional[List[str]] = None
    is_default: Optional[bool] = None
    is_active: Optional[bool] = None

    @field_validator('type')
    @classmethod
    def validate_type(cls, v):
        return _one_of(v, TAX_TYPES, "type")

    @field_validator('category')
    @classmethod
    def validate_category(cls, v):
        return _one_of(v, TAX_CATEGORIES, "category")

class TaxRate(TaxRateBase):
    id: int
    tenant_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TaxConfigurationBase(BaseModel):
    enable_tax: bool = True
    default_tax_rate: Decimal = Field(Decimal("18"), ge=0, le=100)
    tax_display_format: str = "percentage"
    rounding_method: str = "round"
    compound_tax: bool = False
    tax_on_shipping: bool = False
    prices_include_tax: bool = False

    @field_validator('rounding_method')
    @classmethod
    def validate_rounding_method(cls, v):
        return _one_of(v, ROUNDING_METHODS, "rounding_method")

class TaxConfigurationUpdate(TaxConfigurationBase):
    pass

class TaxConfiguration(TaxConfigurationBase):
    # Defaults are served without a stored row, so these stay optional
    id: Optional[int] = None
    tenant_id: str

    class Config:
        from_attributes = True
