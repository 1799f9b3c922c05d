from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime

VALID_ACCOUNT_TYPES = ["ASSET", "LIABILITY", "EQUITY", "INCOME", "EXPENSE"]

class ChartOfAccountsBase(BaseModel):
    code: str
    name: str
    type: str  # ASSET, LIABILITY, EQUITY, INCOME, EXPENSE
    parent_id: Optional[int] = None
    is_active: bool = True

    @field_validator('type')
    @classmethod
    def validate_account_type(cls, v):
        v = v.upper()
        if v not in VALID_ACCOUNT_TYPES:
            raise ValueError(f"type must be one of {VALID_ACCOUNT_TYPES}")
        return v

class ChartOfAccountsCreate(ChartOfAccountsBase):
    pass

class ChartOfAccountsUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    parent_id: Optional[int] = None
    is_active: Optional[bool] = None

    @field_validator('type')
    @classmethod
    def validate_account_type(cls, v):
        if v is None:
            return v
        v = v.upper()
        if v not in VALID_ACCOUNT_TYPES:
            raise ValueError(f"type must be one of {VALID_ACCOUNT_TYPES}")
        return v

class ChartOfAccounts(ChartOfAccountsBase):
    id: int
    tenant_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
