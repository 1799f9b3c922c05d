from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime
from models.contacts import ContactType

class ContactBase(BaseModel):
    type: ContactType
    name: str
    email: Optional[EmailStr] = None
    mobile: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

class ContactCreate(ContactBase):
    pass

class ContactUpdate(BaseModel):
    type: Optional[ContactType] = None
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    mobile: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None

class Contact(ContactBase):
    id: int
    is_active: bool
    tenant_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
