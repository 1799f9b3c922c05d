from typing import Optional
from sqlalchemy.orm import Session
from models.contacts import Contact, ContactType
from exceptions import ContactNotFound, ValidationError

def get_contact(db: Session, contact_id: int, tenant_id: str) -> Contact:
    contact = db.query(Contact).filter(Contact.id == contact_id, Contact.tenant_id == tenant_id).first()
    if not contact:
        raise ContactNotFound(contact_id)
    return contact

def get_vendor(db: Session, contact_id: int, tenant_id: str) -> Contact:
    contact = get_contact(db, contact_id, tenant_id)
    if not contact.is_vendor:
        raise ValidationError(f"Contact {contact_id} is not a vendor")
    return contact

def get_customer(db: Session, contact_id: int, tenant_id: str) -> Contact:
    contact = get_contact(db, contact_id, tenant_id)
    if not contact.is_customer:
        raise ValidationError(f"Contact {contact_id} is not a customer")
    return contact

def get_contacts(db: Session, tenant_id: str, contact_type: Optional[ContactType] = None,
                 include_inactive: bool = False, skip: int = 0, limit: int = 100):
    query = db.query(Contact).filter(Contact.tenant_id == tenant_id)
    if not include_inactive:
        query = query.filter(Contact.is_active == True)
    if contact_type == ContactType.VENDOR:
        query = query.filter(Contact.type.in_([ContactType.VENDOR, ContactType.BOTH]))
    elif contact_type == ContactType.CUSTOMER:
        query = query.filter(Contact.type.in_([ContactType.CUSTOMER, ContactType.BOTH]))
    elif contact_type == ContactType.BOTH:
        query = query.filter(Contact.type == ContactType.BOTH)
    return query.order_by(Contact.name).offset(skip).limit(limit).all()
