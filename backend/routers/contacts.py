from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from crud import contacts as contacts_crud
from crud.audit_log import create_audit_log
from models.contacts import Contact as ContactModel, ContactType
from schemas.audit_log import AuditLogCreate
from schemas.contacts import Contact, ContactCreate, ContactUpdate
from utils import sqlalchemy_to_dict
from utils.auth_utils import require_permission, get_user_identifier, own_contact_scope
from utils.rbac import PermissionMatrix, get_permission_matrix
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/contacts", tags=["Contacts"])
logger = logging.getLogger("contacts")

@router.post("/", response_model=Contact, status_code=status.HTTP_201_CREATED)
def create_contact(
    contact: ContactCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("contacts:create")),
    tenant_id: str = Depends(get_tenant_id)
):
    db_contact = ContactModel(**contact.model_dump(), tenant_id=tenant_id, created_by=get_user_identifier(user))
    db.add(db_contact)
    db.commit()
    db.refresh(db_contact)
    logger.info(f"Contact '{db_contact.name}' ({db_contact.type.value}) created by user {get_user_identifier(user)} for tenant {tenant_id}")
    return db_contact

@router.get("/", response_model=List[Contact])
def read_contacts(
    skip: int = 0,
    limit: int = 100,
    type: Optional[ContactType] = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("contacts:view_all", "contacts:view_own")),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
    tenant_id: str = Depends(get_tenant_id)
):
    own_contact = own_contact_scope(user, matrix, "contacts:view_all")
    if own_contact is not None:
        return [contacts_crud.get_contact(db, own_contact, tenant_id)]
    return contacts_crud.get_contacts(db, tenant_id, contact_type=type, include_inactive=include_inactive, skip=skip, limit=limit)

@router.get("/{contact_id}", response_model=Contact)
def read_contact(
    contact_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("contacts:view_all", "contacts:view_own")),
    matrix: PermissionMatrix = Depends(get_permission_matrix),
    tenant_id: str = Depends(get_tenant_id)
):
    own_contact = own_contact_scope(user, matrix, "contacts:view_all")
    if own_contact is not None and own_contact != contact_id:
        raise HTTPException(status_code=404, detail=f"Contact {contact_id} not found")
    return contacts_crud.get_contact(db, contact_id, tenant_id)

@router.put("/{contact_id}", response_model=Contact)
def update_contact(
    contact_id: int,
    contact_update: ContactUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("contacts:edit")),
    tenant_id: str = Depends(get_tenant_id)
):
    db_contact = contacts_crud.get_contact(db, contact_id, tenant_id)
    old_values = sqlalchemy_to_dict(db_contact)

    for key, value in contact_update.model_dump(exclude_unset=True).items():
        setattr(db_contact, key, value)
    db_contact.updated_by = get_user_identifier(user)
    db.flush()

    create_audit_log(db=db, log_entry=AuditLogCreate(
        table_name='contacts',
        record_id=contact_id,
        changed_by=get_user_identifier(user),
        action='UPDATE',
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_contact),
        tenant_id=tenant_id
    ))
    db.commit()
    db.refresh(db_contact)
    logger.info(f"Contact (ID: {contact_id}) updated by user {get_user_identifier(user)} for tenant {tenant_id}")
    return db_contact

@router.delete("/{contact_id}")
def archive_contact(
    contact_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("contacts:delete", "contacts:archive")),
    tenant_id: str = Depends(get_tenant_id)
):
    """Archive a contact. Orders and invoices keep referencing it."""
    db_contact = contacts_crud.get_contact(db, contact_id, tenant_id)
    db_contact.is_active = False
    db_contact.updated_by = get_user_identifier(user)
    db.commit()
    logger.info(f"Contact (ID: {contact_id}) archived by user {get_user_identifier(user)} for tenant {tenant_id}")
    return {"message": "Contact archived successfully"}
