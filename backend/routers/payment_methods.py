from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
import logging
from database import get_db
from crud import payment_methods as payment_methods_crud
from schemas.payment_methods import PaymentMethod, PaymentMethodCreate, PaymentMethodUpdate
from utils.auth_utils import require_permission, get_user_identifier
from utils.tenancy import get_tenant_id

router = APIRouter(
    prefix="/payment-methods",
    tags=["Payment Methods"],
)
logger = logging.getLogger("payment_methods")

@router.post("/", response_model=PaymentMethod, status_code=status.HTTP_201_CREATED)
def create_payment_method(
    method: PaymentMethodCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("transactions:payments:create")),
    tenant_id: str = Depends(get_tenant_id)
):
    db_method = payment_methods_crud.create_payment_method(db, method, tenant_id, created_by=get_user_identifier(user))
    db.commit()
    db.refresh(db_method)
    logger.info(f"Payment method '{db_method.name}' ({db_method.type}) created by user {get_user_identifier(user)} for tenant {tenant_id}")
    return db_method

@router.get("/", response_model=List[PaymentMethod])
def read_payment_methods(
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("transactions:payments:view")),
    tenant_id: str = Depends(get_tenant_id)
):
    return payment_methods_crud.get_payment_methods(db, tenant_id, include_inactive=include_inactive)

@router.get("/{payment_method_id}", response_model=PaymentMethod)
def read_payment_method(
    payment_method_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("transactions:payments:view")),
    tenant_id: str = Depends(get_tenant_id)
):
    return payment_methods_crud.get_payment_method(db, payment_method_id, tenant_id)

@router.put("/{payment_method_id}", response_model=PaymentMethod)
def update_payment_method(
    payment_method_id: int,
    method_update: PaymentMethodUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("transactions:payments:edit")),
    tenant_id: str = Depends(get_tenant_id)
):
    db_method = payment_methods_crud.update_payment_method(
        db, payment_method_id, method_update, tenant_id, updated_by=get_user_identifier(user)
    )
    db.commit()
    db.refresh(db_method)
    logger.info(f"Payment method (ID: {payment_method_id}) updated by user {get_user_identifier(user)} for tenant {tenant_id}")
    return db_method

@router.delete("/{payment_method_id}")
def deactivate_payment_method(
    payment_method_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("transactions:payments:delete")),
    tenant_id: str = Depends(get_tenant_id)
):
    payment_methods_crud.deactivate_payment_method(db, payment_method_id, tenant_id, updated_by=get_user_identifier(user))
    db.commit()
    logger.info(f"Payment method (ID: {payment_method_id}) deactivated by user {get_user_identifier(user)} for tenant {tenant_id}")
    return {"message": "Payment method deactivated"}
