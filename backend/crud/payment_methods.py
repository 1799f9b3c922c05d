from sqlalchemy.orm import Session
from models.payment_methods import PaymentMethodSetting
from schemas.payment_methods import PaymentMethodCreate, PaymentMethodUpdate
from crud.chart_of_accounts import get_account
from exceptions import PaymentMethodNotFound

def get_payment_method(db: Session, payment_method_id: int, tenant_id: str):
    method = db.query(PaymentMethodSetting).filter(
        PaymentMethodSetting.id == payment_method_id,
        PaymentMethodSetting.tenant_id == tenant_id
    ).first()
    if not method:
        raise PaymentMethodNotFound(payment_method_id)
    return method

def get_payment_methods(db: Session, tenant_id: str, include_inactive: bool = False):
    query = db.query(PaymentMethodSetting).filter(PaymentMethodSetting.tenant_id == tenant_id)
    if not include_inactive:
        query = query.filter(PaymentMethodSetting.is_active == True)
    return query.order_by(PaymentMethodSetting.name).all()

def create_payment_method(db: Session, method: PaymentMethodCreate, tenant_id: str, created_by: str = None):
    if method.account_id is not None:
        get_account(db, method.account_id, tenant_id)
    db_method = PaymentMethodSetting(**method.model_dump(), tenant_id=tenant_id, created_by=created_by)
    db.add(db_method)
    db.flush()
    return db_method

def update_payment_method(db: Session, payment_method_id: int, method_update: PaymentMethodUpdate, tenant_id: str, updated_by: str = None):
    db_method = get_payment_method(db, payment_method_id, tenant_id)
    update_data = method_update.model_dump(exclude_unset=True)
    if update_data.get("account_id") is not None:
        get_account(db, update_data["account_id"], tenant_id)
    for key, value in update_data.items():
        setattr(db_method, key, value)
    db_method.updated_by = updated_by
    db.flush()
    return db_method

def deactivate_payment_method(db: Session, payment_method_id: int, tenant_id: str, updated_by: str = None):
    db_method = get_payment_method(db, payment_method_id, tenant_id)
    db_method.is_active = False
    db_method.updated_by = updated_by
    db.flush()
    return db_method
