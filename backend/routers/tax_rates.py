from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
from database import get_db
from crud import tax_rates as tax_rates_crud
from schemas.tax_rates import TaxRate, TaxRateCreate, TaxRateUpdate, TaxConfiguration, TaxConfigurationUpdate
from utils.auth_utils import require_permission, get_user_identifier
from utils.tenancy import get_tenant_id

router = APIRouter(
    prefix="/taxes",
    tags=["Taxes"],
)
logger = logging.getLogger("tax_rates")

# /config is declared before /{tax_rate_id} so it is not read as an id
@router.get("/config", response_model=TaxConfiguration)
def read_tax_configuration(
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("taxes:view")),
    tenant_id: str = Depends(get_tenant_id)
):
    return tax_rates_crud.get_tax_configuration(db, tenant_id)

@router.put("/config", response_model=TaxConfiguration)
def update_tax_configuration(
    config: TaxConfigurationUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("taxes:edit")),
    tenant_id: str = Depends(get_tenant_id)
):
    db_config = tax_rates_crud.save_tax_configuration(db, config, tenant_id, updated_by=get_user_identifier(user))
    db.commit()
    db.refresh(db_config)
    logger.info(f"Tax configuration updated by user {get_user_identifier(user)} for tenant {tenant_id}")
    return db_config

@router.post("/", response_model=TaxRate, status_code=status.HTTP_201_CREATED)
def create_tax_rate(
    tax_rate: TaxRateCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("taxes:create")),
    tenant_id: str = Depends(get_tenant_id)
):
    db_tax_rate = tax_rates_crud.create_tax_rate(db, tax_rate, tenant_id, created_by=get_user_identifier(user))
    db.commit()
    db.refresh(db_tax_rate)
    logger.info(f"Tax rate '{db_tax_rate.name}' ({db_tax_rate.rate}%) created by user {get_user_identifier(user)} for tenant {tenant_id}")
    return db_tax_rate

@router.get("/", response_model=List[TaxRate])
def read_tax_rates(
    category: Optional[str] = None,
    include_inactive: bool = True,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("taxes:view")),
    tenant_id: str = Depends(get_tenant_id)
):
    return tax_rates_crud.get_tax_rates(db, tenant_id, category=category, include_inactive=include_inactive)

@router.put("/{tax_rate_id}", response_model=TaxRate)
def update_tax_rate(
    tax_rate_id: int,
    tax_rate_update: TaxRateUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("taxes:edit")),
    tenant_id: str = Depends(get_tenant_id)
):
    db_tax_rate = tax_rates_crud.update_tax_rate(db, tax_rate_id, tax_rate_update, tenant_id, updated_by=get_user_identifier(user))
    db.commit()
    db.refresh(db_tax_rate)
    logger.info(f"Tax rate (ID: {tax_rate_id}) updated by user {get_user_identifier(user)} for tenant {tenant_id}")
    return db_tax_rate

@router.delete("/{tax_rate_id}")
def delete_tax_rate(
    tax_rate_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("taxes:delete")),
    tenant_id: str = Depends(get_tenant_id)
):
    tax_rates_crud.delete_tax_rate(db, tax_rate_id, tenant_id)
    db.commit()
    logger.info(f"Tax rate (ID: {tax_rate_id}) deleted by user {get_user_identifier(user)} for tenant {tenant_id}")
    return {"message": "Tax rate deleted successfully"}
