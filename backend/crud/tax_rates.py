from sqlalchemy.orm import Session
import logging
from models.tax_rates import TaxRate, TaxConfiguration
from schemas.tax_rates import TaxRateCreate, TaxRateUpdate, TaxConfigurationUpdate
from exceptions import TaxRateNotFound

logger = logging.getLogger("tax_rates")

def get_tax_rate(db: Session, tax_rate_id: int, tenant_id: str):
    tax_rate = db.query(TaxRate).filter(TaxRate.id == tax_rate_id, TaxRate.tenant_id == tenant_id).first()
    if not tax_rate:
        raise TaxRateNotFound(tax_rate_id)
    return tax_rate

def get_tax_rates(db: Session, tenant_id: str, category: str = None, include_inactive: bool = True):
    query = db.query(TaxRate).filter(TaxRate.tenant_id == tenant_id)
    if not include_inactive:
        query = query.filter(TaxRate.is_active == True)
    if category:
        # "both" rates apply to sales and purchases alike
        query = query.filter(TaxRate.category.in_([category.lower(), "both"]))
    return query.order_by(TaxRate.name).all()

def _clear_default(db: Session, tenant_id: str, keep_id: int = None):
    query = db.query(TaxRate).filter(TaxRate.tenant_id == tenant_id, TaxRate.is_default == True)
    if keep_id is not None:
        query = query.filter(TaxRate.id != keep_id)
    for other in query.all():
        other.is_default = False

def create_tax_rate(db: Session, tax_rate: TaxRateCreate, tenant_id: str, created_by: str = None):
    if tax_rate.is_default:
        _clear_default(db, tenant_id)
    db_tax_rate = TaxRate(**tax_rate.model_dump(), tenant_id=tenant_id, created_by=created_by)
    db.add(db_tax_rate)
    db.flush()
    return db_tax_rate

def update_tax_rate(db: Session, tax_rate_id: int, tax_rate_update: TaxRateUpdate, tenant_id: str, updated_by: str = None):
    db_tax_rate = get_tax_rate(db, tax_rate_id, tenant_id)
    update_data = tax_rate_update.model_dump(exclude_unset=True)
    if update_data.get("is_default"):
        _clear_default(db, tenant_id, keep_id=tax_rate_id)
    for key, value in update_data.items():
        if value is not None:
            setattr(db_tax_rate, key, value)
    db_tax_rate.updated_by = updated_by
    db.flush()
    return db_tax_rate

def delete_tax_rate(db: Session, tax_rate_id: int, tenant_id: str):
    db_tax_rate = get_tax_rate(db, tax_rate_id, tenant_id)
    db.delete(db_tax_rate)
    db.flush()
    return db_tax_rate

def get_tax_configuration(db: Session, tenant_id: str):
    """The tenant's stored settings, or an unsaved row carrying the defaults."""
    config = db.query(TaxConfiguration).filter(TaxConfiguration.tenant_id == tenant_id).first()
    if config:
        return config
    return TaxConfiguration(tenant_id=tenant_id, **TaxConfigurationUpdate().model_dump())

def save_tax_configuration(db: Session, config_in: TaxConfigurationUpdate, tenant_id: str, updated_by: str = None):
    config = db.query(TaxConfiguration).filter(TaxConfiguration.tenant_id == tenant_id).first()
    if config is None:
        config = TaxConfiguration(tenant_id=tenant_id, created_by=updated_by)
        db.add(config)
        logger.info(f"Creating tax configuration for tenant {tenant_id}")
    for key, value in config_in.model_dump().items():
        setattr(config, key, value)
    config.updated_by = updated_by
    db.flush()
    return config
