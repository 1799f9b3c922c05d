from sqlalchemy import Column, Integer, String, Numeric, Boolean, Text, JSON
from database import Base
from models.audit_mixin import TimestampMixin

class TaxRate(Base, TimestampMixin):
    __tablename__ = "tax_rates"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    rate = Column(Numeric(5, 2), nullable=False)
    type = Column(String(20), default="exclusive", nullable=False)  # exclusive, inclusive
    category = Column(String(20), default="both", nullable=False)  # sales, purchase, both
    hsn_codes = Column(JSON, default=list)
    is_default = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

class TaxConfiguration(Base, TimestampMixin):
    """One row per tenant; absent until the tenant first saves its settings."""
    __tablename__ = "tax_configuration"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, unique=True, index=True)
    enable_tax = Column(Boolean, default=True, nullable=False)
    default_tax_rate = Column(Numeric(5, 2), default=18, nullable=False)
    tax_display_format = Column(String(20), default="percentage", nullable=False)
    rounding_method = Column(String(20), default="round", nullable=False)  # round, floor, ceil
    compound_tax = Column(Boolean, default=False, nullable=False)
    tax_on_shipping = Column(Boolean, default=False, nullable=False)
    prices_include_tax = Column(Boolean, default=False, nullable=False)
