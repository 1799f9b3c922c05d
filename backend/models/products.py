from sqlalchemy import Column, Integer, String, Numeric, Boolean, Enum
from database import Base
import enum
from models.audit_mixin import TimestampMixin

class ProductType(enum.Enum):
    GOODS = "GOODS"
    SERVICE = "SERVICE"

class Product(Base, TimestampMixin):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    name = Column(String(255), nullable=False)
    type = Column(Enum(ProductType, name="product_type"), default=ProductType.GOODS, nullable=False)
    sales_price = Column(Numeric(10, 2), nullable=True)
    purchase_price = Column(Numeric(10, 2), nullable=True)
    tax_percentage = Column(Numeric(5, 2), nullable=True)
    hsn_code = Column(String(20), nullable=True)
    category = Column(String(100), nullable=True) # e.g., "Hardware", "Consulting"
    is_active = Column(Boolean, default=True, nullable=False)
