from sqlalchemy import Column, Integer, Numeric, ForeignKey, String, Enum, Index
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin

class OrderType(enum.Enum):
    PURCHASE = "PURCHASE"
    SALES = "SALES"
    INVOICE = "INVOICE"

class OrderStatus(enum.Enum):
    DRAFT = "DRAFT"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

class OrderItem(Base, TimestampMixin):
    """Line item of a purchase order, sales order or invoice.

    ``order_id`` points into the table selected by ``order_type``; there is no
    database-level foreign key because the target table varies.
    """
    __tablename__ = "order_items"
    __table_args__ = (Index('ix_order_items_order', 'order_id', 'order_type'),)

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, nullable=False)
    order_type = Column(Enum(OrderType, name="order_type"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Numeric(10, 2), nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    tax_amount = Column(Numeric(10, 2), default=0, nullable=False)
    discount_amount = Column(Numeric(10, 2), default=0, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False) # quantity * unit_price + tax - discount
    tenant_id = Column(String, index=True)

    # Relationships
    product = relationship("Product")
