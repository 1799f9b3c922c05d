from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, Enum, UniqueConstraint, and_
from sqlalchemy.orm import relationship, foreign
from database import Base
from models.audit_mixin import TimestampMixin
from models.order_items import OrderItem, OrderStatus, OrderType

class PurchaseOrder(Base, TimestampMixin):
    __tablename__ = "purchase_orders"
    __table_args__ = (UniqueConstraint('tenant_id', 'po_number', name='_tenant_po_number_uc'),)

    order_type = OrderType.PURCHASE

    id = Column(Integer, primary_key=True, index=True)
    po_number = Column(String(50), index=True, nullable=False) # PO-YYYYMM-NNNN, sequential per tenant and month
    vendor_id = Column(Integer, ForeignKey("contacts.id"), nullable=False)
    order_date = Column(Date, nullable=False)
    status = Column(Enum(OrderStatus, name="order_status"), default=OrderStatus.DRAFT, nullable=False)
    total_amount = Column(Numeric(12, 2), default=0, nullable=False)
    notes = Column(Text, nullable=True)
    tenant_id = Column(String, index=True)

    # Relationships
    vendor = relationship("Contact", back_populates="purchase_orders", foreign_keys=[vendor_id])
    items = relationship(
        OrderItem,
        primaryjoin=lambda: and_(
            PurchaseOrder.id == foreign(OrderItem.order_id),
            OrderItem.order_type == OrderType.PURCHASE,
        ),
        order_by=OrderItem.id,
        viewonly=True,
    )

    @property
    def number(self):
        return self.po_number

    @property
    def contact_id(self):
        return self.vendor_id
