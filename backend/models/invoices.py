from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, Enum, UniqueConstraint, and_
from sqlalchemy.orm import relationship, foreign
from database import Base
import enum
from models.audit_mixin import TimestampMixin
from models.order_items import OrderItem, OrderType

class InvoiceType(enum.Enum):
    PURCHASE = "PURCHASE" # vendor bill
    SALES = "SALES" # customer invoice

class InvoiceStatus(enum.Enum):
    UNPAID = "UNPAID"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"

class Invoice(Base, TimestampMixin):
    __tablename__ = "invoices"
    __table_args__ = (UniqueConstraint('tenant_id', 'invoice_number', name='_tenant_invoice_number_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String(50), index=True, nullable=False) # BILL-/INV-YYYYMM-NNNN
    type = Column(Enum(InvoiceType, name="invoice_type"), nullable=False)
    contact_id = Column(Integer, ForeignKey("contacts.id"), nullable=False)
    order_id = Column(Integer, nullable=True) # purchase or sales order, depending on type
    invoice_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    status = Column(Enum(InvoiceStatus, name="invoice_status"), default=InvoiceStatus.UNPAID, nullable=False)
    sub_total = Column(Numeric(12, 2), default=0, nullable=False)
    tax_amount = Column(Numeric(12, 2), default=0, nullable=False)
    discount_amount = Column(Numeric(12, 2), default=0, nullable=False)
    total_amount = Column(Numeric(12, 2), default=0, nullable=False)
    paid_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False) # sum of payments
    balance_amount = Column(Numeric(12, 2), default=0, server_default='0', nullable=False) # total - paid, floored at 0
    currency = Column(String(3), default="INR", nullable=False)
    notes = Column(Text, nullable=True)
    tenant_id = Column(String, index=True)

    # Relationships
    contact = relationship("Contact", back_populates="invoices")
    payments = relationship("Payment", back_populates="invoice", cascade="all, delete-orphan", order_by="Payment.payment_date")
    items = relationship(
        OrderItem,
        primaryjoin=lambda: and_(
            Invoice.id == foreign(OrderItem.order_id),
            OrderItem.order_type == OrderType.INVOICE,
        ),
        order_by=OrderItem.id,
        viewonly=True,
    )
