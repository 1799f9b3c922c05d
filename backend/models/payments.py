from sqlalchemy import Column, Integer, Numeric, Date, String, ForeignKey, Text, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin

class PaymentMethod(enum.Enum):
    CASH = "CASH"
    BANK = "BANK"
    CHEQUE = "CHEQUE"
    CARD = "CARD"
    DIGITAL = "DIGITAL"

class Payment(Base, TimestampMixin):
    __tablename__ = "payments"
    __table_args__ = (UniqueConstraint('tenant_id', 'payment_number', name='_tenant_payment_number_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    payment_number = Column(String(50), index=True, nullable=True) # YYYY-NNNN
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False)
    payment_date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(Enum(PaymentMethod, name="payment_method"), default=PaymentMethod.CASH, nullable=False)
    reference = Column(String(100), nullable=True) # Cheque number, transaction ID etc.
    bank_account = Column(String(100), nullable=True)
    cheque_date = Column(Date, nullable=True)
    clearance_date = Column(Date, nullable=True)
    status = Column(String(20), default="COMPLETED", nullable=False)
    currency = Column(String(3), default="INR", nullable=False)
    notes = Column(Text, nullable=True)
    tenant_id = Column(String, index=True)

    # Relationships
    invoice = relationship("Invoice", back_populates="payments")
