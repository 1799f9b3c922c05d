from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Text
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

class PaymentMethodSetting(Base, TimestampMixin):
    __tablename__ = "payment_methods"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    name = Column(String(100), nullable=False)
    type = Column(String(20), nullable=False)  # CASH, BANK, CARD, DIGITAL
    account_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    account = relationship("ChartOfAccounts")

    @property
    def account_name(self):
        return self.account.name if self.account else None
