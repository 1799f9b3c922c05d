from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, UniqueConstraint
from database import Base
from models.audit_mixin import TimestampMixin

class ChartOfAccounts(Base, TimestampMixin):
    __tablename__ = "chart_of_accounts"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(20), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    type = Column(String(20), nullable=False)  # ASSET, LIABILITY, EQUITY, INCOME, EXPENSE
    parent_id = Column(Integer, ForeignKey("chart_of_accounts.id"), nullable=True)
    is_active = Column(Boolean, default=True)
    tenant_id = Column(String, index=True)

    __table_args__ = (
        UniqueConstraint('tenant_id', 'code', name='_tenant_account_code_uc'),
    )
