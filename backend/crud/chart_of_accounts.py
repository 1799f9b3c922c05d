from sqlalchemy.orm import Session
from models import chart_of_accounts as chart_of_accounts_model
from schemas.chart_of_accounts import ChartOfAccountsCreate, ChartOfAccountsUpdate
from exceptions import AccountNotFound

def get_account(db: Session, account_id: int, tenant_id: str):
    account = db.query(chart_of_accounts_model.ChartOfAccounts).filter(
        chart_of_accounts_model.ChartOfAccounts.id == account_id,
        chart_of_accounts_model.ChartOfAccounts.tenant_id == tenant_id
    ).first()
    if not account:
        raise AccountNotFound(account_id)
    return account

def get_account_by_code(db: Session, code: str, tenant_id: str):
    return db.query(chart_of_accounts_model.ChartOfAccounts).filter(
        chart_of_accounts_model.ChartOfAccounts.code == code,
        chart_of_accounts_model.ChartOfAccounts.tenant_id == tenant_id
    ).first()

def get_accounts(db: Session, tenant_id: str, account_type: str = None, include_inactive: bool = False, skip: int = 0, limit: int = 100):
    query = db.query(chart_of_accounts_model.ChartOfAccounts).filter(
        chart_of_accounts_model.ChartOfAccounts.tenant_id == tenant_id
    )
    if not include_inactive:
        query = query.filter(chart_of_accounts_model.ChartOfAccounts.is_active == True)

    if account_type:
        query = query.filter(chart_of_accounts_model.ChartOfAccounts.type == account_type.upper())

    return query.order_by(chart_of_accounts_model.ChartOfAccounts.code).offset(skip).limit(limit).all()

def create_account(db: Session, account: ChartOfAccountsCreate, tenant_id: str, created_by: str = None):
    if account.parent_id is not None:
        get_account(db, account.parent_id, tenant_id)
    db_account = chart_of_accounts_model.ChartOfAccounts(**account.model_dump(), tenant_id=tenant_id, created_by=created_by)
    db.add(db_account)
    db.flush()
    return db_account

def update_account(db: Session, account_id: int, account_update: ChartOfAccountsUpdate, tenant_id: str, updated_by: str = None):
    db_account = get_account(db, account_id, tenant_id)

    update_data = account_update.model_dump(exclude_unset=True)
    if update_data.get("parent_id") is not None:
        get_account(db, update_data["parent_id"], tenant_id)
    for key, value in update_data.items():
        setattr(db_account, key, value)
    db_account.updated_by = updated_by

    db.flush()
    return db_account

def deactivate_account(db: Session, account_id: int, tenant_id: str, updated_by: str = None):
    db_account = get_account(db, account_id, tenant_id)

    # Soft delete by setting is_active to False
    db_account.is_active = False
    db_account.updated_by = updated_by
    db.flush()
    return db_account

def initialize_default_accounts(db: Session, tenant_id: str, created_by: str = None):
    """Seed the default chart of accounts for a new tenant; existing codes are left alone."""
    default_accounts = [
        {"code": "1000", "name": "Cash", "type": "ASSET"},
        {"code": "1010", "name": "Bank", "type": "ASSET"},
        {"code": "1100", "name": "Accounts Receivable", "type": "ASSET"},
        {"code": "1200", "name": "Inventory", "type": "ASSET"},
        {"code": "2000", "name": "Accounts Payable", "type": "LIABILITY"},
        {"code": "2100", "name": "Taxes Payable", "type": "LIABILITY"},
        {"code": "3000", "name": "Owner's Equity", "type": "EQUITY"},
        {"code": "4000", "name": "Sales Revenue", "type": "INCOME"},
        {"code": "5000", "name": "Cost of Goods Sold", "type": "EXPENSE"},
        {"code": "6000", "name": "Operating Expenses", "type": "EXPENSE"},
    ]

    created = []
    for account_data in default_accounts:
        existing = get_account_by_code(db, account_data["code"], tenant_id)
        if not existing:
            created.append(create_account(db, ChartOfAccountsCreate(**account_data), tenant_id, created_by))

    return created
