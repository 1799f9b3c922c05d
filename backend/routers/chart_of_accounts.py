from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
from database import get_db
from crud import chart_of_accounts as chart_of_accounts_crud
from schemas.chart_of_accounts import ChartOfAccounts, ChartOfAccountsCreate, ChartOfAccountsUpdate
from utils.auth_utils import require_permission, get_user_identifier
from utils.tenancy import get_tenant_id

router = APIRouter(
    prefix="/chart-of-accounts",
    tags=["Chart of Accounts"],
)
logger = logging.getLogger("chart_of_accounts")

@router.post("/", response_model=ChartOfAccounts, status_code=status.HTTP_201_CREATED)
def create_account(
    account: ChartOfAccountsCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("coa:create")),
    tenant_id: str = Depends(get_tenant_id)
):
    # Check if account code already exists for this tenant
    if chart_of_accounts_crud.get_account_by_code(db, account.code, tenant_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Account with code {account.code} already exists"
        )

    db_account = chart_of_accounts_crud.create_account(db, account, tenant_id, created_by=get_user_identifier(user))
    db.commit()
    db.refresh(db_account)
    logger.info(f"Account {db_account.code} '{db_account.name}' created by user {get_user_identifier(user)} for tenant {tenant_id}")
    return db_account

@router.post("/initialize", response_model=List[ChartOfAccounts])
def initialize_accounts(
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("coa:create")),
    tenant_id: str = Depends(get_tenant_id)
):
    """Seed the default accounts for this tenant. Returns only the newly created ones."""
    created = chart_of_accounts_crud.initialize_default_accounts(db, tenant_id, created_by=get_user_identifier(user))
    db.commit()
    for account in created:
        db.refresh(account)
    logger.info(f"Initialized {len(created)} default account(s) for tenant {tenant_id}")
    return created

@router.get("/", response_model=List[ChartOfAccounts])
def get_accounts(
    account_type: Optional[str] = None,
    include_inactive: bool = False,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("coa:view")),
    tenant_id: str = Depends(get_tenant_id)
):
    return chart_of_accounts_crud.get_accounts(
        db, tenant_id, account_type=account_type, include_inactive=include_inactive, skip=skip, limit=limit
    )

@router.get("/{account_id}", response_model=ChartOfAccounts)
def get_account(
    account_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("coa:view")),
    tenant_id: str = Depends(get_tenant_id)
):
    return chart_of_accounts_crud.get_account(db, account_id, tenant_id)

@router.patch("/{account_id}", response_model=ChartOfAccounts)
def update_account(
    account_id: int,
    account_update: ChartOfAccountsUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("coa:edit")),
    tenant_id: str = Depends(get_tenant_id)
):
    if account_update.parent_id is not None and account_update.parent_id == account_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="An account cannot be its own parent."
        )

    account = chart_of_accounts_crud.update_account(db, account_id, account_update, tenant_id, updated_by=get_user_identifier(user))
    db.commit()
    db.refresh(account)
    logger.info(f"Account (ID: {account_id}) updated by user {get_user_identifier(user)} for tenant {tenant_id}")
    return account

@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(
    account_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("coa:delete")),
    tenant_id: str = Depends(get_tenant_id)
):
    # Soft delete by setting is_active to False
    chart_of_accounts_crud.deactivate_account(db, account_id, tenant_id, updated_by=get_user_identifier(user))
    db.commit()
    logger.info(f"Account (ID: {account_id}) deactivated by user {get_user_identifier(user)} for tenant {tenant_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
