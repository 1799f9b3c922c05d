from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from crud.order_status import ensure_product
from models.products import Product as ProductModel, ProductType
from schemas.products import Product, ProductCreate, ProductUpdate
from utils.auth_utils import require_permission, get_user_identifier
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/products", tags=["Products"])
logger = logging.getLogger("products")

@router.post("/", response_model=Product, status_code=status.HTTP_201_CREATED)
def create_product(
    product: ProductCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("products:create")),
    tenant_id: str = Depends(get_tenant_id)
):
    db_product = ProductModel(**product.model_dump(), tenant_id=tenant_id, created_by=get_user_identifier(user))
    db.add(db_product)
    db.commit()
    db.refresh(db_product)
    logger.info(f"Product '{db_product.name}' created by user {get_user_identifier(user)} for tenant {tenant_id}")
    return db_product

@router.get("/", response_model=List[Product])
def read_products(
    skip: int = 0,
    limit: int = 100,
    type: Optional[ProductType] = None,
    category: Optional[str] = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("products:view")),
    tenant_id: str = Depends(get_tenant_id)
):
    query = db.query(ProductModel).filter(ProductModel.tenant_id == tenant_id)
    if not include_inactive:
        query = query.filter(ProductModel.is_active == True)
    if type:
        query = query.filter(ProductModel.type == type)
    if category:
        query = query.filter(ProductModel.category == category)
    return query.order_by(ProductModel.name).offset(skip).limit(limit).all()

@router.get("/{product_id}", response_model=Product)
def read_product(
    product_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("products:view")),
    tenant_id: str = Depends(get_tenant_id)
):
    return ensure_product(db, product_id, tenant_id)

@router.put("/{product_id}", response_model=Product)
def update_product(
    product_id: int,
    product_update: ProductUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("products:edit")),
    tenant_id: str = Depends(get_tenant_id)
):
    db_product = ensure_product(db, product_id, tenant_id)
    for key, value in product_update.model_dump(exclude_unset=True).items():
        setattr(db_product, key, value)
    db_product.updated_by = get_user_identifier(user)
    db.commit()
    db.refresh(db_product)
    logger.info(f"Product (ID: {product_id}) updated by user {get_user_identifier(user)} for tenant {tenant_id}")
    return db_product

@router.delete("/{product_id}")
def archive_product(
    product_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("products:delete", "products:archive")),
    tenant_id: str = Depends(get_tenant_id)
):
    # Archived products stay on existing order and invoice lines
    db_product = ensure_product(db, product_id, tenant_id)
    db_product.is_active = False
    db_product.updated_by = get_user_identifier(user)
    db.commit()
    logger.info(f"Product (ID: {product_id}) archived by user {get_user_identifier(user)} for tenant {tenant_id}")
    return {"message": "Product archived successfully"}
