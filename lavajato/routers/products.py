from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from starlette import status

from lavajato.auth_utils import get_current_role, require_admin
from lavajato.database import get_db
from lavajato.models.catalog import Product, ProductCreate, ProductUpdate
from lavajato.services.catalog import CatalogStore

router = APIRouter(prefix="/products", tags=["inventory"])


@router.get("", response_model=List[Product], name="list_products")
def list_products(db: Session = Depends(get_db), _=Depends(get_current_role)):
    return CatalogStore(db).list_products()


@router.get("/low-stock", response_model=List[Product], name="low_stock_products")
def low_stock_products(db: Session = Depends(get_db), _=Depends(get_current_role)):
    """Produtos abaixo do estoque mínimo."""
    return CatalogStore(db).list_low_stock()


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED, name="create_product")
def create_product(payload: ProductCreate, db: Session = Depends(get_db), _=Depends(require_admin)):
    return CatalogStore(db).create_product(payload.model_dump())


@router.put("/{product_id}", response_model=Product, name="update_product")
def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    return CatalogStore(db).update_product(product_id, payload.model_dump(exclude_unset=True))


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT, name="delete_product")
def delete_product(product_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    CatalogStore(db).delete_product(product_id)
