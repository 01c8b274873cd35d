# stockbook/routers/products.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from stockbook.database import get_db
from stockbook.core.auth import get_current_user
from stockbook.services import ledger
from stockbook.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
)

router = APIRouter(
    prefix="/products",
    tags=["Products"],
)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return ledger.create_product(db, current_user.id, **product_data.model_dump())


@router.get("", response_model=list[ProductResponse])
def list_products(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return ledger.list_products(db, current_user.id)


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return ledger.get_product(db, current_user.id, product_id)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return ledger.update_product(
        db,
        current_user.id,
        product_id,
        **product_data.model_dump(),
    )


# Deleting a missing or foreign product is still a 204
@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    ledger.delete_product(db, current_user.id, product_id)

    return None
