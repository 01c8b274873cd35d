# stockbook/services/ledger.py

"""
Inventory ledger: products owned by a user and the one place their
quantity goes down.

Every query is filtered by ``user_id`` so a guessed product id from
another account behaves exactly like a missing one.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockbook.core.errors import InsufficientStock, NotFound, StorageFailure, parse_input
from stockbook.models.products import Product
from stockbook.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger("stockbook.ledger")


def _first_owned(db: Session, user_id: int, product_id: int):
    try:
        return (
            db.query(Product)
            .filter(
                Product.id == product_id,
                Product.user_id == user_id,
            )
            .first()
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to load product %s", product_id)
        raise StorageFailure("Unable to load product") from exc


def create_product(
    db: Session,
    user_id: int,
    name: str,
    purchase_price,
    quantity: int,
    purchase_date: datetime | None = None,
) -> Product:
    data = parse_input(
        ProductCreate,
        name=name,
        purchase_price=purchase_price,
        quantity=quantity,
        purchase_date=purchase_date,
    )

    product = Product(
        user_id=user_id,
        name=data.name,
        purchase_price=data.purchase_price,
        quantity=data.quantity,
        purchase_date=data.purchase_date or datetime.now(timezone.utc),
    )

    try:
        db.add(product)
        db.commit()
        db.refresh(product)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to create product for user %s", user_id)
        raise StorageFailure("Unable to save product") from exc

    logger.info("Product %s created for user %s (qty=%s)", product.id, user_id, product.quantity)
    return product


def list_products(db: Session, user_id: int) -> list[Product]:
    try:
        return (
            db.query(Product)
            .filter(Product.user_id == user_id)
            .order_by(Product.id)
            .all()
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to list products for user %s", user_id)
        raise StorageFailure("Unable to load products") from exc


def get_product(db: Session, user_id: int, product_id: int) -> Product:
    product = _first_owned(db, user_id, product_id)

    if product is None:
        raise NotFound("Product not found")

    return product


def update_product(
    db: Session,
    user_id: int,
    product_id: int,
    name: str | None = None,
    purchase_price=None,
    purchase_date: datetime | None = None,
) -> Product:
    """Edit descriptive fields. Existing sales keep the price they were sold at."""
    data = parse_input(
        ProductUpdate,
        name=name,
        purchase_price=purchase_price,
        purchase_date=purchase_date,
    )

    product = get_product(db, user_id, product_id)

    if data.name is not None:
        product.name = data.name

    if data.purchase_price is not None:
        product.purchase_price = data.purchase_price

    if data.purchase_date is not None:
        product.purchase_date = data.purchase_date

    try:
        db.commit()
        db.refresh(product)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to update product %s", product_id)
        raise StorageFailure("Unable to update product") from exc

    return product


def delete_product(db: Session, user_id: int, product_id: int) -> None:
    """Hard delete. Missing or foreign ids are silently ignored."""
    product = _first_owned(db, user_id, product_id)

    if product is None:
        return None

    try:
        db.delete(product)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to delete product %s", product_id)
        raise StorageFailure("Unable to delete product") from exc

    logger.info("Product %s deleted by user %s", product_id, user_id)
    return None


def decrement_quantity(db: Session, user_id: int, product_id: int, amount: int) -> None:
    """
    Take ``amount`` units off a product inside the caller's transaction.

    Only ``services.sales.record_sale`` calls this. The UPDATE carries its
    own stock guard, so two transactions that both passed the read-side
    check cannot push quantity below zero. Nothing is committed here.
    """
    result = db.execute(
        update(Product)
        .where(
            Product.id == product_id,
            Product.user_id == user_id,
            Product.quantity >= amount,
        )
        .values(quantity=Product.quantity - amount)
        .execution_options(synchronize_session=False)
    )

    if result.rowcount != 1:
        raise InsufficientStock("Insufficient stock for this product")
