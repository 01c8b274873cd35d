# stockbook/services/sales.py

"""
Sale transaction processing.

``record_sale`` turns a sale request into one of two outcomes: the product
loses ``quantity`` units and a new Sale row exists, or nothing changed at
all. The stock check, the decrement and the insert share one transaction;
any error rolls the whole thing back before it reaches the caller.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockbook.core.errors import InsufficientStock, NotFound, StockbookError, StorageFailure, parse_input
from stockbook.models.products import Product
from stockbook.models.sales import Sale
from stockbook.schemas.sale import SaleCreate
from stockbook.services.ledger import decrement_quantity

logger = logging.getLogger("stockbook.sales")


def record_sale(
    db: Session,
    user_id: int,
    product_id: int,
    quantity: int,
    sale_price,
    sale_date: datetime | None = None,
) -> Sale:
    data = parse_input(
        SaleCreate,
        product_id=product_id,
        quantity=quantity,
        sale_price=sale_price,
        sale_date=sale_date,
    )

    try:
        # Row lock where the backend supports it (no-op on SQLite)
        product = (
            db.query(Product)
            .filter(
                Product.id == data.product_id,
                Product.user_id == user_id,
            )
            .populate_existing()
            .with_for_update()
            .first()
        )

        if product is None:
            raise NotFound("Product not found")

        if product.quantity < data.quantity:
            raise InsufficientStock(
                f"Insufficient stock for {product.name}: "
                f"{product.quantity} available, {data.quantity} requested"
            )

        sale = Sale(
            user_id=user_id,
            product_id=product.id,
            product_name=product.name,
            quantity=data.quantity,
            sale_price=data.sale_price,
            purchase_price=product.purchase_price,
            total_price=data.sale_price * data.quantity,
            sale_date=data.sale_date or datetime.now(timezone.utc),
        )

        decrement_quantity(db, user_id, product.id, data.quantity)
        db.add(sale)
        db.commit()
        db.refresh(sale)

    except StockbookError as exc:
        db.rollback()
        logger.warning(
            "Sale rejected for user %s product %s: %s",
            user_id, data.product_id, exc.message,
        )
        raise

    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Sale failed for user %s product %s", user_id, data.product_id)
        raise StorageFailure("Unable to complete sale") from exc

    logger.info(
        "Sale %s recorded: user=%s product=%s qty=%s total=%s",
        sale.id, user_id, sale.product_id, sale.quantity, sale.total_price,
    )
    return sale


def list_sales(db: Session, user_id: int) -> list[Sale]:
    try:
        return (
            db.query(Sale)
            .filter(Sale.user_id == user_id)
            .order_by(Sale.sale_date.desc(), Sale.id.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to list sales for user %s", user_id)
        raise StorageFailure("Unable to load sales") from exc


def get_sale(db: Session, user_id: int, sale_id: int) -> Sale:
    try:
        sale = (
            db.query(Sale)
            .filter(
                Sale.id == sale_id,
                Sale.user_id == user_id,
            )
            .first()
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to load sale %s", sale_id)
        raise StorageFailure("Unable to load sale") from exc

    if sale is None:
        raise NotFound("Sale not found")

    return sale
