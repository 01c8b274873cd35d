# stockbook/models/products.py

from sqlalchemy import CheckConstraint, Column, Index, Integer, String, Numeric, ForeignKey, DateTime
from sqlalchemy.sql import func

from stockbook.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    name = Column(String, nullable=False)
    purchase_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)

    purchase_date = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_products_user_id_id", "user_id", "id"),
        CheckConstraint("purchase_price >= 0", name="ck_purchase_price_non_negative"),
        CheckConstraint("quantity >= 0", name="ck_product_quantity_non_negative"),
    )
