# stockbook/models/sales.py

from sqlalchemy import CheckConstraint, Column, Index, Integer, DateTime, ForeignKey, Numeric, String
from sqlalchemy.sql import func

from stockbook.database import Base


class Sale(Base):
    """One sale event against one product. Rows are never updated or deleted."""

    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Deleting a product keeps its sales; the pointer is cleared
    product_id = Column(
        Integer,
        ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    product_name = Column(String, nullable=False)

    quantity = Column(Integer, nullable=False)
    sale_price = Column(Numeric(10, 2), nullable=False)
    # Cost basis copied from the product when the sale was recorded
    purchase_price = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)

    sale_date = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    # Composite index for user and date filtering
    __table_args__ = (
        Index("ix_sales_user_sale_date", "user_id", "sale_date"),
        CheckConstraint("quantity > 0", name="ck_sale_quantity_positive"),
        CheckConstraint("sale_price >= 0", name="ck_sale_price_non_negative"),
        CheckConstraint("purchase_price >= 0", name="ck_sale_purchase_price_non_negative"),
    )
