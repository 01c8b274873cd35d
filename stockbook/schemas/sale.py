# schemas/sale.py

from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from decimal import Decimal

# sales.total_price is Numeric(12, 2)
MAX_SALE_TOTAL = Decimal("9999999999.99")
MAX_SALE_QUANTITY = 1_000_000

class SaleCreate(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0, le=MAX_SALE_QUANTITY)
    sale_price: Decimal = Field(..., ge=0, lt=100_000_000, max_digits=10, decimal_places=2)
    sale_date: datetime | None = None

    @model_validator(mode="after")
    def total_fits_column(self):
        if self.sale_price * self.quantity > MAX_SALE_TOTAL:
            raise ValueError(f"Sale total cannot exceed {MAX_SALE_TOTAL}")
        return self

class SaleResponse(BaseModel):
    id: int
    product_id: int | None
    product_name: str
    quantity: int
    sale_price: Decimal
    purchase_price: Decimal
    total_price: Decimal
    sale_date: datetime

    class Config:
        from_attributes = True
