from decimal import Decimal
from pydantic import BaseModel, Field
from datetime import datetime


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)

    purchase_price: Decimal = Field(
        ...,
        ge=0,
        lt=100_000_000,
        max_digits=10,
        decimal_places=2,
        description="Unit purchase price with at most 2 decimals, must be below 100 million"
    )

    quantity: int = Field(..., ge=0, description="Units on hand")

    purchase_date: datetime | None = None


# Quantity is deliberately absent: stock only moves through sales
class ProductUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    purchase_price: Decimal | None = Field(None, ge=0, lt=100_000_000, max_digits=10, decimal_places=2)
    purchase_date: datetime | None = None

class ProductResponse(BaseModel):
    id: int
    name: str
    purchase_price: Decimal
    quantity: int
    purchase_date: datetime
    created_at: datetime

    class Config:
        from_attributes = True
