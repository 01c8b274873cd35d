# schemas/report.py

from pydantic import BaseModel
from datetime import date
from decimal import Decimal
from typing import List

from stockbook.schemas.sale import SaleResponse


class SummaryReportResponse(BaseModel):
    total_revenue: Decimal
    total_profit: Decimal
    inventory_value: Decimal
    remaining_capital: Decimal
    total_products: int
    total_sales: int


class DailyReportResponse(BaseModel):
    day: date
    total_revenue: Decimal
    total_profit: Decimal
    total_sales: int
    sales: List[SaleResponse]
