# stockbook/services/metrics.py

"""
Profit and inventory figures derived from a user's products and sales.

Everything here is a pure function of the collections passed in: no
session, no writes. Inputs only need the attributes used below, so ORM
rows and plain objects work the same.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Sequence


def _dec(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def total_revenue(sales: Iterable) -> Decimal:
    return sum((_dec(sale.total_price) for sale in sales), Decimal("0"))


def total_profit(sales: Iterable) -> Decimal:
    return sum(
        ((_dec(sale.sale_price) - _dec(sale.purchase_price)) * sale.quantity for sale in sales),
        Decimal("0"),
    )


def inventory_value(products: Iterable) -> Decimal:
    return sum(
        (_dec(product.purchase_price) * product.quantity for product in products),
        Decimal("0"),
    )


def remaining_capital(products: Iterable, sales: Iterable) -> Decimal:
    return inventory_value(products) + total_profit(sales)


def sales_on_day(sales: Iterable, day: date) -> list:
    """Sales whose ``sale_date`` falls on ``day``, comparing the date part only."""
    return [sale for sale in sales if _day_of(sale.sale_date) == day]


def _day_of(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def summarize(products: Sequence, sales: Sequence) -> dict:
    profit = total_profit(sales)
    stock_value = inventory_value(products)

    return {
        "total_revenue": total_revenue(sales),
        "total_profit": profit,
        "inventory_value": stock_value,
        "remaining_capital": stock_value + profit,
        "total_products": len(products),
        "total_sales": len(sales),
    }


def summarize_day(sales: Sequence, day: date) -> dict:
    day_sales = sales_on_day(sales, day)

    return {
        "day": day,
        "total_revenue": total_revenue(day_sales),
        "total_profit": total_profit(day_sales),
        "total_sales": len(day_sales),
        "sales": day_sales,
    }
