# =========================================================
# SALES ROUTER
#
# - Creating a sale decrements stock and stores the sale
#   in a single transaction (see services/sales.py)
# - Sales are append-only: no update or delete endpoints
# - Every lookup is scoped to the authenticated user
# =========================================================

from fastapi import APIRouter, Depends, status, Request
from sqlalchemy.orm import Session

from stockbook.database import get_db
from stockbook.core.auth import get_current_user
from stockbook.services import sales as sales_service
from stockbook.schemas.sale import SaleCreate, SaleResponse
from stockbook.core.rate_limiter import limiter

router = APIRouter(prefix="/sales", tags=["Sales"])


# =========================================================
# CREATE SALE
# =========================================================
@router.post("", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_sale(
    request: Request,
    sale_data: SaleCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return sales_service.record_sale(
        db,
        current_user.id,
        sale_data.product_id,
        sale_data.quantity,
        sale_data.sale_price,
        sale_data.sale_date,
    )


# =========================================================
# LIST SALES (NEWEST FIRST)
# =========================================================
@router.get("", response_model=list[SaleResponse])
def list_sales(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return sales_service.list_sales(db, current_user.id)


# =========================================================
# GET SINGLE SALE
# =========================================================
@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return sales_service.get_sale(db, current_user.id, sale_id)
