"""Sale transaction processing: atomic decrement + insert, or nothing at all."""

import threading
from datetime import datetime
from decimal import Decimal

import pytest

from stockbook.core.errors import InsufficientStock, NotFound, StorageFailure, ValidationError
from stockbook.models.products import Product
from stockbook.models.sales import Sale
from stockbook.services import ledger
from stockbook.services.sales import get_sale, list_sales, record_sale


def _snapshot(db_session, product_id):
    db_session.expire_all()
    product = db_session.get(Product, product_id)
    return product.quantity, db_session.query(Sale).count()


class TestRecordSale:

    def test_sell_entire_stock(self, db_session, user_a, product_a):
        """Selling exactly what is on hand empties the product."""
        sale = record_sale(db_session, user_a.id, product_a.id, 5, Decimal("15"))

        assert sale.id is not None
        assert sale.quantity == 5
        assert sale.total_price == Decimal("75")
        assert sale.purchase_price == Decimal("10")
        assert (sale.sale_price - sale.purchase_price) * sale.quantity == Decimal("25")

        db_session.refresh(product_a)
        assert product_a.quantity == 0

    def test_sell_from_empty_stock_fails(self, db_session, user_a, product_a):
        record_sale(db_session, user_a.id, product_a.id, 5, Decimal("15"))
        before = _snapshot(db_session, product_a.id)

        with pytest.raises(InsufficientStock):
            record_sale(db_session, user_a.id, product_a.id, 1, Decimal("15"))

        assert _snapshot(db_session, product_a.id) == before == (0, 1)

    def test_one_more_than_stock_fails_untouched(self, db_session, user_a, product_a):
        with pytest.raises(InsufficientStock):
            record_sale(db_session, user_a.id, product_a.id, 6, Decimal("15"))

        assert _snapshot(db_session, product_a.id) == (5, 0)

    def test_round_trip_reduces_stock_and_lists_sale(self, db_session, user_a, product_a):
        sale = record_sale(db_session, user_a.id, product_a.id, 2, Decimal("12.50"))

        products = ledger.list_products(db_session, user_a.id)
        assert products[0].quantity == 3

        sales = list_sales(db_session, user_a.id)
        assert [s.id for s in sales] == [sale.id]
        assert sales[0].total_price == sales[0].sale_price * sales[0].quantity == Decimal("25")

    def test_stored_total_matches_stored_price(self, db_session, user_a, product_a):
        sale = record_sale(db_session, user_a.id, product_a.id, 3, Decimal("1.01"))

        db_session.expire_all()
        stored = list_sales(db_session, user_a.id)[0]
        assert stored.id == sale.id
        assert stored.total_price == stored.sale_price * stored.quantity == Decimal("3.03")

    def test_sale_date_defaults_to_now(self, db_session, user_a, product_a):
        sale = record_sale(db_session, user_a.id, product_a.id, 1, Decimal("11"))

        assert sale.sale_date is not None

    def test_explicit_sale_date_is_kept(self, db_session, user_a, product_a):
        sold = datetime(2026, 1, 15, 18, 45)
        sale = record_sale(db_session, user_a.id, product_a.id, 1, Decimal("11"), sold)

        assert sale.sale_date.replace(tzinfo=None) == sold

    def test_zero_sale_price_is_allowed(self, db_session, user_a, product_a):
        sale = record_sale(db_session, user_a.id, product_a.id, 1, Decimal("0"))

        assert sale.total_price == Decimal("0")


class TestCostBasisSnapshot:

    def test_price_edit_does_not_rewrite_history(self, db_session, user_a, product_a):
        first = record_sale(db_session, user_a.id, product_a.id, 2, Decimal("15"))

        ledger.update_product(db_session, user_a.id, product_a.id, purchase_price=Decimal("13"))
        second = record_sale(db_session, user_a.id, product_a.id, 1, Decimal("15"))

        db_session.expire_all()
        assert db_session.get(Sale, first.id).purchase_price == Decimal("10")
        assert db_session.get(Sale, second.id).purchase_price == Decimal("13")

    def test_product_name_is_snapshotted(self, db_session, user_a, product_a):
        sale = record_sale(db_session, user_a.id, product_a.id, 1, Decimal("15"))

        ledger.update_product(db_session, user_a.id, product_a.id, name="Renamed")

        db_session.expire_all()
        assert db_session.get(Sale, sale.id).product_name == "Argan oil 250ml"


class TestRejectedSales:

    def test_missing_product(self, db_session, user_a, product_a):
        with pytest.raises(NotFound):
            record_sale(db_session, user_a.id, 424242, 1, Decimal("15"))

        assert _snapshot(db_session, product_a.id) == (5, 0)

    def test_foreign_product_looks_missing(self, db_session, user_a, product_b):
        with pytest.raises(NotFound):
            record_sale(db_session, user_a.id, product_b.id, 1, Decimal("25"))

        assert _snapshot(db_session, product_b.id) == (2, 0)

    @pytest.mark.parametrize(
        "quantity, price",
        [
            (0, Decimal("15")),
            (-2, Decimal("15")),
            (1, Decimal("-0.01")),
        ],
    )
    def test_invalid_input(self, db_session, user_a, product_a, quantity, price):
        with pytest.raises(ValidationError):
            record_sale(db_session, user_a.id, product_a.id, quantity, price)

        assert _snapshot(db_session, product_a.id) == (5, 0)

    def test_sub_cent_price_rejected(self, db_session, user_a, product_a):
        with pytest.raises(ValidationError):
            record_sale(db_session, user_a.id, product_a.id, 3, Decimal("1.005"))

        assert _snapshot(db_session, product_a.id) == (5, 0)

    def test_quantity_above_limit_rejected(self, db_session, user_a, product_a):
        with pytest.raises(ValidationError):
            record_sale(db_session, user_a.id, product_a.id, 1_000_001, Decimal("1"))

        assert _snapshot(db_session, product_a.id) == (5, 0)

    def test_total_too_large_for_column_rejected(self, db_session, user_a, product_a):
        with pytest.raises(ValidationError) as excinfo:
            record_sale(db_session, user_a.id, product_a.id, 1_000, Decimal("99999999.99"))

        assert "total" in excinfo.value.message
        assert _snapshot(db_session, product_a.id) == (5, 0)

    def test_storage_error_rolls_back(self, db_session, user_a, product_a, monkeypatch):
        from sqlalchemy.exc import OperationalError

        def broken_commit():
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db_session, "commit", broken_commit)

        with pytest.raises(StorageFailure):
            record_sale(db_session, user_a.id, product_a.id, 2, Decimal("15"))

        monkeypatch.undo()
        assert _snapshot(db_session, product_a.id) == (5, 0)


class TestStoreUnavailable:

    def test_list_sales(self, unreachable_session, user_a):
        with pytest.raises(StorageFailure):
            list_sales(unreachable_session, user_a.id)

    def test_get_sale(self, unreachable_session, user_a):
        with pytest.raises(StorageFailure):
            get_sale(unreachable_session, user_a.id, 1)

    def test_record_sale(self, unreachable_session, user_a):
        with pytest.raises(StorageFailure):
            record_sale(unreachable_session, user_a.id, 1, 1, Decimal("15"))


class TestGetSale:

    def test_get_own_sale(self, db_session, user_a, product_a):
        sale = record_sale(db_session, user_a.id, product_a.id, 1, Decimal("15"))

        assert get_sale(db_session, user_a.id, sale.id).id == sale.id

    def test_get_foreign_sale_is_not_found(self, db_session, user_a, user_b, product_a):
        sale = record_sale(db_session, user_a.id, product_a.id, 1, Decimal("15"))

        with pytest.raises(NotFound):
            get_sale(db_session, user_b.id, sale.id)

    def test_list_sales_newest_first(self, db_session, user_a, product_a):
        older = record_sale(db_session, user_a.id, product_a.id, 1, Decimal("15"), datetime(2026, 2, 1, 10))
        newer = record_sale(db_session, user_a.id, product_a.id, 1, Decimal("15"), datetime(2026, 2, 3, 10))

        assert [s.id for s in list_sales(db_session, user_a.id)] == [newer.id, older.id]


def test_concurrent_sales_never_oversell(session_factory, db_session, user_a, product_a):
    user_id, product_id = user_a.id, product_a.id
    # Release this session's transaction so the workers can take the write lock
    db_session.rollback()

    workers = 8
    barrier = threading.Barrier(workers)
    outcomes = []
    outcomes_lock = threading.Lock()

    def sell_one():
        db = session_factory()
        try:
            barrier.wait()
            record_sale(db, user_id, product_id, 1, Decimal("15"))
            outcome = "sold"
        except InsufficientStock:
            outcome = "short"
        except StorageFailure:
            outcome = "busy"
        finally:
            db.close()
        with outcomes_lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=sell_one) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    quantity, sale_count = _snapshot(db_session, product_id)

    assert sorted(outcomes) == ["short"] * 3 + ["sold"] * 5
    assert quantity == 0
    assert sale_count == 5
