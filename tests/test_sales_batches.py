import threading
import time

import pytest

from bukukas import store as store_module
from bukukas.store import LedgerError


def test_add_batch_books_purchase(store):
    batch = store.add_batch(" gula pasir ", "10", "12000", payment_method="BANK", custom_timestamp=100)
    assert batch.product_name == "GULA PASIR"
    assert batch.stock_type == "FOR_PRODUCTION"
    assert batch.value == 120000
    [tx] = store.transactions
    assert (tx.type, tx.category, tx.amount, tx.account) == ("CASH_OUT", "STOCK_PURCHASE", 120000, "BANK")
    assert tx.description == "BELI STOK GULA PASIR (10,00 UNIT)"
    assert tx.related_id == batch.id
    assert tx.created_at == 100


def test_batch_without_payment(store):
    store.add_batch("hibah", 5, 1000, record_payment=False)
    store.add_batch("sampel", 5, 0)
    assert store.transactions == []
    assert len(store.batches) == 2


@pytest.mark.parametrize("args", [("", 1, 1), ("x", 0, 1), ("x", 1, -1)])
def test_add_batch_validation(store, args):
    with pytest.raises(LedgerError):
        store.add_batch(*args)
    assert store.batches == []


def test_add_batch_rejects_unknown_stock_type(store):
    with pytest.raises(LedgerError):
        store.add_batch("x", 1, 1, stock_type="CONSIGNMENT")


@pytest.fixture
def goods(store):
    old = store.add_batch("kue", 5, 2000, stock_type="FOR_SALE", custom_timestamp=10)
    new = store.add_batch("kue", 5, 3000, stock_type="FOR_SALE", custom_timestamp=20)
    return old, new


def test_sale_consumes_fifo_and_books_income(store, goods):
    old, new = goods
    sale = store.record_sale("kue", "7", "5000", payment_method="BANK")
    assert (old.current_quantity, new.current_quantity) == (0, 3)
    assert sale.total == 35000
    assert sale.cogs == 5 * 2000 + 2 * 3000
    assert sale.gross_profit == 35000 - 16000
    tx = store.transactions[-1]
    assert (tx.type, tx.category, tx.amount, tx.account) == ("CASH_IN", "SALES", 35000, "BANK")
    assert tx.description == "PENJUALAN KUE (7,00 UNIT)"
    assert tx.related_id == sale.id
    assert store.source_label(tx) == "PENJUALAN"


def test_sale_ignores_raw_materials(store):
    store.add_batch("kue", 10, 100)
    with pytest.raises(LedgerError, match="tidak cukup"):
        store.record_sale("kue", 1, 500)


@pytest.mark.parametrize("args", [("", 1, 1), ("kue", 0, 1), ("kue", 1, 0), ("kue", 11, 1)])
def test_sale_validation(store, goods, args):
    with pytest.raises(LedgerError):
        store.record_sale(*args)
    assert store.sales == []
    assert [b.current_quantity for b in goods] == [5, 5]


def test_delete_sale_restores_stock(store, goods, recorder):
    old, new = goods
    sale = store.record_sale("kue", 7, 5000)
    store.delete_sale(sale.id)
    assert (old.current_quantity, new.current_quantity) == (5, 5)
    assert store.sales == [] and store.sale_usages == []
    assert all(t.category != "SALES" for t in store.transactions)
    assert recorder.last[1]["sales"] == [sale.id]


def test_delete_unused_batch_removes_purchase(store):
    batch = store.add_batch("gula", 2, 100)
    store.delete_batch(batch.id)
    assert store.batches == [] and store.transactions == []


def test_used_batch_cannot_be_deleted(store, goods):
    old, _ = goods
    store.record_sale("kue", 1, 100)
    with pytest.raises(LedgerError):
        store.delete_batch(old.id)
    assert old in store.batches


def test_finished_batch_deleted_only_through_production(store):
    store.add_batch("tepung", 1, 100)
    prod = store.run_production("roti", 2, [{"product_name": "tepung", "quantity": 1}])
    finished = store.complete_production(prod.id)
    with pytest.raises(LedgerError):
        store.delete_batch(finished.id)


def test_stock_summary(store):
    store.add_batch("gula", 10, 100)
    store.add_batch("gula", 10, 200)
    store.add_batch("kue", 4, 2500, stock_type="FOR_SALE")
    df = store.stock_summary()
    assert list(df.columns) == ["product_name", "stock_type", "batches", "current_quantity", "value", "avg_cost"]
    gula = df[df["product_name"] == "GULA"].iloc[0]
    assert gula["batches"] == 2
    assert gula["current_quantity"] == 20
    assert gula["value"] == 3000
    assert gula["avg_cost"] == 150
    kue = df[df["product_name"] == "KUE"].iloc[0]
    assert kue["stock_type"] == "FOR_SALE"


def test_stock_summary_empty_product_has_zero_avg_cost(store):
    store.add_batch("kue", 2, 100, stock_type="FOR_SALE")
    store.record_sale("kue", 2, 300)
    row = store.stock_summary().iloc[0]
    assert row["current_quantity"] == 0
    assert row["avg_cost"] == 0


def test_available_stock_by_type(store):
    store.add_batch("gula", 3, 1)
    store.add_batch("gula", 2, 1)
    store.add_batch("kue", 4, 1, stock_type="FOR_SALE")
    assert store.available_materials() == {"GULA": 5}
    assert store.available_goods() == {"KUE": 4}


def test_delete_sale_with_missing_batch_changes_nothing(store, goods, recorder):
    old, new = goods
    sale = store.record_sale("kue", 7, 5000)
    store.batches.remove(new)  # row lost between loads
    calls = len(recorder.calls)
    with pytest.raises(LedgerError):
        store.delete_sale(sale.id)
    assert old.current_quantity == 0
    assert sale in store.sales
    assert len(store.sale_usages) == 2
    assert len(recorder.calls) == calls


def _slow_clock(monkeypatch):
    """Widen the gap between the stock check and consumption."""
    real_now = store_module.now_ms

    def slow_now():
        time.sleep(0.05)
        return real_now()

    monkeypatch.setattr(store_module, "now_ms", slow_now)


def _race(target, n=2):
    start = threading.Barrier(n)
    results, errors = [], []

    def worker():
        start.wait()
        try:
            results.append(target())
        except LedgerError as e:
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)
    return results, errors


def test_concurrent_sales_never_oversell(store, monkeypatch):
    store.add_batch("roti", 10, 1000, stock_type="FOR_SALE")
    _slow_clock(monkeypatch)
    results, errors = _race(lambda: store.record_sale("roti", 8, 2000))
    assert len(results) == 1 and len(errors) == 1
    sold = sum(s.quantity for s in store.sales)
    consumed = sum(u.quantity_used for u in store.sale_usages)
    assert sold == consumed == 8
    assert store.sales[0].cogs == 8000
    assert store.available_goods() == {"ROTI": 2}


def test_concurrent_runs_never_overdraw_materials(store, monkeypatch):
    store.add_batch("tepung", 10, 1000)
    _slow_clock(monkeypatch)
    results, errors = _race(lambda: store.run_production(
        "roti", 5, [{"product_name": "tepung", "quantity": 6}]))
    assert len(results) == 1 and len(errors) == 1
    assert sum(u.quantity_used for u in store.production_usages) == 6
    assert store.available_materials() == {"TEPUNG": 4}
