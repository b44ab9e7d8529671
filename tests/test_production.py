import pytest

from bukukas.store import LedgerError


@pytest.fixture
def stocked(store):
    b1 = store.add_batch("tepung", 10, 1000, custom_timestamp=1000)
    b2 = store.add_batch("tepung", 10, 1500, custom_timestamp=2000)
    sugar = store.add_batch("gula", 5, 2000, custom_timestamp=1500)
    return store, b1, b2, sugar


def _run(store, **overrides):
    args = dict(
        output_name="roti manis",
        output_quantity=20,
        ingredients=[{"product_name": "tepung", "quantity": 15},
                     {"product_name": "gula", "quantity": "2"}],
        operating_costs=[{"description": "listrik", "amount": 5000}],
        custom_timestamp=3000,
    )
    args.update(overrides)
    return store.run_production(**args)


def test_run_consumes_oldest_batches_first(stocked):
    store, b1, b2, sugar = stocked
    prod = _run(store)
    assert (b1.current_quantity, b2.current_quantity, sugar.current_quantity) == (0, 5, 3)
    usages = {(u.batch_id, u.quantity_used, u.cost_per_unit) for u in store.production_usages_for(prod.id)}
    assert usages == {(b1.id, 10, 1000), (b2.id, 5, 1500), (sugar.id, 2, 2000)}


def test_run_locks_hpp(stocked):
    store, *_ = stocked
    prod = _run(store)
    # 10*1000 + 5*1500 + 2*2000 + 5000
    assert prod.total_hpp == 26500
    assert prod.unit_hpp == 1325
    assert prod.status == "IN_PROGRESS"
    assert prod.output_product_name == "ROTI MANIS"


def test_operating_costs_become_locked_cash_out(stocked):
    store, *_ = stocked
    prod = _run(store, payment_method="BANK")
    [cost] = store.production_costs(prod.id)
    assert cost.type == "CASH_OUT"
    assert cost.category == "PRODUCTION_COST"
    assert cost.amount == 5000
    assert cost.account == "BANK"
    assert cost.description == "BIAYA PRODUKSI ROTI MANIS (LISTRIK)"
    assert store.cost_label(cost) == "LISTRIK"
    assert store.source_label(cost) == "PRODUKSI"


def test_zero_costs_are_skipped(stocked):
    store, *_ = stocked
    prod = _run(store, operating_costs=[{"description": "kosong", "amount": ""},
                                        {"description": "gas", "amount": 0}])
    assert store.production_costs(prod.id) == []
    assert prod.total_hpp == 21500


def test_repeated_ingredient_lines_are_summed(stocked):
    store, b1, b2, _ = stocked
    _run(store, ingredients=[{"product_name": "tepung", "quantity": 6},
                             {"product_name": "TEPUNG", "quantity": 6}], operating_costs=[])
    assert (b1.current_quantity, b2.current_quantity) == (0, 8)


def test_equal_timestamps_keep_insertion_order(store):
    first = store.add_batch("ragi", 1, 100, custom_timestamp=500)
    second = store.add_batch("ragi", 1, 900, custom_timestamp=500)
    prod = store.run_production("roti", 1, [{"product_name": "ragi", "quantity": 1}])
    assert first.current_quantity == 0 and second.current_quantity == 1
    assert prod.total_hpp == 100


def test_insufficient_stock_changes_nothing(stocked, recorder):
    store, b1, b2, sugar = stocked
    calls = len(recorder.calls)
    tx_count = len(store.transactions)
    with pytest.raises(LedgerError, match="TEPUNG"):
        _run(store, ingredients=[{"product_name": "gula", "quantity": 1},
                                 {"product_name": "tepung", "quantity": 21}])
    assert (b1.current_quantity, b2.current_quantity, sugar.current_quantity) == (10, 10, 5)
    assert store.productions == [] and store.production_usages == []
    assert len(store.transactions) == tx_count
    assert len(recorder.calls) == calls


def test_finished_goods_are_not_raw_materials(store):
    store.add_batch("tepung", 50, 10, stock_type="FOR_SALE")
    with pytest.raises(LedgerError):
        store.run_production("roti", 1, [{"product_name": "tepung", "quantity": 1}])


@pytest.mark.parametrize("overrides", [
    dict(output_name=""),
    dict(output_quantity=0),
    dict(ingredients=[]),
    dict(ingredients=[{"product_name": "tepung", "quantity": 0}]),
    dict(ingredients=[{"product_name": "", "quantity": 1}]),
    dict(operating_costs=[{"description": "x", "amount": -5}]),
    dict(payment_method="QRIS"),
])
def test_run_validation(stocked, overrides):
    store, b1, *_ = stocked
    with pytest.raises(LedgerError):
        _run(store, **overrides)
    assert b1.current_quantity == 10
    assert store.productions == []


def test_update_in_progress_run(stocked):
    store, *_ = stocked
    prod = _run(store)
    store.update_production(prod.id, output_product_name="roti tawar", output_quantity="25")
    assert prod.output_product_name == "ROTI TAWAR"
    assert prod.output_quantity == 25
    assert prod.total_hpp == 26500
    with pytest.raises(LedgerError):
        store.update_production(prod.id, output_quantity=0)


def test_complete_creates_finished_batch(stocked):
    store, *_ = stocked
    prod = _run(store)
    batch = store.complete_production(prod.id, custom_timestamp=4000)
    assert prod.status == "COMPLETED"
    assert prod.completed_at == 4000
    assert batch.stock_type == "FOR_SALE"
    assert batch.product_name == "ROTI MANIS"
    assert batch.initial_quantity == batch.current_quantity == 20
    assert batch.buy_price == 1325
    assert batch.production_id == prod.id
    assert store.available_goods() == {"ROTI MANIS": 20}
    assert store.ongoing_productions() == []
    assert store.completed_productions() == [prod]


def test_completed_run_is_frozen(stocked):
    store, *_ = stocked
    prod = _run(store)
    store.complete_production(prod.id)
    with pytest.raises(LedgerError):
        store.complete_production(prod.id)
    with pytest.raises(LedgerError):
        store.update_production(prod.id, output_quantity=1)


def test_delete_in_progress_run_restores_everything(stocked, recorder):
    store, b1, b2, sugar = stocked
    cash_before = store.summary()["total_cash"]
    prod = _run(store)
    store.delete_production(prod.id)
    assert (b1.current_quantity, b2.current_quantity, sugar.current_quantity) == (10, 10, 5)
    assert store.productions == [] and store.production_usages == []
    assert store.summary()["total_cash"] == cash_before
    upserts, deletes = recorder.last
    assert deletes["productions"] == [prod.id]
    assert len(deletes["production_usages"]) == 3
    assert {r["id"] for r in upserts["batches"]} == {b1.id, b2.id, sugar.id}


def test_delete_completed_run_removes_untouched_output(stocked):
    store, b1, *_ = stocked
    prod = _run(store)
    store.complete_production(prod.id)
    store.delete_production(prod.id)
    assert all(b.production_id is None for b in store.batches)
    assert b1.current_quantity == 10


def test_delete_completed_run_refused_after_sale(stocked):
    store, b1, *_ = stocked
    prod = _run(store)
    store.complete_production(prod.id)
    store.record_sale("roti manis", 1, 5000)
    with pytest.raises(LedgerError):
        store.delete_production(prod.id)
    assert prod in store.productions
    assert b1.current_quantity == 0


def test_stock_value_moves_from_materials_to_goods(stocked):
    store, *_ = stocked
    prod = _run(store, operating_costs=[])
    store.complete_production(prod.id)
    s = store.summary()
    # 5*1500 + 3*2000 left in materials, 21500 in finished goods
    assert s["total_inventory_value"] == pytest.approx(7500 + 6000 + 21500)


def test_delete_with_missing_batch_changes_nothing(stocked, recorder):
    store, b1, b2, sugar = stocked
    prod = _run(store)
    store.batches.remove(sugar)  # row lost between loads
    calls = len(recorder.calls)
    with pytest.raises(LedgerError):
        store.delete_production(prod.id)
    assert (b1.current_quantity, b2.current_quantity) == (0, 5)
    assert prod in store.productions
    assert len(store.production_usages_for(prod.id)) == 3
    assert len(recorder.calls) == calls
