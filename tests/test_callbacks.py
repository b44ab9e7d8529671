import inspect
import json
from contextvars import copy_context

import dash
import dash_bootstrap_components as dbc
import pytest
from dash import no_update
from dash._callback_context import context_value
from dash._utils import AttributeDict

from bukukas import data_state as ds
from bukukas.callbacks import transactions_cb, production_cb, inventory_cb
from bukukas.store import LedgerStore


def _callbacks(module):
    """Register a callback module on a throwaway app; plain functions by name."""
    app = dash.Dash(__name__, suppress_callback_exceptions=True)
    module.register_callbacks(app)
    found = {}
    for entry in app.callback_map.values():
        func = inspect.unwrap(entry["callback"])
        found[func.__name__] = func
    return found


def _fire(func, trigger, *args):
    """Call a callback as if `trigger` had just been clicked."""
    component = json.dumps(trigger) if isinstance(trigger, dict) else trigger

    def run():
        context_value.set(AttributeDict(
            triggered_inputs=[{"prop_id": f"{component}.n_clicks", "value": 1}]))
        return func(*args)

    return copy_context().run(run)


def _is_toast(component, header, icon="success"):
    return isinstance(component, dbc.Toast) and component.header == header and component.icon == icon


def _is_alert(component, text):
    return isinstance(component, dbc.Alert) and component.color == "danger" and text in component.children


@pytest.fixture
def live(offline):
    store = LedgerStore()
    ds.set_store(store)
    yield store
    ds.set_store(None)


# ── Kas & Pinjaman ────────────────────────────────────────────────────────

def test_manual_entry_saves_and_toasts(live):
    cb = _callbacks(transactions_cb)["manual_entry"]
    out = _fire(cb, "kas-manual-save", None, None, 1,
                "CASH_IN", "CASH", "modal", "5000", "setoran", "", 3)
    assert out[0] is False and out[1] is None
    assert out[2] == 4
    assert _is_toast(out[3], "Kas Tercatat")
    assert live.transactions[0].amount == 5000


def test_manual_entry_error_keeps_modal_open(live):
    cb = _callbacks(transactions_cb)["manual_entry"]
    out = _fire(cb, "kas-manual-save", None, None, 1,
                "CASH_IN", "CASH", "modal", "0", "setoran", "", 3)
    assert out[0] is True
    assert _is_alert(out[1], "Nominal harus lebih dari 0.")
    assert out[2] is no_update and out[3] is no_update
    assert live.transactions == []


def test_manual_entry_open_resets_form(live):
    cb = _callbacks(transactions_cb)["manual_entry"]
    out = _fire(cb, "kas-manual-open", 1, None, None, "CASH_IN", "CASH", "x", "1", "y", "", 0)
    assert out[0] is True
    assert out[4:] == ("", "", "", "")


def test_delete_locked_entry_shows_danger_toast(live):
    live.add_batch("gula", 1, 100)
    [tx] = live.transactions
    cb = _callbacks(transactions_cb)["delete_entry"]
    version, message = _fire(cb, {"type": "kas-del-btn", "index": tx.id}, [1], 2)
    assert version is no_update
    assert _is_toast(message, "Gagal Menghapus", icon="danger")
    assert "terkunci" in message.children
    assert tx in live.transactions


def test_repay_over_balance_shows_alert(live):
    loan = live.add_loan("koperasi", 1000)
    cb = _callbacks(transactions_cb)["save_repay"]
    out = _fire(cb, "kas-repay-save", None, 1, loan.id, "5000", "", "", "CASH", 0)
    assert out[0] is True
    assert _is_alert(out[1], "Pokok melebihi sisa hutang")
    assert loan.remaining_amount == 1000


# ── Produksi ──────────────────────────────────────────────────────────────

def test_start_run_toasts_locked_hpp(live):
    live.add_batch("tepung", 10, 1000)
    cb = _callbacks(production_cb)["start_run"]
    out = _fire(cb, "prod-new-save", None, None, 1, "roti", "5", "",
                ["TEPUNG", None], ["4", ""], [None], [""], "CASH", 0)
    assert out[0] is False
    assert out[2] == 1
    assert _is_toast(out[3], "Produksi Dimulai")
    [prod] = live.productions
    assert prod.total_hpp == 4000


def test_start_run_short_stock_shows_alert(live):
    live.add_batch("tepung", 10, 1000)
    cb = _callbacks(production_cb)["start_run"]
    out = _fire(cb, "prod-new-save", None, None, 1, "roti", "5", "",
                ["TEPUNG"], ["50"], [], [], "CASH", 0)
    assert out[0] is True
    assert _is_alert(out[1], "tidak cukup")
    assert live.productions == []
    assert live.available_materials() == {"TEPUNG": 10}


def test_deleting_ingredient_row_keeps_the_rest(live):
    cb = _callbacks(production_cb)["edit_ingredient_rows"]
    rows = _fire(cb, {"type": "prod-ing-del", "index": 0}, None, None, [1, None],
                 ["TEPUNG", "GULA"], ["1", "2"])
    assert len(rows) == 1


def test_complete_run_twice_shows_danger_toast(live):
    live.add_batch("tepung", 10, 1000)
    prod = live.run_production("roti", 5, [{"product_name": "tepung", "quantity": 2}])
    cb = _callbacks(production_cb)["complete_run"]
    trigger = {"type": "prod-complete-btn", "index": prod.id}
    version, message = _fire(cb, trigger, [1], 0)
    assert version == 1 and _is_toast(message, "Produksi Selesai")
    version, message = _fire(cb, trigger, [1], 1)
    assert version is no_update
    assert _is_toast(message, "Gagal", icon="danger")


# ── Stok ──────────────────────────────────────────────────────────────────

def test_add_batch_clears_form_and_toasts(live):
    cb = _callbacks(inventory_cb)["add_batch"]
    out = _fire(cb, "stok-add-btn", 1, "gula", "10", "1000", "FOR_PRODUCTION", "CASH", "", 0)
    assert out[0] is None and out[1] == 1
    assert _is_toast(out[2], "Stok Masuk")
    assert out[3:] == ("", "", "")
    assert live.batches[0].value == 10000


def test_sale_without_stock_shows_alert(live):
    cb = _callbacks(inventory_cb)["sell"]
    out = _fire(cb, "stok-sale-btn", 1, "kue", "1", "5000", "CASH", "", 0)
    assert _is_alert(out[0], "tidak cukup")
    assert out[1] is no_update
    assert live.sales == []


def test_delete_sale_toast_restores_stock(live):
    live.add_batch("kue", 3, 1000, stock_type="FOR_SALE")
    sale = live.record_sale("kue", 2, 3000)
    cb = _callbacks(inventory_cb)["delete_sale"]
    version, message = _fire(cb, {"type": "sale-del-btn", "index": sale.id}, [1], 5)
    assert version == 6
    assert _is_toast(message, "Penjualan Dihapus", icon="warning")
    assert live.available_goods() == {"KUE": 3}
