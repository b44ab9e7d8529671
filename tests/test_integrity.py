import flask
import pytest

from agents import integrity
from bukukas.store import LedgerStore


@pytest.fixture
def busy_store():
    store = LedgerStore()
    store.add_manual_transaction("CASH_IN", "modal", 100000, "setoran", "BANK")
    loan = store.add_loan("koperasi", 50000)
    store.repay_loan(loan.id, principal=10000, interest=500)
    store.add_batch("tepung", 10, 1000)
    prod = store.run_production("roti", 20, [{"product_name": "tepung", "quantity": 8}],
                                [{"description": "gas", "amount": 2000}])
    store.complete_production(prod.id)
    store.record_sale("roti", 5, 2000)
    store.run_production("kue", 5, [{"product_name": "tepung", "quantity": 2}])
    return store


def _check(report, name):
    for agent in report["agents"].values():
        for check in agent["checks"]:
            if check["name"] == name:
                return check
    raise AssertionError(name)


def test_consistent_ledger_scores_full(busy_store):
    report = integrity.run_integrity(busy_store, record=False)
    assert report["failed"] == 0
    assert report["score"] == 100
    assert report["grade"] == "A"
    assert not report["veto_applied"]


def test_empty_ledger_skips_checks():
    report = integrity.run_integrity(LedgerStore(), record=False)
    assert report["score"] == 100
    assert _check(report, "loan_balances")["status"] == "SKIP"


def test_negative_stock_triggers_veto(busy_store):
    busy_store.batches[0].current_quantity = -1
    report = integrity.run_integrity(busy_store, record=False)
    assert _check(report, "batch_bounds")["status"] == "FAIL"
    assert report["veto_applied"]
    assert report["score"] <= 49


def test_tampered_loan_balance(busy_store):
    busy_store.loans[0].remaining_amount = 45000
    report = integrity.run_integrity(busy_store, record=False)
    check = _check(report, "loan_balances")
    assert check["status"] == "FAIL"
    assert check["offenders"][0]["expected"] == 40000


def test_tampered_hpp_costs_points_without_veto(busy_store):
    busy_store.productions[0].total_hpp += 1
    report = integrity.run_integrity(busy_store, record=False)
    assert _check(report, "locked_hpp")["status"] == "FAIL"
    assert not report["veto_applied"]
    assert report["score"] == 90


def test_orphaned_locked_transaction(busy_store):
    busy_store.transactions[1].related_id = "gone"
    report = integrity.run_integrity(busy_store, record=False)
    assert _check(report, "orphan_transactions")["status"] == "FAIL"


def test_routes(busy_store, monkeypatch):
    server = flask.Flask(__name__)
    integrity.register_integrity_routes(server)
    monkeypatch.setattr(integrity, "run_integrity",
                        lambda trigger="manual": {"score": 77.0, "trigger": trigger})
    client = server.test_client()
    resp = client.post("/api/integrity/run")
    assert resp.status_code == 200
    assert resp.get_json() == {"score": 77.0, "trigger": "api"}

    monkeypatch.setattr(integrity, "_LATEST_REPORT", {"score": 12.0})
    assert client.get("/api/integrity/report").get_json() == {"score": 12.0}
