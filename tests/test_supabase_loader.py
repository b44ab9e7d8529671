import json

import supabase_loader as sl
from bukukas.models import TABLES
from bukukas.store import LedgerStore


class _Resp:
    def __init__(self, data):
        self.data = data


class _Query:
    def __init__(self, client, table):
        self.client = client
        self.table = table
        self._range = None

    def select(self, *_args, **_kwargs):
        return self

    def order(self, _col):
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def upsert(self, rows):
        if self.client.fail_writes:
            raise RuntimeError("network down")
        self.client.upserted.append((self.table, rows))
        return self

    def execute(self):
        rows = self.client.rows.get(self.table, [])
        if self._range is not None:
            start, end = self._range
            return _Resp(rows[start:end + 1])
        return _Resp([])


class FakeClient:
    def __init__(self, rows=None, fail_writes=False):
        self.rows = rows or {}
        self.fail_writes = fail_writes
        self.upserted = []

    def table(self, name):
        return _Query(self, name)


def test_missing_file_gives_empty_state(offline):
    state = sl.load_state()
    assert set(state) == set(TABLES) | {"config"}
    assert all(state[t] == [] for t in TABLES)
    assert state["config"] == {}
    assert not sl.is_cloud_ready()


def test_offline_store_survives_restart(offline):
    store = LedgerStore(sl.load_state(), persist=sl.persist_changes)
    loan = store.add_loan("koperasi", 5000)
    store.add_batch("gula", 2, 100)
    manual = store.add_manual_transaction("CASH_OUT", "lain", 10, "parkir")
    store.delete_transaction(manual.id)

    reopened = LedgerStore(sl.load_state())
    assert reopened.to_state() == store.to_state()
    assert reopened.loans[0].id == loan.id
    on_disk = json.loads(offline.read_text(encoding="utf-8"))
    assert len(on_disk["transactions"]) == 2


def test_config_values(offline):
    assert sl.get_config_value("missing", "dflt") == "dflt"
    sl.save_config_value("integrity_last_score", {"score": 100})
    assert sl.get_config_value("integrity_last_score") == {"score": 100}
    assert sl.load_state()["config"] == {"integrity_last_score": {"score": 100}}


def test_failed_upsert_still_reaches_local_file(offline):
    client = FakeClient(fail_writes=True)
    sl.save_rows("loans", [{"id": "l1", "source": "X", "initial_amount": 1,
                            "remaining_amount": 1, "created_at": 0, "note": ""}], client=client)
    assert [r["id"] for r in sl._load_local()["loans"]] == ["l1"]


def test_upsert_goes_to_supabase_in_batches(offline, monkeypatch):
    monkeypatch.setattr(sl, "BATCH_SIZE", 2)
    client = FakeClient()
    rows = [{"id": f"t{i}"} for i in range(5)]
    sl.save_rows("transactions", rows, client=client)
    assert [len(chunk) for _, chunk in client.upserted] == [2, 2, 1]


def test_fetch_all_paginates():
    client = FakeClient(rows={"transactions": [{"id": i} for i in range(1005)]})
    rows = sl._fetch_all(client, "transactions")
    assert len(rows) == 1005
    assert rows[-1] == {"id": 1004}


def test_supabase_is_preferred_when_available(offline, monkeypatch):
    cloud = {t: [] for t in TABLES}
    cloud["loans"] = [{"id": "l1", "source": "BANK", "initial_amount": 5.0,
                       "remaining_amount": 5.0, "created_at": 1, "note": ""}]
    cloud["config"] = [{"key": "k", "value": "[1, 2]"}]
    monkeypatch.setattr(sl, "_get_supabase_client", lambda: FakeClient(rows=cloud))
    state = sl.load_state()
    assert state["loans"][0]["id"] == "l1"
    assert state["config"] == {"k": [1, 2]}
    assert sl.is_cloud_ready()


def test_persist_changes_orders_tables(offline, monkeypatch):
    seen = []
    monkeypatch.setattr(sl, "save_rows", lambda table, rows, client=None: seen.append(("put", table)))
    monkeypatch.setattr(sl, "delete_rows", lambda table, ids, client=None: seen.append(("del", table)))
    sl.persist_changes(
        {"production_usages": [{"id": "u"}], "productions": [{"id": "p"}], "batches": [{"id": "b"}]},
        {"batches": ["b2"], "production_usages": ["u2"]},
    )
    assert seen == [("put", "batches"), ("put", "productions"), ("put", "production_usages"),
                    ("del", "production_usages"), ("del", "batches")]
