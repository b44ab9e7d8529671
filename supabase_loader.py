"""
supabase_loader.py — Load and save ledger data in Supabase (with local-file fallback).

When SUPABASE_URL / SUPABASE_KEY are missing the app runs in offline mode and
everything lives in a local JSON file (data/generated/bukukas_state.json, or
BUKUKAS_DATA_FILE). When Supabase is configured every write also goes to the
local file, so a later Supabase outage still starts from recent data.

State shape (both sources):
  {"transactions": [row, ...], "loans": [...], "batches": [...],
   "productions": [...], "production_usages": [...], "sales": [...],
   "sale_usages": [...], "config": {key: value}}
"""

import os
import json
import threading

from bukukas.models import TABLES

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

BATCH_SIZE = 500
_LOCAL_LOCK = threading.Lock()


# ── Supabase helpers ────────────────────────────────────────────────────────

def _get_supabase_client():
    """Return a Supabase client, or None if credentials are missing."""
    from dotenv import load_dotenv
    load_dotenv(os.path.join(BASE_DIR, ".env"))

    url = os.environ.get("SUPABASE_URL", "")
    key = os.environ.get("SUPABASE_KEY", "")
    if not url or not key or "YOUR_PROJECT" in url:
        return None

    from supabase import create_client
    return create_client(url, key)


def _client_or_none():
    try:
        return _get_supabase_client()
    except Exception as e:
        print(f"Supabase client unavailable ({e}), using local file")
        return None


def is_cloud_ready() -> bool:
    return _client_or_none() is not None


def _fetch_all(client, table: str, order_col: str = "id") -> list[dict]:
    """Fetch all rows from a Supabase table, paginating past the 1000-row limit."""
    rows: list[dict] = []
    page_size = 1000
    offset = 0
    while True:
        resp = (
            client.table(table)
            .select("*")
            .order(order_col)
            .range(offset, offset + page_size - 1)
            .execute()
        )
        batch = resp.data
        rows.extend(batch)
        if len(batch) < page_size:
            break
        offset += page_size
    return rows


def _load_config_from_supabase(client) -> dict:
    """config table (key/value JSONB) → dict."""
    config = {}
    for row in _fetch_all(client, "config", order_col="key"):
        val = row["value"]
        # supabase-py usually auto-parses JSONB, but handle string case too
        if isinstance(val, str):
            try:
                val = json.loads(val)
            except ValueError:
                pass
        config[row["key"]] = val
    return config


def _load_from_supabase(client) -> dict:
    state = {table: _fetch_all(client, table) for table in TABLES}
    state["config"] = _load_config_from_supabase(client)
    return state


# ── Local file ──────────────────────────────────────────────────────────────

def data_file() -> str:
    return os.environ.get("BUKUKAS_DATA_FILE") or os.path.join(
        BASE_DIR, "data", "generated", "bukukas_state.json")


def _empty_state() -> dict:
    state = {table: [] for table in TABLES}
    state["config"] = {}
    return state


def _load_local() -> dict:
    path = data_file()
    state = _empty_state()
    if os.path.exists(path):
        with open(path, encoding="utf-8") as f:
            stored = json.load(f)
        for key in state:
            if key in stored:
                state[key] = stored[key]
    return state


def _write_local(state: dict):
    path = data_file()
    os.makedirs(os.path.dirname(path), exist_ok=True)
    tmp = path + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(state, f, indent=1)
    os.replace(tmp, path)


def _mirror_local(upserts: dict, deletes: dict):
    with _LOCAL_LOCK:
        state = _load_local()
        for table, rows in upserts.items():
            by_id = {r["id"]: r for r in state.get(table, [])}
            for row in rows:
                by_id[row["id"]] = row
            state[table] = list(by_id.values())
        for table, ids in deletes.items():
            gone = set(ids)
            state[table] = [r for r in state.get(table, []) if r["id"] not in gone]
        _write_local(state)


# ── Public API ──────────────────────────────────────────────────────────────

def load_state() -> dict:
    """
    Load the whole ledger.  Tries Supabase first; falls back to the local file.
    """
    client = _client_or_none()

    # ── Try Supabase ────────────────────────────────────────────────────
    if client is not None:
        try:
            state = _load_from_supabase(client)
            print(f"Loaded data from Supabase ({len(state['transactions'])} transactions)")
            return state
        except Exception as e:
            print(f"Supabase load failed ({e}), falling back to local file")

    # ── Fallback to local file ──────────────────────────────────────────
    state = _load_local()
    print(f"Loaded data from local file ({len(state['transactions'])} transactions)")
    return state


def save_rows(table: str, rows: list[dict], client=None):
    """Upsert rows into a table in batches of BATCH_SIZE."""
    if not rows:
        return
    client = client if client is not None else _client_or_none()
    if client is not None:
        try:
            for i in range(0, len(rows), BATCH_SIZE):
                client.table(table).upsert(rows[i : i + BATCH_SIZE]).execute()
        except Exception as e:
            print(f"Supabase upsert into {table} failed ({e}), kept in local file")
    _mirror_local({table: rows}, {})


def delete_rows(table: str, ids: list[str], client=None):
    if not ids:
        return
    client = client if client is not None else _client_or_none()
    if client is not None:
        try:
            client.table(table).delete().in_("id", list(ids)).execute()
        except Exception as e:
            print(f"Supabase delete from {table} failed ({e}), removed from local file only")
    _mirror_local({}, {table: ids})


def persist_changes(upserts: dict, deletes: dict):
    """Persistence hook for LedgerStore: parents first on upsert, children first on delete."""
    client = _client_or_none()
    order = list(TABLES)
    for table in order:
        if upserts.get(table):
            save_rows(table, upserts[table], client=client)
    for table in reversed(order):
        if deletes.get(table):
            delete_rows(table, deletes[table], client=client)


def get_config_value(key: str, default=None):
    client = _client_or_none()
    if client is not None:
        try:
            resp = client.table("config").select("value").eq("key", key).execute()
            if resp.data:
                val = resp.data[0]["value"]
                if isinstance(val, str):
                    try:
                        val = json.loads(val)
                    except ValueError:
                        pass
                return val
            return default
        except Exception as e:
            print(f"Supabase config read failed ({e}), reading local file")
    return _load_local()["config"].get(key, default)


def save_config_value(key: str, value):
    client = _client_or_none()
    if client is not None:
        try:
            client.table("config").upsert({"key": key, "value": value}).execute()
        except Exception as e:
            print(f"Supabase config write failed ({e}), kept in local file")
    with _LOCAL_LOCK:
        state = _load_local()
        state["config"][key] = value
        _write_local(state)
