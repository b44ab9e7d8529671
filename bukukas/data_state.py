"""
data_state.py — The live ledger shared by every page and callback.

The store is built on first use from supabase_loader.load_state() and writes
each mutation back through supabase_loader.persist_changes. Pages import this
module as `ds` and call ds.get_store().
"""

import os
import sys
import threading

# BASE_DIR points to the project root (parent of bukukas/)
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if BASE_DIR not in sys.path:
    sys.path.insert(0, BASE_DIR)

from supabase_loader import load_state as _load_state, persist_changes as _persist_changes

from bukukas.store import LedgerStore, LedgerError, source_label, cost_label
from bukukas.formatting import (
    sanitize_numeric, to_number, format_idr, format_qty, format_date_label,
    format_datetime_label, parse_manual_date, date_input_value,
)

money = format_idr

_STORE = None
_STORE_LOCK = threading.Lock()


def get_store() -> LedgerStore:
    global _STORE
    if _STORE is None:
        with _STORE_LOCK:
            if _STORE is None:
                _STORE = LedgerStore(_load_state(), persist=_persist_changes)
    return _STORE


def set_store(store: LedgerStore):
    """Swap the live store (tests, imports)."""
    global _STORE
    with _STORE_LOCK:
        _STORE = store


def reload():
    """Re-read everything from Supabase / the local file."""
    global _STORE
    with _STORE_LOCK:
        old = _STORE
        if old is not None:
            # wait for a running mutation to persist before re-reading
            with old.lock:
                fresh = LedgerStore(_load_state(), persist=_persist_changes)
        else:
            fresh = LedgerStore(_load_state(), persist=_persist_changes)
        _STORE = fresh
    return {
        "transactions": len(fresh.transactions),
        "batches": len(fresh.batches),
        "loans": len(fresh.loans),
        "productions": len(fresh.productions),
    }
