import pytest

import supabase_loader
from bukukas.store import LedgerStore


class Recorder:
    """Persistence hook that keeps every call for inspection."""

    def __init__(self):
        self.calls = []

    def __call__(self, upserts, deletes):
        self.calls.append((upserts, deletes))

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def store(recorder):
    return LedgerStore(persist=recorder)


@pytest.fixture
def offline(monkeypatch, tmp_path):
    """No Supabase, ledger file under tmp_path."""
    path = tmp_path / "state.json"
    monkeypatch.setenv("BUKUKAS_DATA_FILE", str(path))
    monkeypatch.setattr(supabase_loader, "_get_supabase_client", lambda: None)
    return path
