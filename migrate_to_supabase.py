"""
migrate_to_supabase.py — Upload the local ledger file to Supabase.

Reads the same JSON state file the dashboard uses in offline mode, then pushes
every table to Supabase.  Idempotent: clears tables before inserting so you can
re-run safely.

Usage:
    python migrate_to_supabase.py
"""

import os
import sys
import json
from dotenv import load_dotenv

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
load_dotenv(os.path.join(BASE_DIR, ".env"))

SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_KEY = os.environ.get("SUPABASE_KEY", "")

if not SUPABASE_URL or not SUPABASE_KEY or "YOUR_PROJECT" in SUPABASE_URL:
    print("ERROR: Set SUPABASE_URL and SUPABASE_KEY in .env first.")
    sys.exit(1)

from supabase import create_client

from bukukas.models import TABLES
from supabase_loader import data_file

sb = create_client(SUPABASE_URL, SUPABASE_KEY)

BATCH_SIZE = 500


def batch_insert(table: str, rows: list[dict]):
    """Insert rows in batches of BATCH_SIZE."""
    for i in range(0, len(rows), BATCH_SIZE):
        chunk = rows[i : i + BATCH_SIZE]
        sb.table(table).insert(chunk).execute()
    print(f"  Inserted {len(rows)} rows into {table}")


def clear_table(table: str):
    """Delete all rows from a table."""
    if table == "config":
        # config table uses 'key' as PK, not id
        sb.table(table).delete().neq("key", "").execute()
    else:
        sb.table(table).delete().neq("id", "").execute()


def load_local_state() -> dict:
    path = data_file()
    if not os.path.exists(path):
        print(f"ERROR: No local ledger at {path}")
        sys.exit(1)
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def main():
    print("=" * 60)
    print("  MIGRATE LOCAL LEDGER -> SUPABASE")
    print("=" * 60)

    state = load_local_state()
    tables = list(TABLES)

    # Children first so foreign keys never block the clear
    print("\n[1/3] Clearing tables")
    for table in reversed(tables):
        clear_table(table)
    clear_table("config")

    print("\n[2/3] Inserting ledger rows")
    counts = {}
    for table in tables:
        rows = state.get(table, [])
        batch_insert(table, rows)
        counts[table] = len(rows)

    print("\n[3/3] Config")
    config_rows = [{"key": k, "value": v} for k, v in state.get("config", {}).items()]
    batch_insert("config", config_rows)
    counts["config"] = len(config_rows)

    print("\n" + "=" * 60)
    print("  MIGRATION COMPLETE")
    print("=" * 60)
    for table, n in counts.items():
        print(f"  {table + ':':20s} {n} rows")

    # Ask the running dashboard to pick up the new data
    app_url = os.environ.get("BUKUKAS_APP_URL", "")
    if not app_url:
        return
    print(f"\n  Pinging {app_url}/api/reload to refresh the dashboard...")
    try:
        import urllib.request
        req = urllib.request.Request(f"{app_url}/api/reload", method="GET")
        with urllib.request.urlopen(req, timeout=30) as resp:
            result = json.loads(resp.read().decode())
            print(f"  Dashboard reload: {result}")
    except Exception as e:
        print(f"  Dashboard reload failed (may need manual restart): {e}")


if __name__ == "__main__":
    main()
