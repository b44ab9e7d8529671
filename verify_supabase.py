"""
Verify all Supabase tables exist and are accessible.
Run: python verify_supabase.py
"""
import os
import uuid
from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(__file__), ".env"))

from supabase import create_client

url = os.environ.get("SUPABASE_URL", "")
key = os.environ.get("SUPABASE_KEY", "")

if not url or not key:
    print("ERROR: SUPABASE_URL and SUPABASE_KEY must be set in .env")
    exit(1)

client = create_client(url, key)

TABLES = {
    "transactions":      "Cash in / cash out (CASH and BANK)",
    "loans":             "Loans and remaining principal",
    "batches":           "Stock batches (raw materials and finished goods)",
    "productions":       "Production runs with locked HPP",
    "production_usages": "FIFO material consumption per run",
    "sales":             "Sales of finished goods",
    "sale_usages":       "FIFO consumption per sale",
    "config":            "Key/value settings and integrity reports",
}

print("=" * 60)
print("Supabase Table Verification")
print("=" * 60)

all_ok = True
for table, desc in TABLES.items():
    try:
        resp = client.table(table).select("*", count="exact").limit(1).execute()
        count = resp.count if hasattr(resp, "count") and resp.count is not None else "?"
        status = "OK"
        print(f"  {status:12s} {table:20s} ({count} rows) — {desc}")
    except Exception as e:
        err = str(e)
        if "PGRST205" in err or "not find" in err:
            status = "MISSING"
        elif "permission" in err.lower() or "42501" in err:
            status = "NO ACCESS"
        else:
            status = "ERROR"
        print(f"  {status:12s} {table:20s} — {desc}")
        all_ok = False

print("=" * 60)

if all_ok:
    print("All tables OK!")

    # Test write access with a throwaway row
    print("\nTesting write access...")
    tests = {
        "transactions": {"id": str(uuid.uuid4()), "type": "CASH_IN", "category": "__TEST__",
                         "amount": 0, "description": "verify_script", "created_at": 0,
                         "payment_method": "CASH"},
        "config": {"key": "__verify_script__", "value": True},
    }
    for table, row in tests.items():
        try:
            resp = client.table(table).insert(row).execute()
            if resp.data:
                if table == "config":
                    client.table(table).delete().eq("key", row["key"]).execute()
                else:
                    client.table(table).delete().eq("id", row["id"]).execute()
                print(f"  WRITE OK    {table}")
            else:
                print(f"  WRITE FAIL  {table} (no data returned)")
        except Exception as e:
            print(f"  WRITE FAIL  {table} — {e}")

    print("\nAll checks passed! The dashboard can run in cloud mode.")
else:
    print("\nSome tables are MISSING. Run the SQL in supabase_migration.sql")
    print("in your Supabase Dashboard → SQL Editor → New query → Paste → Run")
