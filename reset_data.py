"""
reset_data.py — Reset the ledger to zero state.

Backs up the local ledger file into data/_backup_YYYYMMDD_HHMMSS/, then clears
every Supabase table.  Run this, then restart the dashboard (or hit
/api/reload) to start with an empty ledger.

Usage:  python reset_data.py
"""

import os
import shutil
from datetime import datetime

from bukukas.models import TABLES
from supabase_loader import data_file

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.join(BASE_DIR, "data")

# Children before parents (FK)
SUPABASE_TABLES = list(reversed(list(TABLES))) + ["config"]


def backup_files():
    """Move the local ledger file to a timestamped backup folder."""
    path = data_file()
    if not os.path.isfile(path):
        return None, 0
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_root = os.path.join(DATA_DIR, f"_backup_{stamp}")
    os.makedirs(backup_root, exist_ok=True)
    shutil.move(path, os.path.join(backup_root, os.path.basename(path)))
    return backup_root, 1


def clear_supabase():
    """Delete all rows from every ledger table."""
    from dotenv import load_dotenv
    load_dotenv(os.path.join(BASE_DIR, ".env"))

    url = os.environ.get("SUPABASE_URL", "")
    key = os.environ.get("SUPABASE_KEY", "")
    if not url or not key or "YOUR_PROJECT" in url:
        print("  Supabase credentials not configured — skipping table clearing.")
        return 0

    from supabase import create_client
    client = create_client(url, key)

    cleared = 0
    for table in SUPABASE_TABLES:
        try:
            if table == "config":
                client.table(table).delete().neq("key", "").execute()
            else:
                # ids are uuid strings, neq "" matches everything
                client.table(table).delete().neq("id", "").execute()
            cleared += 1
            print(f"  Cleared {table}")
        except Exception as e:
            print(f"  Failed to clear {table}: {e}")

    return cleared


def main():
    print("=" * 50)
    print("  RESET LEDGER TO ZERO STATE")
    print("=" * 50)

    print("\n1. Backing up local ledger...")
    backup_path, file_count = backup_files()
    if file_count:
        print(f"   Moved {data_file()} to:\n   {backup_path}")
    else:
        print("   No local ledger found to back up.")

    print("\n2. Clearing Supabase tables...")
    table_count = clear_supabase()
    print(f"   Cleared {table_count}/{len(SUPABASE_TABLES)} tables.")

    print("\n" + "=" * 50)
    print("  DONE!")
    print(f"  Files backed up: {file_count}")
    print(f"  Tables cleared:  {table_count}")
    if file_count:
        print(f"\n  Backup location:\n  {backup_path}")
        print("\n  To restore, move the file back from the backup folder.")
    print("\n  Restart the dashboard:  python -m bukukas.app")
    print("=" * 50)


if __name__ == "__main__":
    main()
