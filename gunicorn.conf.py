"""Gunicorn config for deployment."""
import os
import threading
import time
import urllib.request

bind = f"0.0.0.0:{os.environ.get('PORT', '8070')}"


def post_worker_init(worker):
    """After a worker starts, reload the ledger from Supabase in background.

    Each worker keeps its own in-memory store, so a fresh worker must not
    serve whatever an older deployment left in the local file.
    """
    def _reload():
        time.sleep(3)  # wait for server to be ready
        try:
            port = worker.cfg.bind[0].split(":")[-1] if worker.cfg.bind else "8070"
            url = f"http://127.0.0.1:{port}/api/reload"
            urllib.request.urlopen(url, timeout=30)
            worker.log.info("Auto-reloaded ledger from Supabase")
        except Exception as e:
            worker.log.warning(f"Auto-reload failed: {e}")

    t = threading.Thread(target=_reload, daemon=True)
    t.start()
