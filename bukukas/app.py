"""
BukuKas — cash, loan, stock and production ledger for a small business
Run:  python -m bukukas.app
Open: http://127.0.0.1:8070
"""

import os
import sys

# Ensure project root is on the path for supabase_loader etc.
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import dash
from dash import html, dcc
import dash_bootstrap_components as dbc
import flask

from bukukas import data_state as ds

# ── Create the Dash app ──────────────────────────────────────────────────────
app = dash.Dash(
    __name__,
    suppress_callback_exceptions=True,
    external_stylesheets=[
        dbc.themes.DARKLY,
        "https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700&display=swap",
    ],
    assets_folder=os.path.join(os.path.dirname(__file__), "assets"),
    title="BukuKas",
)
server = app.server  # For deployment (Gunicorn)

# ── Sidebar navigation ──────────────────────────────────────────────────────
NAV_ITEMS = [
    {"label": "Ringkasan",      "icon": "\U0001f4ca", "value": "/"},
    {"label": "Kas & Pinjaman", "icon": "\U0001f4b0", "value": "/kas"},
    "---",
    {"label": "Produksi",       "icon": "\U0001f3ed", "value": "/produksi"},
    {"label": "Stok",           "icon": "\U0001f4e6", "value": "/stok"},
]


def _build_sidebar():
    nav_links = []
    for item in NAV_ITEMS:
        if item == "---":
            nav_links.append(html.Hr(className="sidebar-divider"))
        else:
            nav_links.append(
                dbc.NavLink(
                    [html.Span(item["icon"], className="nav-icon"), item["label"]],
                    href=item["value"],
                    active="exact",
                )
            )

    return html.Div([
        html.Div([
            html.H4("BUKUKAS"),
            html.Small("Kas · Stok · Produksi"),
        ], className="sidebar-brand"),
        dbc.Nav(nav_links, vertical=True, pills=True),
    ], className="sidebar")


# ── App layout ───────────────────────────────────────────────────────────────
def header_subtitle():
    from supabase_loader import is_cloud_ready
    store = ds.get_store()
    s = store.summary()
    mode = "Cloud (Supabase)" if is_cloud_ready() else "Offline (file lokal)"
    return (
        f"{len(store.transactions)} transaksi  |  {len(store.batches)} batch  |  "
        f"Kas: {ds.money(s['total_cash'])}  |  Hutang: {ds.money(s['total_debt'])}  |  "
        f"Kekayaan Bersih: {ds.money(s['net_wealth'])}  |  {mode}"
    )


def serve_layout():
    return html.Div([
        dcc.Location(id="url", refresh=False),

        _build_sidebar(),

        html.Div([
            html.Div([
                html.H3("BUKUKAS"),
                html.Div(header_subtitle(), className="header-subtitle", id="app-header-content"),
            ], className="app-header"),

            # Page content (rendered by routing callback)
            html.Div(id="page-content"),
        ], className="main-content"),
    ])


app.layout = serve_layout


# ── Flask API routes ─────────────────────────────────────────────────────────
@server.route("/api/reload")
def api_reload():
    """Force-reload the ledger from Supabase (or the local file)."""
    try:
        counts = ds.reload()
        return flask.jsonify({"status": "ok", **counts})
    except Exception as e:
        return flask.jsonify({"status": "error", "message": str(e)}), 500


from agents.integrity import register_integrity_routes
register_integrity_routes(server)


# ── Register callbacks ───────────────────────────────────────────────────────
# Import callback modules AFTER app is created so they can reference `app`
from bukukas.callbacks.navigation_cb import register_callbacks as _reg_nav
_reg_nav(app)

from bukukas.callbacks import transactions_cb, production_cb, inventory_cb
transactions_cb.register_callbacks(app)
production_cb.register_callbacks(app)
inventory_cb.register_callbacks(app)

# ── Run ──────────────────────────────────────────────────────────────────────
if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8070))
    print(f"\n  BukuKas")
    print(f"  http://127.0.0.1:{port}\n")
    app.run(debug=False, host="0.0.0.0", port=port)
