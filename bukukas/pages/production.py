"""Produksi page — ongoing/completed runs, FIFO material usage, new-run form."""
from dash import html, dcc
import dash_bootstrap_components as dbc

from bukukas.theme import *
from bukukas.components.kpi import kpi_card, stat_row
from bukukas.components.cards import section, empty_state
from bukukas.models import ProductionStatus
from bukukas import data_state as ds


def build_kpis(store):
    ongoing = store.ongoing_productions()
    completed = store.completed_productions()
    return stat_row([
        kpi_card(STATUS_LABELS[ProductionStatus.IN_PROGRESS], len(ongoing),
                 STATUS_COLORS[ProductionStatus.IN_PROGRESS], count=True),
        kpi_card(STATUS_LABELS[ProductionStatus.COMPLETED], len(completed),
                 STATUS_COLORS[ProductionStatus.COMPLETED], count=True),
        kpi_card("Biaya Terkunci (Berjalan)", sum(p.total_hpp for p in ongoing), BLUE),
        kpi_card("Jenis Bahan Tersedia", len(store.available_materials()), PURPLE, count=True),
    ])


def _usage_rows(store, prod):
    rows = []
    for usage in store.production_usages_for(prod.id):
        batch = store.batch_by_id(usage.batch_id)
        rows.append(html.Div([
            html.Span(batch.product_name if batch else "???", style={"fontWeight": "bold", "fontSize": "12px"}),
            html.Span(f"{ds.format_qty(usage.quantity_used)} UNIT | {ds.money(usage.cost_per_unit)}",
                      style={"color": GRAY, "fontSize": "12px", "fontFamily": "monospace"}),
        ], className="prod-line"))
    return rows or [html.Div("-", style={"color": DARKGRAY})]


def _cost_rows(store, prod):
    rows = []
    for tx in store.production_costs(prod.id):
        rows.append(html.Div([
            html.Span(store.cost_label(tx), style={"fontWeight": "bold", "fontSize": "12px"}),
            html.Span(ds.money(tx.amount), style={"color": RED, "fontSize": "12px", "fontFamily": "monospace"}),
        ], className="prod-line"))
    return rows or [html.Div("-", style={"color": DARKGRAY})]


def production_card(store, prod):
    ongoing = prod.status == ProductionStatus.IN_PROGRESS
    color = STATUS_COLORS[prod.status]
    actions = []
    if ongoing:
        actions += [
            dbc.Button("✏️", id={"type": "prod-edit-btn", "index": prod.id}, color="link", size="sm"),
            dbc.Button("Selesaikan", id={"type": "prod-complete-btn", "index": prod.id},
                       color="success", size="sm"),
        ]
    actions.append(dbc.Button("\U0001f5d1", id={"type": "prod-del-btn", "index": prod.id},
                              color="link", size="sm"))

    started = f"Mulai: {ds.format_datetime_label(prod.created_at)}"
    if prod.completed_at:
        started += f" · Selesai: {ds.format_datetime_label(prod.completed_at)}"

    return dbc.Card([
        dbc.CardHeader(html.Div([
            html.Div([
                html.Span(STATUS_LABELS[prod.status], style={
                    "color": color, "fontSize": "10px", "fontWeight": "bold",
                    "textTransform": "uppercase", "letterSpacing": "1.5px"}),
                html.H5(prod.output_product_name, style={"margin": "2px 0", "fontWeight": "bold"}),
                html.Div(started, style={"color": GRAY, "fontSize": "11px"}),
            ]),
            html.Div([
                html.Div([html.Div("Target Qty", className="kpi-label"),
                          html.Div(f"{ds.format_qty(prod.output_quantity)} Unit",
                                   style={"fontWeight": "bold", "fontFamily": "monospace"})]),
                html.Div([html.Div("Biaya Terkunci", className="kpi-label"),
                          html.Div(ds.money(prod.total_hpp),
                                   style={"fontWeight": "bold", "fontFamily": "monospace", "color": BLUE})]),
                html.Div([html.Div("HPP / Unit", className="kpi-label"),
                          html.Div(ds.money(prod.unit_hpp),
                                   style={"fontWeight": "bold", "fontFamily": "monospace", "color": CYAN})]),
                html.Div(actions, style={"display": "flex", "gap": "4px", "alignItems": "center"}),
            ], style={"display": "flex", "gap": "24px", "alignItems": "center", "marginLeft": "auto"}),
        ], style={"display": "flex", "flexWrap": "wrap", "gap": "12px"}),
            style={"backgroundColor": f"{color}10", "borderBottom": f"2px solid {color}"}),
        dbc.CardBody(dbc.Row([
            dbc.Col([html.Div("Bahan Baku Sudah Terpakai", className="kpi-label mb-2")]
                    + _usage_rows(store, prod), md=6),
            dbc.Col([html.Div("Biaya Operasional (Kas Berkurang)", className="kpi-label mb-2")]
                    + _cost_rows(store, prod), md=6),
        ])),
    ], className="mb-3")


def build_cards(store, view):
    prods = store.ongoing_productions() if view == "ONGOING" else store.completed_productions()
    if not prods:
        return empty_state("Belum ada produksi" if view == "ONGOING" else "Belum ada produksi selesai")
    return [production_card(store, p) for p in prods]


def tab_labels(store):
    return (f"Sedang Jalan ({len(store.ongoing_productions())})",
            f"Selesai ({len(store.completed_productions())})")


def material_options(store):
    return [{"label": f"{name} (Stok: {ds.format_qty(qty)})", "value": name}
            for name, qty in sorted(store.available_materials().items())]


def ingredient_rows(rows, options):
    """rows: [{"product_name": ..., "quantity": ...}, ...]"""
    out = []
    for i, row in enumerate(rows):
        out.append(dbc.Row([
            dbc.Col(dcc.Dropdown(id={"type": "prod-ing-name", "index": i}, options=options,
                                 value=row.get("product_name"), placeholder="-- PILIH BAHAN --",
                                 style=DROPDOWN_STYLE), md=7),
            dbc.Col(dbc.Input(id={"type": "prod-ing-qty", "index": i}, type="text",
                              inputmode="decimal", placeholder="0.00",
                              value=row.get("quantity") or ""), md=3),
            dbc.Col(dbc.Button("\U0001f5d1", id={"type": "prod-ing-del", "index": i},
                               color="link", size="sm"), md=2),
        ], className="g-2 mb-2", align="center"))
    return out


def cost_rows(rows):
    """rows: [{"description": ..., "amount": ...}, ...]"""
    out = []
    for i, row in enumerate(rows):
        out.append(dbc.Row([
            dbc.Col(dbc.Input(id={"type": "prod-cost-desc", "index": i}, type="text",
                              placeholder="KETERANGAN (MISAL: LISTRIK)",
                              value=row.get("description") or ""), md=7),
            dbc.Col(dbc.Input(id={"type": "prod-cost-amt", "index": i}, type="text",
                              inputmode="decimal", placeholder="BIAYA (RP)",
                              value=row.get("amount") or ""), md=3),
            dbc.Col(dbc.Button("\U0001f5d1", id={"type": "prod-cost-del", "index": i},
                               color="link", size="sm"), md=2),
        ], className="g-2 mb-2", align="center"))
    return out


def _new_modal(store):
    return dbc.Modal([
        dbc.ModalHeader(dbc.ModalTitle("\U0001f3ed Mulai Produksi Baru")),
        dbc.ModalBody([
            html.Div(id="prod-new-error"),
            dbc.Row([
                dbc.Col([dbc.Label("Nama Produk Jadi (Target)", className="kpi-label"),
                         dbc.Input(id="prod-output-name", type="text", placeholder="CONTOH: ROTI MANIS")], md=6),
                dbc.Col([dbc.Label("Kuantitas Target", className="kpi-label"),
                         dbc.Input(id="prod-output-qty", type="text", inputmode="decimal",
                                   placeholder="0.00")], md=3),
                dbc.Col([dbc.Label("Tanggal Mulai (Opsional)", className="kpi-label"),
                         dbc.Input(id="prod-date", type="date")], md=3),
            ], className="g-2 mb-3"),

            html.Div([
                html.Span("Komposisi Bahan Baku (FIFO)", className="kpi-label", style={"color": BLUE}),
                dbc.Button("+ Tambah Bahan", id="prod-add-ing", color="info", size="sm",
                           outline=True, className="ms-auto"),
            ], style={"display": "flex", "alignItems": "center", "marginBottom": "8px"}),
            html.Div(ingredient_rows([{}], material_options(store)), id="prod-ingredient-rows"),

            html.Hr(),
            html.Div([
                html.Span("Biaya Operasional Langsung (Potong Kas)", className="kpi-label", style={"color": RED}),
                dbc.Button("+ Tambah Biaya", id="prod-add-cost", color="danger", size="sm",
                           outline=True, className="ms-auto"),
            ], style={"display": "flex", "alignItems": "center", "marginBottom": "8px"}),
            html.Div(cost_rows([{}]), id="prod-cost-rows"),
            dbc.RadioItems(id="prod-cost-method", inline=True, value="CASH",
                           options=[{"label": "Potong Cash", "value": "CASH"},
                                    {"label": "Potong Bank", "value": "BANK"}]),
        ]),
        dbc.ModalFooter([
            dbc.Button("Batal", id="prod-new-cancel", color="secondary", outline=True, size="sm"),
            dbc.Button("Mulai Sekarang", id="prod-new-save", color="primary", size="sm"),
        ]),
    ], id="prod-new-modal", is_open=False, size="lg", scrollable=True)


def _edit_modal():
    return dbc.Modal([
        dbc.ModalHeader(dbc.ModalTitle("Edit Produksi")),
        dbc.ModalBody([
            dcc.Store(id="prod-edit-id"),
            html.Div(id="prod-edit-error"),
            dbc.Label("Nama Produk Target", className="kpi-label"),
            dbc.Input(id="prod-edit-name", type="text", className="mb-2"),
            dbc.Label("Kuantitas Target", className="kpi-label"),
            dbc.Input(id="prod-edit-qty", type="text", inputmode="decimal"),
        ]),
        dbc.ModalFooter([
            dbc.Button("Batal", id="prod-edit-cancel", color="secondary", outline=True, size="sm"),
            dbc.Button("Update Data", id="prod-edit-save", color="primary", size="sm"),
        ]),
    ], id="prod-edit-modal", is_open=False, centered=True)


def layout():
    """Build the Produksi page."""
    store = ds.get_store()
    ongoing_label, done_label = tab_labels(store)
    return html.Div([
        dcc.Store(id="prod-version", data=0),
        html.Div(build_kpis(store), id="prod-kpis"),

        html.Div([
            html.Div([
                html.H4("Sistem Produksi", style={"margin": "0", "fontWeight": "bold"}),
                html.Small("Pelacakan proses & konversi bahan baku", style={"color": GRAY}),
            ]),
            dbc.Button("+ Produksi Baru", id="prod-open-new", color="primary", className="ms-auto"),
        ], style={"display": "flex", "alignItems": "center", "marginBottom": "12px"}),

        dbc.Tabs([
            dbc.Tab(label=ongoing_label, tab_id="ONGOING", id="prod-tab-ongoing"),
            dbc.Tab(label=done_label, tab_id="HISTORY", id="prod-tab-history"),
        ], id="prod-view", active_tab="ONGOING", className="mb-3"),

        html.Div(build_cards(store, "ONGOING"), id="prod-cards"),

        _new_modal(store),
        _edit_modal(),
        html.Div(id="prod-toast"),
    ])
