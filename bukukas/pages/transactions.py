"""Kas & Pinjaman page — stat board, cash history with filters, loans, entry modals."""
from dash import html, dcc
import dash_bootstrap_components as dbc

from bukukas.theme import *
from bukukas.components.kpi import kpi_card, stat_row
from bukukas.components.cards import section, empty_state
from bukukas.components.tables import account_badge, category_badge, lock_badge
from bukukas.models import TransactionType
from bukukas import data_state as ds

METHOD_OPTIONS = [
    {"label": "Tunai/Cash", "value": "CASH"},
    {"label": "Bank/Transfer", "value": "BANK"},
]


def _field(label, component):
    return html.Div([
        dbc.Label(label, className="kpi-label", style={"marginBottom": "4px"}),
        component,
    ], className="mb-2")


def _money_input(id_, placeholder="0"):
    return dbc.Input(id=id_, type="text", inputmode="decimal", placeholder=placeholder)


def _modal(prefix, title, body, save_label):
    return dbc.Modal([
        dbc.ModalHeader(dbc.ModalTitle(title)),
        dbc.ModalBody([html.Div(id=f"{prefix}-error")] + body),
        dbc.ModalFooter([
            dbc.Button("Batal", id=f"{prefix}-cancel", color="secondary", outline=True, size="sm"),
            dbc.Button(save_label, id=f"{prefix}-save", color="primary", size="sm"),
        ]),
    ], id=f"{prefix}-modal", is_open=False, centered=True)


def build_stats(store):
    s = store.summary()
    return stat_row([
        kpi_card("Total Kas Gabungan", s["total_cash"], CYAN,
                 f"Cash {ds.money(s['cash_only'])} · Bank {ds.money(s['bank_only'])}"),
        kpi_card("Nilai Stok", s["total_inventory_value"], PURPLE),
        kpi_card("Total Hutang", s["total_debt"], ORANGE),
        kpi_card("Total Masuk", s["total_income"], GREEN),
        kpi_card("Total Keluar", s["total_expense"], RED),
        kpi_card("Kekayaan Bersih", s["net_wealth"]),
    ], widths=[3, 2, 2, 2, 1, 2])


def build_history(store, type_filter="ALL", account_filter="ALL", search="",
                  start_date="", end_date=""):
    rows = store.filter_transactions(type_filter, account_filter, search, start_date, end_date)
    if not rows:
        return empty_state("Data tidak ditemukan")

    body = []
    for t in rows:
        source = store.source_label(t)
        is_in = t.type == TransactionType.CASH_IN
        if source:
            actions = lock_badge(source)
        else:
            actions = html.Div([
                dbc.Button("✏️", id={"type": "kas-edit-btn", "index": t.id},
                           color="link", size="sm"),
                dbc.Button("\U0001f5d1", id={"type": "kas-del-btn", "index": t.id},
                           color="link", size="sm"),
            ], style={"display": "flex", "justifyContent": "center"})
        body.append(html.Tr([
            html.Td(account_badge(t.account)),
            html.Td(ds.format_date_label(t.created_at), style={"whiteSpace": "nowrap", "fontSize": "12px"}),
            html.Td(category_badge(t.category)),
            html.Td([
                html.Div(t.description, style={"fontSize": "12px", "fontWeight": "600"}),
                html.Div(f"Ref ID: {t.id[:8]}", style={"color": DARKGRAY, "fontSize": "10px"}),
            ]),
            html.Td(("+" if is_in else "-") + ds.money(t.amount),
                    style={"color": GREEN if is_in else RED, "textAlign": "right",
                           "fontFamily": "monospace", "fontWeight": "bold", "whiteSpace": "nowrap"}),
            html.Td(actions, style={"textAlign": "center"}),
        ]))

    return dbc.Table([
        html.Thead(html.Tr([
            html.Th("Akun"), html.Th("Tanggal"), html.Th("Kategori"), html.Th("Deskripsi"),
            html.Th("Nominal", style={"textAlign": "right"}),
            html.Th("Aksi / Sumber", style={"textAlign": "center"}),
        ])),
        html.Tbody(body),
    ], striped=True, hover=True, size="sm", className="mb-0")


def build_loans(store):
    if not store.loans:
        return empty_state("Belum ada pinjaman")
    cards = []
    for loan in sorted(store.loans, key=lambda l: l.created_at, reverse=True):
        paid_off = loan.remaining_amount <= 0
        cards.append(dbc.Col(dbc.Card(dbc.CardBody([
            html.Div([
                html.H5(loan.source, style={"margin": "0", "fontWeight": "bold"}),
                dbc.Button("\U0001f5d1", id={"type": "loan-del-btn", "index": loan.id},
                           color="link", size="sm", className="ms-auto"),
            ], style={"display": "flex", "alignItems": "center"}),
            html.Div(f"Awal: {ds.money(loan.initial_amount)} · {ds.format_date_label(loan.created_at)}",
                     style={"color": GRAY, "fontSize": "11px"}),
            html.Div(loan.note, style={"color": DARKGRAY, "fontSize": "11px"}) if loan.note else None,
            html.Div("Sisa Hutang Pokok", className="kpi-label", style={"marginTop": "10px"}),
            html.Div(ds.money(loan.remaining_amount),
                     style={"color": GREEN if paid_off else RED, "fontSize": "20px",
                            "fontWeight": "bold", "fontFamily": "monospace"}),
            dbc.Button("Lunas" if paid_off else "Bayar Cicilan",
                       id={"type": "loan-repay-btn", "index": loan.id},
                       color="light", size="sm", disabled=paid_off, className="mt-2 w-100"),
        ]), style={"borderTop": f"3px solid {GREEN if paid_off else ORANGE}"}), md=4, className="mb-3"))
    return dbc.Row(cards, className="g-3")


def _manual_modal():
    return _modal("kas-manual", "Catat Kas Manual", [
        _field("Jenis", dbc.RadioItems(
            id="kas-manual-type", inline=True, value=TransactionType.CASH_OUT,
            options=[{"label": "Masuk", "value": TransactionType.CASH_IN},
                     {"label": "Keluar", "value": TransactionType.CASH_OUT}])),
        _field("Akun", dbc.RadioItems(id="kas-manual-method", inline=True, value="CASH",
                                      options=METHOD_OPTIONS)),
        _field("Kategori", dbc.Input(id="kas-manual-category", type="text")),
        _field("Nominal", _money_input("kas-manual-amount")),
        _field("Keterangan", dbc.Input(id="kas-manual-desc", type="text")),
        _field("Tanggal", dbc.Input(id="kas-manual-date", type="date")),
    ], "Simpan Data")


def _edit_modal():
    return _modal("kas-edit", "Edit Transaksi Kas", [
        dcc.Store(id="kas-edit-id"),
        _field("Akun", dbc.RadioItems(id="kas-edit-method", inline=True, value="CASH",
                                      options=[{"label": "Cash", "value": "CASH"},
                                               {"label": "Bank", "value": "BANK"}])),
        _field("Kategori", dbc.Input(id="kas-edit-category", type="text")),
        _field("Nominal", _money_input("kas-edit-amount")),
        _field("Keterangan", dbc.Input(id="kas-edit-desc", type="text")),
        _field("Tanggal", dbc.Input(id="kas-edit-date", type="date")),
    ], "Update Data")


def _loan_modal():
    return _modal("kas-loan", "Catat Pinjaman Baru", [
        _field("Masuk Ke", dbc.RadioItems(id="kas-loan-method", inline=True, value="CASH",
                                          options=[{"label": "Cash", "value": "CASH"},
                                                   {"label": "Bank", "value": "BANK"}])),
        _field("Sumber Pinjaman", dbc.Input(id="kas-loan-source", type="text")),
        _field("Jumlah Pencairan (Pokok)", _money_input("kas-loan-amount")),
        _field("Catatan", dbc.Input(id="kas-loan-note", type="text")),
        _field("Tanggal", dbc.Input(id="kas-loan-date", type="date")),
    ], "Terima Dana")


def _repay_modal():
    return _modal("kas-repay", "Bayar Cicilan / Pelunasan", [
        dcc.Store(id="kas-repay-id"),
        html.Div(id="kas-repay-title", style={"color": GRAY, "fontSize": "12px", "marginBottom": "8px"}),
        _field("Potong Dari", dbc.RadioItems(id="kas-repay-method", inline=True, value="CASH",
                                             options=[{"label": "Cash", "value": "CASH"},
                                                      {"label": "Bank", "value": "BANK"}])),
        _field("Bayar Pokok", _money_input("kas-repay-principal")),
        _field("Bunga", _money_input("kas-repay-interest")),
        _field("Tanggal", dbc.Input(id="kas-repay-date", type="date")),
    ], "Konfirmasi Bayar")


def _filters():
    return dbc.Row([
        dbc.Col(dbc.RadioItems(
            id="kas-filter-type", inline=True, value="ALL",
            options=[{"label": "Semua", "value": "ALL"},
                     {"label": "Masuk", "value": TransactionType.CASH_IN},
                     {"label": "Keluar", "value": TransactionType.CASH_OUT}]), md=3),
        dbc.Col(dbc.RadioItems(
            id="kas-filter-account", inline=True, value="ALL",
            options=[{"label": "Semua Akun", "value": "ALL"},
                     {"label": "Cash", "value": "CASH"},
                     {"label": "Bank", "value": "BANK"}]), md=3),
        dbc.Col(dbc.Input(id="kas-search", type="text", placeholder="CARI DESKRIPSI...",
                          debounce=True, size="sm"), md=2),
        dbc.Col(dbc.InputGroup([dbc.InputGroupText("Mulai"),
                                dbc.Input(id="kas-start", type="date")], size="sm"), md=2),
        dbc.Col(dbc.InputGroup([dbc.InputGroupText("Sampai"),
                                dbc.Input(id="kas-end", type="date")], size="sm"), md=2),
    ], className="g-2 mb-3", align="center")


def layout():
    """Build the Kas & Pinjaman page."""
    store = ds.get_store()
    return html.Div([
        dcc.Store(id="kas-version", data=0),

        html.Div(build_stats(store), id="kas-stats"),

        html.Div([
            dbc.Button("+ Kas Manual", id="kas-manual-open", color="primary", size="sm"),
            dbc.Button("+ Pinjaman", id="kas-loan-open", color="info", size="sm"),
        ], style={"display": "flex", "gap": "8px", "marginBottom": "12px"}),

        dbc.Tabs([
            dbc.Tab(section("Riwayat Kas", [
                _filters(),
                html.Div(id="kas-history"),
            ], CYAN), label="Riwayat Kas", tab_id="HISTORY"),
            dbc.Tab(section("Daftar Pinjaman", [
                html.Div(build_loans(store), id="kas-loans"),
            ], ORANGE), label="Daftar Pinjaman", tab_id="LOANS"),
        ], id="kas-tabs", active_tab="HISTORY", className="mb-3"),

        _manual_modal(),
        _edit_modal(),
        _loan_modal(),
        _repay_modal(),

        html.Div(id="kas-toast"),
    ])
