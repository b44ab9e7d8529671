"""Stok page — purchase form, FIFO sales, batch table, stock summary."""
from dash import html, dcc
import dash_bootstrap_components as dbc

from bukukas.theme import *
from bukukas.components.kpi import kpi_card, stat_row
from bukukas.components.cards import section, empty_state
from bukukas.components.tables import stock_level_bar, account_badge
from bukukas.models import StockType
from bukukas import data_state as ds

METHOD_OPTIONS = [
    {"label": "Cash", "value": "CASH"},
    {"label": "Bank", "value": "BANK"},
]


def build_kpis(store):
    materials = sum(b.value for b in store.batches if b.stock_type == StockType.FOR_PRODUCTION)
    goods = sum(b.value for b in store.batches if b.stock_type == StockType.FOR_SALE)
    revenue = sum(s.total for s in store.sales)
    profit = sum(s.gross_profit for s in store.sales)
    return stat_row([
        kpi_card("Nilai Bahan Baku", materials, BLUE),
        kpi_card("Nilai Barang Dagang", goods, PURPLE),
        kpi_card("Total Penjualan", revenue, GREEN, f"{len(store.sales)} transaksi"),
        kpi_card("Laba Kotor", profit, subtitle=f"HPP terjual {ds.money(revenue - profit)}"),
    ])


def goods_options(store):
    return [{"label": f"{name} (Stok: {ds.format_qty(qty)})", "value": name}
            for name, qty in sorted(store.available_goods().items())]


def build_summary(store):
    df = store.stock_summary()
    if len(df) == 0:
        return empty_state("Gudang kosong")
    rows = []
    for _, r in df.iterrows():
        rows.append(html.Tr([
            html.Td(r["product_name"], style={"fontWeight": "bold"}),
            html.Td(STOCK_TYPE_LABELS.get(r["stock_type"], r["stock_type"]), style={"color": GRAY}),
            html.Td(str(int(r["batches"])), style={"textAlign": "center"}),
            html.Td(ds.format_qty(r["current_quantity"]), style={"textAlign": "right", "fontFamily": "monospace"}),
            html.Td(ds.money(r["avg_cost"]), style={"textAlign": "right", "fontFamily": "monospace"}),
            html.Td(ds.money(r["value"]), style={"textAlign": "right", "fontFamily": "monospace",
                                                 "color": CYAN}),
        ]))
    return dbc.Table([
        html.Thead(html.Tr([
            html.Th("Produk"), html.Th("Jenis"), html.Th("Batch", style={"textAlign": "center"}),
            html.Th("Sisa Qty", style={"textAlign": "right"}),
            html.Th("Rata-rata Modal", style={"textAlign": "right"}),
            html.Th("Nilai", style={"textAlign": "right"}),
        ])),
        html.Tbody(rows),
    ], striped=True, hover=True, size="sm", className="mb-0")


def build_batches(store):
    if not store.batches:
        return empty_state("Belum ada batch stok")
    rows = []
    for b in sorted(store.batches, key=lambda b: b.created_at, reverse=True):
        if b.production_id:
            action = html.Span("HASIL PRODUKSI", style={"color": DARKGRAY, "fontSize": "9px"})
        else:
            action = dbc.Button("\U0001f5d1", id={"type": "batch-del-btn", "index": b.id},
                                color="link", size="sm")
        rows.append(html.Tr([
            html.Td(ds.format_date_label(b.created_at), style={"fontSize": "12px", "whiteSpace": "nowrap"}),
            html.Td([html.Div(b.product_name, style={"fontWeight": "bold", "fontSize": "12px"}),
                     html.Div(STOCK_TYPE_LABELS.get(b.stock_type, b.stock_type),
                              style={"color": GRAY, "fontSize": "10px"})]),
            html.Td([stock_level_bar(b.current_quantity, b.initial_quantity),
                     html.Span(f" {ds.format_qty(b.current_quantity)} / {ds.format_qty(b.initial_quantity)}",
                               style={"fontSize": "11px", "fontFamily": "monospace"})]),
            html.Td(ds.money(b.buy_price), style={"textAlign": "right", "fontFamily": "monospace"}),
            html.Td(ds.money(b.value), style={"textAlign": "right", "fontFamily": "monospace"}),
            html.Td(action, style={"textAlign": "center"}),
        ]))
    return dbc.Table([
        html.Thead(html.Tr([
            html.Th("Tanggal"), html.Th("Barang"), html.Th("Sisa / Awal"),
            html.Th("Harga Beli", style={"textAlign": "right"}),
            html.Th("Nilai Sisa", style={"textAlign": "right"}),
            html.Th("", style={"textAlign": "center"}),
        ])),
        html.Tbody(rows),
    ], striped=True, hover=True, size="sm", className="mb-0")


def build_sales(store):
    if not store.sales:
        return empty_state("Belum ada penjualan")
    txs = {t.related_id: t for t in store.transactions if t.related_id}
    rows = []
    for s in sorted(store.sales, key=lambda s: s.created_at, reverse=True):
        tx = txs.get(s.id)
        rows.append(html.Tr([
            html.Td(ds.format_date_label(s.created_at), style={"fontSize": "12px"}),
            html.Td(s.product_name, style={"fontWeight": "bold", "fontSize": "12px"}),
            html.Td(account_badge(tx.account) if tx else ""),
            html.Td(f"{ds.format_qty(s.quantity)} x {ds.money(s.unit_price)}",
                    style={"fontFamily": "monospace", "fontSize": "12px"}),
            html.Td(ds.money(s.total), style={"textAlign": "right", "fontFamily": "monospace", "color": GREEN}),
            html.Td(ds.money(s.gross_profit), style={"textAlign": "right", "fontFamily": "monospace",
                                                     "color": signed_color(s.gross_profit)}),
            html.Td(dbc.Button("\U0001f5d1", id={"type": "sale-del-btn", "index": s.id},
                               color="link", size="sm"),
                    style={"textAlign": "center"}),
        ]))
    return dbc.Table([
        html.Thead(html.Tr([
            html.Th("Tanggal"), html.Th("Produk"), html.Th("Akun"), html.Th("Qty x Harga"),
            html.Th("Total", style={"textAlign": "right"}),
            html.Th("Laba Kotor", style={"textAlign": "right"}),
            html.Th(""),
        ])),
        html.Tbody(rows),
    ], striped=True, hover=True, size="sm", className="mb-0")


def _purchase_form():
    return section("Beli Stok", [
        html.Div(id="stok-add-error"),
        dbc.Row([
            dbc.Col(dbc.Input(id="stok-name", type="text", placeholder="NAMA BARANG"), md=4),
            dbc.Col(dbc.Input(id="stok-qty", type="text", inputmode="decimal", placeholder="QTY"), md=2),
            dbc.Col(dbc.Input(id="stok-price", type="text", inputmode="decimal",
                              placeholder="HARGA BELI / UNIT"), md=3),
            dbc.Col(dbc.Input(id="stok-date", type="date"), md=3),
        ], className="g-2 mb-2"),
        dbc.Row([
            dbc.Col(dbc.RadioItems(id="stok-type", inline=True, value=StockType.FOR_PRODUCTION,
                                   options=[{"label": v, "value": k} for k, v in STOCK_TYPE_LABELS.items()]),
                    md=5),
            dbc.Col(dbc.RadioItems(id="stok-method", inline=True, value="CASH", options=METHOD_OPTIONS), md=4),
            dbc.Col(dbc.Button("+ Simpan Batch", id="stok-add-btn", color="primary", size="sm",
                               className="w-100"), md=3),
        ], className="g-2", align="center"),
    ], PURPLE)


def _sale_form(store):
    return section("Catat Penjualan (FIFO)", [
        html.Div(id="stok-sale-error"),
        dbc.Row([
            dbc.Col(dcc.Dropdown(id="stok-sale-product", options=goods_options(store),
                                 placeholder="-- PILIH BARANG --", style=DROPDOWN_STYLE), md=4),
            dbc.Col(dbc.Input(id="stok-sale-qty", type="text", inputmode="decimal", placeholder="QTY"), md=2),
            dbc.Col(dbc.Input(id="stok-sale-price", type="text", inputmode="decimal",
                              placeholder="HARGA JUAL / UNIT"), md=3),
            dbc.Col(dbc.Input(id="stok-sale-date", type="date"), md=3),
        ], className="g-2 mb-2"),
        dbc.Row([
            dbc.Col(dbc.RadioItems(id="stok-sale-method", inline=True, value="CASH",
                                   options=METHOD_OPTIONS), md=9),
            dbc.Col(dbc.Button("Jual", id="stok-sale-btn", color="success", size="sm",
                               className="w-100"), md=3),
        ], className="g-2", align="center"),
    ], GREEN)


def layout():
    """Build the Stok page."""
    store = ds.get_store()
    return html.Div([
        dcc.Store(id="stok-version", data=0),
        html.Div(build_kpis(store), id="stok-kpis"),
        dbc.Row([
            dbc.Col(_purchase_form(), md=6),
            dbc.Col(_sale_form(store), md=6),
        ], className="g-3"),
        section("Ringkasan Stok", [html.Div(build_summary(store), id="stok-summary")], CYAN),
        dbc.Tabs([
            dbc.Tab(section("Batch Stok", [html.Div(build_batches(store), id="stok-batches")], PURPLE),
                    label="Batch", tab_id="BATCHES"),
            dbc.Tab(section("Riwayat Penjualan", [html.Div(build_sales(store), id="stok-sales")], GREEN),
                    label="Penjualan", tab_id="SALES"),
        ], id="stok-tabs", active_tab="BATCHES", className="mb-3"),
        html.Div(id="stok-toast"),
    ])
