"""Ringkasan page — stat board, financial position, monthly cash flow."""
from dash import html, dcc
import dash_bootstrap_components as dbc
import plotly.graph_objects as go

from bukukas.theme import *
from bukukas.components.kpi import kpi_pill, stat_row
from bukukas.components.cards import section, row_item, make_chart
from bukukas import data_state as ds


def _build_position(s):
    return html.Div([
        row_item("Akun Cash", s["cash_only"], indent=1),
        row_item("Akun Bank", s["bank_only"], indent=1),
        row_item("Total Kas Gabungan", s["total_cash"], bold=True),
        row_item("Nilai Stok (batch tersisa x harga beli)", s["total_inventory_value"], indent=1),
        row_item("Total Aset", s["total_asset"], bold=True),
        row_item("Total Hutang Pokok", -s["total_debt"], indent=1),
        row_item("Kekayaan Bersih", s["net_wealth"], bold=True, color=signed_color(s["net_wealth"])),
    ])


def _build_cashflow_chart(store):
    monthly = store.monthly_cashflow()
    fig = go.Figure()
    if len(monthly) > 0:
        fig.add_trace(go.Bar(x=monthly["month"], y=monthly["cash_in"], name="Masuk", marker_color=CASHFLOW_COLORS["cash_in"]))
        fig.add_trace(go.Bar(x=monthly["month"], y=-monthly["cash_out"], name="Keluar", marker_color=CASHFLOW_COLORS["cash_out"]))
        fig.add_trace(go.Scatter(x=monthly["month"], y=monthly["net"], name="Bersih",
                                 mode="lines+markers", line=dict(color=CASHFLOW_COLORS["net"], width=2)))
    make_chart(fig, 320)
    fig.update_layout(title="Arus Kas Bulanan", barmode="relative")
    return fig


def layout():
    """Build the Ringkasan page."""
    store = ds.get_store()
    s = store.summary()
    ongoing = store.ongoing_productions()

    return html.Div([
        stat_row([
            kpi_pill("\U0001fa99", "Total Kas Gabungan", s["total_cash"], CYAN,
                     f"Cash {ds.money(s['cash_only'])} | Bank {ds.money(s['bank_only'])}"),
            kpi_pill("\U0001f4e6", "Nilai Stok", s["total_inventory_value"], PURPLE,
                     f"{len(store.batches)} batch"),
            kpi_pill("⚖️", "Kekayaan Bersih", s["net_wealth"],
                     subtitle=f"Aset {ds.money(s['total_asset'])}"),
        ], className="g-2 mb-2"),
        stat_row([
            kpi_pill("⬆", "Total Masuk", s["total_income"], GREEN),
            kpi_pill("⬇", "Total Keluar", s["total_expense"], RED),
            kpi_pill("\U0001f3e6", "Total Hutang", s["total_debt"], ORANGE,
                     f"{sum(1 for l in store.loans if l.remaining_amount > 0)} pinjaman aktif"),
            kpi_pill("\U0001f3ed", "Produksi Berjalan", len(ongoing), BLUE,
                     ds.money(sum(p.total_hpp for p in ongoing)) + " terkunci", count=True),
        ]),

        dbc.Row([
            dbc.Col(section("Posisi Keuangan", [_build_position(s)], CYAN), md=5),
            dbc.Col(dbc.Card(dbc.CardBody(dcc.Graph(figure=_build_cashflow_chart(store),
                                                    config={"displayModeBar": False}))), md=7),
        ], className="g-3"),
    ])
