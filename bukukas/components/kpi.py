"""KPI builders for the stat boards: Ringkasan pills and page header cards.

Values may be passed as numbers (shown as Rupiah, or as a plain count with
count=True) or as ready-made strings. Leaving color out colors a number by its
sign, which is what the net-wealth and gross-profit figures want.
"""
from dash import html
import dash_bootstrap_components as dbc

from bukukas.theme import *
from bukukas.formatting import format_idr


def _display(value, count=False):
    if isinstance(value, str):
        return value
    return f"{int(value):,}".replace(",", ".") if count else format_idr(value)


def _pick_color(value, color):
    if color is not None:
        return color
    return signed_color(value) if not isinstance(value, str) else WHITE


def icon_badge(text, color):
    """Round 34px icon chip, tinted with the pill color."""
    return html.Div(text, style={
        "width": "34px", "height": "34px", "borderRadius": "50%",
        "backgroundColor": f"{color}22", "border": f"1px solid {color}66",
        "display": "inline-flex", "alignItems": "center", "justifyContent": "center",
        "fontSize": "15px", "flexShrink": "0",
    })


def kpi_pill(icon, label, value, color=None, subtitle="", count=False):
    color = _pick_color(value, color)
    text_children = [
        html.Div(label, className="kpi-label"),
        html.Div(_display(value, count), className="kpi-value", style={"color": color}),
    ]
    if subtitle:
        text_children.append(html.Div(subtitle, className="kpi-subtitle"))
    return dbc.Card(
        dbc.CardBody([
            icon_badge(icon, color),
            html.Div(text_children, style={"marginLeft": "12px", "minWidth": "0"}),
        ], style={"display": "flex", "alignItems": "center", "padding": "12px 16px"}),
        style={"borderLeft": f"4px solid {color}", "height": "100%"},
        className="kpi-pill",
    )


def kpi_card(label, value, color=None, subtitle="", count=False):
    """Compact centered card for page headers."""
    color = _pick_color(value, color)
    body_children = [
        html.Div(label, className="kpi-label"),
        html.Div(_display(value, count), className="kpi-value", style={"color": color}),
    ]
    if subtitle:
        body_children.append(html.Div(subtitle, className="kpi-subtitle"))
    return dbc.Card(
        dbc.CardBody(body_children, style={"padding": "12px", "textAlign": "center"}),
        style={"borderTop": f"3px solid {color}", "height": "100%"},
        className="kpi-card-top",
    )


def stat_row(cards, widths=None, className="g-2 mb-3"):
    """One row of KPI cards; equal widths unless `widths` (md columns) is given."""
    if widths is None:
        widths = [max(1, 12 // max(len(cards), 1))] * len(cards)
    return dbc.Row([dbc.Col(card, md=w) for card, w in zip(cards, widths)], className=className)
