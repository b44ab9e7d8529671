"""Reusable card/section builders."""
from dash import html
import dash_bootstrap_components as dbc
from bukukas.theme import *
from bukukas.formatting import format_idr


def section(title, children, color=ORANGE, actions=None):
    """Titled section card with colored top border."""
    header = [html.Span(title)]
    if actions:
        header.append(html.Div(actions, className="ms-auto", style={"display": "flex", "gap": "8px"}))
    return dbc.Card([
        dbc.CardHeader(header, style={"color": color, "fontWeight": "bold", "fontSize": "16px",
                                      "borderBottom": f"2px solid {color}",
                                      "backgroundColor": "transparent", "padding": "12px 16px",
                                      "display": "flex", "alignItems": "center"}),
        dbc.CardBody(children, style={"padding": "16px"}),
    ], className="mb-3")


def row_item(label, amount, indent=0, bold=False, color=WHITE, neg_color=RED):
    """Single ledger row: label on the left, Rupiah on the right."""
    display_color = neg_color if amount < 0 else color
    style = {
        "display": "flex", "justifyContent": "space-between",
        "padding": "4px 0", "borderBottom": "1px solid #ffffff10",
        "marginLeft": f"{indent * 24}px",
    }
    if bold:
        style["fontWeight"] = "bold"
        style["borderBottom"] = "2px solid #ffffff30"
        style["padding"] = "8px 0"
    return html.Div([
        html.Span(label, style={"color": color if not bold else display_color, "fontSize": "13px"}),
        html.Span(format_idr(amount), style={"color": display_color, "fontFamily": "monospace", "fontSize": "13px"}),
    ], style=style)


def make_chart(fig, height=360, legend_h=True):
    """Apply consistent styling to a Plotly figure."""
    layout = {**CHART_LAYOUT, "height": height}
    if legend_h:
        layout["legend"] = dict(orientation="h", y=1.12, x=0.5, xanchor="center")
    fig.update_layout(**layout)
    return fig


def toast(message, header, icon="success"):
    return dbc.Toast(message, header=header, icon=icon, duration=3000, style=TOAST_STYLE)


def error_alert(message):
    return dbc.Alert(str(message), color="danger", dismissable=True, className="mb-2")


def empty_state(text):
    return html.P(text, style={"color": GRAY, "textAlign": "center", "padding": "40px",
                               "textTransform": "uppercase", "fontSize": "11px",
                               "letterSpacing": "1.2px"})
