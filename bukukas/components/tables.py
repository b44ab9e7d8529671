"""Reusable table cells: stock gauge, account/category badges, lock badge."""
from dash import html
from bukukas.theme import *


def stock_level_bar(current, initial):
    """Visual stock gauge bar — 8px height, gradient fill."""
    if initial <= 0:
        return html.Div(style={"width": "80px", "display": "inline-block"})
    pct = max(0, min(100, (current / initial) * 100))
    color = GREEN if pct > 50 else (ORANGE if pct > 20 else RED)
    return html.Div([
        html.Div(style={"width": f"{max(pct, 4)}%", "height": "8px",
                         "background": f"linear-gradient(90deg, {color}88, {color})",
                         "borderRadius": "4px",
                         "transition": "width 0.3s ease"}),
    ], style={"width": "80px", "height": "8px", "backgroundColor": GAUGE_TRACK,
              "borderRadius": "4px", "display": "inline-block", "verticalAlign": "middle",
              "overflow": "hidden"})


def _badge(text, color, size="10px"):
    return html.Span(text, style={
        "color": color, "border": f"1px solid {color}66", "backgroundColor": f"{color}15",
        "borderRadius": "6px", "padding": "1px 6px", "fontSize": size, "fontWeight": "bold",
        "textTransform": "uppercase", "letterSpacing": "1px", "whiteSpace": "nowrap",
    })


def account_badge(account):
    icon = ACCOUNT_ICONS.get(account, "")
    return _badge(f"{icon} {account}", ACCOUNT_COLORS.get(account, GRAY))


def category_badge(category):
    return _badge(category.replace("_", " "), CATEGORY_COLORS.get(category, GRAY), size="9px")


def lock_badge(label):
    """Lock badge colored by the module that owns the transaction."""
    return _badge(f"\U0001f512 {label}", SOURCE_COLORS.get(label, DARKGRAY), size="9px")
