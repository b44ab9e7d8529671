"""
Theme constants — colors, chart layout, Bootstrap overrides.
Import from here instead of hardcoding colors anywhere.
"""

# ── Color Palette ────────────────────────────────────────────────────────────
BG = "#0a0a14"
GREEN = "#2ecc71"
RED = "#e74c3c"
BLUE = "#3498db"
ORANGE = "#f39c12"
PURPLE = "#9b59b6"
TEAL = "#1abc9c"
WHITE = "#ffffff"
GRAY = "#aaaaaa"
DARKGRAY = "#666666"
CYAN = "#00d4ff"
GAUGE_TRACK = "#0d0d1a"

# ── Ledger colors ────────────────────────────────────────────────────────────
# transaction category -> badge color in the cash history
CATEGORY_COLORS = {
    "SALES": GREEN,
    "DEPOSIT": TEAL,
    "FORFEITED_DP": TEAL,
    "LOAN_PROCEEDS": BLUE,
    "LOAN_REPAYMENT": ORANGE,
    "LOAN_INTEREST": ORANGE,
    "STOCK_PURCHASE": PURPLE,
    "PRODUCTION_COST": RED,
}

# owning module of a locked transaction (store.source_label) -> lock badge color
SOURCE_COLORS = {
    "STOK": PURPLE,
    "PRODUKSI": RED,
    "PINJAMAN": ORANGE,
    "PENJUALAN": GREEN,
    "ORDER DP": TEAL,
}

ACCOUNT_COLORS = {"CASH": GREEN, "BANK": BLUE}
ACCOUNT_ICONS = {"CASH": "\U0001f4b5", "BANK": "\U0001f3e6"}

STATUS_COLORS = {"IN_PROGRESS": ORANGE, "COMPLETED": GREEN}
STATUS_LABELS = {"IN_PROGRESS": "Sedang Jalan", "COMPLETED": "Selesai"}

STOCK_TYPE_LABELS = {
    "FOR_PRODUCTION": "Bahan Baku",
    "FOR_SALE": "Barang Dagang",
}

# monthly cash-flow chart series
CASHFLOW_COLORS = {"cash_in": GREEN, "cash_out": RED, "net": CYAN}


def signed_color(value, positive=GREEN, negative=RED):
    """Green for money in (or zero), red for money out."""
    return positive if value >= 0 else negative


# ── Plotly Chart Layout ──────────────────────────────────────────────────────
CHART_LAYOUT = dict(
    template="plotly_dark",
    paper_bgcolor="rgba(0,0,0,0)",
    plot_bgcolor="rgba(0,0,0,0)",
    font={"color": WHITE},
    margin=dict(t=50, b=30, l=60, r=20),
    separators=",.",  # id-ID: comma decimals, dot thousands
)

TOAST_STYLE = {"position": "fixed", "top": 20, "right": 20, "zIndex": 9999}

# ── Input styles ─────────────────────────────────────────────────────────────
DROPDOWN_STYLE = {"backgroundColor": BG, "color": "#000000"}
