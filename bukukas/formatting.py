"""Input sanitising and id-ID display helpers (Rupiah, quantities, dates)."""

import re
from datetime import datetime


def sanitize_numeric(val):
    """Keep digits and a single decimal point. Commas count as decimal points."""
    sanitized = re.sub(r"[^0-9.]", "", str(val or "").replace(",", "."))
    parts = sanitized.split(".")
    if len(parts) > 2:
        sanitized = parts[0] + "." + "".join(parts[1:])
    return sanitized


def to_number(val):
    if isinstance(val, (int, float)):
        return float(val)
    cleaned = sanitize_numeric(val)
    if cleaned in ("", "."):
        return 0.0
    return float(cleaned)


def _swap_separators(text):
    # 1,234.50 -> 1.234,50
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_idr(val):
    """Format a number as Rupiah: Rp 1.234.567 (decimals only when present)."""
    val = float(val or 0)
    rounded = round(abs(val), 2)
    if rounded == int(rounded):
        body = f"{int(rounded):,}".replace(",", ".")
    else:
        body = _swap_separators(f"{rounded:,.2f}").rstrip("0")
    sign = "-" if val < 0 and rounded > 0 else ""
    return f"{sign}Rp {body}"


def format_qty(val):
    """Quantities always carry two decimals: 1.234,50"""
    val = float(val or 0)
    text = _swap_separators(f"{abs(val):,.2f}")
    return f"-{text}" if val < 0 and round(abs(val), 2) > 0 else text


def format_date_label(ts):
    return datetime.fromtimestamp(ts / 1000).strftime("%d/%m/%Y")


def format_datetime_label(ts):
    return datetime.fromtimestamp(ts / 1000).strftime("%d/%m/%Y %H.%M")


def parse_manual_date(date_str):
    """YYYY-MM-DD -> epoch ms at local midnight, or None when empty/invalid."""
    if not date_str:
        return None
    try:
        dt = datetime.strptime(str(date_str)[:10], "%Y-%m-%d")
    except ValueError:
        return None
    return int(dt.timestamp() * 1000)


def date_input_value(ts):
    """Epoch ms -> YYYY-MM-DD for pre-filling a date input."""
    return datetime.fromtimestamp(ts / 1000).strftime("%Y-%m-%d")


def day_start(ts):
    """Epoch ms of local midnight on the same calendar day."""
    dt = datetime.fromtimestamp(ts / 1000)
    return int(datetime(dt.year, dt.month, dt.day).timestamp() * 1000)
