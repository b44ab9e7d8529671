from datetime import datetime

import pytest

from bukukas.formatting import (
    sanitize_numeric, to_number, format_idr, format_qty, format_date_label,
    parse_manual_date, date_input_value, day_start,
)


@pytest.mark.parametrize("val,expected", [
    (1234567, "Rp 1.234.567"),
    (1234.5, "Rp 1.234,5"),
    (99.25, "Rp 99,25"),
    (0, "Rp 0"),
    (None, "Rp 0"),
    (-2500, "-Rp 2.500"),
])
def test_format_idr(val, expected):
    assert format_idr(val) == expected


@pytest.mark.parametrize("val,expected", [
    (1234.5, "1.234,50"),
    (0, "0,00"),
    (3, "3,00"),
    (-1.5, "-1,50"),
])
def test_format_qty(val, expected):
    assert format_qty(val) == expected


@pytest.mark.parametrize("raw,expected", [
    ("12a,5", "12.5"),
    ("1.2.3", "1.23"),
    ("Rp 15000", "15000"),
    ("-7", "7"),
    (None, ""),
])
def test_sanitize_numeric(raw, expected):
    assert sanitize_numeric(raw) == expected


def test_to_number():
    assert to_number("") == 0.0
    assert to_number(".") == 0.0
    assert to_number(7) == 7.0
    assert to_number("2,75") == 2.75


def test_manual_dates_are_local_midnight():
    ts = parse_manual_date("2024-03-05")
    assert ts == int(datetime(2024, 3, 5).timestamp() * 1000)
    assert format_date_label(ts) == "05/03/2024"
    assert date_input_value(ts) == "2024-03-05"
    assert day_start(ts + 5 * 3600 * 1000) == ts


@pytest.mark.parametrize("raw", ["", None, "kemarin", "2024-13-40"])
def test_bad_manual_dates(raw):
    assert parse_manual_date(raw) is None
