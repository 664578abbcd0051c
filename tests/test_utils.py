"""
test_utils.py - Input parsing and formatting helpers
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal

from utils import app_dir, format_amount, now_stamps, safe_decimal


@pytest.mark.parametrize("raw, expected", [
    ("12.50", Decimal("12.50")),
    (" -3 ", Decimal("-3")),
    ("", Decimal("0")),
    ("abc", Decimal("0")),
    ("NaN", Decimal("0")),
    ("inf", Decimal("0")),
    (None, Decimal("0")),
])
def test_safe_decimal(raw, expected):
    assert safe_decimal(raw) == expected


def test_safe_decimal_custom_default():
    assert safe_decimal("x", None) is None


@pytest.mark.parametrize("value, signed, expected", [
    (Decimal("150"), True, "+150.00"),
    (Decimal("-200"), True, "-200.00"),
    (Decimal("-0.001"), True, "+0.00"),
    (Decimal("1150.005"), False, "1150.00"),
    (Decimal("98765432109876543210.987654321"), False, "98765432109876543210.99"),
    (Decimal("1E-28"), True, "+0.00"),
])
def test_format_amount(value, signed, expected):
    assert format_amount(value, signed=signed) == expected


def test_now_stamps_instant_is_utc_iso():
    display, instant = now_stamps(datetime(2026, 10, 19, 6, 30, tzinfo=timezone.utc))
    assert instant == "2026-10-19T06:30:00+00:00"
    assert datetime.strptime(display, "%Y/%m/%d %H:%M:%S")


def test_app_dir_honours_env(isolated_home):
    assert app_dir() == str(isolated_home)
    assert isolated_home.is_dir()
