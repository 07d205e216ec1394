import datetime

import pytest

from formatting import (
    chemical,
    current_shift,
    format_currency,
    format_date,
    format_date_short,
    format_number,
    parameter_status,
    trend,
)


@pytest.mark.parametrize("name,value,expected", [
    ("ph", 7.0, "ok"),
    ("ph", 7.5, "warning"),
    ("ph", 6.0, "critical"),
    ("ph", 7.9, "critical"),
    ("turbidity", 450, "ok"),
    ("turbidity", 600, "warning"),
    ("turbidity", 900, "critical"),
    ("temperature", 100, "warning"),
    ("brix", None, "ok"),
    ("unknown", 3, "ok"),
])
def test_parameter_status(name, value, expected):
    assert parameter_status(name, value) == expected


@pytest.mark.parametrize("hour,shift", [(0, "C"), (7, "C"), (8, "A"), (15, "A"), (16, "B"), (23, "B")])
def test_current_shift(hour, shift):
    assert current_shift(datetime.datetime(2024, 5, 1, hour, 30)) == shift


def test_format_currency():
    assert format_currency(1234.5) == "R$ 1.234,50"
    assert format_currency(None) == "R$ 0,00"


def test_format_number():
    assert format_number(6.956) == "7.0"
    assert format_number(6.956, digits=2) == "6.96"
    assert format_number(None) == "—"
    assert format_number("abc") == "—"


def test_format_date_converts_to_plant_time():
    # naive backend timestamps are UTC
    assert format_date("2024-03-10T15:30:00") == "10/03/2024 12:30"
    assert format_date("2024-03-10T15:30:00Z") == "10/03/2024 12:30"
    assert format_date_short("2024-03-10T01:00:00") == "09/03"


@pytest.mark.parametrize("value", [None, "", "not a date"])
def test_format_date_placeholder(value):
    assert format_date(value) == "-"


def test_trend():
    assert trend(110, 100) == pytest.approx(10.0)
    assert trend(None, 100) is None
    assert trend(5, 0) is None


def test_chemical_lookup():
    assert chemical("cal")["unit"] == "kg"
    assert chemical("agua") is None
