from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from src.tracking.services.eta import ETACalculator, format_minutes, format_window

NOON = datetime(2026, 3, 14, 12, 0)


@pytest.fixture
def calculator() -> ETACalculator:
    return ETACalculator(
        clock=lambda: NOON,
        time_format="%I:%M %p",
        placeholder="Calculating...",
        completion_qualifier="(estimated arrival)",
    )


def test_equal_window_returns_single_time(calculator):
    assert calculator.format(10, 10) == "12:10 PM"


def test_distinct_window_returns_range(calculator):
    assert calculator.format(10, 20) == "12:10 PM - 12:20 PM"


def test_reversed_window_is_ordered(calculator):
    assert calculator.format(20, 10) == "12:10 PM - 12:20 PM"


def test_on_the_way_appends_completion_qualifier(calculator):
    text = calculator.format(10, 10, is_on_the_way=True)
    assert text == "12:10 PM (estimated arrival)"


def test_on_the_way_uses_earlier_time_of_window(calculator):
    assert calculator.format(10, 25, is_on_the_way=True).startswith("12:10 PM")
    assert " - " not in calculator.format(10, 25, is_on_the_way=True)


@pytest.mark.parametrize("bad", [None, 0, -5, "soon", float("nan")])
def test_degenerate_input_returns_placeholder(calculator, bad):
    assert calculator.format(bad, 10) == "Calculating..."
    assert calculator.format(10, bad) == "Calculating..."
    assert calculator.format_duration(bad) == "Calculating..."


def test_duration_rounds_up_to_whole_minutes(calculator):
    # 601 seconds -> 11 minutes
    assert calculator.format_duration(601) == "12:11 PM"
    # anything under a minute still shows one minute out
    assert calculator.format_duration(20) == "12:01 PM"


def test_duration_on_the_way(calculator):
    assert calculator.format_duration(600, is_on_the_way=True) == "12:10 PM (estimated arrival)"


def test_leading_zero_is_dropped():
    calc = ETACalculator(clock=lambda: datetime(2026, 3, 14, 8, 50), time_format="%I:%M %p")
    assert calc.format(15, 15) == "9:05 AM"


@pytest.mark.parametrize(
    "minutes,expected",
    [
        (None, "Arriving soon"),
        (0, "Arriving soon"),
        (0.5, "Less than a minute"),
        (1, "1 min"),
        (25, "25 mins"),
        (60, "1 hr"),
        (65, "1 hr 5 mins"),
        (121, "2 hrs 1 min"),
    ],
)
def test_format_minutes(minutes, expected):
    assert format_minutes(minutes) == expected


def test_format_window():
    assert format_window(14.6, 25.2) == "15-25 mins"


def test_clock_times_are_shown_in_the_customer_zone():
    utc_morning = datetime(2026, 3, 14, 6, 30, tzinfo=timezone.utc)
    calc = ETACalculator(clock=lambda: utc_morning, time_format="%I:%M %p", tz="Asia/Colombo")

    assert calc.format(10, 10) == "12:10 PM"
    assert calc.format_duration(1200) == "12:20 PM"


def test_default_clock_uses_configured_zone(monkeypatch):
    from src.tracking.services import eta

    monkeypatch.setattr(eta.settings, "eta_timezone", "Asia/Colombo")

    calc = ETACalculator()

    assert calc.tz == ZoneInfo("Asia/Colombo")
    assert calc.now().utcoffset() == timedelta(hours=5, minutes=30)


def test_24_hour_format_keeps_leading_zero():
    calc = ETACalculator(clock=lambda: datetime(2026, 3, 14, 8, 50), time_format="%H:%M")

    assert calc.format(15, 15) == "09:05"
