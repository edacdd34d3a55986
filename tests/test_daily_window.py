import time
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from hotel_orders.services.daily_window import (
    DayWindow,
    current_day_window,
    is_within_reset_window,
    reference_now,
)

IST = ZoneInfo("Asia/Kolkata")


def test_window_is_the_ist_civil_day():
    # 20:00 UTC on 1 March is 01:30 IST on 2 March
    window = current_day_window(datetime(2024, 3, 1, 20, 0, tzinfo=timezone.utc))

    assert window.start == datetime(2024, 3, 2, 0, 0, tzinfo=IST)
    assert window.start == datetime(2024, 3, 1, 18, 30, tzinfo=timezone.utc)
    assert window.end - window.start == timedelta(hours=24)


def test_window_just_before_ist_midnight():
    window = current_day_window(datetime(2024, 3, 1, 18, 29, 59, tzinfo=timezone.utc))

    assert window.start == datetime(2024, 3, 1, 0, 0, tzinfo=IST)
    assert window.end == datetime(2024, 3, 2, 0, 0, tzinfo=IST)


def test_naive_now_is_taken_as_utc():
    naive = current_day_window(datetime(2024, 3, 1, 20, 0))
    aware = current_day_window(datetime(2024, 3, 1, 20, 0, tzinfo=timezone.utc))

    assert naive == aware


def test_explicit_timezone_override():
    window = current_day_window(datetime(2024, 3, 1, 20, 0, tzinfo=timezone.utc), tz=timezone.utc)

    assert window.start == datetime(2024, 3, 1, tzinfo=timezone.utc)


@pytest.mark.skipif(not hasattr(time, "tzset"), reason="needs time.tzset")
def test_window_ignores_host_timezone(monkeypatch):
    now = datetime(2024, 7, 10, 2, 0, tzinfo=timezone.utc)
    expected = current_day_window(now)

    monkeypatch.setenv("TZ", "America/Los_Angeles")
    time.tzset()
    try:
        assert current_day_window(now) == expected
    finally:
        monkeypatch.undo()
        time.tzset()


def test_day_window_is_half_open():
    window = DayWindow(
        start=datetime(2024, 3, 2, tzinfo=IST),
        end=datetime(2024, 3, 3, tzinfo=IST),
    )

    assert window.start in window
    assert window.end - timedelta(microseconds=1) in window
    assert window.end not in window
    assert window.start - timedelta(microseconds=1) not in window


def test_reference_now_converts_to_ist():
    local = reference_now(datetime(2024, 3, 1, 18, 33, tzinfo=timezone.utc))

    assert (local.hour, local.minute) == (0, 3)
    assert local.utcoffset() == timedelta(hours=5, minutes=30)


@pytest.mark.parametrize(
    "ist_time, expected",
    [
        ((0, 0), True),
        ((0, 3), True),
        ((0, 5), True),
        ((0, 6), False),
        ((12, 3), False),
        ((23, 59), False),
    ],
)
def test_reset_window(ist_time, expected):
    hour, minute = ist_time
    now = datetime(2024, 3, 2, hour, minute, tzinfo=IST)

    assert is_within_reset_window(now, minutes=5) is expected
