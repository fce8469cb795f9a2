from __future__ import annotations

from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from aliya.core.cycle import period_reminder_date, predict_next_period
from aliya.core.timeparse import EVERY_DAY, local_datetime, parse_clock_time, parse_iso_date, parse_weekdays


def test_parse_clock_time():
    assert parse_clock_time("08:00") == time(8, 0)
    assert parse_clock_time("7:30") == time(7, 30)
    assert parse_clock_time("23:59") == time(23, 59)
    assert parse_clock_time("8am") is None
    assert parse_clock_time("12:60") is None


def test_parse_weekdays_uses_sunday_zero():
    assert parse_weekdays("daily") == EVERY_DAY
    assert parse_weekdays("Sun,Sat") == (0, 6)
    assert parse_weekdays("fri,mon,wed,mon") == (1, 3, 5)
    assert parse_weekdays("") is None
    assert parse_weekdays("weekdays") is None


def test_parse_iso_date():
    assert parse_iso_date("2025-04-01") == date(2025, 4, 1)
    assert parse_iso_date("2025-4-1") is None
    assert parse_iso_date("2025-13-01") is None


def test_local_datetime_converts_to_utc():
    dt = local_datetime(date(2025, 4, 26), time(9, 0), tz="America/New_York")
    assert dt == datetime(2025, 4, 26, 13, 0, tzinfo=ZoneInfo("UTC"))


def test_cycle_prediction():
    predicted = predict_next_period(date(2025, 4, 1), 28)
    assert predicted == date(2025, 4, 29)
    assert period_reminder_date(predicted) == date(2025, 4, 26)
