from __future__ import annotations

import re
from datetime import date, datetime, time
from zoneinfo import ZoneInfo


UTC = ZoneInfo("UTC")

_RE_HHMM = re.compile(r"^(?P<h>\d{1,2}):(?P<m>\d{2})$")
_RE_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Weekday numbering follows cron / python-telegram-bot's JobQueue: 0=Sunday .. 6=Saturday.
WEEKDAYS: dict[str, int] = {"sun": 0, "mon": 1, "tue": 2, "wed": 3, "thu": 4, "fri": 5, "sat": 6}
EVERY_DAY: tuple[int, ...] = tuple(range(7))


def now_utc() -> datetime:
    return datetime.now(tz=UTC)


# Zone the users' calendar dates are read in; set once at startup from DEFAULT_TIMEZONE.
_local_zone: ZoneInfo = UTC


def set_local_timezone(tz: str) -> None:
    global _local_zone
    _local_zone = ZoneInfo(tz)


def local_today() -> date:
    return now_utc().astimezone(_local_zone).date()


def parse_clock_time(text: str) -> time | None:
    """
    Parse a 24-hour `HH:MM` time of day (e.g. `08:00`, `7:30`).
    Returns a naive `time`, or None if the input is not a valid clock time.
    """
    m = _RE_HHMM.match((text or "").strip())
    if not m:
        return None
    h = int(m.group("h"))
    mi = int(m.group("m"))
    if not (0 <= h <= 23 and 0 <= mi <= 59):
        return None
    return time(h, mi)


def parse_weekdays(text: str) -> tuple[int, ...] | None:
    """
    Parse `daily` or a comma separated list of three-letter weekday names (`Mon,Wed,Fri`).
    Returns sorted weekday numbers (0=Sunday), or None if any entry is unknown.
    """
    raw = (text or "").strip().lower()
    if not raw:
        return None
    if raw == "daily":
        return EVERY_DAY
    days: set[int] = set()
    for part in raw.split(","):
        day = WEEKDAYS.get(part.strip())
        if day is None:
            return None
        days.add(day)
    return tuple(sorted(days))


def parse_iso_date(text: str) -> date | None:
    raw = (text or "").strip()
    if not _RE_ISO_DATE.match(raw):
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


def local_datetime(d: date, t: time, *, tz: str) -> datetime:
    """Combine a calendar date and a wall-clock time in `tz`, returned in UTC."""
    return datetime.combine(d, t, tzinfo=ZoneInfo(tz)).astimezone(UTC)
