from __future__ import annotations

import calendar as _calendar
from datetime import date, datetime


def pad(n: int) -> str:
    return f"{n:02d}"


def day_key(value: date | datetime) -> str:
    """YYYY-MM-DD from the value's own (local) calendar fields, never UTC."""
    return f"{value.year:04d}-{pad(value.month)}-{pad(value.day)}"


def parse_day_key(key: str) -> date:
    return date.fromisoformat(key)


def today_key(clock=None) -> str:
    now = clock() if clock else datetime.now()
    return day_key(now)


def is_past(key: str, clock=None) -> bool:
    return key < today_key(clock)


def is_today(key: str, clock=None) -> bool:
    return key == today_key(clock)


def is_future(key: str, clock=None) -> bool:
    return key > today_key(clock)


def hour_label(hour: int) -> str:
    hour12 = ((hour + 11) % 12) + 1
    suffix = "AM" if hour < 12 else "PM"
    return f"{hour12} {suffix}"


def time_range(hour: int) -> dict:
    hh = pad(hour)
    return {"first": f"{hh}:00–{hh}:30", "second": f"{hh}:30–{hh}:59"}


def format_hours(value: float):
    if float(value).is_integer():
        return int(value)
    return f"{value:.1f}"


def days_in_month(year: int, month: int) -> int:
    return _calendar.monthrange(year, month)[1]


def month_name(month: int) -> str:
    return _calendar.month_name[month]


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1
