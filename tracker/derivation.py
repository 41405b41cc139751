from __future__ import annotations

from datetime import date

from tracker.constants import (
    ACCOUNTED_EPSILON,
    HALF_HOUR,
    HOURS_PER_DAY,
    MISC_PREFIX,
    POST_ACTIVITY_PATTERNS,
    PRE_SLEEP_PATTERN,
    SLEEP_RANGE,
    SLEEPING,
    STUDYING,
    TOTAL_KINDS,
    WASTED,
)
from tracker.dates import day_key, days_in_month, month_name
from tracker.models import DailyTotals, TotalsSource


def half_to_hours(value, target):
    return HALF_HOUR if value == target else 0.0


def is_misc(value):
    return bool(value) and value.startswith(MISC_PREFIX)


def count_misc_hours(rows):
    return sum(
        (HALF_HOUR if is_misc(row.first) else 0.0) + (HALF_HOUR if is_misc(row.second) else 0.0)
        for row in rows
    )


def totals_from_grid(rows):
    """Half-hour credits for one day's slots.

    Returns study/sleep/wasted plus ``misc_hours``, ``accounted`` and the
    ``overflow`` flag (accounted beyond 24h, only reachable with malformed rows).
    """
    study = sleep = wasted = 0.0
    for row in rows:
        study += half_to_hours(row.first, STUDYING) + half_to_hours(row.second, STUDYING)
        sleep += half_to_hours(row.first, SLEEPING) + half_to_hours(row.second, SLEEPING)
        wasted += half_to_hours(row.first, WASTED) + half_to_hours(row.second, WASTED)
    misc_hours = count_misc_hours(rows)
    accounted = study + sleep + wasted + misc_hours
    return {
        "study": study,
        "sleep": sleep,
        "wasted": wasted,
        "misc_hours": misc_hours,
        "accounted": accounted,
        "overflow": accounted > HOURS_PER_DAY + ACCOUNTED_EPSILON,
    }


def daily_totals_from_grid(rows):
    derived = totals_from_grid(rows)
    return DailyTotals(
        study=derived["study"],
        sleep=derived["sleep"],
        wasted=derived["wasted"],
        source=TotalsSource.GRID,
    )


def _in_pre_sleep_window(hour):
    # Literal port of the window check; `hour < 4` never widens `hour < 22`.
    return hour < SLEEP_RANGE[0] or hour < SLEEP_RANGE[1]


def _pattern_for(previous, hour):
    if previous in POST_ACTIVITY_PATTERNS:
        return POST_ACTIVITY_PATTERNS[previous]
    if _in_pre_sleep_window(hour):
        return PRE_SLEEP_PATTERN
    return None


def auto_calc_patterns(rows):
    found = []
    previous = None
    for hour, row in enumerate(rows[:HOURS_PER_DAY]):
        first, second = row.first, row.second
        if first == WASTED:
            found.append(_pattern_for(previous, hour))
        if second == WASTED:
            found.append(_pattern_for(first, hour))
        previous = second or first
    return dedupe([item for item in found if item])


def dedupe(items):
    seen = set()
    ordered = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        ordered.append(item)
    return ordered


def merge_patterns(auto, manual):
    return dedupe(list(auto) + list(manual or []))


def infer_manual_patterns(patterns, rows):
    """Entries of a stored pattern list that auto-detection would not produce."""
    auto = set(auto_calc_patterns(rows)) if rows else set()
    return dedupe(item for item in patterns or [] if item not in auto)


def recompute_from_grid(grid, manual_patterns=None):
    manual_patterns = manual_patterns or {}
    daily = {}
    patterns = {}
    for key, rows in grid.items():
        daily[key] = daily_totals_from_grid(rows)
        patterns[key] = merge_patterns(auto_calc_patterns(rows), manual_patterns.get(key, []))
    return daily, patterns


def _sum_totals(values):
    totals = {kind: 0.0 for kind in TOTAL_KINDS}
    for value in values:
        for kind in TOTAL_KINDS:
            totals[kind] += getattr(value, kind, 0.0) or 0.0
    return totals


def weekly_report(year, month, daily):
    """Week buckets of a month; a bucket closes on Sunday or on the month's last day."""
    last_day = days_in_month(year, month)
    weeks = []
    bucket = []
    bucket_start = None
    for day in range(1, last_day + 1):
        current = date(year, month, day)
        if bucket_start is None:
            bucket_start = current
        bucket.append(daily.get(day_key(current)) or DailyTotals())
        if current.weekday() == 6 or day == last_day:
            totals = _sum_totals(bucket)
            count = len(bucket)
            weeks.append({
                "week_num": len(weeks) + 1,
                "start": day_key(bucket_start),
                "end": day_key(current),
                "days": count,
                "avg_study": f"{totals['study'] / count:.2f}",
                "avg_sleep": f"{totals['sleep'] / count:.2f}",
                "avg_wasted": f"{totals['wasted'] / count:.2f}",
                "total_study": f"{totals['study']:.1f}",
                "total_sleep": f"{totals['sleep']:.1f}",
                "total_wasted": f"{totals['wasted']:.1f}",
            })
            bucket = []
            bucket_start = None
    return weeks


def monthly_report(year, month, daily):
    last_day = days_in_month(year, month)
    tracked = [
        daily[key]
        for key in (day_key(date(year, month, day)) for day in range(1, last_day + 1))
        if key in daily
    ]
    totals = _sum_totals(tracked)
    days_tracked = len(tracked)
    averages = {
        kind: f"{(totals[kind] / days_tracked) if days_tracked else 0:.2f}"
        for kind in TOTAL_KINDS
    }
    return {
        "totals": totals,
        "averages": averages,
        "days_tracked": days_tracked,
        "days_in_month": last_day,
    }


def yearly_report(year, daily):
    months = []
    totals = {kind: 0.0 for kind in TOTAL_KINDS}
    days_tracked = 0
    for month in range(1, 13):
        report = monthly_report(year, month, daily)
        months.append({"month": month, "name": month_name(month), **report})
        for kind in TOTAL_KINDS:
            totals[kind] += report["totals"][kind]
        days_tracked += report["days_tracked"]
    return {"year": year, "months": months, "totals": {**totals, "days_tracked": days_tracked}}


def visible_months(report, today):
    """Current year: months with data plus the current month. Other years: all months."""
    if report["year"] != today.year:
        return list(report["months"])
    visible = []
    for item in report["months"]:
        hours = sum(item["totals"].values())
        if item["month"] == today.month or hours > 0 or item["days_tracked"] > 0:
            visible.append(item)
    return visible


def pattern_analysis(patterns):
    counts = {}
    for items in patterns.values():
        for item in items or []:
            name = (item or "").lower()
            counts[name] = counts.get(name, 0) + 1
    ranked = sorted(counts.items(), key=lambda pair: pair[1], reverse=True)
    return [{"pattern": name, "count": count} for name, count in ranked]


def month_calendar(year, month, daily, selected_key=None, today_key=None):
    # Sunday-first layout.
    offset = (date(year, month, 1).weekday() + 1) % 7
    cells = [{"empty": True, "key": f"empty-{idx}"} for idx in range(offset)]
    for day in range(1, days_in_month(year, month) + 1):
        key = day_key(date(year, month, day))
        cells.append({
            "empty": False,
            "day": day,
            "key": key,
            "has_data": key in daily,
            "is_selected": key == selected_key,
            "is_today": key == today_key,
        })
    return cells
