from __future__ import annotations

from enum import Enum

from tracker.constants import BACK, HALVES, HOURS_PER_DAY, MISC_MENU, MISC_PREFIX, SLEEPING, STUDYING, WASTED
from tracker.errors import InvalidActivityError
from tracker.models import HourSlot, empty_day

COMMITTED_LABELS = {STUDYING, SLEEPING, WASTED}


class SlotCommand(str, Enum):
    """Menu commands that share the selector with activity labels but are never stored."""

    OPEN_MISC_MENU = MISC_MENU
    BACK = BACK


def parse_slot_input(value):
    """Split raw selector input into a committed label (or None) and a menu command."""
    if value == MISC_MENU:
        return SlotCommand.OPEN_MISC_MENU
    if value == BACK:
        return SlotCommand.BACK
    if value in (None, ""):
        return None
    if value in COMMITTED_LABELS:
        return value
    if isinstance(value, str) and value.startswith(MISC_PREFIX) and len(value) > len(MISC_PREFIX):
        return value
    raise InvalidActivityError(f"Unknown activity: {value!r}")


def validate_address(hour, half):
    if not isinstance(hour, int) or isinstance(hour, bool) or not 0 <= hour < HOURS_PER_DAY:
        raise InvalidActivityError(f"Hour must be 0-23, got {hour!r}")
    if half not in HALVES:
        raise InvalidActivityError(f"Half must be one of {HALVES}, got {half!r}")


def ensure_day(grid, key):
    if key not in grid:
        grid[key] = empty_day()
    return grid[key]


def write_half(grid, key, hour, half, label):
    day = ensure_day(grid, key)
    slot = day[hour]
    day[hour] = HourSlot(
        first=label if half == "first" else slot.first,
        second=label if half == "second" else slot.second,
        wasted_reason=slot.wasted_reason,
    )
    return day


def write_wasted_reason(grid, key, hour, reason):
    day = ensure_day(grid, key)
    slot = day[hour]
    normalized = reason.strip() if isinstance(reason, str) else reason
    day[hour] = HourSlot(first=slot.first, second=slot.second, wasted_reason=normalized or None)
    return day


class MiscMenuState:
    """Per-(day, hour, half) view flag: is the MISC sub-menu showing for that selector."""

    def __init__(self):
        self._open = set()

    def open(self, key, hour, half):
        self._open.add((key, hour, half))

    def close(self, key, hour, half):
        self._open.discard((key, hour, half))

    def is_open(self, key, hour, half):
        return (key, hour, half) in self._open

    def showing_misc(self, key, hour, half, current):
        return self.is_open(key, hour, half) or bool(current and current.startswith(MISC_PREFIX))

    def clear(self):
        self._open.clear()
