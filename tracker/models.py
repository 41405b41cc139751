"""
State shapes shared by the grid model, the derivation engine, persistence and sync.

Everything that crosses a storage or network boundary goes through
``Bundle.to_payload`` / ``Bundle.from_payload`` so the local store, the export
file and the live document all speak the same camelCase wire format.
"""

from __future__ import annotations

import copy
import hashlib
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from tracker.constants import (
    BACK,
    HALVES,
    HOURS_PER_DAY,
    MISC_MENU,
    WIRE_DAILY,
    WIRE_HOURLY,
    WIRE_MANUAL_PATTERNS,
    WIRE_PATTERNS,
    WIRE_REFLECTIONS,
)


class TotalsSource(str, Enum):
    GRID = "grid"
    MANUAL = "manual"


@dataclass
class HourSlot:
    first: Optional[str] = None
    second: Optional[str] = None
    wasted_reason: Optional[str] = None

    def get(self, half: str) -> Optional[str]:
        if half not in HALVES:
            raise ValueError(f"Unknown half: {half!r}")
        return getattr(self, half)

    def to_dict(self) -> dict:
        return {"first": self.first, "second": self.second, "wastedReason": self.wasted_reason}

    @classmethod
    def from_dict(cls, row: Any) -> "HourSlot":
        if not isinstance(row, dict):
            raise ValueError("Hour slot must be an object")
        return cls(
            first=_committed_label(row.get("first")),
            second=_committed_label(row.get("second")),
            wasted_reason=_optional_text(row.get("wastedReason")),
        )


@dataclass
class DailyTotals:
    study: float = 0.0
    sleep: float = 0.0
    wasted: float = 0.0
    source: TotalsSource = TotalsSource.MANUAL

    def to_dict(self) -> dict:
        return {"study": self.study, "sleep": self.sleep, "wasted": self.wasted}

    @classmethod
    def from_dict(cls, raw: Any, source: TotalsSource = TotalsSource.MANUAL) -> "DailyTotals":
        if not isinstance(raw, dict):
            raise ValueError("Daily totals must be an object")
        return cls(
            study=_hours(raw.get("study")),
            sleep=_hours(raw.get("sleep")),
            wasted=_hours(raw.get("wasted")),
            source=source,
        )


def empty_day() -> List[HourSlot]:
    return [HourSlot() for _ in range(HOURS_PER_DAY)]


def _committed_label(value):
    # "MISC" and "Back" are menu commands, never committed activity values.
    if value in (None, "", MISC_MENU, BACK):
        return None
    if not isinstance(value, str):
        raise ValueError(f"Invalid activity value: {value!r}")
    return value


def _optional_text(value):
    if value in (None, ""):
        return None
    return str(value)


def _hours(value) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise ValueError("Hours must be numeric")
    number = float(value)
    if number < 0:
        raise ValueError("Hours must be non-negative")
    return number


def parse_day_rows(rows: Any) -> List[HourSlot]:
    if not isinstance(rows, list):
        raise ValueError("Day grid must be a list")
    if len(rows) > HOURS_PER_DAY:
        raise ValueError(f"Day grid has {len(rows)} rows")
    slots = [HourSlot.from_dict(row or {}) for row in rows]
    slots.extend(HourSlot() for _ in range(HOURS_PER_DAY - len(slots)))
    return slots


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        raise ValueError("Pattern list must be a list")
    return [str(item) for item in value if item is not None]


@dataclass
class Bundle:
    """The four per-day maps (plus the manual-pattern split) that make up user data."""

    daily_totals: Dict[str, DailyTotals] = field(default_factory=dict)
    activity_grid: Dict[str, List[HourSlot]] = field(default_factory=dict)
    wasted_patterns: Dict[str, List[str]] = field(default_factory=dict)
    reflections: Dict[str, str] = field(default_factory=dict)
    manual_patterns: Dict[str, List[str]] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (self.daily_totals or self.activity_grid or self.wasted_patterns or self.reflections)

    def copy(self) -> "Bundle":
        return copy.deepcopy(self)

    def to_payload(self) -> dict:
        payload = {
            WIRE_DAILY: {k: v.to_dict() for k, v in self.daily_totals.items()},
            WIRE_HOURLY: {k: [slot.to_dict() for slot in rows] for k, rows in self.activity_grid.items()},
            WIRE_PATTERNS: {k: list(v) for k, v in self.wasted_patterns.items()},
            WIRE_REFLECTIONS: dict(self.reflections),
        }
        manual = {k: list(v) for k, v in self.manual_patterns.items() if v}
        if manual:
            payload[WIRE_MANUAL_PATTERNS] = manual
        return payload

    @classmethod
    def from_payload(cls, payload: Any) -> "Bundle":
        """Strict parse; raises ``ValueError`` on any malformed section."""
        if not isinstance(payload, dict):
            raise ValueError("Payload must be an object")
        return cls(
            daily_totals=parse_daily_map(payload.get(WIRE_DAILY) or {}, payload.get(WIRE_HOURLY) or {}),
            activity_grid=parse_grid_map(payload.get(WIRE_HOURLY) or {}),
            wasted_patterns=parse_patterns_map(payload.get(WIRE_PATTERNS) or {}),
            reflections=parse_reflections_map(payload.get(WIRE_REFLECTIONS) or {}),
            manual_patterns=parse_patterns_map(payload.get(WIRE_MANUAL_PATTERNS) or {}),
        )


def _require_map(value: Any, name: str) -> dict:
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be an object")
    return value


def parse_grid_map(raw: Any) -> Dict[str, List[HourSlot]]:
    return {str(k): parse_day_rows(rows) for k, rows in _require_map(raw, WIRE_HOURLY).items()}


def parse_daily_map(raw: Any, grid_raw: Any = None) -> Dict[str, DailyTotals]:
    grid_days = set(grid_raw) if isinstance(grid_raw, dict) else set()
    return {
        str(k): DailyTotals.from_dict(v, TotalsSource.GRID if k in grid_days else TotalsSource.MANUAL)
        for k, v in _require_map(raw, WIRE_DAILY).items()
    }


def parse_patterns_map(raw: Any) -> Dict[str, List[str]]:
    return {str(k): _string_list(v) for k, v in _require_map(raw, WIRE_PATTERNS).items()}


def parse_reflections_map(raw: Any) -> Dict[str, str]:
    return {str(k): "" if v is None else str(v) for k, v in _require_map(raw, WIRE_REFLECTIONS).items()}


def content_hash(payload: dict) -> str:
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


@dataclass
class AuthUser:
    uid: str
    email: str = ""
    display_name: str = ""
    photo_url: str = ""
