"""
Application state and its mutation entry points.

``TimeStore`` owns one ``AppState`` per session. Every write to the activity
grid, totals, patterns or reflections goes through a method here, which checks
permissions first, mutates, re-derives the affected day and then notifies
listeners (the sync coordinator and the UI).
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from tracker.constants import (
    ACCOUNTED_EPSILON,
    HOURS_PER_DAY,
    IMPORT_LOCAL_ONLY_MESSAGE,
    MISC_PREFIX,
    SOURCE_LIVE_PREFIX,
    SOURCE_LOCAL,
    TOTAL_KINDS,
)
from tracker.dates import day_key, is_past
from tracker.derivation import auto_calc_patterns, daily_totals_from_grid, merge_patterns, totals_from_grid
from tracker.errors import (
    ManualTotalsLockedError,
    PastDayLockedError,
    ReadOnlyError,
    ValidationRejected,
)
from tracker.grid import MiscMenuState, SlotCommand, parse_slot_input, validate_address, write_half, write_wasted_reason
from tracker.models import Bundle, DailyTotals, TotalsSource
from tracker.persistence import export_bundle, import_bundle

logger = logging.getLogger(__name__)


class Role(str, Enum):
    VIEWER = "viewer"
    ADMIN = "admin"


class DataSource(str, Enum):
    LOCAL = "local"
    LIVE = "live"

    def storage_value(self, doc_id):
        return SOURCE_LOCAL if self is DataSource.LOCAL else f"{SOURCE_LIVE_PREFIX}{doc_id}"

    @classmethod
    def from_storage(cls, value):
        if value == SOURCE_LOCAL:
            return cls.LOCAL
        return cls.LIVE


class EffectiveMode(str, Enum):
    ADMIN = "admin"
    LOCAL_PRIVATE = "local-private"
    LIVE_SHARED = "live-shared"


def resolve_effective_mode(role, data_source):
    if role is Role.ADMIN:
        return EffectiveMode.ADMIN
    if data_source is DataSource.LOCAL:
        return EffectiveMode.LOCAL_PRIVATE
    return EffectiveMode.LIVE_SHARED


class ChangeOrigin(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"
    SEED = "seed"
    HYDRATE = "hydrate"
    IMPORT = "import"
    RESET = "reset"


@dataclass
class AppState:
    bundle: Bundle = field(default_factory=Bundle)
    selected_date: date = field(default_factory=date.today)
    role: Role = Role.VIEWER
    data_source: DataSource = DataSource.LIVE
    misc_menu: MiscMenuState = field(default_factory=MiscMenuState)

    @property
    def effective_mode(self):
        return resolve_effective_mode(self.role, self.data_source)

    @property
    def read_only(self):
        return self.effective_mode is EffectiveMode.LIVE_SHARED


def _parse_hours(value):
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return max(0.0, number)


class TimeStore:
    def __init__(self, state=None, clock=None):
        self.state = state or AppState()
        self.clock = clock or datetime.now
        self.lock = threading.RLock()
        self._listeners = []

    # -- listeners -----------------------------------------------------------

    def add_listener(self, listener):
        self._listeners.append(listener)

        def remove():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _notify(self, origin):
        for listener in list(self._listeners):
            try:
                listener(origin)
            except Exception:
                logger.exception("Store listener failed for %s change", origin.value)

    # -- read side -----------------------------------------------------------

    @property
    def bundle(self):
        return self.state.bundle

    @property
    def read_only(self):
        return self.state.read_only

    @property
    def effective_mode(self):
        return self.state.effective_mode

    @property
    def date_key(self):
        return day_key(self.state.selected_date)

    def snapshot(self):
        with self.lock:
            return self.state.bundle.copy()

    def is_past(self, key):
        return is_past(key, self.clock)

    def day_summary(self, key):
        with self.lock:
            rows = self.state.bundle.activity_grid.get(key)
            if rows is not None:
                summary = totals_from_grid(rows)
                summary["source"] = TotalsSource.GRID
                return summary
            base = self.state.bundle.daily_totals.get(key) or DailyTotals()
            accounted = base.study + base.sleep + base.wasted
            return {
                "study": base.study,
                "sleep": base.sleep,
                "wasted": base.wasted,
                "misc_hours": 0.0,
                "accounted": accounted,
                "overflow": accounted > HOURS_PER_DAY + ACCOUNTED_EPSILON,
                "source": TotalsSource.MANUAL,
            }

    def day_patterns(self, key):
        return list(self.state.bundle.wasted_patterns.get(key, []))

    def is_auto_pattern(self, key, pattern):
        """Auto-detected entries are rebuilt from the grid on every edit of that day."""
        bundle = self.state.bundle
        return key in bundle.activity_grid and pattern not in bundle.manual_patterns.get(key, [])

    def reflection(self, key):
        return self.state.bundle.reflections.get(key, "")

    # -- session -------------------------------------------------------------

    def select_date(self, value):
        with self.lock:
            self.state.selected_date = value

    def update_session(self, role=None, data_source=None):
        with self.lock:
            if role is not None:
                self.state.role = role
            if data_source is not None:
                self.state.data_source = data_source

    def replace_bundle(self, bundle, origin):
        with self.lock:
            self.state.bundle = bundle
            self.state.misc_menu.clear()
            self._notify(origin)

    # -- guards --------------------------------------------------------------

    def _require_writable(self):
        if self.state.read_only:
            raise ReadOnlyError()

    def _require_editable_day(self, key):
        self._require_writable()
        if is_past(key, self.clock):
            raise PastDayLockedError(key)

    # -- grid ----------------------------------------------------------------

    def set_half_slot(self, key, hour, half, value):
        with self.lock:
            self._require_editable_day(key)
            validate_address(hour, half)
            parsed = parse_slot_input(value)
            menu = self.state.misc_menu
            if parsed is SlotCommand.OPEN_MISC_MENU:
                menu.open(key, hour, half)
                return
            label = None if parsed is SlotCommand.BACK else parsed
            write_half(self.state.bundle.activity_grid, key, hour, half, label)
            if label and label.startswith(MISC_PREFIX):
                menu.open(key, hour, half)
            else:
                menu.close(key, hour, half)
            self._recompute_day(key)
            self._notify(ChangeOrigin.LOCAL)

    def set_wasted_reason(self, key, hour, reason):
        with self.lock:
            self._require_editable_day(key)
            validate_address(hour, "first")
            write_wasted_reason(self.state.bundle.activity_grid, key, hour, reason)
            self._recompute_day(key)
            self._notify(ChangeOrigin.LOCAL)

    def _recompute_day(self, key):
        bundle = self.state.bundle
        rows = bundle.activity_grid[key]
        bundle.daily_totals[key] = daily_totals_from_grid(rows)
        bundle.wasted_patterns[key] = merge_patterns(
            auto_calc_patterns(rows),
            bundle.manual_patterns.get(key, []),
        )

    # -- totals, patterns, reflections ----------------------------------------

    def set_manual_total(self, key, kind, value):
        with self.lock:
            self._require_writable()
            if kind not in TOTAL_KINDS:
                raise ValidationRejected(f"Unknown total: {kind!r}")
            bundle = self.state.bundle
            if key in bundle.activity_grid:
                raise ManualTotalsLockedError("Totals for this day come from the hourly grid.")
            current = bundle.daily_totals.get(key) or DailyTotals()
            values = current.to_dict()
            values[kind] = _parse_hours(value)
            bundle.daily_totals[key] = DailyTotals(**values, source=TotalsSource.MANUAL)
            self._notify(ChangeOrigin.LOCAL)

    def add_pattern(self, key, text):
        with self.lock:
            self._require_writable()
            pattern = (text or "").strip()
            if not pattern:
                return
            bundle = self.state.bundle
            if pattern in bundle.wasted_patterns.get(key, []):
                return
            bundle.manual_patterns.setdefault(key, []).append(pattern)
            bundle.wasted_patterns.setdefault(key, []).append(pattern)
            self._notify(ChangeOrigin.LOCAL)

    def remove_pattern(self, key, index):
        with self.lock:
            self._require_writable()
            bundle = self.state.bundle
            items = bundle.wasted_patterns.get(key, [])
            if not 0 <= index < len(items):
                raise ValidationRejected(f"No pattern at position {index}.")
            removed = items.pop(index)
            manual = bundle.manual_patterns.get(key, [])
            if removed in manual:
                manual.remove(removed)
                if not manual:
                    bundle.manual_patterns.pop(key, None)
            self._notify(ChangeOrigin.LOCAL)

    def set_reflection(self, key, text):
        with self.lock:
            self._require_editable_day(key)
            self.state.bundle.reflections[key] = text or ""
            self._notify(ChangeOrigin.LOCAL)

    def clear_reflection(self, key):
        self.set_reflection(key, "")

    # -- whole bundle --------------------------------------------------------

    def export_data(self):
        with self.lock:
            now_ms = self.clock().timestamp() * 1000
            return export_bundle(self.state.bundle, now_ms)

    def import_data(self, raw):
        with self.lock:
            if self.state.read_only:
                raise ReadOnlyError(IMPORT_LOCAL_ONLY_MESSAGE)
            bundle = import_bundle(raw)
            self.replace_bundle(bundle, ChangeOrigin.IMPORT)
            return bundle

    def reset_all(self):
        with self.lock:
            self._require_writable()
            self.replace_bundle(Bundle(), ChangeOrigin.RESET)
