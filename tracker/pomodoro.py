"""
Countdown timer whose deadline survives reloads.

The persisted record holds the absolute ``endAt`` (epoch ms) while running, so
a restored session recomputes the remaining time from the wall clock instead
of resuming a stale countdown. While paused only ``timeRemaining`` is kept.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Optional

from tracker.constants import (
    NOT_SET_TASK,
    POMODORO_MAX_HOURS,
    POMODORO_MAX_MINUTES,
    POMODORO_TICK_SECONDS,
    STORAGE_POMODORO,
    TIME_IS_UP_MESSAGE,
)
from tracker.scheduling import ThreadingScheduler

logger = logging.getLogger(__name__)


def _clamp_int(value, upper):
    try:
        number = int(str(value).strip() or "0")
    except (TypeError, ValueError):
        number = 0
    return max(0, min(upper, number))


def _now_ms():
    return int(time.time() * 1000)


@dataclass
class PomodoroState:
    is_running: bool = False
    is_paused: bool = False
    end_at: Optional[int] = None
    total_sec: int = 0
    time_remaining: int = 0
    task: str = NOT_SET_TASK

    def to_dict(self) -> dict:
        return {
            "isRunning": self.is_running,
            "isPaused": self.is_paused,
            "endAt": self.end_at,
            "totalSec": self.total_sec,
            "timeRemaining": self.time_remaining,
            "taskMessage": self.task,
        }

    @classmethod
    def from_dict(cls, raw) -> "PomodoroState":
        end_at = raw.get("endAt")
        return cls(
            is_running=bool(raw.get("isRunning")),
            is_paused=bool(raw.get("isPaused")),
            end_at=int(end_at) if end_at else None,
            total_sec=int(raw.get("totalSec") or 0),
            time_remaining=int(raw.get("timeRemaining") or 0),
            task=str(raw.get("taskMessage") or NOT_SET_TASK),
        )


class PomodoroTimer:
    def __init__(self, persistence, clock_ms=None, scheduler=None, on_expire=None):
        self.persistence = persistence
        self.clock_ms = clock_ms or _now_ms
        self.scheduler = scheduler or ThreadingScheduler()
        self.on_expire = on_expire
        self.state = PomodoroState()
        self._tick_handle = None
        self._lock = threading.RLock()
        self._restore()

    # -- persistence ---------------------------------------------------------

    def _restore(self):
        raw = self.persistence.read_json(STORAGE_POMODORO, None, dict)
        if raw is None:
            return
        try:
            saved = PomodoroState.from_dict(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring corrupt pomodoro state")
            return
        now = self.clock_ms()
        if saved.is_running and not saved.is_paused and saved.end_at and saved.end_at > now:
            saved.time_remaining = self._seconds_until(saved.end_at, now)
            self.state = saved
            self._schedule_tick()
        elif saved.is_running and saved.is_paused and saved.time_remaining > 0:
            saved.end_at = None
            self.state = saved
        else:
            # Expired while away: drop it without a notification.
            self._hard_stop()
            self.persistence.remove(STORAGE_POMODORO)

    def _save(self):
        self.persistence.write_json(STORAGE_POMODORO, self.state.to_dict())

    # -- ticking -------------------------------------------------------------

    @staticmethod
    def _seconds_until(end_at, now):
        return max(0, math.ceil((end_at - now) / 1000))

    def _schedule_tick(self):
        self._cancel_tick()
        self._tick_handle = self.scheduler.call_later(POMODORO_TICK_SECONDS, self._tick)

    def _cancel_tick(self):
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _tick(self):
        with self._lock:
            self._tick_handle = None
            if not self.state.is_running or self.state.is_paused:
                return
            if not self.check_expiry():
                self._schedule_tick()

    def check_expiry(self):
        """Refresh the remaining time; returns True when the timer just ran out."""
        with self._lock:
            state = self.state
            if not state.is_running or state.is_paused or not state.end_at:
                return False
            state.time_remaining = self._seconds_until(state.end_at, self.clock_ms())
            if state.time_remaining > 0:
                self._save()
                return False
            self._hard_stop()
            self._save()
        logger.info("Pomodoro finished")
        if self.on_expire is not None:
            self.on_expire(TIME_IS_UP_MESSAGE)
        return True

    # -- actions -------------------------------------------------------------

    def _hard_stop(self):
        self._cancel_tick()
        self.state = PomodoroState()

    def start(self, hours, minutes, task=""):
        hh = _clamp_int(hours, POMODORO_MAX_HOURS)
        mm = _clamp_int(minutes, POMODORO_MAX_MINUTES)
        total = hh * 3600 + mm * 60
        with self._lock:
            if total <= 0:
                self.reset()
                return False
            label = (task or "").strip() or NOT_SET_TASK
            self.state = PomodoroState(
                is_running=True,
                is_paused=False,
                end_at=self.clock_ms() + total * 1000,
                total_sec=total,
                time_remaining=total,
                task=f"{label} ({hh}h {mm}m)",
            )
            self._schedule_tick()
            self._save()
            return True

    def toggle_pause(self):
        with self._lock:
            state = self.state
            if not state.is_running:
                return
            if not state.is_paused:
                if state.end_at:
                    state.time_remaining = self._seconds_until(state.end_at, self.clock_ms())
                self._cancel_tick()
                state.end_at = None
                state.is_paused = True
            elif state.time_remaining > 0:
                state.end_at = self.clock_ms() + state.time_remaining * 1000
                state.is_paused = False
                self._schedule_tick()
            self._save()

    def reset(self):
        with self._lock:
            self._hard_stop()
            self.persistence.remove(STORAGE_POMODORO)

    def stop(self):
        """Stop ticking without touching the saved state."""
        with self._lock:
            self._cancel_tick()

    # -- read side -----------------------------------------------------------

    def time_left_sec(self):
        state = self.state
        if state.is_running and not state.is_paused and state.end_at:
            return self._seconds_until(state.end_at, self.clock_ms())
        return state.time_remaining

    def view(self):
        state = self.state
        left = self.time_left_sec()
        total = state.total_sec
        progress = ((total - left) / total) * 100 if total > 0 else 0.0
        return {
            "total_sec": total,
            "time_left_sec": left,
            "progress": progress,
            "task": state.task,
            "is_running": state.is_running,
            "is_paused": state.is_paused,
            "display": format_clock(left),
        }


def format_clock(seconds):
    seconds = max(0, int(seconds))
    return f"{seconds // 3600:02d}:{(seconds % 3600) // 60:02d}:{seconds % 60:02d}"
