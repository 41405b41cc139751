from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)


class ThreadingScheduler:
    """Runs callbacks later on daemon ``threading.Timer`` threads."""

    def call_later(self, delay, callback):
        timer = threading.Timer(delay, self._run, args=(callback,))
        timer.daemon = True
        timer.start()
        return timer

    @staticmethod
    def _run(callback):
        try:
            callback()
        except Exception:
            logger.exception("Scheduled callback failed")


class Debouncer:
    """Only the last ``trigger()`` inside the window results in a call."""

    def __init__(self, scheduler, delay, callback):
        self.scheduler = scheduler
        self.delay = delay
        self.callback = callback
        self._handle = None
        self._running = False
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self):
        """True from ``trigger()`` until the callback has returned."""
        return self._handle is not None or self._running

    def trigger(self):
        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
            self._generation += 1
            generation = self._generation
            self._handle = self.scheduler.call_later(self.delay, lambda: self._fire(generation))

    def cancel(self):
        with self._lock:
            self._generation += 1
            if self._handle is not None:
                self._handle.cancel()
                self._handle = None

    def _fire(self, generation):
        with self._lock:
            if generation != self._generation:
                return
            self._handle = None
            self._running = True
        try:
            self.callback()
        finally:
            with self._lock:
                self._running = False
