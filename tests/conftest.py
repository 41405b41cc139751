"""Shared fixtures: fixed clock, manual scheduler, in-memory live document, temp SQLite store."""

from datetime import date, datetime

import pytest

from tracker.data.local_store import LocalStore
from tracker.persistence import LocalPersistence
from tracker.store import AppState, DataSource, TimeStore

TODAY = date(2024, 3, 15)
NOW = datetime(2024, 3, 15, 10, 0, 0)
TODAY_KEY = "2024-03-15"
YESTERDAY_KEY = "2024-03-14"


class ManualHandle:
    def __init__(self, scheduler, delay, callback):
        self.scheduler = scheduler
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Collects ``call_later`` requests; tests fire them explicitly."""

    def __init__(self):
        self.handles = []

    def call_later(self, delay, callback):
        handle = ManualHandle(self, delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled]

    def run_pending(self):
        ready, self.handles = self.pending, []
        for handle in ready:
            handle.callback()
        return len(ready)


class FakeLiveStore:
    def __init__(self):
        self.writes = []
        self.subscribers = []
        self.fail_writes = False
        self.unsubscribed = 0

    def subscribe(self, doc_id, on_snapshot, on_error=None):
        entry = (doc_id, on_snapshot, on_error)
        self.subscribers.append(entry)

        def unsubscribe():
            self.unsubscribed += 1
            if entry in self.subscribers:
                self.subscribers.remove(entry)

        return unsubscribe

    def set_document(self, doc_id, payload):
        if self.fail_writes:
            raise RuntimeError("backend unavailable")
        self.writes.append((doc_id, payload))

    def push(self, payload):
        for _, on_snapshot, _ in list(self.subscribers):
            on_snapshot(payload)


class FixedClock:
    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def ms(self):
        return int(self.now.timestamp() * 1000)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def live_store():
    return FakeLiveStore()


@pytest.fixture
def local_store(tmp_path):
    store = LocalStore(f"sqlite:///{tmp_path / 'local.db'}")
    yield store
    store.close()


@pytest.fixture
def persistence(local_store):
    return LocalPersistence(local_store)


@pytest.fixture
def store(clock):
    """A writable (local-private) store whose 'today' is 2024-03-15."""
    return TimeStore(AppState(selected_date=TODAY, data_source=DataSource.LOCAL), clock=clock)
