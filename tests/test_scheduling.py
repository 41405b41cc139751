"""Unit tests for the debouncer on top of the manual scheduler."""

from tracker.scheduling import Debouncer


class TestDebouncer:
    def test_only_last_trigger_fires(self, scheduler):
        calls = []
        debouncer = Debouncer(scheduler, 0.6, lambda: calls.append(1))
        debouncer.trigger()
        debouncer.trigger()
        assert debouncer.pending
        scheduler.run_pending()
        assert calls == [1]
        assert not debouncer.pending

    def test_cancel(self, scheduler):
        calls = []
        debouncer = Debouncer(scheduler, 0.6, lambda: calls.append(1))
        debouncer.trigger()
        debouncer.cancel()
        assert not debouncer.pending
        scheduler.run_pending()
        assert calls == []

    def test_pending_while_callback_runs(self, scheduler):
        seen = []
        debouncer = Debouncer(scheduler, 0.6, lambda: seen.append(debouncer.pending))
        debouncer.trigger()
        scheduler.run_pending()
        assert seen == [True]
        assert not debouncer.pending
