"""Unit tests for the accountability tracker model."""

from datetime import date, datetime

import pytest

from tracker.accountability import AccountabilityTracker
from tracker.errors import ValidationRejected


@pytest.fixture
def tracker(persistence, clock):
    item = AccountabilityTracker(persistence, clock=clock)
    item.setup([("Snoozing", "Alarm across the room"), ("", ""), ("Late coffee", "None after 2pm")])
    return item


class TestSetup:
    def test_blank_titles_skipped(self, tracker):
        assert [p.title for p in tracker.problems] == ["Snoozing", "Late coffee"]
        assert tracker.start_date == "2024-03-15"
        assert tracker.setup_complete

    def test_missing_approach_rejected(self, persistence, clock):
        item = AccountabilityTracker(persistence, clock=clock)
        with pytest.raises(ValidationRejected):
            item.setup([("Snoozing", "")])
        assert not item.setup_complete

    def test_no_problems_rejected(self, persistence, clock):
        with pytest.raises(ValidationRejected):
            AccountabilityTracker(persistence, clock=clock).setup([("  ", "x")])


class TestMarking:
    def test_reflection_required(self, tracker):
        problem = tracker.problems[0]
        with pytest.raises(ValidationRejected):
            tracker.mark_problem(problem.id, True, "  ")
        assert tracker.daily_records == {}

    def test_streaks(self, tracker):
        problem = tracker.problems[0]
        tracker.mark_problem(problem.id, True, "up on time", "2024-03-13")
        tracker.mark_problem(problem.id, True, "again", "2024-03-14")
        assert (problem.streak, problem.best_streak) == (2, 2)
        tracker.mark_problem(problem.id, False, "snoozed", "2024-03-15")
        assert (problem.streak, problem.best_streak) == (0, 2)
        record = tracker.daily_records["2024-03-15"]
        assert record[str(problem.id)] is False
        assert record[f"{problem.id}_reflection"] == "snoozed"

    def test_state_persists(self, tracker, persistence, clock):
        problem = tracker.problems[1]
        tracker.mark_problem(problem.id, True, "done")
        reloaded = AccountabilityTracker(persistence, clock=clock)
        assert reloaded.problems[1].streak == 1
        assert reloaded.daily_records["2024-03-15"][str(problem.id)] is True


class TestStats:
    def test_stats(self, tracker):
        first, second = tracker.problems
        tracker.start_date = "2024-03-06"
        for key in ("2024-03-12", "2024-03-13", "2024-03-15"):
            tracker.mark_problem(first.id, True, "ok", key)
            tracker.mark_problem(second.id, True, "ok", key)
        tracker.mark_problem(first.id, True, "ok", "2024-03-14")
        stats = tracker.stats(date(2024, 3, 15))
        assert stats == {"total_days": 10, "perfect_days": 3, "current_streak": 1, "success_rate": 30}

    def test_stats_before_setup(self, persistence, clock):
        assert AccountabilityTracker(persistence, clock=clock).stats()["total_days"] == 0

    def test_reset(self, tracker, persistence, clock):
        tracker.reset()
        assert persistence.read_json("ACCOUNTABILITY_DATA") is None
        assert not AccountabilityTracker(persistence, clock=clock).setup_complete
