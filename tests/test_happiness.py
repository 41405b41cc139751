"""Unit tests for the happiness checklist."""

import pytest

from tracker.errors import ValidationRejected
from tracker.happiness import HappinessChecklist


@pytest.fixture
def checklist(persistence):
    items = HappinessChecklist(persistence)
    items.set_items(["Walk", "Read", "Call mom"])
    return items


class TestItems:
    def test_items_persist(self, checklist, persistence):
        assert HappinessChecklist(persistence).items == ["Walk", "Read", "Call mom"]

    def test_max_six_items(self, checklist):
        for label in ["a", "b", "c"]:
            checklist.add_item(label)
        with pytest.raises(ValidationRejected):
            checklist.add_item("g")
        assert len(checklist.items) == 6

    def test_blank_label_rejected(self, checklist):
        with pytest.raises(ValidationRejected):
            checklist.add_item("   ")

    def test_long_label_trimmed(self, checklist):
        checklist.add_item("x" * 80)
        assert len(checklist.items[-1]) == 40

    def test_remove_shifts_status_for_every_day(self, checklist):
        checklist.toggle("2024-03-14", 2)
        checklist.toggle("2024-03-15", 1)
        checklist.toggle("2024-03-15", 2)
        checklist.remove_item(1)
        assert checklist.items == ["Walk", "Call mom"]
        assert checklist.day_status("2024-03-14") == [False, True]
        assert checklist.day_status("2024-03-15") == [False, True]


class TestStatus:
    def test_toggle_and_completion(self, checklist, persistence):
        assert checklist.toggle("2024-03-15", 0) is True
        assert checklist.completion("2024-03-15") == (1, 33.3, 3)
        assert checklist.toggle("2024-03-15", 0) is False
        assert HappinessChecklist(persistence).day_status("2024-03-15") == [False, False, False]

    def test_untracked_day(self, checklist):
        assert checklist.completion("2020-01-01") == (0, 0, 3)

    def test_empty_checklist(self, persistence):
        assert HappinessChecklist(persistence).completion("2024-03-15") == (0, 0, 0)

    def test_toggle_out_of_range(self, checklist):
        with pytest.raises(ValidationRejected):
            checklist.toggle("2024-03-15", 7)
