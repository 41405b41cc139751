"""Unit tests for totals, pattern detection and reports."""

from datetime import date

import pytest

from tracker.derivation import (
    auto_calc_patterns,
    daily_totals_from_grid,
    infer_manual_patterns,
    merge_patterns,
    month_calendar,
    monthly_report,
    pattern_analysis,
    recompute_from_grid,
    totals_from_grid,
    visible_months,
    weekly_report,
    yearly_report,
)
from tracker.models import DailyTotals, HourSlot, TotalsSource, empty_day


def day_with(**hours):
    """``day_with(h7=("MISC-BREAKFAST", "Wasted"))`` builds a 24-slot day."""
    rows = empty_day()
    for name, (first, second) in hours.items():
        rows[int(name[1:])] = HourSlot(first=first, second=second)
    return rows


class TestTotals:
    def test_breakfast_then_wasted_example(self):
        rows = day_with(h7=("MISC-BREAKFAST", "Wasted"))
        totals = totals_from_grid(rows)
        assert totals["study"] == 0
        assert totals["sleep"] == 0
        assert totals["wasted"] == 0.5
        assert totals["misc_hours"] == 0.5
        assert totals["accounted"] == 1.0
        assert totals["overflow"] is False
        assert auto_calc_patterns(rows) == ["Post Breakfast"]

    def test_half_hour_credits(self):
        rows = day_with(h0=("Sleeping", "Sleeping"), h9=("Studying", "Wasted"), h10=("Studying", None))
        daily = daily_totals_from_grid(rows)
        assert (daily.study, daily.sleep, daily.wasted) == (1.0, 1.0, 0.5)
        assert daily.source is TotalsSource.GRID

    def test_full_day_is_accounted_without_overflow(self):
        rows = [HourSlot(first="Sleeping", second="MISC-BREAK") for _ in range(24)]
        totals = totals_from_grid(rows)
        assert totals["accounted"] == 24.0
        assert totals["study"] + totals["sleep"] + totals["wasted"] + totals["misc_hours"] == totals["accounted"]
        assert totals["overflow"] is False

    def test_malformed_grid_reports_overflow(self):
        rows = [HourSlot(first="Studying", second="Studying") for _ in range(25)]
        assert totals_from_grid(rows)["overflow"] is True

    def test_deterministic(self):
        rows = day_with(h3=("Wasted", "Studying"), h4=("MISC-GYM", "Wasted"))
        assert totals_from_grid(rows) == totals_from_grid(rows)


class TestPatterns:
    def test_duplicate_post_gym_collapses(self):
        rows = day_with(h2=("MISC-GYM", "Wasted"), h5=("MISC-GYM", "Wasted"))
        assert auto_calc_patterns(rows) == ["Post Gym"]

    def test_previous_activity_carries_across_hours(self):
        rows = day_with(h8=(None, "MISC-LUNCH"), h9=("Wasted", None))
        assert auto_calc_patterns(rows) == ["Post Lunch"]

    def test_second_half_uses_first_half_even_when_empty(self):
        rows = day_with(h8=("MISC-DINNER", None), h9=(None, "Wasted"))
        # Previous for the second half is this hour's empty first half.
        assert auto_calc_patterns(rows) == ["Pre Sleep"]

    def test_pre_sleep_window_excludes_late_evening(self):
        assert auto_calc_patterns(day_with(h22=("Wasted", None))) == []
        assert auto_calc_patterns(day_with(h23=(None, "Wasted"))) == []
        assert auto_calc_patterns(day_with(h1=("Wasted", None))) == ["Pre Sleep"]

    def test_first_occurrence_order(self):
        rows = day_with(h6=("MISC-WOKE_UP", "Wasted"), h7=("Wasted", None), h12=("MISC-GYM", "Wasted"))
        assert auto_calc_patterns(rows) == ["Post Wakeup", "Pre Sleep", "Post Gym"]

    def test_merge_keeps_manual_after_auto(self):
        assert merge_patterns(["Post Gym"], ["Phone", "Post Gym"]) == ["Post Gym", "Phone"]
        assert merge_patterns(["Post Gym"], ["Phone", "Phone"]) == ["Post Gym", "Phone"]

    def test_infer_manual_patterns(self):
        rows = day_with(h2=("MISC-GYM", "Wasted"))
        assert infer_manual_patterns(["Post Gym", "Doomscrolling"], rows) == ["Doomscrolling"]
        assert infer_manual_patterns(["Anything"], None) == ["Anything"]

    def test_recompute_from_grid(self):
        grid = {"2024-03-10": day_with(h7=("MISC-BREAKFAST", "Wasted"))}
        daily, patterns = recompute_from_grid(grid, {"2024-03-10": ["Phone"]})
        assert daily["2024-03-10"].wasted == 0.5
        assert patterns["2024-03-10"] == ["Post Breakfast", "Phone"]

    def test_pattern_analysis_case_folds_and_ranks(self):
        analysis = pattern_analysis({
            "2024-03-01": ["Post Gym", "Phone"],
            "2024-03-02": ["post gym"],
            "2024-03-03": ["Pre Sleep", "Post Gym"],
        })
        assert analysis == [
            {"pattern": "post gym", "count": 3},
            {"pattern": "phone", "count": 1},
            {"pattern": "pre sleep", "count": 1},
        ]


class TestReports:
    def test_weekly_buckets_for_month_starting_wednesday(self):
        # May 2024: 31 days, the 1st is a Wednesday, first Sunday is the 5th.
        daily = {"2024-05-02": DailyTotals(study=3, sleep=7, wasted=1)}
        weeks = weekly_report(2024, 5, daily)
        assert weeks[0]["start"] == "2024-05-01"
        assert weeks[0]["end"] == "2024-05-05"
        assert weeks[0]["days"] == 5
        assert weeks[0]["avg_study"] == "0.60"
        assert weeks[0]["total_sleep"] == "7.0"
        assert weeks[-1]["start"] == "2024-05-27"
        assert weeks[-1]["end"] == "2024-05-31"
        assert sum(w["days"] for w in weeks) == 31

    def test_monthly_report_single_tracked_day(self):
        daily = {"2024-04-12": DailyTotals(study=4, sleep=6, wasted=2)}
        report = monthly_report(2024, 4, daily)
        assert report["days_tracked"] == 1
        assert report["averages"] == {"study": "4.00", "sleep": "6.00", "wasted": "2.00"}
        assert report["totals"] == {"study": 4, "sleep": 6, "wasted": 2}
        assert report["days_in_month"] == 30

    def test_monthly_report_without_data(self):
        report = monthly_report(2024, 2, {})
        assert report["days_tracked"] == 0
        assert report["averages"]["study"] == "0.00"
        assert report["days_in_month"] == 29

    def test_yearly_report_sums_months(self):
        daily = {
            "2024-01-05": DailyTotals(study=2, sleep=8, wasted=1),
            "2024-07-20": DailyTotals(study=5, sleep=6, wasted=0.5),
            "2023-12-31": DailyTotals(study=9, sleep=9, wasted=9),
        }
        report = yearly_report(2024, daily)
        assert len(report["months"]) == 12
        assert report["totals"]["study"] == 7
        assert report["totals"]["wasted"] == 1.5
        assert report["totals"]["days_tracked"] == 2
        assert report["months"][6]["name"] == "July"

    def test_visible_months_current_year(self):
        daily = {"2024-01-05": DailyTotals(study=2)}
        report = yearly_report(2024, daily)
        months = [m["month"] for m in visible_months(report, date(2024, 3, 15))]
        assert months == [1, 3]

    def test_visible_months_other_year(self):
        report = yearly_report(2023, {})
        assert len(visible_months(report, date(2024, 3, 15))) == 12


class TestMonthCalendar:
    def test_sunday_first_offset_and_flags(self):
        # March 2024 starts on a Friday: five leading blanks.
        cells = month_calendar(2024, 3, {"2024-03-02": DailyTotals()}, "2024-03-15", "2024-03-15")
        assert [c["empty"] for c in cells[:6]] == [True] * 5 + [False]
        day2 = cells[6]
        assert day2["day"] == 2
        assert day2["has_data"] is True
        selected = [c for c in cells if not c["empty"] and c["is_selected"]]
        assert [c["day"] for c in selected] == [15]
        assert selected[0]["is_today"] is True
        assert len([c for c in cells if not c["empty"]]) == 31

    @pytest.mark.parametrize("year,month,blanks", [(2024, 9, 0), (2024, 6, 6)])
    def test_leading_blanks(self, year, month, blanks):
        cells = month_calendar(year, month, {})
        assert sum(1 for c in cells if c["empty"]) == blanks
