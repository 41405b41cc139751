"""
Accountability tracker: a handful of recurring problems, each with a planned
approach, marked as a success or a failure once per day with a reflection.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime

from tracker.constants import STORAGE_ACCOUNTABILITY_DATA, STORAGE_ACCOUNTABILITY_PROBLEMS
from tracker.dates import parse_day_key, today_key
from tracker.errors import ValidationRejected

logger = logging.getLogger(__name__)

REFLECTION_REQUIRED_MESSAGE = "Please write your reflection first before marking this problem."


@dataclass
class Problem:
    id: int
    title: str
    approach: str = ""
    streak: int = 0
    best_streak: int = 0

    def to_dict(self):
        data = asdict(self)
        data["bestStreak"] = data.pop("best_streak")
        return data

    @classmethod
    def from_dict(cls, raw):
        return cls(
            id=int(raw["id"]),
            title=str(raw.get("title") or ""),
            approach=str(raw.get("approach") or ""),
            streak=int(raw.get("streak") or 0),
            best_streak=int(raw.get("bestStreak") or 0),
        )


def _reflection_key(problem_id):
    return f"{problem_id}_reflection"


class AccountabilityTracker:
    def __init__(self, persistence, clock=None):
        self.persistence = persistence
        self.clock = clock or datetime.now
        self.problems = []
        self.start_date = None
        self.daily_records = {}
        self._load()

    def _load(self):
        data = self.persistence.read_json(STORAGE_ACCOUNTABILITY_DATA, None, dict)
        problems = self.persistence.read_json(STORAGE_ACCOUNTABILITY_PROBLEMS, None, list)
        if data is None or problems is None:
            return
        try:
            self.problems = [Problem.from_dict(item) for item in problems]
        except (KeyError, TypeError, ValueError):
            logger.warning("Ignoring corrupt accountability problems")
            self.problems = []
            return
        self.start_date = data.get("startDate")
        records = data.get("dailyRecords") or {}
        self.daily_records = records if isinstance(records, dict) else {}

    def _save(self):
        self.persistence.write_json(
            STORAGE_ACCOUNTABILITY_DATA,
            {"startDate": self.start_date, "dailyRecords": self.daily_records},
        )
        self.persistence.write_json(
            STORAGE_ACCOUNTABILITY_PROBLEMS,
            [problem.to_dict() for problem in self.problems],
        )

    @property
    def setup_complete(self):
        return bool(self.problems) and self.start_date is not None

    def setup(self, entries):
        """``entries`` is a list of ``(title, approach)``; blank titles are skipped."""
        base = int(self.clock().timestamp() * 1000)
        problems = []
        for index, (title, approach) in enumerate(entries):
            title = (title or "").strip()
            if not title:
                continue
            approach = (approach or "").strip()
            if not approach:
                raise ValidationRejected("Please define an approach for all problems before continuing.")
            problems.append(Problem(id=base + index, title=title, approach=approach))
        if not problems:
            raise ValidationRejected("Please add at least one problem to continue.")
        self.problems = problems
        if self.start_date is None:
            self.start_date = today_key(self.clock)
        self._save()
        return problems

    def _problem(self, problem_id):
        for problem in self.problems:
            if problem.id == problem_id:
                return problem
        raise ValidationRejected(f"Unknown problem: {problem_id}")

    def mark_problem(self, problem_id, success, reflection, key=None):
        text = (reflection or "").strip()
        if not text:
            raise ValidationRejected(REFLECTION_REQUIRED_MESSAGE)
        problem = self._problem(problem_id)
        key = key or today_key(self.clock)
        record = self.daily_records.setdefault(key, {})
        record[str(problem_id)] = bool(success)
        record[_reflection_key(problem_id)] = text
        if success:
            problem.streak += 1
            problem.best_streak = max(problem.streak, problem.best_streak)
        else:
            problem.streak = 0
        self._save()

    def is_perfect(self, key):
        record = self.daily_records.get(key) or {}
        return bool(self.problems) and all(record.get(str(p.id)) is True for p in self.problems)

    def stats(self, today=None):
        if not self.start_date:
            return {"total_days": 0, "perfect_days": 0, "current_streak": 0, "success_rate": 0}
        today = today or self.clock().date()
        total_days = (today - parse_day_key(self.start_date)).days + 1
        dates = sorted(self.daily_records, reverse=True)
        perfect_days = sum(1 for key in dates if self.is_perfect(key))
        current_streak = 0
        for key in dates:
            if not self.is_perfect(key):
                break
            current_streak += 1
        success_rate = round((perfect_days / total_days) * 100) if total_days > 0 else 0
        return {
            "total_days": total_days,
            "perfect_days": perfect_days,
            "current_streak": current_streak,
            "success_rate": success_rate,
        }

    def reset(self):
        self.problems = []
        self.start_date = None
        self.daily_records = {}
        self.persistence.remove(STORAGE_ACCOUNTABILITY_DATA)
        self.persistence.remove(STORAGE_ACCOUNTABILITY_PROBLEMS)
