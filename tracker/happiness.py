from __future__ import annotations

import logging

from tracker.constants import MAX_HAPPINESS_ITEMS, MAX_HAPPINESS_LABEL, STORAGE_HAPPINESS_ITEMS, STORAGE_HAPPINESS_STATUS
from tracker.errors import ValidationRejected

logger = logging.getLogger(__name__)


def _clean_label(label):
    text = (label or "").strip()
    if not text:
        raise ValidationRejected("Checklist item cannot be blank.")
    return text[:MAX_HAPPINESS_LABEL]


class HappinessChecklist:
    """Process-wide checklist labels plus a per-day list of booleans aligned to them."""

    def __init__(self, persistence):
        self.persistence = persistence
        self.items = [str(item) for item in persistence.read_json(STORAGE_HAPPINESS_ITEMS, [], list)]
        raw_status = persistence.read_json(STORAGE_HAPPINESS_STATUS, {}, dict)
        self.status = {
            str(key): [bool(flag) for flag in flags]
            for key, flags in raw_status.items()
            if isinstance(flags, list)
        }

    def _save(self):
        self.persistence.write_json(STORAGE_HAPPINESS_ITEMS, self.items)
        self.persistence.write_json(STORAGE_HAPPINESS_STATUS, self.status)

    def set_items(self, labels):
        cleaned = [_clean_label(label) for label in labels]
        if len(cleaned) > MAX_HAPPINESS_ITEMS:
            raise ValidationRejected(f"At most {MAX_HAPPINESS_ITEMS} checklist items.")
        self.items = cleaned
        self.status = {key: flags[: len(cleaned)] for key, flags in self.status.items()}
        self._save()

    def add_item(self, label):
        if len(self.items) >= MAX_HAPPINESS_ITEMS:
            raise ValidationRejected(f"At most {MAX_HAPPINESS_ITEMS} checklist items.")
        self.items.append(_clean_label(label))
        self._save()

    def remove_item(self, index):
        if not 0 <= index < len(self.items):
            raise ValidationRejected(f"No checklist item at position {index}.")
        self.items.pop(index)
        for flags in self.status.values():
            if index < len(flags):
                flags.pop(index)
        self._save()

    def day_status(self, key):
        flags = list(self.status.get(key, []))
        flags.extend(False for _ in range(len(self.items) - len(flags)))
        return flags[: len(self.items)]

    def toggle(self, key, index):
        if not 0 <= index < len(self.items):
            raise ValidationRejected(f"No checklist item at position {index}.")
        flags = self.day_status(key)
        flags[index] = not flags[index]
        self.status[key] = flags
        self._save()
        return flags[index]

    def completion(self, key):
        flags = self.day_status(key)
        total = len(flags)
        completed = sum(1 for flag in flags if flag)
        percent = round((completed / total) * 100, 1) if total > 0 else 0
        return completed, percent, total
