from __future__ import annotations

import json
import logging
import secrets

from tracker.constants import (
    EXPORT_FILENAME_PREFIX,
    IMPORT_INVALID_MESSAGE,
    STORAGE_ANON_ID,
    STORAGE_DAILY,
    STORAGE_HOURLY,
    STORAGE_MANUAL_PATTERNS,
    STORAGE_PATTERNS,
    STORAGE_REFLECTIONS,
    WIRE_DAILY,
    WIRE_HOURLY,
    WIRE_MANUAL_PATTERNS,
    WIRE_PATTERNS,
    WIRE_REFLECTIONS,
)
from tracker.derivation import infer_manual_patterns, recompute_from_grid
from tracker.errors import ImportFailedError
from tracker.models import (
    Bundle,
    parse_daily_map,
    parse_grid_map,
    parse_patterns_map,
    parse_reflections_map,
)

logger = logging.getLogger(__name__)


def infer_manual_map(patterns, grid):
    manual = {}
    for key, items in patterns.items():
        entries = infer_manual_patterns(items, grid.get(key))
        if entries:
            manual[key] = entries
    return manual


class LocalPersistence:
    """Load/save the user bundle and the small side records through a ``LocalStore``."""

    def __init__(self, store):
        self.store = store

    def read_json(self, key, default=None, expected_type=None):
        raw = self.store.get(key)
        if raw is None:
            return default
        try:
            value = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring corrupt local value for %s", key)
            return default
        if expected_type is not None and not isinstance(value, expected_type):
            logger.warning("Ignoring local value of unexpected type for %s", key)
            return default
        return value

    def write_json(self, key, value):
        try:
            encoded = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            logger.warning("Could not encode local value for %s: %s", key, exc)
            return False
        return self.store.set(key, encoded)

    def remove(self, key):
        self.store.remove(key)

    def _read_section(self, key, parser, *extra):
        raw = self.read_json(key, {}, dict)
        try:
            return parser(raw, *extra)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed local section %s", key)
            return {}

    def load(self):
        grid = self._read_section(STORAGE_HOURLY, parse_grid_map)
        grid_raw = {key: None for key in grid}
        daily = self._read_section(STORAGE_DAILY, parse_daily_map, grid_raw)
        patterns = self._read_section(STORAGE_PATTERNS, parse_patterns_map)
        reflections = self._read_section(STORAGE_REFLECTIONS, parse_reflections_map)
        if self.store.get(STORAGE_MANUAL_PATTERNS) is None:
            manual = infer_manual_map(patterns, grid)
        else:
            manual = self._read_section(STORAGE_MANUAL_PATTERNS, parse_patterns_map)
        return Bundle(
            daily_totals=daily,
            activity_grid=grid,
            wasted_patterns=patterns,
            reflections=reflections,
            manual_patterns=manual,
        )

    def save(self, bundle):
        payload = bundle.to_payload()
        ok = True
        ok &= self.write_json(STORAGE_DAILY, payload[WIRE_DAILY])
        ok &= self.write_json(STORAGE_HOURLY, payload[WIRE_HOURLY])
        ok &= self.write_json(STORAGE_PATTERNS, payload[WIRE_PATTERNS])
        ok &= self.write_json(STORAGE_REFLECTIONS, payload[WIRE_REFLECTIONS])
        ok &= self.write_json(STORAGE_MANUAL_PATTERNS, payload.get(WIRE_MANUAL_PATTERNS, {}))
        if not ok:
            logger.warning("Local save incomplete; in-memory state remains authoritative")
        return bool(ok)

    def anonymous_id(self):
        value = self.read_json(STORAGE_ANON_ID, None, str)
        if value:
            return value
        value = secrets.token_hex(8)
        self.write_json(STORAGE_ANON_ID, value)
        return value


def local_scope(user, session_token):
    """Namespace for one identity's local data: the signed-in account, else this browser session."""
    if user is not None:
        account = (user.email or user.uid or "").strip().lower()
        if account:
            return f"user:{account}"
    return f"anon:{session_token}"


def bundle_from_document(payload):
    """Strict parse of a stored or received document; manual patterns are inferred when absent."""
    bundle = Bundle.from_payload(payload)
    if WIRE_MANUAL_PATTERNS not in payload:
        bundle.manual_patterns = infer_manual_map(bundle.wasted_patterns, bundle.activity_grid)
    return bundle


def export_bundle(bundle, now_ms):
    """Return ``(filename, text)`` for a pretty-printed backup of ``bundle``."""
    text = json.dumps(bundle.to_payload(), indent=2, ensure_ascii=False)
    return f"{EXPORT_FILENAME_PREFIX}{int(now_ms)}.json", text


def import_bundle(raw):
    """Parse an exported document into a fresh ``Bundle``.

    The grid wins over any totals or patterns in the file: every day with a grid
    gets its totals and auto patterns recomputed, manual patterns are kept.
    Nothing is returned unless the whole document parses.
    """
    try:
        payload = json.loads(raw) if isinstance(raw, (str, bytes, bytearray)) else raw
        bundle = bundle_from_document(payload)
    except (TypeError, ValueError) as exc:
        raise ImportFailedError(IMPORT_INVALID_MESSAGE) from exc
    if bundle.activity_grid:
        daily, patterns = recompute_from_grid(bundle.activity_grid, bundle.manual_patterns)
        bundle.daily_totals.update(daily)
        bundle.wasted_patterns.update(patterns)
    logger.info(
        "Imported bundle: %d days of totals, %d days of grid",
        len(bundle.daily_totals),
        len(bundle.activity_grid),
    )
    return bundle
