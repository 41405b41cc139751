"""Unit tests for the local store, load/save, export and import."""

import json

import pytest

from tracker.constants import IMPORT_INVALID_MESSAGE
from tracker.data.local_store import LocalStore
from tracker.errors import ImportFailedError
from tracker.models import AuthUser, Bundle, DailyTotals, HourSlot, TotalsSource, content_hash, empty_day
from tracker.persistence import LocalPersistence, bundle_from_document, export_bundle, import_bundle, local_scope


def grid_bundle():
    rows = empty_day()
    rows[7] = HourSlot(first="MISC-BREAKFAST", second="Wasted", wasted_reason="Phone")
    return Bundle(
        daily_totals={"2024-03-10": DailyTotals(wasted=0.5, source=TotalsSource.GRID)},
        activity_grid={"2024-03-10": rows},
        wasted_patterns={"2024-03-10": ["Post Breakfast", "Doomscrolling"]},
        reflections={"2024-03-10": "meh"},
        manual_patterns={"2024-03-10": ["Doomscrolling"]},
    )


class TestLocalStore:
    def test_get_set_remove(self, local_store):
        assert local_store.get("missing") is None
        assert local_store.set("k", "v1") is True
        assert local_store.set("k", "v2") is True
        assert local_store.get("k") == "v2"
        local_store.remove("k")
        assert local_store.get("k") is None

    def test_unavailable_store_degrades(self, tmp_path):
        store = LocalStore(f"sqlite:///{tmp_path / 'missing-dir' / 'x.db'}")
        assert store.get("k") is None
        assert store.set("k", "v") is False

    def test_namespaces_do_not_collide(self, local_store):
        viewer = local_store.scoped("anon:abc")
        admin = local_store.scoped("user:owner@example.com")
        viewer.set("TT_REFLECTIONS", "{}")
        assert admin.get("TT_REFLECTIONS") is None
        assert local_store.get("TT_REFLECTIONS") is None
        admin.set("TT_REFLECTIONS", "[]")
        assert viewer.get("TT_REFLECTIONS") == "{}"
        viewer.remove("TT_REFLECTIONS")
        assert admin.get("TT_REFLECTIONS") == "[]"

    def test_local_scope(self):
        assert local_scope(None, "abc") == "anon:abc"
        assert local_scope(AuthUser(uid="u1", email="Owner@Example.com"), "abc") == "user:owner@example.com"
        assert local_scope(AuthUser(uid="u1"), "abc") == "user:u1"


class TestLoadSave:
    def test_empty_store_loads_empty_bundle(self, persistence):
        assert persistence.load().is_empty()

    def test_round_trip(self, persistence):
        bundle = grid_bundle()
        assert persistence.save(bundle) is True
        loaded = persistence.load()
        assert loaded.to_payload() == bundle.to_payload()
        assert loaded.daily_totals["2024-03-10"].source is TotalsSource.GRID
        assert loaded.manual_patterns == {"2024-03-10": ["Doomscrolling"]}

    def test_corrupt_section_is_treated_as_absent(self, persistence, local_store):
        persistence.save(grid_bundle())
        local_store.set("TT_HOURLY", "{not json")
        local_store.set("TT_REFLECTIONS", "[1, 2]")
        loaded = persistence.load()
        assert loaded.activity_grid == {}
        assert loaded.reflections == {}
        assert loaded.daily_totals["2024-03-10"].wasted == 0.5
        assert loaded.daily_totals["2024-03-10"].source is TotalsSource.MANUAL

    def test_malformed_rows_are_treated_as_absent(self, persistence, local_store):
        local_store.set("TT_DAILY", json.dumps({"2024-03-10": {"study": "lots"}}))
        assert persistence.load().daily_totals == {}

    def test_manual_patterns_inferred_for_legacy_data(self, persistence, local_store):
        bundle = grid_bundle()
        payload = bundle.to_payload()
        local_store.set("TT_HOURLY", json.dumps(payload["hourlyData"]))
        local_store.set("TT_PATTERNS", json.dumps(payload["wastedPatterns"]))
        assert persistence.load().manual_patterns == {"2024-03-10": ["Doomscrolling"]}

    def test_failed_save_reports_false(self, tmp_path):
        persistence = LocalPersistence(LocalStore(f"sqlite:///{tmp_path / 'nope' / 'x.db'}"))
        assert persistence.save(grid_bundle()) is False

    def test_anonymous_id_is_stable(self, persistence):
        first = persistence.anonymous_id()
        assert len(first) == 16
        assert persistence.anonymous_id() == first


class TestExport:
    def test_export_shape(self):
        filename, text = export_bundle(grid_bundle(), 1710496800000)
        assert filename == "time-tracker-backup-1710496800000.json"
        payload = json.loads(text)
        assert set(payload) >= {"dailyData", "hourlyData", "wastedPatterns", "reflections"}

    def test_manual_only_bundle_round_trips(self):
        bundle = Bundle(
            daily_totals={"2024-02-01": DailyTotals(study=4, sleep=6, wasted=2)},
            wasted_patterns={"2024-02-01": ["Phone"]},
            reflections={"2024-02-01": "ok"},
            manual_patterns={"2024-02-01": ["Phone"]},
        )
        _, text = export_bundle(bundle, 0)
        assert import_bundle(text).to_payload() == bundle.to_payload()

    def test_grid_bundle_recompute_is_idempotent(self):
        _, text = export_bundle(grid_bundle(), 0)
        once = import_bundle(text)
        _, again = export_bundle(once, 0)
        twice = import_bundle(again)
        assert content_hash(once.to_payload()) == content_hash(twice.to_payload())


class TestImport:
    def test_grid_wins_over_file_totals(self):
        payload = grid_bundle().to_payload()
        payload["dailyData"]["2024-03-10"] = {"study": 9, "sleep": 9, "wasted": 9}
        payload["wastedPatterns"]["2024-03-10"] = ["Stale"]
        payload.pop("manualPatterns")
        bundle = import_bundle(json.dumps(payload))
        totals = bundle.daily_totals["2024-03-10"]
        assert (totals.study, totals.sleep, totals.wasted) == (0, 0, 0.5)
        assert bundle.wasted_patterns["2024-03-10"] == ["Post Breakfast", "Stale"]

    def test_accepts_bytes(self):
        bundle = import_bundle(b'{"reflections": {"2024-01-01": "hi"}}')
        assert bundle.reflections == {"2024-01-01": "hi"}

    @pytest.mark.parametrize(
        "raw",
        [
            "{oops",
            "[]",
            '{"hourlyData": {"2024-01-01": "nope"}}',
            '{"dailyData": {"2024-01-01": {"study": -1}}}',
            '{"hourlyData": {"2024-01-01": [{"first": 3}]}}',
        ],
    )
    def test_invalid_documents_rejected(self, raw):
        with pytest.raises(ImportFailedError) as excinfo:
            import_bundle(raw)
        assert str(excinfo.value) == IMPORT_INVALID_MESSAGE

    def test_failed_import_leaves_store_untouched(self, store):
        store.set_reflection("2024-03-15", "keep me")
        with pytest.raises(ImportFailedError):
            store.import_data("{oops")
        assert store.reflection("2024-03-15") == "keep me"

    def test_sentinels_in_file_are_dropped(self):
        bundle = import_bundle('{"hourlyData": {"2024-01-01": [{"first": "MISC", "second": "Back"}]}}')
        rows = bundle.activity_grid["2024-01-01"]
        assert len(rows) == 24
        assert rows[0].first is None and rows[0].second is None


class TestDocumentParsing:
    def test_bundle_from_document_ignores_updated_at(self):
        payload = grid_bundle().to_payload()
        payload["updatedAt"] = 1
        assert bundle_from_document(payload).to_payload() == grid_bundle().to_payload()
