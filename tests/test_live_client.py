"""Tests for the polling live document client, with the HTTP layer faked out."""

import pytest
import requests

from tracker.data import api_client
from tracker.data.live_client import HttpLiveDocumentStore


class FakeRequest:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def __call__(self, method, path, json=None, user_email=None):
        self.calls.append((method, path, json, user_email))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _doc(version, **data):
    return {"doc_id": "live", "version": version, "updated_at": None, "data": data}


class TestFetch:
    def test_missing_document(self):
        fake = FakeRequest([api_client.ApiError(404, "Not Found", {"detail": "Live document not found"})])
        client = HttpLiveDocumentStore(request=fake)
        assert client.fetch("live") is None

    def test_other_errors_propagate(self):
        fake = FakeRequest([api_client.ApiError(401, "Unauthorized", {"detail": "Invalid backend token"})])
        client = HttpLiveDocumentStore(request=fake)
        with pytest.raises(api_client.ApiError):
            client.fetch("live")

    def test_identity_sent_with_every_call(self):
        fake = FakeRequest([_doc(1), {"ok": True, "version": 2}])
        client = HttpLiveDocumentStore(identity=lambda: "owner@example.com", request=fake)
        client.fetch("saiteja")
        client.set_document("saiteja", {"reflections": {}})
        assert fake.calls == [
            ("GET", "/v1/live/saiteja", None, "owner@example.com"),
            ("PUT", "/v1/live/saiteja", {"reflections": {}}, "owner@example.com"),
        ]


class TestPolling:
    def test_snapshot_only_when_version_moves(self):
        fake = FakeRequest([_doc(1, reflections={"2024-03-15": "a"}), _doc(1), _doc(2, reflections={})])
        client = HttpLiveDocumentStore(request=fake)
        seen = []
        version = client.poll_once("live", seen.append)
        version = client.poll_once("live", seen.append, version)
        version = client.poll_once("live", seen.append, version)
        assert version == 2
        assert seen == [{"reflections": {"2024-03-15": "a"}}, {"reflections": {}}]

    def test_absent_document_keeps_last_version(self):
        fake = FakeRequest([api_client.ApiError(404, "Not Found", "missing")])
        client = HttpLiveDocumentStore(request=fake)
        assert client.poll_once("live", lambda data: None, 3) == 3

    def test_poll_errors_reach_callback(self):
        fake = FakeRequest([requests.ConnectionError("down")])
        client = HttpLiveDocumentStore(poll_seconds=0, request=fake)
        errors = []

        class StopAfterOne:
            calls = 0

            def is_set(self):
                StopAfterOne.calls += 1
                return StopAfterOne.calls > 1

            def wait(self, timeout):
                return True

        client._poll("live", lambda data: None, errors.append, StopAfterOne())
        assert len(errors) == 1
        assert isinstance(errors[0], requests.ConnectionError)


class TestApiClient:
    def test_request_requires_configuration(self):
        api_client.configure(None, None)
        assert not api_client.is_enabled()
        with pytest.raises(RuntimeError):
            api_client.request("GET", "/v1/live/live", user_email="a@b.c")
