"""HTTP client for the shared live document.

``subscribe`` polls ``GET /v1/live/{doc_id}`` on a daemon thread and hands the
document to the callback whenever its server-side ``version`` moves.
"""

from __future__ import annotations

import logging
import threading

import requests

from tracker.data import api_client

logger = logging.getLogger(__name__)


def _doc_path(doc_id):
    return f"/v1/live/{doc_id}"


class HttpLiveDocumentStore:
    def __init__(self, poll_seconds=2.0, identity=None, request=None):
        self.poll_seconds = poll_seconds
        self.identity = identity
        self._request = request or api_client.request

    def _call(self, method, path, json=None):
        user_email = self.identity() if self.identity else None
        return self._request(method, path, json=json, user_email=user_email)

    def fetch(self, doc_id):
        """Return ``(version, data)`` or ``None`` when the document does not exist."""
        try:
            body = self._call("GET", _doc_path(doc_id))
        except api_client.ApiError as exc:
            if exc.status_code == 404:
                return None
            raise
        return int(body.get("version") or 0), body.get("data") or {}

    def set_document(self, doc_id, payload):
        return self._call("PUT", _doc_path(doc_id), json=payload)

    def subscribe(self, doc_id, on_snapshot, on_error=None):
        stop = threading.Event()
        thread = threading.Thread(
            target=self._poll,
            args=(doc_id, on_snapshot, on_error, stop),
            name=f"live-poll-{doc_id}",
            daemon=True,
        )
        thread.start()
        return stop.set

    def poll_once(self, doc_id, on_snapshot, last_version=None):
        """One poll step; returns the version seen (``None`` while absent)."""
        result = self.fetch(doc_id)
        if result is None:
            return last_version
        version, data = result
        if version != last_version:
            on_snapshot(data)
        return version

    def _poll(self, doc_id, on_snapshot, on_error, stop):
        last_version = None
        while not stop.is_set():
            try:
                last_version = self.poll_once(doc_id, on_snapshot, last_version)
            except (requests.RequestException, RuntimeError, ValueError) as exc:
                if on_error is not None:
                    on_error(exc)
                else:
                    logger.warning("Live poll failed for %s: %s", doc_id, exc)
            stop.wait(self.poll_seconds)
