"""
Keeps the session's bundle consistent between the local store and the shared
live document.

Roles and data sources resolve to one effective mode:

* admin: edits locally, mirrors to the local store, publishes to the live doc.
* viewer + local: edits locally, mirrors to the local store, never publishes.
* viewer + live: read-only mirror of the live doc, nothing saved locally.

The live document collaborator needs two methods:
``subscribe(doc_id, on_snapshot, on_error) -> unsubscribe`` and
``set_document(doc_id, payload)``. Publishing is debounced and only happens
when the bundle is non-empty, differs from the last known remote content and
the one-shot skip guard is not set.
"""

from __future__ import annotations

import logging
import time

from tracker.constants import DS_KEY, WIRE_MANUAL_PATTERNS, WIRE_UPDATED_AT
from tracker.models import Bundle, content_hash
from tracker.persistence import bundle_from_document
from tracker.scheduling import Debouncer, ThreadingScheduler
from tracker.store import ChangeOrigin, DataSource, EffectiveMode, Role

logger = logging.getLogger(__name__)

LISTENING_MODES = {EffectiveMode.ADMIN, EffectiveMode.LIVE_SHARED}
LOCAL_MODES = {EffectiveMode.ADMIN, EffectiveMode.LOCAL_PRIVATE}


def resolve_role(user, admin_uid="", admin_emails=()):
    if user is None:
        return Role.VIEWER
    if admin_uid and getattr(user, "uid", None) == admin_uid:
        return Role.ADMIN
    email = (getattr(user, "email", "") or "").strip().lower()
    if email and email in {item.strip().lower() for item in admin_emails}:
        return Role.ADMIN
    return Role.VIEWER


def _now_ms():
    return int(time.time() * 1000)


class SyncCoordinator:
    def __init__(
        self,
        store,
        persistence,
        live_store=None,
        doc_id="live",
        scheduler=None,
        debounce_seconds=0.6,
        clock_ms=None,
    ):
        self.store = store
        self.persistence = persistence
        self.live_store = live_store
        self.doc_id = doc_id
        self.clock_ms = clock_ms or _now_ms
        self._debouncer = Debouncer(scheduler or ThreadingScheduler(), debounce_seconds, self._publish)
        self._unsubscribe = None
        self._remote_hash = ""
        self._last_remote = None
        self._skip_next_publish = False
        self._remove_listener = store.add_listener(self._on_store_change)

    # -- mode ----------------------------------------------------------------

    @property
    def mode(self):
        return self.store.effective_mode

    @property
    def subscribed(self):
        return self._unsubscribe is not None

    @property
    def publish_pending(self):
        return self._debouncer.pending

    @property
    def skip_next_publish(self):
        return self._skip_next_publish

    @property
    def last_remote(self):
        return self._last_remote

    def start(self):
        """Restore the saved data source (new visitors default to live) and enter its mode."""
        raw = self.persistence.read_json(DS_KEY, None, str)
        if raw is None:
            raw = DataSource.LIVE.storage_value(self.doc_id)
            self.persistence.write_json(DS_KEY, raw)
        with self.store.lock:
            self.store.update_session(data_source=DataSource.from_storage(raw))
            self._enter_mode(None)

    def stop(self):
        with self.store.lock:
            self._debouncer.cancel()
            self._set_listening(False)
            self._remove_listener()

    def set_role(self, role):
        with self.store.lock:
            if role is self.store.state.role:
                return
            previous = self.mode
            self.store.update_session(role=role)
            if role is Role.ADMIN:
                # A fresh admin login must not publish whatever pre-login state is in memory.
                self._skip_next_publish = True
            logger.info("Role resolved to %s", role.value)
            self._enter_mode(previous)

    def on_auth_changed(self, user, admin_uid="", admin_emails=()):
        self.set_role(resolve_role(user, admin_uid, admin_emails))

    def set_data_source(self, source):
        with self.store.lock:
            self.persistence.write_json(DS_KEY, source.storage_value(self.doc_id))
            if source is self.store.state.data_source:
                return
            previous = self.mode
            self.store.update_session(data_source=source)
            self._enter_mode(previous)

    def _enter_mode(self, previous):
        mode = self.mode
        if mode is not previous:
            logger.info("Effective mode %s -> %s", getattr(previous, "value", None), mode.value)
            # Entering admin always re-reads the local store so the hydrate
            # change is what consumes the post-login skip guard.
            if mode is EffectiveMode.ADMIN or (mode in LOCAL_MODES and previous not in LOCAL_MODES):
                self.store.replace_bundle(self.persistence.load(), ChangeOrigin.HYDRATE)
            elif mode is EffectiveMode.LIVE_SHARED:
                cached = self._last_remote.copy() if self._last_remote else Bundle()
                self.store.replace_bundle(cached, ChangeOrigin.HYDRATE)
        if mode is not EffectiveMode.ADMIN:
            self._debouncer.cancel()
        self._set_listening(mode in LISTENING_MODES)
        if mode is EffectiveMode.ADMIN:
            self.seed_if_empty()

    def _set_listening(self, listen):
        if self.live_store is None:
            return
        if listen and self._unsubscribe is None:
            try:
                self._unsubscribe = self.live_store.subscribe(
                    self.doc_id,
                    self._on_remote_snapshot,
                    self._on_remote_error,
                )
            except Exception as exc:
                logger.warning("Could not subscribe to live document %s: %s", self.doc_id, exc)
                self._unsubscribe = None
        elif not listen and self._unsubscribe is not None:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            unsubscribe()

    # -- inbound -------------------------------------------------------------

    def _on_remote_snapshot(self, payload):
        if payload is None:
            return
        try:
            bundle = bundle_from_document(payload)
        except (TypeError, ValueError) as exc:
            logger.warning("Ignoring malformed live snapshot: %s", exc)
            return
        with self.store.lock:
            mode = self.mode
            if mode not in LISTENING_MODES:
                return
            self._last_remote = bundle.copy()
            self._remote_hash = content_hash(bundle.to_payload())
            if mode is EffectiveMode.ADMIN:
                if self.seed_if_empty():
                    return
                if self._debouncer.pending:
                    logger.info("Local edits pending publish; live snapshot not applied")
                    return
            self.store.replace_bundle(bundle, ChangeOrigin.REMOTE)

    def _on_remote_error(self, exc):
        logger.warning("Live subscription error for %s: %s", self.doc_id, exc)

    def seed_if_empty(self):
        """Copy the last live snapshot into an empty admin session without publishing it back."""
        with self.store.lock:
            if self.mode is not EffectiveMode.ADMIN:
                return False
            if not self.store.bundle.is_empty() or self._last_remote is None:
                return False
            self._skip_next_publish = True
            self.store.replace_bundle(self._last_remote.copy(), ChangeOrigin.SEED)
            logger.info("Seeded empty admin session from live snapshot")
            return True

    # -- outbound ------------------------------------------------------------

    def _on_store_change(self, origin):
        mode = self.mode
        if mode in LOCAL_MODES and origin is not ChangeOrigin.HYDRATE:
            self.persistence.save(self.store.bundle)
        if mode is not EffectiveMode.ADMIN:
            return
        if self._skip_next_publish:
            self._skip_next_publish = False
            return
        if self.live_store is not None and self._outbound() is not None:
            self._debouncer.trigger()

    def _outbound(self):
        bundle = self.store.bundle
        if bundle.is_empty():
            return None
        payload = bundle.to_payload()
        digest = content_hash(payload)
        if digest == self._remote_hash:
            return None
        return payload, digest

    def _publish(self):
        with self.store.lock:
            if self.mode is not EffectiveMode.ADMIN or self.live_store is None:
                return
            outbound = self._outbound()
            if outbound is None:
                return
            payload, digest = outbound
        document = dict(payload)
        # Always sent so the server-side merge cannot keep a stale manual map.
        document.setdefault(WIRE_MANUAL_PATTERNS, {})
        document[WIRE_UPDATED_AT] = self.clock_ms()
        try:
            self.live_store.set_document(self.doc_id, document)
        except Exception as exc:
            logger.warning("Publish to live document %s failed: %s", self.doc_id, exc)
            return
        with self.store.lock:
            self._remote_hash = digest
        logger.info("Published live document %s", self.doc_id)

    def flush(self):
        """Publish now instead of waiting for the debounce window."""
        self._debouncer.cancel()
        self._publish()
