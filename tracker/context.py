"""Per-browser-session wiring of the core services for the Streamlit app."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Any, Optional

import streamlit as st

from tracker.accountability import AccountabilityTracker
from tracker.config import get_settings
from tracker.data import api_client
from tracker.data.live_client import HttpLiveDocumentStore
from tracker.data.local_store import LocalStore
from tracker.happiness import HappinessChecklist
from tracker.persistence import LocalPersistence, local_scope
from tracker.pomodoro import PomodoroTimer
from tracker.store import TimeStore
from tracker.sync import SyncCoordinator

logger = logging.getLogger(__name__)

SESSION_KEY = "tracker.session"
ANON_TOKEN_KEY = "tracker.anon_token"


@dataclass
class TrackerContext:
    settings: Any
    persistence: LocalPersistence
    store: TimeStore
    coordinator: SyncCoordinator
    pomodoro: PomodoroTimer
    happiness: HappinessChecklist
    accountability: AccountabilityTracker
    user: Optional[Any] = None
    notices: Optional[list] = None
    scope: str = ""

    def notify(self, message):
        self.notices.append(message)

    def pop_notices(self):
        items, self.notices[:] = list(self.notices), []
        return items

    def close(self):
        self.coordinator.stop()
        self.pomodoro.stop()


@st.cache_resource
def _local_store(database_url):
    return LocalStore(database_url)


def _session_scope(user):
    token = st.session_state.get(ANON_TOKEN_KEY)
    if token is None:
        token = secrets.token_hex(8)
        st.session_state[ANON_TOKEN_KEY] = token
    return local_scope(user, token)


def build_context(user=None):
    settings = get_settings()
    scope = _session_scope(user)
    persistence = LocalPersistence(_local_store(settings.local_database_url).scoped(scope))
    store = TimeStore()
    live_store = None
    if settings.live_enabled:
        live_store = HttpLiveDocumentStore(
            poll_seconds=settings.live_poll_seconds,
            identity=lambda: _request_identity(ctx),
        )
    coordinator = SyncCoordinator(
        store,
        persistence,
        live_store=live_store,
        doc_id=settings.live_doc_id,
        debounce_seconds=settings.debounce_seconds,
    )
    ctx = TrackerContext(
        settings=settings,
        persistence=persistence,
        store=store,
        coordinator=coordinator,
        pomodoro=None,
        happiness=HappinessChecklist(persistence),
        accountability=AccountabilityTracker(persistence),
        user=user,
        notices=[],
        scope=scope,
    )
    ctx.pomodoro = PomodoroTimer(persistence, on_expire=ctx.notify)
    api_client.configure(get_settings, None)
    coordinator.start()
    if user is not None:
        coordinator.on_auth_changed(user, settings.admin_uid, settings.admin_emails)
    logger.info("Tracker session started for %s (live backend %s)", scope, "on" if live_store else "off")
    return ctx


def _request_identity(ctx):
    if ctx.user is not None and ctx.user.email:
        return ctx.user.email
    return f"anon-{ctx.persistence.anonymous_id()}"


def get_context(user=None):
    """The session's context, rebuilt whenever the signed-in identity changes."""
    ctx = st.session_state.get(SESSION_KEY)
    if ctx is not None and ctx.scope != _session_scope(user):
        ctx.close()
        ctx = None
    if ctx is None:
        ctx = build_context(user)
        st.session_state[SESSION_KEY] = ctx
    ctx.user = user
    return ctx
