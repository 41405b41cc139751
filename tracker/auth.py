"""Identity provider adapter over Streamlit's built-in OIDC login."""

from __future__ import annotations

import streamlit as st

from tracker.models import AuthUser

AUTH_STATE_KEY = "auth.last_uid"


def get_secret(path, default=None):
    current = st.secrets
    for key in path:
        try:
            if key not in current:
                return default
            current = current[key]
        except (FileNotFoundError, KeyError, TypeError):
            return default
    return current


def auth_configured():
    return bool(
        get_secret(("auth", "redirect_uri"))
        and get_secret(("auth", "cookie_secret"))
        and get_secret(("auth", "google", "client_id"))
        and get_secret(("auth", "google", "client_secret"))
    )


def current_user():
    if not auth_configured() or not st.user.is_logged_in:
        return None
    email = str(getattr(st.user, "email", "") or "").strip().lower()
    uid = str(getattr(st.user, "sub", "") or email)
    return AuthUser(
        uid=uid,
        email=email,
        display_name=str(getattr(st.user, "name", "") or ""),
        photo_url=str(getattr(st.user, "picture", "") or ""),
    )


def consume_auth_change(user):
    """True once per change of signed-in identity within this browser session."""
    uid = user.uid if user else ""
    if st.session_state.get(AUTH_STATE_KEY) == uid:
        return False
    st.session_state[AUTH_STATE_KEY] = uid
    return True


def render_auth_controls(user):
    if not auth_configured():
        st.caption("Sign-in is not configured; running as a viewer.")
        return
    if user is None:
        if st.button("Sign in with Google", key="auth.login"):
            st.login("google")
        return
    st.caption(f"Logged as: {user.email or user.display_name}")
    if st.button("Logout", key="auth.logout"):
        st.logout()
