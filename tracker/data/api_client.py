from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

_SETTINGS_GETTER = None
_USER_GETTER = None


class ApiError(RuntimeError):
    def __init__(self, status_code, reason, detail):
        super().__init__(f"API error {status_code} {reason}: {detail}")
        self.status_code = status_code
        self.detail = detail


def _build_session():
    session = requests.Session()
    retry = Retry(
        total=2,
        backoff_factor=0.5,
        status_forcelist=(502, 503, 504),
        allowed_methods=("GET", "PUT"),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=4, pool_maxsize=4)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


_SESSION = _build_session()


def configure(settings_getter, user_getter):
    """``settings_getter`` returns a ``TrackerSettings``; ``user_getter`` the email to send."""
    global _SETTINGS_GETTER, _USER_GETTER
    _SETTINGS_GETTER = settings_getter
    _USER_GETTER = user_getter


def api_base_url():
    if _SETTINGS_GETTER is None:
        return ""
    return _SETTINGS_GETTER().api_base_url or ""


def backend_token():
    if _SETTINGS_GETTER is None:
        return ""
    return _SETTINGS_GETTER().backend_session_secret or ""


def is_enabled():
    return bool(api_base_url() and backend_token())


def request(
    method: str,
    path: str,
    params: dict | None = None,
    json: dict | None = None,
    timeout: int = 10,
    user_email: str | None = None,
) -> Any:
    base = api_base_url().rstrip("/")
    if not base:
        raise RuntimeError("API_BASE_URL not configured")
    token = backend_token()
    if not token:
        raise RuntimeError("BACKEND_SESSION_SECRET not configured")
    if not user_email:
        user_email = _USER_GETTER() if _USER_GETTER else None
    if not user_email:
        raise RuntimeError("Missing user email for API request")
    headers = {
        "X-User-Email": user_email,
        "X-Backend-Token": token,
    }
    url = f"{base}{path}"
    response = _SESSION.request(method, url, params=params, json=json, headers=headers, timeout=timeout)
    if not response.ok:
        try:
            detail = response.json()
        except ValueError:
            detail = response.text
        raise ApiError(response.status_code, response.reason, detail)
    if response.status_code == 204:
        return None
    return response.json()
