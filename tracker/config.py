from __future__ import annotations

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tracker.data.local_store import default_database_url


class TrackerSettings(BaseSettings):
    api_base_url: str = Field("", alias="API_BASE_URL")
    backend_session_secret: str = Field("", alias="BACKEND_SESSION_SECRET")

    admin_uid: str = Field("", alias="ADMIN_UID")
    admin_emails_raw: str = Field("", alias="ADMIN_EMAILS")

    live_doc_id: str = Field("live", alias="LIVE_DOC_ID")
    local_database_url: str = Field(default_factory=default_database_url, alias="TRACKER_LOCAL_DATABASE_URL")

    publish_debounce_ms: int = Field(600, alias="PUBLISH_DEBOUNCE_MS")
    live_poll_seconds: float = Field(2.0, alias="LIVE_POLL_SECONDS")

    log_level: str = Field("INFO", alias="TRACKER_LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def admin_emails(self) -> List[str]:
        return [email.strip().lower() for email in self.admin_emails_raw.split(",") if email.strip()]

    @property
    def live_enabled(self) -> bool:
        return bool(self.api_base_url and self.backend_session_secret)

    @property
    def debounce_seconds(self) -> float:
        return max(0, self.publish_debounce_ms) / 1000.0


_settings: TrackerSettings | None = None


def get_settings() -> TrackerSettings:
    global _settings
    if _settings is None:
        _settings = TrackerSettings()
    return _settings
