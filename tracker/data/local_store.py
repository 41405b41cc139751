"""Local key-value store: the desktop counterpart of browser local storage.

Values are JSON text keyed by short names (see ``tracker.constants``). Every
failure is logged and swallowed here so callers only ever see "no value".

One SQLite file serves every session of the app, so each identity reads and
writes through its own ``namespace``; keys are stored as ``<namespace>:<key>``.
"""

from __future__ import annotations

import logging
import os

from sqlalchemy import create_engine, text as sql_text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

LOCAL_STORAGE_TABLE = "local_storage"
DEFAULT_DB_PATH = os.path.join(os.path.dirname(__file__), "..", "..", "tracker_local.db")


def default_database_url() -> str:
    return f"sqlite:///{os.path.abspath(DEFAULT_DB_PATH)}"


def build_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            future=True,
        )
    return create_engine(database_url, pool_pre_ping=True, future=True)


class LocalStore:
    def __init__(
        self,
        database_url: str | None = None,
        engine: Engine | None = None,
        namespace: str = "",
    ) -> None:
        self.database_url = database_url or default_database_url()
        self._owns_engine = engine is None
        self.engine = engine or build_engine(self.database_url)
        self.namespace = namespace
        self._ready = False

    def scoped(self, namespace: str) -> "LocalStore":
        """Another view of the same table whose keys never collide with this one's."""
        return LocalStore(self.database_url, engine=self.engine, namespace=namespace)

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}" if self.namespace else key

    def _ensure_table(self) -> bool:
        if self._ready:
            return True
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    sql_text(
                        f"""
                        CREATE TABLE IF NOT EXISTS {LOCAL_STORAGE_TABLE} (
                            key TEXT PRIMARY KEY,
                            value TEXT
                        )
                        """
                    )
                )
        except SQLAlchemyError as exc:
            logger.warning("Local store unavailable: %s", exc)
            return False
        self._ready = True
        return True

    def get(self, key: str) -> str | None:
        if not self._ensure_table():
            return None
        try:
            with self.engine.connect() as conn:
                row = conn.execute(
                    sql_text(f"SELECT value FROM {LOCAL_STORAGE_TABLE} WHERE key = :key"),
                    {"key": self._key(key)},
                ).fetchone()
        except SQLAlchemyError as exc:
            logger.warning("Local store read failed for %s: %s", key, exc)
            return None
        return row[0] if row else None

    def set(self, key: str, value: str) -> bool:
        if not self._ensure_table():
            return False
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    sql_text(
                        f"INSERT INTO {LOCAL_STORAGE_TABLE} (key, value) VALUES (:key, :value) "
                        "ON CONFLICT(key) DO UPDATE SET value=EXCLUDED.value"
                    ),
                    {"key": self._key(key), "value": value},
                )
        except SQLAlchemyError as exc:
            logger.warning("Local store write failed for %s: %s", key, exc)
            return False
        return True

    def remove(self, key: str) -> None:
        if not self._ensure_table():
            return
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    sql_text(f"DELETE FROM {LOCAL_STORAGE_TABLE} WHERE key = :key"),
                    {"key": self._key(key)},
                )
        except SQLAlchemyError as exc:
            logger.warning("Local store delete failed for %s: %s", key, exc)

    def close(self) -> None:
        if self._owns_engine:
            self.engine.dispose()
