from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from sqlalchemy import text as sql_text

from backend.db import get_sessionmaker
from backend.db_init import LIVE_DOCUMENTS_TABLE

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _decode_payload(raw: str | None) -> dict:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except ValueError:
        logger.warning("Stored live document is not valid JSON; treating as empty")
        return {}
    return value if isinstance(value, dict) else {}


async def get_live_document(doc_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT doc_id, payload_json, version, updated_at, updated_by "
                f"FROM {LIVE_DOCUMENTS_TABLE} WHERE doc_id = :doc_id"
            ),
            {"doc_id": doc_id},
        )).mappings().fetchone()
    if not row:
        return None
    return {
        "doc_id": row["doc_id"],
        "version": int(row["version"] or 0),
        "updated_at": row["updated_at"],
        "updated_by": row["updated_by"],
        "data": _decode_payload(row["payload_json"]),
    }


async def upsert_live_document(doc_id: str, fields: dict, user_email: str) -> int:
    """Merge ``fields`` over the stored document at top-level granularity; returns the new version."""
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        async with session.begin():
            row = (await session.execute(
                sql_text(f"SELECT payload_json, version FROM {LIVE_DOCUMENTS_TABLE} WHERE doc_id = :doc_id"),
                {"doc_id": doc_id},
            )).fetchone()
            merged = _decode_payload(row[0]) if row else {}
            merged.update(fields)
            version = (int(row[1] or 0) if row else 0) + 1
            params = {
                "doc_id": doc_id,
                "payload_json": json.dumps(merged, ensure_ascii=False),
                "version": version,
                "updated_at": _now_iso(),
                "updated_by": user_email,
            }
            if row:
                await session.execute(
                    sql_text(
                        f"UPDATE {LIVE_DOCUMENTS_TABLE} SET payload_json = :payload_json, version = :version, "
                        "updated_at = :updated_at, updated_by = :updated_by WHERE doc_id = :doc_id"
                    ),
                    params,
                )
            else:
                await session.execute(
                    sql_text(
                        f"INSERT INTO {LIVE_DOCUMENTS_TABLE} (doc_id, payload_json, version, updated_at, updated_by) "
                        "VALUES (:doc_id, :payload_json, :version, :updated_at, :updated_by)"
                    ),
                    params,
                )
    logger.info("Live document %s updated to version %d by %s", doc_id, version, user_email)
    return version
