from __future__ import annotations

import json
import sqlite3

import anyio.to_thread
import structlog

from little_lemon.core.config import settings
from little_lemon.core.errors import StorageFailure
from little_lemon.db.sqlite import connect
from little_lemon.profile.models import ProfileRecord

logger = structlog.get_logger(__name__)


class ProfileStore:
    """Key-value persistence of the profile record, one row per field."""

    table = "profile"

    def __init__(self, db_path: str | None = None) -> None:
        self.db_path = db_path or settings.db_path

    async def get(self) -> ProfileRecord:
        try:
            values = await anyio.to_thread.run_sync(self._get_sync)
        except sqlite3.Error as exc:
            logger.warning("profile_read_failed", error=str(exc))
            raise StorageFailure("profile_get", str(exc)) from exc
        return ProfileRecord.model_validate(values)

    async def save(self, profile: ProfileRecord) -> None:
        try:
            await anyio.to_thread.run_sync(self._save_sync, profile)
        except sqlite3.Error as exc:
            logger.warning("profile_write_failed", error=str(exc))
            raise StorageFailure("profile_save", str(exc)) from exc

    async def clear(self) -> None:
        try:
            await anyio.to_thread.run_sync(self._clear_sync)
        except sqlite3.Error as exc:
            logger.warning("profile_clear_failed", error=str(exc))
            raise StorageFailure("profile_clear", str(exc)) from exc

    def _ensure_table(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self.table} (
                key TEXT PRIMARY KEY NOT NULL,
                value TEXT
            )
            """
        )

    def _get_sync(self) -> dict[str, object]:
        with connect(self.db_path) as conn:
            self._ensure_table(conn)
            rows = conn.execute(f"SELECT key, value FROM {self.table}").fetchall()
        known = ProfileRecord.model_fields
        return {
            row["key"]: json.loads(row["value"])
            for row in rows
            if row["key"] in known and row["value"] is not None
        }

    def _save_sync(self, profile: ProfileRecord) -> None:
        with connect(self.db_path) as conn:
            self._ensure_table(conn)
            conn.executemany(
                f"""
                INSERT INTO {self.table} (key, value) VALUES (?, ?)
                ON CONFLICT (key) DO UPDATE SET value = excluded.value
                """,
                [(key, json.dumps(value)) for key, value in profile.model_dump().items()],
            )
        logger.info("profile_saved", onboarding_completed=profile.is_onboarding_completed)

    def _clear_sync(self) -> None:
        with connect(self.db_path) as conn:
            self._ensure_table(conn)
            conn.execute(f"DELETE FROM {self.table}")
