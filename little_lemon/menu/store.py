from __future__ import annotations

import sqlite3
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import anyio.to_thread
import structlog

from little_lemon.core.config import settings
from little_lemon.core.errors import StorageFailure
from little_lemon.db.sqlite import connect
from little_lemon.menu.filters import build_filter_clause
from little_lemon.menu.models import MenuItem

logger = structlog.get_logger(__name__)

T = TypeVar("T")

COLUMNS = ("title", "id", "description", "price", "image", "category")


class MenuStore:
    table = "menuitems"

    def __init__(self, db_path: str | None = None) -> None:
        self.db_path = db_path or settings.db_path
        self._tables_ensured = False

    async def ensure_schema(self) -> None:
        await self._run("ensure_schema", self._ensure_schema_sync)

    async def load_all(self) -> list[MenuItem]:
        return await self._run("load_all", self._select_sync, "", [])

    async def bulk_insert(self, items: Sequence[MenuItem]) -> None:
        await self._run("bulk_insert", self._bulk_insert_sync, list(items))

    async def query(self, text: str, active_categories: Sequence[str]) -> list[MenuItem]:
        clause, params = build_filter_clause(text, active_categories)
        logger.debug(
            "menu_query",
            text=text,
            categories=list(active_categories),
            clause=clause,
        )
        return await self._run("query", self._select_sync, clause, params)

    async def drop_all(self) -> None:
        await self._run("drop_all", self._drop_sync)

    async def _run(self, operation: str, func: Callable[..., T], *args: Any) -> T:
        try:
            return await anyio.to_thread.run_sync(func, *args)
        except sqlite3.Error as exc:
            logger.warning("menu_store_failed", operation=operation, error=str(exc))
            raise StorageFailure(operation, str(exc)) from exc

    def _ensure_schema_sync(self) -> None:
        with connect(self.db_path) as conn:
            self._create_table(conn)
        self._tables_ensured = True

    def _create_table(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self.table} (
                title TEXT PRIMARY KEY NOT NULL,
                id INTEGER,
                description TEXT,
                price TEXT,
                image TEXT,
                category TEXT
            )
            """
        )

    def _auto_create(self, conn: sqlite3.Connection) -> None:
        if settings.db_auto_create and not self._tables_ensured:
            self._create_table(conn)
            self._tables_ensured = True

    def _select_sync(self, clause: str, params: list[Any]) -> list[MenuItem]:
        columns = ", ".join(COLUMNS)
        with connect(self.db_path) as conn:
            self._auto_create(conn)
            rows = conn.execute(
                f"SELECT {columns} FROM {self.table}{clause} ORDER BY rowid",
                params,
            ).fetchall()
        return [self._row_to_item(row) for row in rows]

    def _bulk_insert_sync(self, items: list[MenuItem]) -> None:
        if not items:
            return
        columns = ", ".join(COLUMNS)
        placeholders = ", ".join("?" for _ in COLUMNS)
        # One transaction: a primary key clash rolls back the whole batch.
        with connect(self.db_path) as conn:
            self._auto_create(conn)
            conn.executemany(
                f"INSERT INTO {self.table} ({columns}) VALUES ({placeholders})",
                [tuple(getattr(item, column) for column in COLUMNS) for item in items],
            )
        logger.info("menu_cache_populated", count=len(items))

    def _drop_sync(self) -> None:
        with connect(self.db_path) as conn:
            conn.execute(f"DROP TABLE IF EXISTS {self.table}")
        self._tables_ensured = False
        logger.info("menu_cache_dropped")

    @staticmethod
    def _row_to_item(row: sqlite3.Row) -> MenuItem:
        return MenuItem(
            title=row["title"],
            id=row["id"],
            description=row["description"] or "",
            price=row["price"] or "",
            image=row["image"] or "",
            category=row["category"] or "",
        )
