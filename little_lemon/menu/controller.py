from __future__ import annotations

from collections.abc import Awaitable, Callable
from functools import partial

import anyio
import structlog

from little_lemon.core.alerts import AlertSink
from little_lemon.core.config import settings
from little_lemon.core.errors import StorageFailure
from little_lemon.menu.debounce import Debouncer
from little_lemon.menu.filters import active_categories, derive_categories
from little_lemon.menu.models import MenuItem
from little_lemon.menu.remote import load_remote_menu
from little_lemon.menu.store import MenuStore

logger = structlog.get_logger(__name__)

MenuFetcher = Callable[[], Awaitable[list[MenuItem]]]


class MenuController:
    """
    Search and category filter state for the menu list.

    `load_initial` is the mount path: it reads the cache (populating it from
    the remote menu when empty) and never runs the filtered query. After
    mount, every change of the debounced query or of the selection vector
    runs exactly one filtered query against the store.
    """

    def __init__(
        self,
        store: MenuStore,
        alerts: AlertSink,
        fetcher: MenuFetcher | None = None,
        debounce_seconds: float | None = None,
    ) -> None:
        self.store = store
        self.alerts = alerts
        self._fetcher = fetcher or partial(load_remote_menu, alerts)
        wait = settings.search_debounce_seconds if debounce_seconds is None else debounce_seconds
        self._debouncer = Debouncer(self._apply_query, wait)
        self._generation = 0
        self._load_lock = anyio.Lock()
        self._clear()

    def _clear(self) -> None:
        self.items: list[MenuItem] = []
        self.categories: list[str] = []
        self.selections: list[bool] = []
        self.query_text = ""
        self.debounced_query = ""
        self.mounted = False

    async def load_initial(self) -> list[MenuItem]:
        # Concurrent mounts share one load; the cache is populated at most once.
        async with self._load_lock:
            if self.mounted:
                return self.items
            return await self._load()

    async def _load(self) -> list[MenuItem]:
        generation = self._generation
        try:
            await self.store.ensure_schema()
            items = await self.store.load_all()
            logger.info("menu_cache_loaded", count=len(items))
            if not items:
                items = await self._fetcher()
                await self.store.bulk_insert(items)
        except StorageFailure as exc:
            logger.warning("menu_load_failed", operation=exc.operation, error=str(exc))
            self.alerts.alert(f"Failed to retrieve menu items: {exc}")
            return self.items
        finally:
            if generation == self._generation:
                self.mounted = True

        if generation != self._generation:
            return self.items
        self.items = items
        self._set_categories(derive_categories(items))
        logger.info("menu_categories_derived", categories=self.categories)
        return self.items

    def search(self, text: str) -> None:
        self.query_text = text
        self._debouncer.call(text)

    async def flush_search(self) -> list[MenuItem]:
        await self._debouncer.flush()
        return self.items

    async def toggle_category(self, index: int) -> list[MenuItem]:
        if not 0 <= index < len(self.selections):
            raise IndexError(f"No category at index {index}")
        selections = list(self.selections)
        selections[index] = not selections[index]
        self.selections = selections
        return await self._refresh()

    def active_categories(self) -> list[str]:
        return active_categories(self.categories, self.selections)

    def reset(self) -> None:
        self._debouncer.cancel()
        self._generation += 1
        self._clear()

    async def wait_idle(self) -> None:
        await self._debouncer.wait_idle()

    @property
    def search_pending(self) -> bool:
        return self._debouncer.pending

    def _set_categories(self, categories: list[str]) -> None:
        self.categories = categories
        self.selections = [False] * len(categories)

    async def _apply_query(self, text: str) -> None:
        if text == self.debounced_query:
            return
        self.debounced_query = text
        await self._refresh()

    async def _refresh(self) -> list[MenuItem]:
        if not self.mounted:
            logger.debug("menu_query_skipped_before_mount")
            return self.items
        generation = self._generation
        categories = self.active_categories()
        try:
            items = await self.store.query(self.debounced_query, categories)
        except StorageFailure as exc:
            logger.warning("menu_query_failed", error=str(exc))
            self.alerts.alert(f"Failed to select menu items: {exc}")
            return self.items
        if generation == self._generation:
            self.items = items
        return self.items
