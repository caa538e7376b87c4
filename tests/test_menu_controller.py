from __future__ import annotations

import asyncio
from collections.abc import Sequence

import pytest

from little_lemon.core.alerts import AlertSink
from little_lemon.core.errors import StorageFailure
from little_lemon.menu.controller import MenuController
from little_lemon.menu.models import MenuItem
from little_lemon.menu.store import MenuStore

pytestmark = pytest.mark.anyio

DEBOUNCE = 0.05


class RecordingStore(MenuStore):
    def __init__(self, db_path: str) -> None:
        super().__init__(db_path)
        self.queries: list[tuple[str, list[str]]] = []
        self.fail_queries = False

    async def query(self, text: str, active_categories: Sequence[str]) -> list[MenuItem]:
        self.queries.append((text, list(active_categories)))
        if self.fail_queries:
            raise StorageFailure("query", "database is locked")
        return await super().query(text, active_categories)


class BrokenLoadStore(MenuStore):
    async def load_all(self) -> list[MenuItem]:
        raise StorageFailure("load_all", "disk I/O error")


def _titles(items: list[MenuItem]) -> list[str]:
    return [item.title for item in items]


@pytest.fixture
def store(db_path: str) -> RecordingStore:
    return RecordingStore(db_path)


@pytest.fixture
def alerts() -> AlertSink:
    return AlertSink()


@pytest.fixture
def controller(store: RecordingStore, alerts: AlertSink, remote_menu) -> MenuController:
    return MenuController(store, alerts, fetcher=remote_menu, debounce_seconds=DEBOUNCE)


async def test_load_initial_populates_empty_cache_from_remote(
    controller: MenuController, store: RecordingStore, remote_menu, sample_items
) -> None:
    items = await controller.load_initial()

    assert items == sample_items
    assert remote_menu.calls == 1
    assert await store.load_all() == sample_items
    assert controller.categories == ["main", "sides"]
    assert controller.selections == [False, False]
    assert controller.mounted


async def test_load_initial_uses_cache_without_fetching(
    store: RecordingStore, alerts: AlertSink, remote_menu, sample_items
) -> None:
    await store.ensure_schema()
    await store.bulk_insert(sample_items[:3])
    controller = MenuController(store, alerts, fetcher=remote_menu, debounce_seconds=DEBOUNCE)

    items = await controller.load_initial()

    assert _titles(items) == ["pizza", "pasta", "fries"]
    assert remote_menu.calls == 0


async def test_mount_does_not_run_filtered_query(
    controller: MenuController, store: RecordingStore
) -> None:
    await controller.load_initial()
    await asyncio.sleep(DEBOUNCE * 3)

    assert store.queries == []


async def test_search_before_mount_does_not_query(
    controller: MenuController, store: RecordingStore
) -> None:
    controller.search("pi")
    await asyncio.sleep(DEBOUNCE * 3)

    assert store.queries == []
    assert controller.items == []


async def test_rapid_search_issues_one_query_with_final_text(
    controller: MenuController, store: RecordingStore
) -> None:
    await controller.load_initial()

    for text in ["s", "sa", "sal", "a"]:
        controller.search(text)
    assert controller.query_text == "a"
    await asyncio.sleep(DEBOUNCE * 4)

    assert store.queries == [("a", ["main", "sides"])]
    assert _titles(controller.items) == ["pizza", "pasta", "salad"]


async def test_unchanged_debounced_text_does_not_requery(
    controller: MenuController, store: RecordingStore
) -> None:
    await controller.load_initial()

    controller.search("")
    await controller.flush_search()

    assert store.queries == []


async def test_toggle_category_filters_and_all_deselected_shows_everything(
    controller: MenuController, store: RecordingStore
) -> None:
    await controller.load_initial()

    items = await controller.toggle_category(0)
    assert _titles(items) == ["pizza", "pasta"]
    assert controller.selections == [True, False]

    items = await controller.toggle_category(0)
    assert _titles(items) == ["pizza", "pasta", "fries", "salad"]
    assert store.queries == [("", ["main"]), ("", ["main", "sides"])]


async def test_search_and_category_combine(
    controller: MenuController, store: RecordingStore
) -> None:
    await controller.load_initial()

    await controller.toggle_category(0)
    controller.search("a")
    items = await controller.flush_search()

    assert _titles(items) == ["pizza", "pasta"]
    assert store.queries[-1] == ("a", ["main"])
    assert len(store.queries) == 2


async def test_toggle_out_of_range_raises(controller: MenuController) -> None:
    await controller.load_initial()

    with pytest.raises(IndexError):
        await controller.toggle_category(2)


async def test_query_failure_alerts_and_keeps_previous_items(
    controller: MenuController, store: RecordingStore, alerts: AlertSink, sample_items
) -> None:
    await controller.load_initial()
    store.fail_queries = True

    items = await controller.toggle_category(1)

    assert items == sample_items
    assert alerts.drain() == ["Failed to select menu items: database is locked"]


async def test_load_failure_alerts_and_still_mounts(
    db_path: str, alerts: AlertSink, remote_menu
) -> None:
    controller = MenuController(
        BrokenLoadStore(db_path), alerts, fetcher=remote_menu, debounce_seconds=DEBOUNCE
    )

    items = await controller.load_initial()

    assert items == []
    assert controller.mounted
    assert alerts.drain() == ["Failed to retrieve menu items: disk I/O error"]
    assert remote_menu.calls == 0


async def test_empty_remote_menu_leaves_cache_empty(
    store: RecordingStore, alerts: AlertSink
) -> None:
    async def empty_fetcher() -> list[MenuItem]:
        return []

    controller = MenuController(store, alerts, fetcher=empty_fetcher, debounce_seconds=DEBOUNCE)

    assert await controller.load_initial() == []
    assert controller.categories == []
    assert controller.selections == []
    assert await store.load_all() == []


async def test_reset_clears_state_and_cancels_pending_search(
    controller: MenuController, store: RecordingStore
) -> None:
    await controller.load_initial()
    controller.search("pi")

    controller.reset()
    await asyncio.sleep(DEBOUNCE * 3)

    assert store.queries == []
    assert controller.items == []
    assert controller.categories == []
    assert controller.query_text == ""
    assert not controller.mounted
    assert not controller.search_pending


async def test_concurrent_mounts_fetch_and_populate_once(
    store: RecordingStore, alerts: AlertSink, sample_items
) -> None:
    calls = 0

    async def slow_fetcher() -> list[MenuItem]:
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.05)
        return [item.model_copy() for item in sample_items]

    controller = MenuController(store, alerts, fetcher=slow_fetcher, debounce_seconds=DEBOUNCE)

    first, second = await asyncio.gather(controller.load_initial(), controller.load_initial())

    assert calls == 1
    assert first == second == sample_items
    assert alerts.drain() == []
    assert await store.load_all() == sample_items
    assert store.queries == []
