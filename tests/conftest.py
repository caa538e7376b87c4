from __future__ import annotations

from pathlib import Path

import pytest

from little_lemon.menu.models import MenuItem
from little_lemon.menu.store import MenuStore


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "little_lemon.sqlite3")


@pytest.fixture
def menu_store(db_path: str) -> MenuStore:
    return MenuStore(db_path)


@pytest.fixture
def sample_items() -> list[MenuItem]:
    return [
        MenuItem(
            id=1,
            title="pizza",
            description="Wood-fired margherita",
            price="12.99",
            image="pizza.jpg",
            category="main",
        ),
        MenuItem(
            id=2,
            title="pasta",
            description="Penne arrabbiata",
            price="10.50",
            image="pasta.jpg",
            category="main",
        ),
        MenuItem(
            id=3,
            title="fries",
            description="Hand-cut with sea salt",
            price="4.00",
            image="https://cdn.example.com/fries.jpg",
            category="sides",
        ),
        MenuItem(
            id=4,
            title="salad",
            description="Greek salad with feta",
            price="7.25",
            image="salad.jpg",
            category="sides",
        ),
    ]


class FakeRemoteMenu:
    """Stands in for the remote fetcher and counts how often it is hit."""

    def __init__(self, items: list[MenuItem]) -> None:
        self.items = items
        self.calls = 0

    async def __call__(self) -> list[MenuItem]:
        self.calls += 1
        return [item.model_copy() for item in self.items]


@pytest.fixture
def remote_menu(sample_items: list[MenuItem]) -> FakeRemoteMenu:
    return FakeRemoteMenu(sample_items)
