from __future__ import annotations

from functools import partial

import structlog

from little_lemon.core.alerts import AlertSink
from little_lemon.core.config import Settings, settings as default_settings
from little_lemon.core.errors import StorageFailure
from little_lemon.menu.controller import MenuController, MenuFetcher
from little_lemon.menu.remote import load_remote_menu
from little_lemon.menu.store import MenuStore
from little_lemon.profile.models import ProfileRecord
from little_lemon.profile.store import ProfileStore

logger = structlog.get_logger(__name__)


class AppState:
    """Everything the screens share, with the SQLite file as its only persistence."""

    def __init__(
        self,
        config: Settings | None = None,
        fetcher: MenuFetcher | None = None,
    ) -> None:
        self.settings = config or default_settings
        self.alerts = AlertSink()
        self.menu_store = MenuStore(self.settings.db_path)
        self.profile_store = ProfileStore(self.settings.db_path)
        self.menu = MenuController(
            self.menu_store,
            self.alerts,
            fetcher=fetcher or partial(load_remote_menu, self.alerts, self.settings.menu_url),
            debounce_seconds=self.settings.search_debounce_seconds,
        )

    async def get_profile(self) -> ProfileRecord:
        try:
            return await self.profile_store.get()
        except StorageFailure as exc:
            self.alerts.alert(f"Failed to read profile: {exc}")
            return ProfileRecord()

    async def save_profile(self, profile: ProfileRecord) -> bool:
        try:
            await self.profile_store.save(profile)
        except StorageFailure as exc:
            self.alerts.alert(f"Failed to save profile: {exc}")
            return False
        return True

    async def logout(self) -> None:
        """Forget the profile and the cached menu so the next mount refetches."""
        self.menu.reset()
        try:
            await self.profile_store.clear()
            await self.menu_store.drop_all()
        except StorageFailure as exc:
            self.alerts.alert(f"Failed to log out cleanly: {exc}")
            return
        logger.info("logged_out")

    async def aclose(self) -> None:
        self.menu.reset()
        await self.menu.wait_idle()
