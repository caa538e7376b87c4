from __future__ import annotations

import asyncio

import structlog

from little_lemon.core.config import settings
from little_lemon.core.logging import configure_logging
from little_lemon.state import AppState

logger = structlog.get_logger(__name__)


async def refresh_menu_cache(drop: bool = True) -> int:
    state = AppState()
    if drop:
        await state.menu_store.drop_all()
    items = await state.menu.load_initial()
    for alert in state.alerts.drain():
        logger.warning("menu_refresh_alert", alert=alert)
    await state.aclose()
    return len(items)


if __name__ == "__main__":
    configure_logging(settings.log_level)
    count = asyncio.run(refresh_menu_cache())
    logger.info("menu_cache_refreshed", count=count)
