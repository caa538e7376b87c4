from __future__ import annotations

import anyio.to_thread
import requests
import structlog
from pydantic import ValidationError

from little_lemon.core.alerts import AlertSink
from little_lemon.core.config import settings
from little_lemon.core.errors import NetworkFailure
from little_lemon.menu.models import MenuEnvelope, MenuItem

logger = structlog.get_logger(__name__)

SERVICE = "menu_api"


def fetch_menu(url: str | None = None, timeout: float | None = None) -> list[MenuItem]:
    """
    Fetch the remote menu and map it to menu items.

    Raises:
        NetworkFailure: On transport errors, non-2xx responses or a body
            that is not a valid `{"menu": [...]}` envelope.
    """
    url = url or settings.menu_url
    timeout = timeout if timeout is not None else settings.menu_fetch_timeout

    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as exc:
        raise NetworkFailure(SERVICE, str(exc)) from exc

    if not 200 <= response.status_code < 300:
        raise NetworkFailure(
            SERVICE,
            f"Menu API error {response.status_code}: {response.text}",
            status_code=response.status_code,
        )

    try:
        payload = response.json()
    except ValueError as exc:
        raise NetworkFailure(
            SERVICE, f"Malformed menu body: {exc}", status_code=response.status_code
        ) from exc

    try:
        envelope = MenuEnvelope.model_validate(payload)
        items = [item.to_menu_item() for item in envelope.menu]
    except ValidationError as exc:
        raise NetworkFailure(
            SERVICE, f"Malformed menu body: {exc}", status_code=response.status_code
        ) from exc

    logger.info("menu_fetched", url=url, count=len(items))
    return items


async def load_remote_menu(alerts: AlertSink, url: str | None = None) -> list[MenuItem]:
    url = url or settings.menu_url
    try:
        return await anyio.to_thread.run_sync(fetch_menu, url)
    except NetworkFailure as exc:
        logger.warning(
            "menu_fetch_failed",
            url=url,
            status_code=exc.status_code,
            error=str(exc),
        )
        alerts.alert(f"Failed to retrieve menu items from {url}: {exc}")
        return []
