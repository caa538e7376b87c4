from __future__ import annotations

from collections import deque

import structlog

logger = structlog.get_logger(__name__)


class AlertSink:
    """Collects user-visible alert messages until the view drains them."""

    def __init__(self, max_pending: int = 50) -> None:
        self._pending: deque[str] = deque(maxlen=max_pending)

    def alert(self, message: str) -> None:
        logger.warning("user_alert", alert=message)
        self._pending.append(message)

    def drain(self) -> list[str]:
        messages = list(self._pending)
        self._pending.clear()
        return messages

    def __len__(self) -> int:
        return len(self._pending)
