from __future__ import annotations

from typing import Any, Mapping, Protocol

import structlog

logger = structlog.get_logger(__name__)


class NotificationSink(Protocol):
    """Delivery side owned by the messaging provider; fire-and-forget."""

    def send(self, recipient_id: int, *, title: str, body: str, data: Mapping[str, Any]) -> None:
        raise NotImplementedError


class LoggingNotificationSink:
    """Default sink: records the notification in the application log."""

    def send(self, recipient_id: int, *, title: str, body: str, data: Mapping[str, Any]) -> None:
        logger.info("notification.sent", recipient_id=recipient_id, title=title, body=body, data=dict(data))
