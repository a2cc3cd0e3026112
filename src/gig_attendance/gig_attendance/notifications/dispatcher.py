from __future__ import annotations

from typing import Any, Mapping, Optional

import structlog

from .sink import NotificationSink
from .templates import get_template

logger = structlog.get_logger(__name__)


class NotificationDispatcher:
    """Renders templates and hands them to the sink.

    Delivery failures are logged and never propagate to the caller.
    """

    def __init__(self, sink: NotificationSink):
        self._sink = sink

    def notify(
        self,
        recipient_id: int,
        template_key: str,
        args: tuple,
        data: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        template = get_template(template_key)
        title, body = template.render(*args)
        payload = {"type": template.kind, **(data or {})}
        try:
            self._sink.send(recipient_id, title=title, body=body, data=payload)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "notification.failed",
                recipient_id=recipient_id,
                template=template_key,
                error=str(exc),
            )
            return False
        return True
