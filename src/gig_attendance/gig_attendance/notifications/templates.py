from __future__ import annotations

from dataclasses import dataclass

from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class NotificationTemplate:
    title: str
    body: str
    kind: str

    def render(self, *args) -> tuple[str, str]:
        return self.title.format(*args), self.body.format(*args)


TEMPLATES = {
    "attendance_check_in": NotificationTemplate(
        title="Check-in Confirmed",
        body="{0} checked in at {1}",
        kind="attendance_checkin",
    ),
    "attendance_check_out": NotificationTemplate(
        title="Check-out Confirmed",
        body="{0} checked out at {1}",
        kind="attendance_checkout",
    ),
}


def get_template(key: str) -> NotificationTemplate:
    try:
        return TEMPLATES[key]
    except KeyError:
        raise ValidationError(f"Unknown notification template: {key}") from None
