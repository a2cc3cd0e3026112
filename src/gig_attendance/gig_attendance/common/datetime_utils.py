from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal


def now_utc() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (MySQL DATETIME columns are stored in UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_naive_utc(value: datetime) -> datetime:
    return ensure_utc(value).replace(tzinfo=None)


def coerce_datetime(value) -> datetime | None:
    """Best-effort conversion of date/datetime/ISO strings; None when unparseable."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return ensure_utc(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def start_of_day_utc(value: datetime) -> datetime:
    return ensure_utc(value).replace(hour=0, minute=0, second=0, microsecond=0)


def day_range_utc(day: date) -> tuple[datetime, datetime]:
    """Inclusive UTC bounds of a calendar day."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1) - timedelta(microseconds=1)


def round2(value) -> float:
    """Round half-up to two decimals (money and hour totals)."""
    return float(Decimal(str(float(value or 0))).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_hhmm(value: datetime | None) -> str | None:
    if value is None:
        return None
    return ensure_utc(value).strftime("%H:%M")


def format_iso_date(value: datetime | None) -> str | None:
    if value is None:
        return None
    return ensure_utc(value).date().isoformat()
