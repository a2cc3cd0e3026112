"""Expansion of schedule rules into concrete shift occurrences.

Everything here is pure: the current instant is always passed in, so the same
rule and `now` produce the same occurrences.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from ..common.datetime_utils import coerce_datetime, ensure_utc, start_of_day_utc
from ..core.constants import (
    DEFAULT_CUSTOM_WINDOW_DAYS,
    DEFAULT_MONTHLY_WINDOW_MONTHS,
    DEFAULT_SHIFT_DURATION,
    DEFAULT_WEEKLY_WINDOW_DAYS,
    MAX_GENERATED_OCCURRENCES,
    MAX_SHIFT_DURATION,
    MIN_SHIFT_DURATION,
)
from ..core.enums import Recurrence
from ..directory.model import ScheduleRule

# Day indices follow the client convention: 0 = Sunday ... 6 = Saturday.
DAY_NAME_TO_INDEX = {
    "sunday": 0,
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
}

DAY_GROUPS = {
    "weekday": (1, 2, 3, 4, 5),
    "weekdays": (1, 2, 3, 4, 5),
    "weekend": (0, 6),
    "weekends": (0, 6),
    "daily": (0, 1, 2, 3, 4, 5, 6),
    "everyday": (0, 1, 2, 3, 4, 5, 6),
    "all": (0, 1, 2, 3, 4, 5, 6),
}

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


@dataclass(frozen=True)
class Occurrence:
    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


def day_index(value: datetime | date) -> int:
    """Sunday-based weekday index."""
    return (value.weekday() + 1) % 7


def parse_time_of_day(value) -> Optional[time]:
    if not isinstance(value, str):
        return None
    match = _TIME_RE.match(value.strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return time(hours, minutes)


def clamp_duration(duration: Optional[timedelta]) -> timedelta:
    if duration is None or duration <= timedelta(0):
        return DEFAULT_SHIFT_DURATION
    return max(min(duration, MAX_SHIFT_DURATION), MIN_SHIFT_DURATION)


def shift_duration(start_time: Optional[time], end_time: Optional[time]) -> timedelta:
    """Per-occurrence duration from time-of-day parts; wraps past midnight."""

    if start_time is None or end_time is None:
        return DEFAULT_SHIFT_DURATION

    diff_minutes = (end_time.hour * 60 + end_time.minute) - (start_time.hour * 60 + start_time.minute)
    if diff_minutes <= 0:
        diff_minutes += 24 * 60
    return clamp_duration(timedelta(minutes=diff_minutes))


def resolve_work_days(work_days: Iterable, fallback_index: Optional[int]) -> set[int]:
    """Target weekday set from indices, names, unambiguous prefixes and named groups."""

    days: set[int] = set()
    for value in work_days or ():
        if isinstance(value, bool):
            continue
        if isinstance(value, int):
            if 0 <= value <= 6:
                days.add(value)
            continue
        if value is None:
            continue

        normalized = str(value).strip().lower()
        if not normalized:
            continue
        if normalized.isdigit() and 0 <= int(normalized) <= 6:
            days.add(int(normalized))
        elif normalized in DAY_GROUPS:
            days.update(DAY_GROUPS[normalized])
        elif normalized in DAY_NAME_TO_INDEX:
            days.add(DAY_NAME_TO_INDEX[normalized])
        else:
            matches = [idx for name, idx in DAY_NAME_TO_INDEX.items() if name.startswith(normalized)]
            if len(matches) == 1:
                days.add(matches[0])

    if not days and fallback_index is not None:
        days.add(fallback_index)
    return days


def extract_custom_dates(rule: ScheduleRule) -> list[datetime]:
    """Custom dates (plus legacy date-valued work days), one per UTC day, ascending."""

    candidates = list(rule.custom_dates or ())
    if rule.recurrence == Recurrence.CUSTOM:
        candidates.extend(rule.work_days or ())

    by_day: dict[date, datetime] = {}
    for value in candidates:
        parsed = coerce_datetime(value)
        if parsed is None:
            continue
        day = start_of_day_utc(parsed)
        by_day[day.date()] = day
    return [by_day[key] for key in sorted(by_day)]


def _at(day: datetime, time_of_day: time) -> datetime:
    return datetime.combine(day.date(), time_of_day, tzinfo=timezone.utc)


def _limit(max_occurrences) -> int:
    try:
        requested = int(max_occurrences or 0)
    except (TypeError, ValueError):
        requested = 0
    if requested <= 0:
        return MAX_GENERATED_OCCURRENCES
    return min(MAX_GENERATED_OCCURRENCES, requested)


def _window_end(rule: ScheduleRule, window_start: datetime) -> datetime:
    if rule.end_date is not None:
        end_day = start_of_day_utc(rule.end_date)
        if end_day >= window_start:
            return end_day
    if rule.recurrence == Recurrence.MONTHLY:
        return window_start + relativedelta(months=DEFAULT_MONTHLY_WINDOW_MONTHS)
    if rule.recurrence == Recurrence.CUSTOM:
        return window_start + timedelta(days=DEFAULT_CUSTOM_WINDOW_DAYS)
    return window_start + timedelta(days=DEFAULT_WEEKLY_WINDOW_DAYS)


def build_occurrences(rule: Optional[ScheduleRule], *, now: datetime, max_occurrences=None) -> list[Occurrence]:
    """Expand `rule` into future occurrences, capped at `max_occurrences` (<= 365).

    Occurrences whose end is not after `now` are dropped.
    """

    if rule is None or rule.start_date is None:
        return []

    now = ensure_utc(now)
    limit = _limit(max_occurrences)
    base_start = ensure_utc(rule.start_date)
    base_end = ensure_utc(rule.end_date) if rule.end_date is not None else None

    start_time = parse_time_of_day(rule.start_time) or base_start.timetz().replace(tzinfo=None)

    end_fallback = None
    if base_end is not None and base_start < base_end <= base_start + MAX_SHIFT_DURATION:
        end_fallback = base_end
    end_time = parse_time_of_day(rule.end_time)
    if end_time is None and end_fallback is not None:
        end_time = end_fallback.timetz().replace(tzinfo=None)

    duration = shift_duration(start_time, end_time)

    if rule.recurrence == Recurrence.ONE_TIME:
        start = _at(base_start, start_time)
        if base_end is not None and start < base_end <= start + MAX_SHIFT_DURATION:
            end = base_end
        else:
            end = start + duration
        return [Occurrence(start, end)] if end > now else []

    occurrences: list[Occurrence] = []

    custom_dates = extract_custom_dates(rule) if rule.recurrence == Recurrence.CUSTOM else []
    if custom_dates:
        for day in custom_dates:
            if len(occurrences) >= limit:
                break
            start = _at(day, start_time)
            end = start + duration
            if end > now:
                occurrences.append(Occurrence(start, end))
        return occurrences

    window_start = max(start_of_day_utc(base_start), start_of_day_utc(now))
    window_end = _window_end(rule, window_start)
    target_days = resolve_work_days(rule.work_days, day_index(base_start))

    cursor = window_start
    while cursor <= window_end and len(occurrences) < limit:
        if day_index(cursor) in target_days:
            start = _at(cursor, start_time)
            end = start + duration
            if end > now:
                occurrences.append(Occurrence(start, end))
        cursor += timedelta(days=1)

    return occurrences
