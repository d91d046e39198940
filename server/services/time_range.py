"""
Time Range Helpers

RFC 3339 formatting/parsing and the preset-or-explicit time range variant.
A TimeRange is resolved once, at the tool boundary, into a concrete
(start, end) pair before it reaches the calendar services.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Mapping, Optional, Tuple, Union

import pytz

from services.errors import ValidationError


class TimeRangePreset(str, Enum):
    TODAY = "today"
    TOMORROW = "tomorrow"
    THIS_WEEK = "this_week"
    NEXT_WEEK = "next_week"
    THIS_MONTH = "this_month"


@dataclass(frozen=True)
class PresetRange:
    preset: TimeRangePreset


@dataclass(frozen=True)
class ExplicitRange:
    start: str
    end: str


TimeRange = Union[PresetRange, ExplicitRange]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_rfc3339(value: datetime) -> str:
    """Format as UTC with millisecond precision, e.g. 2025-01-02T09:00:00.000Z."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC 3339 timestamp into an aware datetime.

    Date-only values (all-day events) are taken as UTC midnight and
    naive values are assumed to be UTC.

    Raises:
        ValidationError: If the value cannot be parsed
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid timestamp: {value!r}")
    raw = value.strip()
    try:
        if len(raw) == 10:
            parsed = datetime.combine(date.fromisoformat(raw), time.min)
        else:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00").replace("z", "+00:00"))
    except ValueError as e:
        raise ValidationError(f"Invalid timestamp: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, floored."""
    return int((end - start).total_seconds() // 60)


def shift_time(value: str, minutes: int) -> str:
    """Shift an RFC 3339 timestamp by a number of minutes (negative goes back)."""
    return to_rfc3339(parse_rfc3339(value) + timedelta(minutes=minutes))


def get_timezone(name: str):
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError as e:
        raise ValidationError(f"Unknown time zone: {name}") from e


def parse_time_range(payload: Optional[Mapping]) -> TimeRange:
    """
    Build a TimeRange from a tool payload.

    Accepts either {"preset": "<name>"} or {"start": ..., "end": ...}.

    Raises:
        ValidationError: If neither form (or both) is present, or the values are invalid
    """
    if not payload:
        raise ValidationError("Time range is required: give a preset or start and end")

    has_preset = payload.get("preset") is not None
    has_explicit = payload.get("start") is not None or payload.get("end") is not None

    if has_preset and has_explicit:
        raise ValidationError("Time range must be either a preset or start/end, not both")

    if has_preset:
        try:
            return PresetRange(TimeRangePreset(payload["preset"]))
        except ValueError as e:
            allowed = ", ".join(p.value for p in TimeRangePreset)
            raise ValidationError(
                f"Unknown time range preset: {payload['preset']!r} (expected one of: {allowed})"
            ) from e

    start, end = payload.get("start"), payload.get("end")
    if not start or not end:
        raise ValidationError("Explicit time range needs both start and end")
    parse_rfc3339(start)
    parse_rfc3339(end)
    return ExplicitRange(start=start, end=end)


def _local_midnight(tz, day: date) -> datetime:
    return tz.localize(datetime.combine(day, time.min))


def _preset_bounds(preset: TimeRangePreset, today: date) -> Tuple[date, date]:
    """First day of the range and first day after it."""
    if preset is TimeRangePreset.TODAY:
        return today, today + timedelta(days=1)
    if preset is TimeRangePreset.TOMORROW:
        return today + timedelta(days=1), today + timedelta(days=2)
    if preset is TimeRangePreset.THIS_WEEK:
        monday = today - timedelta(days=today.weekday())
        return monday, monday + timedelta(days=7)
    if preset is TimeRangePreset.NEXT_WEEK:
        monday = today + timedelta(days=7 - today.weekday())
        return monday, monday + timedelta(days=7)
    if preset is TimeRangePreset.THIS_MONTH:
        first = today.replace(day=1)
        if first.month == 12:
            return first, first.replace(year=first.year + 1, month=1)
        return first, first.replace(month=first.month + 1)
    raise ValidationError(f"Unknown time range preset: {preset!r}")


def resolve_time_range(
    time_range: TimeRange,
    now: Optional[datetime] = None,
    time_zone: str = "UTC",
) -> Tuple[str, str]:
    """
    Resolve a TimeRange into a concrete (start, end) pair of RFC 3339 strings.

    Presets are computed in ``time_zone``; weeks start on Monday and every
    preset ends one millisecond before the next period begins.
    """
    if isinstance(time_range, ExplicitRange):
        return (
            to_rfc3339(parse_rfc3339(time_range.start)),
            to_rfc3339(parse_rfc3339(time_range.end)),
        )

    tz = get_timezone(time_zone)
    current = now or utc_now()
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    today = current.astimezone(tz).date()

    first_day, next_day = _preset_bounds(time_range.preset, today)
    start = _local_midnight(tz, first_day)
    end = _local_midnight(tz, next_day) - timedelta(milliseconds=1)
    return to_rfc3339(start), to_rfc3339(end)
