"""
Availability Service

Finds free time across several calendars. Busy intervals from every
calendar are merged into one start-ordered sequence and swept with a
cursor that never moves backwards, so overlapping and nested events
never produce spurious gaps.
"""

import asyncio
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from fastmcp.utilities.logging import get_logger
from services.errors import ValidationError
from services.gateways import EventGateway
from services.models import AvailabilityResult, BusyInterval, FreeSlot, SkippedCalendar
from services.time_range import minutes_between, parse_rfc3339, to_rfc3339


def event_boundary(event: Dict[str, Any], key: str) -> Optional[datetime]:
    """Start or end of an event; all-day events only carry a date."""
    boundary = event.get(key) or {}
    raw = boundary.get("dateTime") or boundary.get("date")
    return parse_rfc3339(raw) if raw else None


def merge_busy_intervals(events_by_calendar: Iterable[tuple]) -> List[BusyInterval]:
    """
    Flatten (calendar_id, events) pairs into busy intervals sorted by start.

    The sort is stable, so ties keep calendar order and then fetch order.
    Events without usable start/end times are ignored.
    """
    intervals = []
    for calendar_id, events in events_by_calendar:
        for event in events:
            try:
                start = event_boundary(event, "start")
                end = event_boundary(event, "end")
            except ValidationError:
                continue
            if start is None or end is None:
                continue
            intervals.append(BusyInterval(start=start, end=end, calendar_id=calendar_id))
    intervals.sort(key=lambda interval: interval.start)
    return intervals


def sweep_free_slots(
    intervals: Sequence[BusyInterval],
    window_start: datetime,
    window_end: datetime,
    min_duration_minutes: int,
    max_results: int,
) -> List[FreeSlot]:
    """
    Emit free gaps between start-ordered busy intervals.

    Gaps must have positive length and last at least ``min_duration_minutes``
    whole minutes. Stops after ``max_results`` slots.
    """
    slots: List[FreeSlot] = []

    def consider(gap_start: datetime, gap_end: datetime):
        if gap_end <= gap_start:
            return
        duration = minutes_between(gap_start, gap_end)
        if duration >= min_duration_minutes:
            slots.append(FreeSlot(start=to_rfc3339(gap_start), end=to_rfc3339(gap_end), duration=duration))

    cursor = window_start
    for interval in intervals:
        if len(slots) >= max_results or cursor >= window_end:
            break
        if interval.start > cursor:
            consider(cursor, min(interval.start, window_end))
        cursor = max(cursor, interval.end)

    if len(slots) < max_results and cursor < window_end:
        consider(cursor, window_end)

    return slots[:max_results]


class AvailabilityService:
    """
    Service for free time searches over Google Calendar.

    Calendars are fetched concurrently; one unreachable calendar is
    reported as skipped and does not block the search.
    """

    def __init__(self, event_gateway: EventGateway):
        self.logger = get_logger("AvailabilityService")
        self.event_gateway = event_gateway

    async def _fetch_calendar(
        self, calendar_id: str, time_min: str, time_max: str, time_zone: Optional[str]
    ) -> List[Dict[str, Any]]:
        events: List[Dict[str, Any]] = []
        page_token = None
        while True:
            response = await self.event_gateway.list_events(
                calendar_id=calendar_id,
                time_min=time_min,
                time_max=time_max,
                single_events=True,
                time_zone=time_zone,
                page_token=page_token,
            )
            events.extend(response.get("items") or [])
            page_token = response.get("nextPageToken")
            if not page_token:
                return events

    async def find_free_time_slots(
        self,
        window_start: str,
        window_end: str,
        min_duration_minutes: int = 30,
        max_results: int = 5,
        calendar_ids: Optional[Sequence[str]] = None,
        time_zone: Optional[str] = None,
    ) -> AvailabilityResult:
        """
        Find free slots inside [window_start, window_end).

        Args:
            window_start: Window start (RFC 3339)
            window_end: Window end (RFC 3339)
            min_duration_minutes: Shortest slot worth returning
            max_results: Maximum number of slots
            calendar_ids: Calendars whose events count as busy (primary by default)
            time_zone: Time zone passed to the calendar API

        Returns:
            AvailabilityResult with chronological slots and skipped calendars

        Raises:
            ValidationError: On an empty/inverted window or bad limits
        """
        start = parse_rfc3339(window_start)
        end = parse_rfc3339(window_end)
        if end <= start:
            raise ValidationError("Window end must be after window start")
        if min_duration_minutes < 0:
            raise ValidationError("Minimum duration cannot be negative")
        if max_results < 1:
            raise ValidationError("max_results must be at least 1")

        calendar_ids = list(calendar_ids) if calendar_ids is not None else ["primary"]
        if not calendar_ids:
            raise ValidationError("At least one calendar id is required")

        time_min, time_max = to_rfc3339(start), to_rfc3339(end)
        fetched = await asyncio.gather(
            *(self._fetch_calendar(cid, time_min, time_max, time_zone) for cid in calendar_ids),
            return_exceptions=True,
        )

        events_by_calendar = []
        skipped = []
        for calendar_id, outcome in zip(calendar_ids, fetched):
            if isinstance(outcome, Exception):
                self.logger.warning(f"Skipping calendar {calendar_id} in free time search: {outcome}")
                skipped.append(SkippedCalendar(calendar_id=calendar_id, reason=str(outcome)))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                events_by_calendar.append((calendar_id, outcome))

        intervals = merge_busy_intervals(events_by_calendar)
        slots = sweep_free_slots(intervals, start, end, min_duration_minutes, max_results)
        self.logger.info(
            f"Found {len(slots)} free slots across {len(events_by_calendar)} calendars "
            f"({len(intervals)} busy intervals, {len(skipped)} calendars skipped)"
        )
        return AvailabilityResult(slots=slots, skipped_calendars=skipped)
