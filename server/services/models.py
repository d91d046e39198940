"""
Domain Models

Link records, lookup/page results, bulk results and free time slots.
Every model renders its wire form through ``to_dict()``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

CURRENT_USER = "current_user"


@dataclass(frozen=True)
class Link:
    """Association between one Google Tasks task and one Google Calendar event."""

    id: str
    task_id: str
    event_id: str
    user_id: str
    created_at: str
    updated_at: str
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "id": self.id,
            "taskId": self.task_id,
            "eventId": self.event_id,
            "userId": self.user_id,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.notes is not None:
            payload["notes"] = self.notes
        return payload

    def summary(self) -> Dict[str, str]:
        return {"id": self.id, "taskId": self.task_id, "eventId": self.event_id}


@dataclass(frozen=True)
class LinkRequest:
    task_id: str
    event_id: str
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {"taskId": self.task_id, "eventId": self.event_id}
        if self.notes is not None:
            payload["notes"] = self.notes
        return payload


@dataclass(frozen=True)
class LinkPair:
    task_id: str
    event_id: str

    def to_dict(self) -> Dict[str, str]:
        return {"taskId": self.task_id, "eventId": self.event_id}


@dataclass(frozen=True)
class DeleteAck:
    success: bool
    message: str
    link: Link

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "message": self.message, "link": self.link.summary()}


@dataclass
class LinkPage:
    items: List[Link]
    next_page_token: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"items": [link.to_dict() for link in self.items]}
        if self.next_page_token is not None:
            payload["nextPageToken"] = self.next_page_token
        return payload


# === REVERSE LOOKUP RESULTS ===

@dataclass(frozen=True)
class Fetched:
    """A linked task or event that was fetched successfully."""

    item_id: str
    data: Dict[str, Any]


@dataclass(frozen=True)
class Skipped:
    """A linked task or event that could not be fetched (often a stale link)."""

    item_id: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.item_id, "reason": self.reason}


LookupOutcome = Union[Fetched, Skipped]


@dataclass
class LinkedItemsPage:
    """One page of tasks or events reached through links."""

    outcomes: List[LookupOutcome]
    next_page_token: Optional[str] = None
    time_zone: Optional[str] = None

    @property
    def items(self) -> List[Dict[str, Any]]:
        return [o.data for o in self.outcomes if isinstance(o, Fetched)]

    @property
    def skipped(self) -> List[Skipped]:
        return [o for o in self.outcomes if isinstance(o, Skipped)]

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "items": self.items,
            "skipped": [s.to_dict() for s in self.skipped],
        }
        if self.next_page_token is not None:
            payload["nextPageToken"] = self.next_page_token
        if self.time_zone is not None:
            payload["timeZone"] = self.time_zone
        return payload


# === BULK RESULTS ===

@dataclass(frozen=True)
class BulkFailure:
    input: Dict[str, Any]
    error_type: str
    message: str
    detail: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"type": self.error_type, "message": self.message}
        if self.detail:
            error["detail"] = self.detail
        return {"input": self.input, "error": error}


@dataclass
class BulkResult:
    """Aggregate outcome of a bulk link operation, in input order."""

    total: int
    results: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[BulkFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "results": self.results,
            "errors": [e.to_dict() for e in self.errors],
        }


# === AVAILABILITY ===

@dataclass(frozen=True)
class BusyInterval:
    start: Any
    end: Any
    calendar_id: str


@dataclass(frozen=True)
class FreeSlot:
    start: str
    end: str
    duration: int

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start, "end": self.end, "duration": self.duration}


@dataclass(frozen=True)
class SkippedCalendar:
    calendar_id: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {"calendarId": self.calendar_id, "reason": self.reason}


@dataclass
class AvailabilityResult:
    slots: List[FreeSlot]
    skipped_calendars: List[SkippedCalendar] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "freeTimeSlots": [s.to_dict() for s in self.slots],
            "skippedCalendars": [c.to_dict() for c in self.skipped_calendars],
        }
