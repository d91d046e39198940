"""
Link Service

Create, update, delete and look up task/event links against a shared
LinkRegistry. Creation is validated against the Google Tasks and Calendar
gateways; the registry never re-checks referenced entities afterwards, so
links to since-deleted tasks or events stay until removed explicitly.
"""

import dataclasses
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar
from uuid import uuid4

from fastmcp.utilities.logging import get_logger
from services.errors import DuplicateLinkError, NotFoundError, ValidationError
from services.gateways import EventGateway, TaskGateway
from services.link_registry import LinkRegistry
from services.models import (
    CURRENT_USER,
    DeleteAck,
    Fetched,
    Link,
    LinkedItemsPage,
    LinkPage,
    LookupOutcome,
    Skipped,
)
from services.time_range import to_rfc3339, utc_now

T = TypeVar("T")


def new_link_id() -> str:
    return f"link_{uuid4().hex}"


def now_rfc3339() -> str:
    return to_rfc3339(utc_now())


def paginate(
    items: Sequence[T],
    page_size: Optional[int] = None,
    page_token: Optional[str] = None,
) -> Tuple[List[T], Optional[str]]:
    """
    Slice one page out of an ordered sequence using an offset cursor.

    Args:
        items: Full, order-preserving result set
        page_size: Items per page; everything from the offset when None
        page_token: Zero-based offset as a decimal string; start when None

    Returns:
        (page, next_page_token) where the token is the offset of the first
        unreturned item, or None at the end of the set

    Raises:
        ValidationError: On a malformed token or a non-positive page size
    """
    offset = 0
    if page_token:
        if not (page_token.isascii() and page_token.isdigit()):
            raise ValidationError(f"Invalid page token: {page_token!r}")
        offset = int(page_token)
    if page_size is not None and page_size < 1:
        raise ValidationError(f"Page size must be at least 1, got {page_size}")

    end = len(items) if page_size is None else offset + page_size
    page = list(items[offset:end])
    next_token = str(end) if end < len(items) else None
    return page, next_token


class LinkService:
    """
    Service for the task/event link lifecycle.

    The registry is injected so callers (and tests) own its lifetime.
    """

    def __init__(
        self,
        registry: LinkRegistry,
        task_gateway: TaskGateway,
        event_gateway: EventGateway,
        clock: Callable[[], str] = now_rfc3339,
        id_factory: Callable[[], str] = new_link_id,
    ):
        """
        Initialize Link Service.

        Args:
            registry: Registry holding the links
            task_gateway: Google Tasks gateway
            event_gateway: Google Calendar gateway
            clock: Returns the current time as an RFC 3339 string
            id_factory: Returns a fresh link id
        """
        self.logger = get_logger("LinkService")
        self.registry = registry
        self.task_gateway = task_gateway
        self.event_gateway = event_gateway
        self.clock = clock
        self.id_factory = id_factory

    # === MUTATIONS ===

    async def create(self, task_id: str, event_id: str, notes: Optional[str] = None) -> Link:
        """
        Link a task to an event after confirming both exist.

        Raises:
            NotFoundError: If the task or the event does not exist
            GatewayError: If either lookup fails otherwise
            DuplicateLinkError: If the pair is already linked
        """
        await self.task_gateway.get_task(task_id)
        await self.event_gateway.get_event(event_id)

        if self.registry.find_pair(task_id, event_id) is not None:
            raise DuplicateLinkError(
                f"Task {task_id} and event {event_id} are already linked",
                detail={"taskId": task_id, "eventId": event_id},
            )

        now = self.clock()
        link = Link(
            id=self.id_factory(),
            task_id=task_id,
            event_id=event_id,
            user_id=CURRENT_USER,
            created_at=now,
            updated_at=now,
            notes=notes,
        )
        self.registry.insert(link)
        self.logger.info(f"Linked task {task_id} to event {event_id} as {link.id}")
        return link

    async def update(self, link_id: str, notes: Optional[str] = None) -> Link:
        """
        Refresh a link, replacing its notes when given.

        Raises:
            NotFoundError: If no link has that id
        """
        existing = self.get(link_id)

        changes = {"updated_at": max(self.clock(), existing.created_at)}
        if notes is not None:
            changes["notes"] = notes
        updated = self.registry.replace(dataclasses.replace(existing, **changes))
        self.logger.info(f"Updated link {link_id}")
        return updated

    async def delete_by_id(self, link_id: str) -> DeleteAck:
        removed = self.registry.remove_by_id(link_id)
        if removed is None:
            raise NotFoundError(f"Link {link_id} not found", detail={"linkId": link_id})
        self.logger.info(f"Deleted link {link_id}")
        return DeleteAck(success=True, message="Link deleted.", link=removed)

    async def delete_by_pair(self, task_id: str, event_id: str) -> DeleteAck:
        removed = self.registry.remove_by_pair(task_id, event_id)
        if removed is None:
            raise NotFoundError(
                f"No link between task {task_id} and event {event_id}",
                detail={"taskId": task_id, "eventId": event_id},
            )
        self.logger.info(f"Unlinked task {task_id} from event {event_id}")
        return DeleteAck(success=True, message="Task and event unlinked.", link=removed)

    # === QUERIES ===

    def get(self, link_id: str) -> Link:
        """
        Get one link by id.

        Raises:
            NotFoundError: If no link has that id
        """
        link = self.registry.get(link_id)
        if link is None:
            raise NotFoundError(f"Link {link_id} not found", detail={"linkId": link_id})
        return link

    def list_links(
        self,
        task_id: Optional[str] = None,
        event_id: Optional[str] = None,
        page_size: Optional[int] = None,
        page_token: Optional[str] = None,
    ) -> LinkPage:
        """List link records, optionally filtered by task and/or event."""
        matches = list(self.registry.find(
            lambda link: (task_id is None or link.task_id == task_id)
            and (event_id is None or link.event_id == event_id)
        ))
        page, next_token = paginate(matches, page_size, page_token)
        return LinkPage(items=page, next_page_token=next_token)

    async def list_for_task(
        self,
        task_id: str,
        page_size: Optional[int] = None,
        page_token: Optional[str] = None,
        time_zone: Optional[str] = None,
    ) -> LinkedItemsPage:
        """
        Fetch the events linked to a task.

        Events that cannot be fetched are reported as skipped instead of
        failing the call.

        Raises:
            NotFoundError: If the task itself does not exist
        """
        await self.task_gateway.get_task(task_id)

        event_ids = [link.event_id for link in self.registry.find(lambda link: link.task_id == task_id)]
        page, next_token = paginate(event_ids, page_size, page_token)

        outcomes = []
        for event_id in page:
            outcomes.append(await self._fetch(
                event_id,
                lambda: self.event_gateway.get_event(event_id, time_zone=time_zone),
                kind="event",
            ))
        return LinkedItemsPage(outcomes=outcomes, next_page_token=next_token, time_zone=time_zone or "UTC")

    async def list_for_event(
        self,
        event_id: str,
        page_size: Optional[int] = None,
        page_token: Optional[str] = None,
    ) -> LinkedItemsPage:
        """
        Fetch the tasks linked to an event.

        Raises:
            NotFoundError: If the event itself does not exist
        """
        await self.event_gateway.get_event(event_id)

        task_ids = [link.task_id for link in self.registry.find(lambda link: link.event_id == event_id)]
        page, next_token = paginate(task_ids, page_size, page_token)

        outcomes = []
        for task_id in page:
            outcomes.append(await self._fetch(
                task_id,
                lambda: self.task_gateway.get_task(task_id),
                kind="task",
            ))
        return LinkedItemsPage(outcomes=outcomes, next_page_token=next_token)

    async def _fetch(self, item_id: str, fetch, *, kind: str) -> LookupOutcome:
        try:
            return Fetched(item_id=item_id, data=await fetch())
        except Exception as e:
            self.logger.warning(f"Skipping linked {kind} {item_id}: {e}")
            return Skipped(item_id=item_id, reason=str(e))
