"""
Link Registry

In-memory, insertion-ordered set of task/event links. The registry lives for
the lifetime of the process only; a restart loses every link.

All mutations (insert, replace, remove_by_id, remove_by_pair) and snapshot
reads happen under one lock, so a registry can be shared between threads.
"""

import threading
from typing import Callable, Iterator, List, Optional, Tuple

from fastmcp.utilities.logging import get_logger
from services.errors import DuplicateLinkError, NotFoundError
from services.models import Link


class LinkRegistry:
    """
    Ordered set of Link records.

    Records are never mutated in place: updates swap in a new record
    at the same position. Ids of removed links stay reserved for the life
    of the registry (one string per link ever created), so a caller holding
    an old id can never reach a different link through it.
    """

    def __init__(self):
        self.logger = get_logger("LinkRegistry")
        self._lock = threading.RLock()
        self._links: List[Link] = []
        # every id ever inserted, removed ones included; an id is never reissued
        self._issued_ids = set()

    def __len__(self) -> int:
        with self._lock:
            return len(self._links)

    def snapshot(self) -> Tuple[Link, ...]:
        with self._lock:
            return tuple(self._links)

    def find(self, predicate: Callable[[Link], bool]) -> Iterator[Link]:
        """Lazily yield matching links, in insertion order, from a snapshot."""
        return (link for link in self.snapshot() if predicate(link))

    def get(self, link_id: str) -> Optional[Link]:
        return next(self.find(lambda link: link.id == link_id), None)

    def find_pair(self, task_id: str, event_id: str) -> Optional[Link]:
        return next(
            self.find(lambda link: link.task_id == task_id and link.event_id == event_id),
            None,
        )

    def insert(self, link: Link) -> Link:
        """
        Append a link.

        Callers check for duplicates first; the check is repeated under the
        lock so a racing insert cannot break pair uniqueness.

        Raises:
            DuplicateLinkError: If the pair is already linked or the id was used before
        """
        with self._lock:
            if link.id in self._issued_ids:
                raise DuplicateLinkError(f"Link id {link.id} has already been used")
            if self._index_of_pair(link.task_id, link.event_id) is not None:
                raise DuplicateLinkError(
                    f"Task {link.task_id} and event {link.event_id} are already linked",
                    detail={"taskId": link.task_id, "eventId": link.event_id},
                )
            self._links.append(link)
            self._issued_ids.add(link.id)
        self.logger.debug(f"Inserted link {link.id} ({link.task_id} -> {link.event_id})")
        return link

    def replace(self, link: Link) -> Link:
        """
        Swap in a new record for the link with the same id, keeping its position.

        Raises:
            NotFoundError: If no link has that id
        """
        with self._lock:
            index = self._index_of_id(link.id)
            if index is None:
                raise NotFoundError(f"Link {link.id} not found")
            self._links[index] = link
        return link

    def remove_by_id(self, link_id: str) -> Optional[Link]:
        """Remove the link with this id; returns the removed link or None."""
        with self._lock:
            index = self._index_of_id(link_id)
            if index is None:
                return None
            return self._links.pop(index)

    def remove_by_pair(self, task_id: str, event_id: str) -> Optional[Link]:
        """Remove the link for this pair; returns the removed link or None."""
        with self._lock:
            index = self._index_of_pair(task_id, event_id)
            if index is None:
                return None
            return self._links.pop(index)

    def _index_of_id(self, link_id: str) -> Optional[int]:
        for index, link in enumerate(self._links):
            if link.id == link_id:
                return index
        return None

    def _index_of_pair(self, task_id: str, event_id: str) -> Optional[int]:
        for index, link in enumerate(self._links):
            if link.task_id == task_id and link.event_id == event_id:
                return index
        return None
