"""Shared fixtures: in-memory gateways, a ticking clock and wired services."""

from datetime import datetime, timedelta, timezone

import pytest

from services.availability_service import AvailabilityService
from services.bulk_link_service import BulkLinkService
from services.errors import GatewayError, NotFoundError
from services.link_registry import LinkRegistry
from services.link_service import LinkService
from services.time_range import to_rfc3339


class FakeTaskGateway:
    def __init__(self, task_ids=()):
        self.tasks = {task_id: {"id": task_id, "title": f"Task {task_id}"} for task_id in task_ids}
        self.failures = {}
        self.calls = []

    async def get_task(self, task_id):
        self.calls.append(task_id)
        if task_id in self.failures:
            raise self.failures[task_id]
        if task_id not in self.tasks:
            raise NotFoundError(f"Task {task_id} not found")
        return dict(self.tasks[task_id])

    async def list_tasks(self, show_completed=True, max_results=None, page_token=None):
        return {"items": list(self.tasks.values()), "nextPageToken": None}

    async def create_task(self, data):
        task_id = f"t{len(self.tasks) + 1}"
        self.tasks[task_id] = {"id": task_id, **data}
        return dict(self.tasks[task_id])

    async def update_task(self, task_id, data):
        if task_id not in self.tasks:
            raise NotFoundError(f"Task {task_id} not found")
        self.tasks[task_id].update(data)
        return dict(self.tasks[task_id])

    async def delete_task(self, task_id):
        if self.tasks.pop(task_id, None) is None:
            raise NotFoundError(f"Task {task_id} not found")


class FakeEventGateway:
    def __init__(self, event_ids=()):
        self.events = {event_id: {"id": event_id, "summary": f"Event {event_id}"} for event_id in event_ids}
        self.calendars = {}
        self.failing_calendars = set()
        self.page_size = None
        self.list_calls = []

    async def get_event(self, event_id, calendar_id=None, time_zone=None):
        if event_id not in self.events:
            raise NotFoundError(f"Event {event_id} not found")
        return dict(self.events[event_id])

    async def list_events(
        self,
        calendar_id=None,
        time_min=None,
        time_max=None,
        single_events=False,
        time_zone=None,
        max_results=None,
        page_token=None,
        query=None,
    ):
        calendar_id = calendar_id or "primary"
        self.list_calls.append({
            "calendar_id": calendar_id,
            "time_min": time_min,
            "time_max": time_max,
            "single_events": single_events,
            "page_token": page_token,
            "query": query,
        })
        if calendar_id in self.failing_calendars:
            raise GatewayError(f"Calendar {calendar_id} unreachable")

        items = self.calendars.get(calendar_id, [])
        if self.page_size is None:
            return {"items": list(items), "nextPageToken": None, "timeZone": time_zone or "UTC"}
        offset = int(page_token or 0)
        end = offset + self.page_size
        return {
            "items": list(items[offset:end]),
            "nextPageToken": str(end) if end < len(items) else None,
            "timeZone": time_zone or "UTC",
        }

    async def create_event(self, data, calendar_id=None):
        event_id = f"e{len(self.events) + 1}"
        self.events[event_id] = {"id": event_id, **data}
        return dict(self.events[event_id])

    async def update_event(self, event_id, data, calendar_id=None):
        if event_id not in self.events:
            raise NotFoundError(f"Event {event_id} not found")
        self.events[event_id].update(data)
        return dict(self.events[event_id])

    async def delete_event(self, event_id, calendar_id=None):
        if self.events.pop(event_id, None) is None:
            raise NotFoundError(f"Event {event_id} not found")


class TickingClock:
    """Returns RFC 3339 timestamps one second apart."""

    def __init__(self, start=datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self):
        value = to_rfc3339(self.current)
        self.current += timedelta(seconds=1)
        return value


def busy(event_id, start, end):
    return {"id": event_id, "start": {"dateTime": start}, "end": {"dateTime": end}}


@pytest.fixture
def task_gateway():
    return FakeTaskGateway(["t1", "t2", "t3", "t4", "t5"])


@pytest.fixture
def event_gateway():
    return FakeEventGateway(["e1", "e2", "e3", "e4", "e5"])


@pytest.fixture
def registry():
    return LinkRegistry()


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def link_service(registry, task_gateway, event_gateway, clock):
    return LinkService(registry, task_gateway, event_gateway, clock=clock)


@pytest.fixture
def bulk_service(link_service):
    return BulkLinkService(link_service)


@pytest.fixture
def availability_service(event_gateway):
    return AvailabilityService(event_gateway)
