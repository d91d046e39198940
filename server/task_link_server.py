"""
Task Link MCP Server

MCP server that links Google Tasks tasks to Google Calendar events.
Exposes tools for link management, bulk linking, free time search and
thin task/event access through the Google APIs.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
import json
import sys
from typing import Any, List, Optional

from fastmcp import FastMCP, Context
from fastmcp.exceptions import ToolError
from fastmcp.utilities.logging import configure_logging, get_logger
from pydantic import BaseModel, Field
from starlette.requests import Request
from starlette.responses import JSONResponse

# Add the server directory to Python path
sys.path.insert(0, str(Path(__file__).parent))

from config.settings import ServerSettings, get_settings
from services.availability_service import AvailabilityService
from services.bulk_link_service import BulkLinkService
from services.credentials_service import CredentialsService
from services.errors import LinkError
from services.google_calendar_service import GoogleCalendarService
from services.google_tasks_service import GoogleTasksService
from services.link_registry import LinkRegistry
from services.link_service import LinkService
from services.models import LinkPair, LinkRequest
from services.smart_query import interpret_query
from services.time_range import parse_time_range, resolve_time_range

logger = get_logger(__name__)

# === TOOL INPUT MODELS ===


class LinkInput(BaseModel):
    task_id: str = Field(description="Google Tasks task ID")
    event_id: str = Field(description="Google Calendar event ID")
    notes: Optional[str] = Field(default=None, description="Optional note about the link")


class PairInput(BaseModel):
    task_id: str = Field(description="Google Tasks task ID")
    event_id: str = Field(description="Google Calendar event ID")


class TimeRangeInput(BaseModel):
    """Either a preset or an explicit start/end pair."""

    preset: Optional[str] = Field(
        default=None,
        description="One of: today, tomorrow, this_week, next_week, this_month",
    )
    start: Optional[str] = Field(default=None, description="Range start (RFC 3339)")
    end: Optional[str] = Field(default=None, description="Range end (RFC 3339)")


# === APPLICATION CONTEXT ===

@dataclass
class AppContext:
    """Application context with all services."""
    registry: LinkRegistry
    link_service: LinkService
    bulk_link_service: BulkLinkService
    availability_service: AvailabilityService
    tasks_service: Any
    calendar_service: Any
    settings: ServerSettings


def build_app_context(settings: ServerSettings) -> AppContext:
    """Wire the Google gateways and the link services around one registry."""
    credentials_service = CredentialsService(settings)
    tasks_service = GoogleTasksService(credentials_service, tasklist=settings.default_tasklist)
    calendar_service = GoogleCalendarService(
        credentials_service, default_calendar_id=settings.default_calendar_id
    )

    registry = LinkRegistry()
    link_service = LinkService(registry, tasks_service, calendar_service)
    return AppContext(
        registry=registry,
        link_service=link_service,
        bulk_link_service=BulkLinkService(link_service),
        availability_service=AvailabilityService(calendar_service),
        tasks_service=tasks_service,
        calendar_service=calendar_service,
        settings=settings,
    )


# Set by the lifespan so custom routes can reach the services
_app_context: Optional[AppContext] = None


@asynccontextmanager
async def app_lifespan(mcp: FastMCP):
    """Initialize all services for the link server."""
    global _app_context
    try:
        settings = get_settings()
        configure_logging(settings.log_level)
        logger.info("Initializing Task Link MCP Server...")

        _app_context = build_app_context(settings)
        logger.info("Task Link MCP Server initialized successfully")

        yield _app_context
    except Exception as e:
        logger.error(f"Error during app lifespan: {e}", exc_info=True)
        raise
    finally:
        _app_context = None
        logger.info("Shutting down Task Link MCP Server")


# === MCP SERVER ===

mcp = FastMCP(
    name="task-link-server",
    instructions="""You manage the user's Google Tasks and Google Calendar, and the links between them.

- A link joins one task to one event; a pair can only be linked once.
- Links live in server memory only and are lost when the server restarts.
- Links are not removed when their task or event is deleted; lookups report such items as skipped.
- Bulk tools report per-item results: check "failed" and "errors" in every bulk response.
- find_free_time_slots merges events from all given calendars and returns gaps in chronological order.
- Time ranges are either {"preset": "today" | "tomorrow" | "this_week" | "next_week" | "this_month"}
  or {"start": <RFC 3339>, "end": <RFC 3339>}.""",
    lifespan=app_lifespan
)


# === HELPERS ===

def get_app(ctx: Context) -> AppContext:
    return ctx.request_context.lifespan_context


def to_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def tool_failure(tool: str, error: LinkError) -> ToolError:
    """Log a failed tool call and build the error returned to the client."""
    text = f"{error.code}: {error.message}"
    if error.detail:
        text += f" {json.dumps(error.detail, ensure_ascii=False)}"
    logger.error(f"{tool} failed: {text}")
    return ToolError(text)


def event_time(value: str, time_zone: Optional[str] = None) -> dict:
    """Calendar API start/end object; YYYY-MM-DD values make all-day events."""
    if len(value) == 10:
        return {"date": value}
    boundary = {"dateTime": value}
    if time_zone:
        boundary["timeZone"] = time_zone
    return boundary


# === LINK TOOLS ===

@mcp.tool()
async def create_task_event_link(
    task_id: str,
    event_id: str,
    notes: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Link a Google Tasks task to a Google Calendar event.

    Both the task and the event must exist. A pair can only be linked once.

    Args:
        task_id: Task ID
        event_id: Event ID
        notes: Optional note about the link
    """
    logger.info(f"TOOL CALLED: create_task_event_link(task_id={task_id}, event_id={event_id})")
    try:
        link = await get_app(ctx).link_service.create(task_id, event_id, notes)
    except LinkError as e:
        raise tool_failure("create_task_event_link", e) from e
    return to_json(link.to_dict())


@mcp.tool()
async def get_task_event_link(
    link_id: str,
    ctx: Context = None
) -> str:
    """
    Get a link by its ID.

    Args:
        link_id: Link ID
    """
    logger.info(f"TOOL CALLED: get_task_event_link(link_id={link_id})")
    try:
        link = get_app(ctx).link_service.get(link_id)
    except LinkError as e:
        raise tool_failure("get_task_event_link", e) from e
    return to_json(link.to_dict())


@mcp.tool()
async def update_task_event_link(
    link_id: str,
    notes: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Update a link's notes.

    Args:
        link_id: Link ID
        notes: New note (leave out to keep the current one)
    """
    logger.info(f"TOOL CALLED: update_task_event_link(link_id={link_id})")
    try:
        link = await get_app(ctx).link_service.update(link_id, notes)
    except LinkError as e:
        raise tool_failure("update_task_event_link", e) from e
    return to_json(link.to_dict())


@mcp.tool()
async def delete_task_event_link(
    link_id: str,
    ctx: Context = None
) -> str:
    """
    Delete a link by its ID.

    Args:
        link_id: Link ID
    """
    logger.info(f"TOOL CALLED: delete_task_event_link(link_id={link_id})")
    try:
        ack = await get_app(ctx).link_service.delete_by_id(link_id)
    except LinkError as e:
        raise tool_failure("delete_task_event_link", e) from e
    return to_json(ack.to_dict())


@mcp.tool()
async def unlink_task_event(
    task_id: str,
    event_id: str,
    ctx: Context = None
) -> str:
    """
    Remove the link between a specific task and event.

    Args:
        task_id: Task ID
        event_id: Event ID
    """
    logger.info(f"TOOL CALLED: unlink_task_event(task_id={task_id}, event_id={event_id})")
    try:
        ack = await get_app(ctx).link_service.delete_by_pair(task_id, event_id)
    except LinkError as e:
        raise tool_failure("unlink_task_event", e) from e
    return to_json(ack.to_dict())


@mcp.tool()
async def list_task_event_links(
    task_id: Optional[str] = None,
    event_id: Optional[str] = None,
    max_results: Optional[int] = None,
    page_token: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    List links, optionally filtered by task and/or event. Links are kept in server memory only.

    Args:
        task_id: Only links for this task
        event_id: Only links for this event
        max_results: Page size
        page_token: nextPageToken from a previous call
    """
    logger.info(f"TOOL CALLED: list_task_event_links(task_id={task_id}, event_id={event_id})")
    try:
        page = get_app(ctx).link_service.list_links(task_id, event_id, max_results, page_token)
    except LinkError as e:
        raise tool_failure("list_task_event_links", e) from e
    return to_json(page.to_dict())


@mcp.tool()
async def get_task_events(
    task_id: str,
    time_zone: Optional[str] = None,
    max_results: Optional[int] = None,
    page_token: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Get the calendar events linked to a task.

    Events that can no longer be fetched are listed under "skipped".

    Args:
        task_id: Task ID
        time_zone: Time zone for event times (e.g. 'Asia/Tokyo')
        max_results: Page size
        page_token: nextPageToken from a previous call
    """
    logger.info(f"TOOL CALLED: get_task_events(task_id={task_id})")
    try:
        page = await get_app(ctx).link_service.list_for_task(task_id, max_results, page_token, time_zone)
    except LinkError as e:
        raise tool_failure("get_task_events", e) from e
    return to_json(page.to_dict())


@mcp.tool()
async def get_event_tasks(
    event_id: str,
    max_results: Optional[int] = None,
    page_token: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Get the tasks linked to a calendar event.

    Tasks that can no longer be fetched are listed under "skipped".

    Args:
        event_id: Event ID
        max_results: Page size
        page_token: nextPageToken from a previous call
    """
    logger.info(f"TOOL CALLED: get_event_tasks(event_id={event_id})")
    try:
        page = await get_app(ctx).link_service.list_for_event(event_id, max_results, page_token)
    except LinkError as e:
        raise tool_failure("get_event_tasks", e) from e
    return to_json(page.to_dict())


# === BULK LINK TOOLS ===

@mcp.tool()
async def bulk_create_task_event_links(
    links: List[LinkInput],
    ctx: Context = None
) -> str:
    """
    Create many links at once. Each link is validated on its own; failures are listed in "errors".

    Args:
        links: Links to create
    """
    logger.info(f"TOOL CALLED: bulk_create_task_event_links({len(links)} links)")
    requests = [LinkRequest(item.task_id, item.event_id, item.notes) for item in links]
    result = await get_app(ctx).bulk_link_service.bulk_create(requests)
    return to_json(result.to_dict())


@mcp.tool()
async def bulk_delete_task_event_links(
    link_ids: List[str],
    ctx: Context = None
) -> str:
    """
    Delete many links by ID.

    Args:
        link_ids: Link IDs to delete
    """
    logger.info(f"TOOL CALLED: bulk_delete_task_event_links({len(link_ids)} ids)")
    result = await get_app(ctx).bulk_link_service.bulk_delete_by_id(link_ids)
    return to_json(result.to_dict())


@mcp.tool()
async def bulk_unlink_task_events(
    pairs: List[PairInput],
    ctx: Context = None
) -> str:
    """
    Remove the links for many task/event pairs.

    Args:
        pairs: Task/event pairs to unlink
    """
    logger.info(f"TOOL CALLED: bulk_unlink_task_events({len(pairs)} pairs)")
    result = await get_app(ctx).bulk_link_service.bulk_delete_by_pair(
        [LinkPair(pair.task_id, pair.event_id) for pair in pairs]
    )
    return to_json(result.to_dict())


@mcp.tool()
async def link_task_to_multiple_events(
    task_id: str,
    event_ids: List[str],
    notes: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Link one task to several events.

    Args:
        task_id: Task ID
        event_ids: Event IDs to link to the task
        notes: Optional note stored on every new link
    """
    logger.info(f"TOOL CALLED: link_task_to_multiple_events(task_id={task_id}, {len(event_ids)} events)")
    try:
        result = await get_app(ctx).bulk_link_service.link_task_to_events(task_id, event_ids, notes)
    except LinkError as e:
        raise tool_failure("link_task_to_multiple_events", e) from e
    return to_json({"taskId": task_id, **result.to_dict()})


@mcp.tool()
async def link_event_to_multiple_tasks(
    event_id: str,
    task_ids: List[str],
    notes: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Link one event to several tasks.

    Args:
        event_id: Event ID
        task_ids: Task IDs to link to the event
        notes: Optional note stored on every new link
    """
    logger.info(f"TOOL CALLED: link_event_to_multiple_tasks(event_id={event_id}, {len(task_ids)} tasks)")
    try:
        result = await get_app(ctx).bulk_link_service.link_event_to_tasks(event_id, task_ids, notes)
    except LinkError as e:
        raise tool_failure("link_event_to_multiple_tasks", e) from e
    return to_json({"eventId": event_id, **result.to_dict()})


# === AVAILABILITY TOOLS ===

@mcp.tool()
async def find_free_time_slots(
    time_range: TimeRangeInput,
    min_duration: Optional[int] = None,
    max_results: Optional[int] = None,
    calendar_ids: Optional[List[str]] = None,
    time_zone: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Find free time slots across one or more calendars.

    Args:
        time_range: Window to search, as a preset or start/end
        min_duration: Minimum slot length in minutes (default 30)
        max_results: Maximum number of slots (default 5)
        calendar_ids: Calendars whose events count as busy (default: primary)
        time_zone: Time zone for presets and event times
    """
    logger.info(f"TOOL CALLED: find_free_time_slots(time_range={time_range}, calendar_ids={calendar_ids})")
    app = get_app(ctx)
    settings = app.settings
    if min_duration is None:
        min_duration = settings.default_min_duration_minutes
    if max_results is None:
        max_results = settings.default_max_free_slots
    calendar_ids = calendar_ids or [settings.default_calendar_id]

    try:
        start, end = resolve_time_range(
            parse_time_range(time_range.model_dump(exclude_none=True)),
            time_zone=time_zone or settings.default_time_zone,
        )
        result = await app.availability_service.find_free_time_slots(
            start, end, min_duration, max_results, calendar_ids, time_zone
        )
    except LinkError as e:
        raise tool_failure("find_free_time_slots", e) from e

    payload = result.to_dict()
    payload["searchParams"] = {
        "startDate": start,
        "endDate": end,
        "minDuration": min_duration,
        "maxResults": max_results,
        "calendarIds": calendar_ids,
    }
    return to_json(payload)


@mcp.tool()
async def list_events_in_time_range(
    time_range: TimeRangeInput,
    calendar_id: Optional[str] = None,
    include_linked_tasks: bool = False,
    max_results: Optional[int] = None,
    page_token: Optional[str] = None,
    time_zone: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    List calendar events in a time range.

    Args:
        time_range: Window to list, as a preset or start/end
        calendar_id: Calendar ID (default: primary)
        include_linked_tasks: Add the IDs of linked tasks to every event
        max_results: Page size
        page_token: Google page token from a previous call
        time_zone: Time zone for presets and event times
    """
    logger.info(f"TOOL CALLED: list_events_in_time_range(time_range={time_range}, calendar_id={calendar_id})")
    app = get_app(ctx)
    try:
        time_min, time_max = resolve_time_range(
            parse_time_range(time_range.model_dump(exclude_none=True)),
            time_zone=time_zone or app.settings.default_time_zone,
        )
        response = await app.calendar_service.list_events(
            calendar_id=calendar_id,
            time_min=time_min,
            time_max=time_max,
            time_zone=time_zone,
            max_results=max_results,
            page_token=page_token,
        )
    except LinkError as e:
        raise tool_failure("list_events_in_time_range", e) from e

    if include_linked_tasks:
        for event in response["items"]:
            event["linkedTaskIds"] = [
                link.task_id for link in app.registry.find(lambda link: link.event_id == event.get("id"))
            ]
    return to_json(response)


@mcp.tool()
async def smart_event_query(
    query: str,
    time_zone: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Search events with a short free text query such as "today standup" or "this_week project x".

    Period words (today, this_week, this_month) narrow the time range; the other
    words are used as search terms. Interpretation is keyword based and best effort.

    Args:
        query: Free text query
        time_zone: Time zone for period words and event times
    """
    logger.info(f"TOOL CALLED: smart_event_query(query={query})")
    app = get_app(ctx)
    try:
        interpretation = interpret_query(query, time_zone=time_zone or app.settings.default_time_zone)
        response = await app.calendar_service.list_events(
            time_min=interpretation.time_min,
            time_max=interpretation.time_max,
            time_zone=time_zone,
            query=interpretation.search_text,
        )
    except LinkError as e:
        raise tool_failure("smart_event_query", e) from e
    return to_json({
        "query": query,
        "interpretation": interpretation.to_dict(),
        "results": response["items"],
    })


# === TASK TOOLS ===

@mcp.tool()
async def get_task(
    task_id: str,
    ctx: Context = None
) -> str:
    """
    Get a Google Tasks task by ID.

    Args:
        task_id: Task ID
    """
    logger.info(f"TOOL CALLED: get_task(task_id={task_id})")
    try:
        task = await get_app(ctx).tasks_service.get_task(task_id)
    except LinkError as e:
        raise tool_failure("get_task", e) from e
    return to_json(task)


@mcp.tool()
async def list_tasks(
    show_completed: bool = True,
    max_results: Optional[int] = None,
    page_token: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    List tasks in the default task list.

    Args:
        show_completed: Include completed tasks
        max_results: Page size
        page_token: Google page token from a previous call
    """
    logger.info("TOOL CALLED: list_tasks")
    try:
        response = await get_app(ctx).tasks_service.list_tasks(show_completed, max_results, page_token)
    except LinkError as e:
        raise tool_failure("list_tasks", e) from e
    return to_json(response)


@mcp.tool()
async def create_task(
    title: str,
    notes: Optional[str] = None,
    due: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Create a task in the default task list.

    Args:
        title: Task title
        notes: Optional task notes
        due: Optional due date (RFC 3339)
    """
    logger.info(f"TOOL CALLED: create_task(title={title})")
    if not title.strip():
        raise ToolError("validation_error: Task title cannot be empty")
    body = {"title": title, "notes": notes, "due": due}
    try:
        task = await get_app(ctx).tasks_service.create_task({k: v for k, v in body.items() if v is not None})
    except LinkError as e:
        raise tool_failure("create_task", e) from e
    return to_json(task)


@mcp.tool()
async def update_task(
    task_id: str,
    title: Optional[str] = None,
    notes: Optional[str] = None,
    due: Optional[str] = None,
    status: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Update fields of a task.

    Args:
        task_id: Task ID
        title: New title
        notes: New notes
        due: New due date (RFC 3339)
        status: needsAction or completed
    """
    logger.info(f"TOOL CALLED: update_task(task_id={task_id})")
    if status is not None and status not in ("needsAction", "completed"):
        raise ToolError("validation_error: Status must be needsAction or completed")
    body = {"title": title, "notes": notes, "due": due, "status": status}
    try:
        task = await get_app(ctx).tasks_service.update_task(
            task_id, {k: v for k, v in body.items() if v is not None}
        )
    except LinkError as e:
        raise tool_failure("update_task", e) from e
    return to_json(task)


@mcp.tool()
async def delete_task(
    task_id: str,
    ctx: Context = None
) -> str:
    """
    Delete a task. Links to the task are kept and show up as skipped in lookups.

    Args:
        task_id: Task ID
    """
    logger.info(f"TOOL CALLED: delete_task(task_id={task_id})")
    try:
        await get_app(ctx).tasks_service.delete_task(task_id)
    except LinkError as e:
        raise tool_failure("delete_task", e) from e
    return to_json({"success": True, "message": f"Task {task_id} deleted."})


# === EVENT TOOLS ===

@mcp.tool()
async def get_event(
    event_id: str,
    calendar_id: Optional[str] = None,
    time_zone: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Get a calendar event by ID.

    Args:
        event_id: Event ID
        calendar_id: Calendar ID (default: primary)
        time_zone: Time zone for event times
    """
    logger.info(f"TOOL CALLED: get_event(event_id={event_id})")
    try:
        event = await get_app(ctx).calendar_service.get_event(event_id, calendar_id, time_zone)
    except LinkError as e:
        raise tool_failure("get_event", e) from e
    return to_json(event)


@mcp.tool()
async def create_event(
    summary: str,
    start: str,
    end: str,
    description: Optional[str] = None,
    location: Optional[str] = None,
    calendar_id: Optional[str] = None,
    time_zone: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Create a calendar event.

    Args:
        summary: Event title
        start: Start (RFC 3339, or YYYY-MM-DD for all-day events)
        end: End (RFC 3339, or YYYY-MM-DD for all-day events)
        description: Optional description
        location: Optional location
        calendar_id: Calendar ID (default: primary)
        time_zone: Time zone for start and end
    """
    logger.info(f"TOOL CALLED: create_event(summary={summary}, start={start}, end={end})")
    body = {
        "summary": summary,
        "start": event_time(start, time_zone),
        "end": event_time(end, time_zone),
    }
    if description is not None:
        body["description"] = description
    if location is not None:
        body["location"] = location
    try:
        event = await get_app(ctx).calendar_service.create_event(body, calendar_id)
    except LinkError as e:
        raise tool_failure("create_event", e) from e
    return to_json(event)


@mcp.tool()
async def update_event(
    event_id: str,
    summary: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    description: Optional[str] = None,
    location: Optional[str] = None,
    calendar_id: Optional[str] = None,
    time_zone: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Update fields of a calendar event.

    Args:
        event_id: Event ID
        summary: New title
        start: New start (RFC 3339 or YYYY-MM-DD)
        end: New end (RFC 3339 or YYYY-MM-DD)
        description: New description
        location: New location
        calendar_id: Calendar ID (default: primary)
        time_zone: Time zone for start and end
    """
    logger.info(f"TOOL CALLED: update_event(event_id={event_id})")
    body = {}
    if summary is not None:
        body["summary"] = summary
    if start is not None:
        body["start"] = event_time(start, time_zone)
    if end is not None:
        body["end"] = event_time(end, time_zone)
    if description is not None:
        body["description"] = description
    if location is not None:
        body["location"] = location
    try:
        event = await get_app(ctx).calendar_service.update_event(event_id, body, calendar_id)
    except LinkError as e:
        raise tool_failure("update_event", e) from e
    return to_json(event)


@mcp.tool()
async def delete_event(
    event_id: str,
    calendar_id: Optional[str] = None,
    ctx: Context = None
) -> str:
    """
    Delete a calendar event. Links to the event are kept and show up as skipped in lookups.

    Args:
        event_id: Event ID
        calendar_id: Calendar ID (default: primary)
    """
    logger.info(f"TOOL CALLED: delete_event(event_id={event_id})")
    try:
        await get_app(ctx).calendar_service.delete_event(event_id, calendar_id)
    except LinkError as e:
        raise tool_failure("delete_event", e) from e
    return to_json({"success": True, "message": f"Event {event_id} deleted."})


# === CUSTOM ROUTES ===

@mcp.custom_route("/health", methods=["GET"])
async def health_check(request: Request):
    """Health check endpoint."""
    links = len(_app_context.registry) if _app_context else None
    return JSONResponse({
        "status": "healthy",
        "service": "task-link-server",
        "links": links,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


# === SERVER ENTRY POINT ===

if __name__ == "__main__":
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("Starting Task Link MCP Server")
    logger.info("=" * 60)
    logger.info(f"MCP endpoint available at: http://{settings.server_host}:{settings.server_port}/mcp")
    logger.info("Health check: GET /health")
    logger.info("=" * 60)

    try:
        mcp.run(transport="streamable-http", host=settings.server_host, port=settings.server_port)
    except Exception as e:
        logger.error(f"Fatal error starting MCP server: {e}", exc_info=True)
        raise
