"""End-to-end tool calls against the MCP server with in-memory gateways."""

import json

import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError

import task_link_server
from conftest import busy
from config.settings import ServerSettings
from task_link_server import AppContext, mcp


@pytest.fixture
def app_context(tmp_path, registry, link_service, bulk_service, availability_service, task_gateway,
                event_gateway):
    return AppContext(
        registry=registry,
        link_service=link_service,
        bulk_link_service=bulk_service,
        availability_service=availability_service,
        tasks_service=task_gateway,
        calendar_service=event_gateway,
        settings=ServerSettings(data_dir=tmp_path),
    )


@pytest.fixture
async def client(monkeypatch, app_context):
    monkeypatch.setattr(task_link_server, "build_app_context", lambda settings: app_context)
    async with Client(mcp) as client:
        yield client


async def call(client, tool, **arguments):
    result = await client.call_tool(tool, arguments)
    return json.loads(result.content[0].text)


async def test_registers_link_tools(client):
    names = {tool.name for tool in await client.list_tools()}

    assert {
        "create_task_event_link",
        "get_task_event_link",
        "update_task_event_link",
        "delete_task_event_link",
        "unlink_task_event",
        "list_task_event_links",
        "get_task_events",
        "get_event_tasks",
        "bulk_create_task_event_links",
        "bulk_delete_task_event_links",
        "bulk_unlink_task_events",
        "link_task_to_multiple_events",
        "link_event_to_multiple_tasks",
        "find_free_time_slots",
        "list_events_in_time_range",
        "smart_event_query",
    } <= names


async def test_link_lifecycle(client):
    link = await call(client, "create_task_event_link", task_id="t1", event_id="e1", notes="agenda")
    assert link["taskId"] == "t1"
    assert link["notes"] == "agenda"

    fetched = await call(client, "get_task_event_link", link_id=link["id"])
    assert fetched == link

    updated = await call(client, "update_task_event_link", link_id=link["id"], notes="minutes")
    assert updated["notes"] == "minutes"
    assert updated["createdAt"] == link["createdAt"]

    events = await call(client, "get_task_events", task_id="t1")
    assert [event["id"] for event in events["items"]] == ["e1"]
    assert events["timeZone"] == "UTC"

    ack = await call(client, "delete_task_event_link", link_id=link["id"])
    assert ack == {"success": True, "message": "Link deleted.", "link": {"id": link["id"], "taskId": "t1",
                                                                        "eventId": "e1"}}

    listing = await call(client, "list_task_event_links")
    assert listing == {"items": []}


async def test_duplicate_link_is_a_tagged_failure(client):
    await call(client, "create_task_event_link", task_id="t1", event_id="e1")

    with pytest.raises(ToolError, match="duplicate_link"):
        await client.call_tool("create_task_event_link", {"task_id": "t1", "event_id": "e1"})


async def test_tool_failure_carries_error_detail(client):
    with pytest.raises(ToolError) as excinfo:
        await client.call_tool("get_task_event_link", {"link_id": "link_missing"})

    message = str(excinfo.value)
    assert "not_found: Link link_missing not found" in message
    assert '{"linkId": "link_missing"}' in message


async def test_unknown_ids_are_tagged_not_found(client):
    with pytest.raises(ToolError, match="not_found"):
        await client.call_tool("create_task_event_link", {"task_id": "nope", "event_id": "e1"})
    with pytest.raises(ToolError, match="not_found"):
        await client.call_tool("unlink_task_event", {"task_id": "t1", "event_id": "e1"})
    with pytest.raises(ToolError, match="not_found"):
        await client.call_tool("get_event_tasks", {"event_id": "nope"})


async def test_bad_page_token_is_a_validation_failure(client):
    with pytest.raises(ToolError, match="validation_error"):
        await client.call_tool("list_task_event_links", {"page_token": "next"})


async def test_bulk_create_reports_partial_failure(client):
    result = await call(client, "bulk_create_task_event_links", links=[
        {"task_id": "t1", "event_id": "e1"},
        {"task_id": "t1", "event_id": "e1"},
        {"task_id": "t2", "event_id": "missing"},
    ])

    assert (result["total"], result["succeeded"], result["failed"]) == (3, 1, 2)
    assert result["success"] is False
    assert [error["error"]["type"] for error in result["errors"]] == ["duplicate_link", "not_found"]


async def test_fan_out_and_bulk_unlink(client):
    fan_out = await call(client, "link_event_to_multiple_tasks", event_id="e1", task_ids=["t1", "t2", "t3"])
    assert fan_out["eventId"] == "e1"
    assert fan_out["succeeded"] == 3

    tasks = await call(client, "get_event_tasks", event_id="e1", max_results=2)
    assert [task["id"] for task in tasks["items"]] == ["t1", "t2"]
    assert tasks["nextPageToken"] == "2"

    unlinked = await call(client, "bulk_unlink_task_events", pairs=[
        {"task_id": "t1", "event_id": "e1"},
        {"task_id": "t2", "event_id": "e1"},
    ])
    assert unlinked["succeeded"] == 2

    remaining = await call(client, "list_task_event_links", event_id="e1")
    assert [link["taskId"] for link in remaining["items"]] == ["t3"]


async def test_fan_out_from_missing_task(client, registry):
    with pytest.raises(ToolError, match="not_found"):
        await client.call_tool("link_task_to_multiple_events", {"task_id": "nope", "event_ids": ["e1"]})
    assert len(registry) == 0


async def test_find_free_time_slots_with_explicit_range(client, event_gateway):
    event_gateway.calendars["primary"] = [busy("m1", "2025-01-15T10:00:00Z", "2025-01-15T11:00:00Z")]

    result = await call(client, "find_free_time_slots", time_range={
        "start": "2025-01-15T09:00:00Z",
        "end": "2025-01-15T17:00:00Z",
    })

    assert [slot["duration"] for slot in result["freeTimeSlots"]] == [60, 360]
    assert result["skippedCalendars"] == []
    assert result["searchParams"]["minDuration"] == 30
    assert result["searchParams"]["calendarIds"] == ["primary"]


async def test_find_free_time_slots_rejects_mixed_range(client):
    with pytest.raises(ToolError, match="validation_error"):
        await client.call_tool("find_free_time_slots", {
            "time_range": {"preset": "today", "start": "2025-01-15T09:00:00Z"},
        })


async def test_list_events_with_linked_tasks(client, event_gateway):
    event_gateway.calendars["primary"] = [busy("e1", "2025-01-15T10:00:00Z", "2025-01-15T11:00:00Z")]
    await call(client, "create_task_event_link", task_id="t2", event_id="e1")

    result = await call(client, "list_events_in_time_range", time_range={"preset": "this_week"},
                        include_linked_tasks=True)

    assert result["items"][0]["linkedTaskIds"] == ["t2"]
    assert event_gateway.list_calls[0]["time_min"].endswith("T00:00:00.000Z")


async def test_smart_event_query_passes_keywords(client, event_gateway):
    result = await call(client, "smart_event_query", query="today standup")

    assert result["interpretation"]["keywords"] == ["standup"]
    assert event_gateway.list_calls[0]["query"] == "standup"
    assert event_gateway.list_calls[0]["time_min"] is not None


async def test_deleting_a_task_leaves_a_stale_link(client):
    await call(client, "create_task_event_link", task_id="t4", event_id="e2")

    await call(client, "delete_task", task_id="t4")
    events = await call(client, "get_event_tasks", event_id="e2")

    assert events["items"] == []
    assert events["skipped"][0]["id"] == "t4"


async def test_health_check():
    response = await task_link_server.health_check(None)

    assert json.loads(response.body)["status"] == "healthy"
