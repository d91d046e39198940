"""
Gateway Protocols

The link and availability services only see these two ports. The Google
implementations live in google_tasks_service and google_calendar_service.
Implementations raise NotFoundError for missing entities and GatewayError
for anything else.
"""

from typing import Any, Dict, Optional, Protocol


class TaskGateway(Protocol):
    async def get_task(self, task_id: str) -> Dict[str, Any]:
        ...

    async def list_tasks(
        self,
        show_completed: bool = True,
        max_results: Optional[int] = None,
        page_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        ...

    async def create_task(self, data: Dict[str, Any]) -> Dict[str, Any]:
        ...

    async def update_task(self, task_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        ...

    async def delete_task(self, task_id: str) -> None:
        ...


class EventGateway(Protocol):
    async def get_event(
        self,
        event_id: str,
        calendar_id: Optional[str] = None,
        time_zone: Optional[str] = None,
    ) -> Dict[str, Any]:
        ...

    async def list_events(
        self,
        calendar_id: Optional[str] = None,
        time_min: Optional[str] = None,
        time_max: Optional[str] = None,
        single_events: bool = False,
        time_zone: Optional[str] = None,
        max_results: Optional[int] = None,
        page_token: Optional[str] = None,
        query: Optional[str] = None,
    ) -> Dict[str, Any]:
        ...

    async def create_event(self, data: Dict[str, Any], calendar_id: Optional[str] = None) -> Dict[str, Any]:
        ...

    async def update_event(
        self, event_id: str, data: Dict[str, Any], calendar_id: Optional[str] = None
    ) -> Dict[str, Any]:
        ...

    async def delete_event(self, event_id: str, calendar_id: Optional[str] = None) -> None:
        ...
