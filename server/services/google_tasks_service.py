"""
Google Tasks Service

Task gateway over the Google Tasks v1 API.
"""

import asyncio
from typing import Any, Callable, Dict, Optional

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from fastmcp.utilities.logging import get_logger
from services.credentials_service import CredentialsService
from services.errors import GatewayError, LinkError, NotFoundError

NOT_FOUND_STATUSES = (404, 410)


def http_status(error: HttpError) -> Optional[int]:
    status = getattr(error.resp, "status", None)
    try:
        return int(status)
    except (TypeError, ValueError):
        return None


async def execute(make_request: Callable[[], Any], *, what: str) -> Any:
    """
    Build and run a googleapiclient request off the event loop and map its errors.

    Credential loading and client building happen in the worker thread too.

    Raises:
        NotFoundError: On HTTP 404/410
        GatewayError: On any other failure
    """
    try:
        return await asyncio.to_thread(lambda: make_request().execute())
    except HttpError as e:
        if http_status(e) in NOT_FOUND_STATUSES:
            raise NotFoundError(f"{what} not found") from e
        raise GatewayError(f"Google API error for {what}: {e}") from e
    except LinkError:
        raise
    except Exception as e:
        raise GatewayError(f"Request for {what} failed: {e}") from e


class GoogleTasksService:
    """
    Service for Google Tasks API integration.

    Every call builds a fresh API client from the stored credentials.
    """

    def __init__(self, credentials_service: CredentialsService, tasklist: str = "@default"):
        """
        Initialize Google Tasks service.

        Args:
            credentials_service: Source of Google credentials
            tasklist: Task list the gateway operates on
        """
        self.logger = get_logger("GoogleTasksService")
        self.credentials_service = credentials_service
        self.tasklist = tasklist

    def get_service(self):
        creds = self.credentials_service.get_credentials()
        return build('tasks', 'v1', credentials=creds, cache_discovery=False)

    async def get_task(self, task_id: str) -> Dict[str, Any]:
        return await execute(
            lambda: self.get_service().tasks().get(tasklist=self.tasklist, task=task_id),
            what=f"Task {task_id}",
        )

    async def list_tasks(
        self,
        show_completed: bool = True,
        max_results: Optional[int] = None,
        page_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"tasklist": self.tasklist, "showCompleted": show_completed}
        if max_results is not None:
            params["maxResults"] = max_results
        if page_token:
            params["pageToken"] = page_token
        response = await execute(
            lambda: self.get_service().tasks().list(**params),
            what=f"Task list {self.tasklist}",
        )
        return {
            "items": response.get("items", []),
            "nextPageToken": response.get("nextPageToken"),
        }

    async def create_task(self, data: Dict[str, Any]) -> Dict[str, Any]:
        created = await execute(
            lambda: self.get_service().tasks().insert(tasklist=self.tasklist, body=data),
            what="New task",
        )
        self.logger.info(f"Created task {created.get('id')}")
        return created

    async def update_task(self, task_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return await execute(
            lambda: self.get_service().tasks().patch(tasklist=self.tasklist, task=task_id, body=data),
            what=f"Task {task_id}",
        )

    async def delete_task(self, task_id: str) -> None:
        await execute(
            lambda: self.get_service().tasks().delete(tasklist=self.tasklist, task=task_id),
            what=f"Task {task_id}",
        )
        self.logger.info(f"Deleted task {task_id}")
