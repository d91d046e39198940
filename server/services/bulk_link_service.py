"""
Bulk Link Service

Applies link operations to lists of inputs. Items are processed one at a
time, in input order; a failing item is recorded and never undoes or stops
the others.
"""

from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, TypeVar

from fastmcp.utilities.logging import get_logger
from services.errors import GatewayError, LinkError
from services.link_service import LinkService
from services.models import BulkFailure, BulkResult, LinkPair, LinkRequest

T = TypeVar("T")


def pair_of(request: LinkRequest) -> Dict[str, str]:
    """Failure input for fan-out links; the shared notes are left out."""
    return {"taskId": request.task_id, "eventId": request.event_id}


class BulkLinkService:
    """Bulk create/delete and fan-out linking on top of LinkService."""

    def __init__(self, link_service: LinkService):
        self.logger = get_logger("BulkLinkService")
        self.link_service = link_service

    async def _run(
        self,
        operation: str,
        items: Iterable[T],
        describe: Callable[[T], Dict[str, Any]],
        apply: Callable[[T], Awaitable[Dict[str, Any]]],
    ) -> BulkResult:
        items = list(items)
        result = BulkResult(total=len(items))
        for item in items:
            try:
                result.results.append(await apply(item))
            except LinkError as e:
                result.errors.append(BulkFailure(
                    input=describe(item), error_type=e.code, message=e.message, detail=e.detail
                ))
            except Exception as e:
                self.logger.error(f"{operation}: unexpected failure for {describe(item)}: {e}", exc_info=True)
                result.errors.append(
                    BulkFailure(input=describe(item), error_type=GatewayError.code, message=str(e))
                )
        self.logger.info(
            f"{operation}: {result.succeeded}/{result.total} succeeded, {result.failed} failed"
        )
        return result

    async def bulk_create(
        self,
        requests: Iterable[LinkRequest],
        describe: Callable[[LinkRequest], Dict[str, Any]] = LinkRequest.to_dict,
    ) -> BulkResult:
        async def apply(request: LinkRequest):
            link = await self.link_service.create(request.task_id, request.event_id, request.notes)
            return link.to_dict()

        return await self._run("bulk_create", requests, describe, apply)

    async def bulk_delete_by_id(self, link_ids: Iterable[str]) -> BulkResult:
        async def apply(link_id: str):
            ack = await self.link_service.delete_by_id(link_id)
            return ack.link.summary()

        return await self._run("bulk_delete_by_id", link_ids, lambda link_id: {"linkId": link_id}, apply)

    async def bulk_delete_by_pair(self, pairs: Iterable[LinkPair]) -> BulkResult:
        async def apply(pair: LinkPair):
            ack = await self.link_service.delete_by_pair(pair.task_id, pair.event_id)
            return ack.link.summary()

        return await self._run("bulk_delete_by_pair", pairs, LinkPair.to_dict, apply)

    async def link_task_to_events(
        self, task_id: str, event_ids: List[str], notes: Optional[str] = None
    ) -> BulkResult:
        """
        Link one task to many events.

        Raises:
            NotFoundError: If the task does not exist (no link is attempted)
        """
        await self.link_service.task_gateway.get_task(task_id)
        return await self.bulk_create(
            (LinkRequest(task_id, event_id, notes) for event_id in event_ids), describe=pair_of
        )

    async def link_event_to_tasks(
        self, event_id: str, task_ids: List[str], notes: Optional[str] = None
    ) -> BulkResult:
        """
        Link one event to many tasks.

        Raises:
            NotFoundError: If the event does not exist (no link is attempted)
        """
        await self.link_service.event_gateway.get_event(event_id)
        return await self.bulk_create(
            (LinkRequest(task_id, event_id, notes) for task_id in task_ids), describe=pair_of
        )
