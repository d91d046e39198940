"""
Google Calendar Service

Event gateway over the Google Calendar v3 API.
Supports scoping every call to one of several calendars.
"""

from typing import Any, Dict, Optional

from googleapiclient.discovery import build

from fastmcp.utilities.logging import get_logger
from services.credentials_service import CredentialsService
from services.google_tasks_service import execute


class GoogleCalendarService:
    """
    Service for Google Calendar API integration.

    Handles fetching, listing and editing calendar events.
    """

    def __init__(self, credentials_service: CredentialsService, default_calendar_id: str = "primary"):
        """
        Initialize Google Calendar service.

        Args:
            credentials_service: Source of Google credentials
            default_calendar_id: Calendar used when a call does not name one
        """
        self.logger = get_logger("GoogleCalendarService")
        self.credentials_service = credentials_service
        self.default_calendar_id = default_calendar_id

    def get_service(self):
        """
        Get Google Calendar API service.

        Raises:
            GatewayError: If no usable credentials are stored
        """
        creds = self.credentials_service.get_credentials()
        return build('calendar', 'v3', credentials=creds, cache_discovery=False)

    async def get_event(
        self,
        event_id: str,
        calendar_id: Optional[str] = None,
        time_zone: Optional[str] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "calendarId": calendar_id or self.default_calendar_id,
            "eventId": event_id,
        }
        if time_zone:
            params["timeZone"] = time_zone
        return await execute(
            lambda: self.get_service().events().get(**params),
            what=f"Event {event_id}",
        )

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
        """
        List events of one calendar.

        Args:
            calendar_id: Calendar to query (default calendar when omitted)
            time_min: Lower bound (RFC 3339) for event end times
            time_max: Upper bound (RFC 3339) for event start times
            single_events: Expand recurring events into single occurrences
            time_zone: Time zone used in the response
            max_results: Page size
            page_token: Google page token from a previous call
            query: Free text search terms

        Returns:
            Dict with items, nextPageToken and timeZone
        """
        calendar_id = calendar_id or self.default_calendar_id
        params: Dict[str, Any] = {"calendarId": calendar_id, "singleEvents": single_events}
        if single_events:
            # orderBy=startTime is only accepted together with singleEvents
            params["orderBy"] = "startTime"
        optional = {
            "timeMin": time_min,
            "timeMax": time_max,
            "timeZone": time_zone,
            "maxResults": max_results,
            "pageToken": page_token,
            "q": query,
        }
        params.update({key: value for key, value in optional.items() if value})

        response = await execute(
            lambda: self.get_service().events().list(**params),
            what=f"Calendar {calendar_id}",
        )
        return {
            "items": response.get("items", []),
            "nextPageToken": response.get("nextPageToken"),
            "timeZone": response.get("timeZone") or time_zone or "UTC",
        }

    async def create_event(self, data: Dict[str, Any], calendar_id: Optional[str] = None) -> Dict[str, Any]:
        calendar_id = calendar_id or self.default_calendar_id
        created = await execute(
            lambda: self.get_service().events().insert(calendarId=calendar_id, body=data),
            what=f"New event in {calendar_id}",
        )
        self.logger.info(f"Created event {created.get('id')} in {calendar_id}")
        return created

    async def update_event(
        self, event_id: str, data: Dict[str, Any], calendar_id: Optional[str] = None
    ) -> Dict[str, Any]:
        return await execute(
            lambda: self.get_service().events().patch(
                calendarId=calendar_id or self.default_calendar_id,
                eventId=event_id,
                body=data,
            ),
            what=f"Event {event_id}",
        )

    async def delete_event(self, event_id: str, calendar_id: Optional[str] = None) -> None:
        await execute(
            lambda: self.get_service().events().delete(
                calendarId=calendar_id or self.default_calendar_id,
                eventId=event_id,
            ),
            what=f"Event {event_id}",
        )
        self.logger.info(f"Deleted event {event_id}")
