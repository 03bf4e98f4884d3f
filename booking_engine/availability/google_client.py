"""
Google Calendar free/busy client.

Implements the ``CalendarClient`` protocol on top of the Calendar v3
``freebusy.query`` endpoint. OAuth state is not looked up ambiently: a
credentials provider is injected, returning the person's stored
``Credentials`` (or ``None`` when no calendar is connected). Expired
tokens are refreshed and handed back through ``on_refresh`` so the caller
can persist them.

The Google client library is blocking, so each call runs in a worker
thread.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from booking_engine.config import settings
from booking_engine.errors import BookingEngineError

logger = logging.getLogger(__name__)

CredentialsProvider = Callable[[str], Awaitable[Optional[Credentials]]]
RefreshCallback = Callable[[str, Credentials], Awaitable[None]]
ServiceFactory = Callable[[Credentials], Any]


class CalendarNotConnectedError(BookingEngineError):
    """The person has no connected Google account."""


class CalendarLookupError(BookingEngineError):
    """The free/busy query failed or reported a calendar error."""


def _build_service(credentials: Credentials) -> Any:
    return build("calendar", "v3", credentials=credentials, cache_discovery=False)


def _rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


class GoogleCalendarClient:
    """Free/busy lookups against a person's primary (or configured) calendar."""

    def __init__(
        self,
        credentials_provider: CredentialsProvider,
        calendar_id: Optional[str] = None,
        service_factory: Optional[ServiceFactory] = None,
        on_refresh: Optional[RefreshCallback] = None,
    ) -> None:
        self.credentials_provider = credentials_provider
        self.calendar_id = calendar_id or settings.oracle.calendar_id
        self.service_factory = service_factory or _build_service
        self.on_refresh = on_refresh

    async def check_free(self, person_id: str, start: datetime, end: datetime) -> bool:
        credentials = await self.credentials_provider(person_id)
        if credentials is None:
            raise CalendarNotConnectedError(f"No Google Calendar connected for {person_id}")

        if credentials.expired and credentials.refresh_token:
            await asyncio.to_thread(credentials.refresh, Request())
            logger.info("Refreshed Google credentials for %s", person_id)
            if self.on_refresh is not None:
                await self.on_refresh(person_id, credentials)

        return await asyncio.to_thread(self._query_free_busy, credentials, start, end)

    def _query_free_busy(self, credentials: Credentials, start: datetime, end: datetime) -> bool:
        service = self.service_factory(credentials)
        body = {
            "timeMin": _rfc3339(start),
            "timeMax": _rfc3339(end),
            "items": [{"id": self.calendar_id}],
        }
        try:
            response = service.freebusy().query(body=body).execute()
        except HttpError as exc:
            raise CalendarLookupError(f"Free/busy query failed: {exc}") from exc

        calendar = response.get("calendars", {}).get(self.calendar_id, {})
        errors = calendar.get("errors")
        if errors:
            reasons = ", ".join(str(e.get("reason", "unknown")) for e in errors)
            raise CalendarLookupError(f"Calendar '{self.calendar_id}' returned errors: {reasons}")

        busy = calendar.get("busy", [])
        if busy:
            logger.debug("Calendar busy: %d interval(s) in window", len(busy))
        return not busy
