"""
Calendar availability oracle.

Answers "is this person free for [start, end)?" by asking an external
calendar through an injected ``CalendarClient``. The oracle never raises:
missing credentials, API errors, network failures and timeouts all come
back as ``False``. Treating unknown as busy can under-assign but never
double-books.
"""

import asyncio
from datetime import datetime
from typing import Optional, Protocol

from booking_engine.config import settings
from booking_engine.logging_context import get_attempt_logger

logger = get_attempt_logger(__name__)


class CalendarClient(Protocol):
    """Provider-specific free/busy lookup. May raise on any failure."""

    async def check_free(self, person_id: str, start: datetime, end: datetime) -> bool:
        ...


class AvailabilityOracle:
    """Boolean, exception-free wrapper around a ``CalendarClient``."""

    def __init__(self, client: CalendarClient, timeout_seconds: Optional[float] = None) -> None:
        self.client = client
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.oracle.timeout_seconds
        )

    async def is_available(self, person_id: str, start: datetime, end: datetime) -> bool:
        try:
            free = await asyncio.wait_for(
                self.client.check_free(person_id, start, end),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Calendar lookup for %s timed out after %.1fs; treating as busy",
                person_id, self.timeout_seconds,
            )
            return False
        except Exception as exc:
            logger.warning(
                "Calendar lookup for %s failed (%s: %s); treating as busy",
                person_id, type(exc).__name__, exc,
            )
            return False
        return bool(free)

    async def check_many(
        self, person_ids: list[str], start: datetime, end: datetime
    ) -> list[bool]:
        """Check several people concurrently; results keep input order."""
        return list(await asyncio.gather(
            *(self.is_available(pid, start, end) for pid in person_ids)
        ))
