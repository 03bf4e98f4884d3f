"""Tests for the Google Calendar free/busy client with a stubbed API service."""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from googleapiclient.errors import HttpError

from booking_engine.availability.google_client import (
    CalendarLookupError,
    CalendarNotConnectedError,
    GoogleCalendarClient,
)
from booking_engine.availability.oracle import AvailabilityOracle
from tests.conftest import at


def _service_returning(response: dict) -> MagicMock:
    service = MagicMock()
    service.freebusy.return_value.query.return_value.execute.return_value = response
    return service


def _credentials(expired: bool = False) -> MagicMock:
    credentials = MagicMock()
    credentials.expired = expired
    credentials.refresh_token = "refresh-token"
    return credentials


def _client(service: MagicMock, credentials=None, **kwargs) -> GoogleCalendarClient:
    provider = AsyncMock(return_value=credentials if credentials is not None else _credentials())
    return GoogleCalendarClient(
        provider, calendar_id="primary", service_factory=lambda creds: service, **kwargs
    )


class TestFreeBusyQuery:
    @pytest.mark.asyncio
    async def test_no_busy_intervals_means_free(self):
        service = _service_returning({"calendars": {"primary": {"busy": []}}})
        assert await _client(service).check_free("ana", at(10), at(10, 30)) is True

    @pytest.mark.asyncio
    async def test_busy_interval_means_busy(self):
        service = _service_returning({"calendars": {"primary": {"busy": [
            {"start": "2025-03-18T10:00:00Z", "end": "2025-03-18T11:00:00Z"},
        ]}}})
        assert await _client(service).check_free("ana", at(10), at(10, 30)) is False

    @pytest.mark.asyncio
    async def test_query_body(self):
        service = _service_returning({"calendars": {"primary": {"busy": []}}})
        await _client(service).check_free("ana", at(10), at(10, 30))
        body = service.freebusy.return_value.query.call_args.kwargs["body"]
        assert body["items"] == [{"id": "primary"}]
        assert body["timeMin"] == "2025-03-18T10:00:00+00:00"
        assert body["timeMax"] == "2025-03-18T10:30:00+00:00"

    @pytest.mark.asyncio
    async def test_naive_datetimes_are_sent_as_utc(self):
        service = _service_returning({"calendars": {"primary": {"busy": []}}})
        await _client(service).check_free("ana", datetime(2025, 3, 18, 10), datetime(2025, 3, 18, 11))
        body = service.freebusy.return_value.query.call_args.kwargs["body"]
        assert body["timeMin"].endswith("+00:00")

    @pytest.mark.asyncio
    async def test_calendar_errors_raise(self):
        service = _service_returning(
            {"calendars": {"primary": {"errors": [{"reason": "notFound"}]}}}
        )
        with pytest.raises(CalendarLookupError, match="notFound"):
            await _client(service).check_free("ana", at(10), at(10, 30))

    @pytest.mark.asyncio
    async def test_http_error_raises_lookup_error(self):
        service = MagicMock()
        service.freebusy.return_value.query.return_value.execute.side_effect = HttpError(
            MagicMock(status=403, reason="Forbidden"),
            b'{"error": {"message": "Forbidden"}}',
        )
        with pytest.raises(CalendarLookupError):
            await _client(service).check_free("ana", at(10), at(10, 30))


class TestCredentials:
    @pytest.mark.asyncio
    async def test_missing_credentials_raise(self):
        client = GoogleCalendarClient(AsyncMock(return_value=None), calendar_id="primary")
        with pytest.raises(CalendarNotConnectedError):
            await client.check_free("ana", at(10), at(10, 30))

    @pytest.mark.asyncio
    async def test_expired_credentials_are_refreshed_and_reported(self):
        credentials = _credentials(expired=True)
        on_refresh = AsyncMock()
        service = _service_returning({"calendars": {"primary": {"busy": []}}})
        client = _client(service, credentials=credentials, on_refresh=on_refresh)

        assert await client.check_free("ana", at(10), at(10, 30)) is True
        credentials.refresh.assert_called_once()
        on_refresh.assert_awaited_once_with("ana", credentials)

    @pytest.mark.asyncio
    async def test_valid_credentials_are_not_refreshed(self):
        credentials = _credentials(expired=False)
        service = _service_returning({"calendars": {"primary": {"busy": []}}})
        await _client(service, credentials=credentials).check_free("ana", at(10), at(10, 30))
        credentials.refresh.assert_not_called()


class TestBehindOracle:
    @pytest.mark.asyncio
    async def test_not_connected_is_busy(self):
        client = GoogleCalendarClient(AsyncMock(return_value=None), calendar_id="primary")
        oracle = AvailabilityOracle(client, timeout_seconds=1.0)
        assert await oracle.is_available("ana", at(10), at(10, 30)) is False
