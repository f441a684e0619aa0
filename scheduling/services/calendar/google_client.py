"""
Google Calendar API client.
Keeps booked events in sync when attendees change.
"""

import asyncio

import httpx

from scheduling.features.bookings.domain import CalendarEvent
from scheduling.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

CALENDAR_API_BASE_URL = "https://www.googleapis.com/calendar/v3"
CALENDAR_PRIMARY = "primary"

REQUEST_TIMEOUT = 30  # seconds
MAX_RETRIES = 3
BACKOFF_FACTOR = 2
RETRY_STATUS_CODES = {429, 500, 502, 503, 504}


class GoogleCalendarError(Exception):
    """Custom exception for Google Calendar API errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int | None = None,
        response_data: dict | None = None,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.status_code = status_code
        self.response_data = response_data or {}


class GoogleCalendarService:
    """
    Calendar adapter bound to one OAuth credential.
    """

    def __init__(self, access_token: str, client: httpx.AsyncClient | None = None):
        self._access_token = access_token
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(REQUEST_TIMEOUT),
            limits=httpx.Limits(max_keepalive_connections=20, max_connections=50),
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request_with_retry(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request with retry and backoff."""
        for attempt in range(1, MAX_RETRIES + 1):
            try:
                response = await self._client.request(method, url, **kwargs)
                if response.status_code in RETRY_STATUS_CODES and attempt < MAX_RETRIES:
                    backoff = BACKOFF_FACTOR * (2 ** (attempt - 1))
                    logger.debug(
                        "Calendar API retrying request",
                        attempt=attempt,
                        status_code=response.status_code,
                        backoff_seconds=backoff,
                    )
                    await asyncio.sleep(backoff)
                    continue
                return response
            except httpx.RequestError as e:
                if attempt >= MAX_RETRIES:
                    raise
                backoff = BACKOFF_FACTOR * (2 ** (attempt - 1))
                logger.debug(
                    "Calendar API request error, retrying",
                    attempt=attempt,
                    error=str(e),
                    backoff_seconds=backoff,
                )
                await asyncio.sleep(backoff)
        raise RuntimeError("Calendar API retry loop exhausted")

    def _get_auth_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _handle_api_response(self, response: httpx.Response, operation: str) -> dict:
        if response.is_success:
            return response.json() if response.text else {}

        try:
            error_info = response.json().get("error", {})
        except ValueError:
            error_info = {}

        logger.error(
            f"Calendar API {operation} failed",
            status_code=response.status_code,
            error_message=error_info.get("message"),
        )
        raise GoogleCalendarError(
            error_info.get("message", f"Calendar API error (HTTP {response.status_code})"),
            error_code=str(error_info.get("code", response.status_code)),
            status_code=response.status_code,
            response_data=error_info,
        )

    async def update_event(
        self, uid: str, event: CalendarEvent, external_calendar_id: str | None = None
    ) -> dict:
        """
        Push the booking's current title, times and attendee list onto the
        provider event.

        Raises:
            GoogleCalendarError: If the API rejects the update
        """
        calendar_id = external_calendar_id or CALENDAR_PRIMARY
        url = f"{CALENDAR_API_BASE_URL}/calendars/{calendar_id}/events/{uid}"
        body = {
            "summary": event.title,
            "description": event.description or "",
            "start": {"dateTime": event.start_time.isoformat(), "timeZone": event.organizer.time_zone},
            "end": {"dateTime": event.end_time.isoformat(), "timeZone": event.organizer.time_zone},
            "attendees": [
                {"email": a.email, "displayName": a.name, "responseStatus": "accepted"}
                for a in event.attendees
            ],
        }

        response = await self._request_with_retry(
            "PATCH", url, headers=self._get_auth_headers(), json=body, params={"sendUpdates": "none"}
        )
        data = self._handle_api_response(response, "update_event")
        logger.info("Calendar event updated", event_uid=uid, calendar_id=calendar_id)
        return data
