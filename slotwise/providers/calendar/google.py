"""Google Calendar v3 provider over plain REST."""

from collections.abc import Awaitable, Callable
from datetime import date, datetime, time, timedelta
from typing import Any

import httpx

from slotwise.domain import User
from slotwise.domain.timeutils import parse_utc_offset
from slotwise.observability.logging import get_logger
from slotwise.providers.calendar.base import (
    CalendarAuthExpiredError,
    CalendarError,
    CalendarEvent,
    CalendarEventData,
    CalendarProvider,
    CalendarTransientError,
    CreatedEvent,
)

logger = get_logger(__name__)

# Resolves a user's current OAuth access token. Raising CalendarAuthExpiredError
# from here is the way a token source reports a revoked refresh token.
TokenSource = Callable[[User], Awaitable[str]]


class GoogleCalendarProvider(CalendarProvider):
    """Calendar provider backed by the Google Calendar REST API.

    OAuth is handled elsewhere; the provider only needs a token source that
    hands out a valid access token per user.
    """

    def __init__(
        self,
        token_source: TokenSource,
        base_url: str = "https://www.googleapis.com/calendar/v3",
        calendar_id: str = "primary",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize Google Calendar provider.

        Args:
            token_source: Async callable returning an access token for a user
            base_url: Calendar API base URL
            calendar_id: Calendar to read and write
            timeout: Request timeout in seconds
            client: Pre-built HTTP client (tests pass a mock transport)
        """
        self._token_source = token_source
        self._base_url = base_url.rstrip("/")
        self._calendar_id = calendar_id
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def provider_name(self) -> str:
        return "google"

    async def close(self) -> None:
        await self._client.aclose()

    async def list_events(
        self, user: User, start: datetime, end: datetime
    ) -> list[CalendarEvent]:
        params = {
            "timeMin": start.isoformat(),
            "timeMax": end.isoformat(),
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": "2500",
        }
        events: list[CalendarEvent] = []
        page_token: str | None = None
        while True:
            if page_token:
                params["pageToken"] = page_token
            data = await self._request("GET", user, "/events", params=params)
            for item in data.get("items", []):
                event = self._parse_event(item, user)
                if event is not None:
                    events.append(event)
            page_token = data.get("nextPageToken")
            if not page_token:
                break

        logger.debug(
            "google_calendar_events_listed",
            user_id=str(user.id),
            count=len(events),
        )
        return events

    async def create_event(self, user: User, data: CalendarEventData) -> CreatedEvent:
        body = await self._request("POST", user, "/events", json=self._event_body(data))
        event_id = body.get("id")
        if not event_id:
            raise CalendarError("Google Calendar returned an event without an id")
        return CreatedEvent(id=event_id)

    async def update_event(
        self, user: User, event_id: str, data: CalendarEventData
    ) -> None:
        await self._request(
            "PATCH", user, f"/events/{event_id}", json=self._event_body(data)
        )

    async def delete_event(self, user: User, event_id: str) -> None:
        await self._request("DELETE", user, f"/events/{event_id}")

    async def _request(
        self,
        method: str,
        user: User,
        path: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        token = await self._token_source(user)
        url = f"{self._base_url}/calendars/{self._calendar_id}{path}"
        try:
            response = await self._client.request(
                method,
                url,
                headers={"Authorization": f"Bearer {token}"},
                **kwargs,
            )
        except httpx.HTTPError as e:
            raise CalendarTransientError(f"Google Calendar request failed: {e}", e) from e

        if response.status_code == 401 or _is_invalid_grant(response):
            logger.warning(
                "google_calendar_auth_expired",
                user_id=str(user.id),
                status_code=response.status_code,
            )
            raise CalendarAuthExpiredError("Google Calendar authorization expired")

        if response.status_code == 429 or response.status_code >= 500:
            raise CalendarTransientError(
                f"Google Calendar error ({response.status_code}): {response.text[:200]}"
            )

        if response.status_code >= 400:
            raise CalendarError(
                f"Google Calendar error ({response.status_code}): {response.text[:200]}"
            )

        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    def _event_body(self, data: CalendarEventData) -> dict[str, Any]:
        tz = parse_utc_offset(data.utc_offset)
        body: dict[str, Any] = {
            "summary": data.summary,
            "start": {"dateTime": data.start.astimezone(tz).isoformat()},
            "end": {"dateTime": data.end.astimezone(tz).isoformat()},
        }
        if data.description:
            body["description"] = data.description
        return body

    def _parse_event(self, item: dict[str, Any], user: User) -> CalendarEvent | None:
        """Normalize one API item; events without usable times are dropped."""
        start_raw = item.get("start") or {}
        end_raw = item.get("end") or {}
        tz = parse_utc_offset(user.utc_offset)
        try:
            if "dateTime" in start_raw and "dateTime" in end_raw:
                start = datetime.fromisoformat(start_raw["dateTime"])
                end = datetime.fromisoformat(end_raw["dateTime"])
                all_day = False
            elif "date" in start_raw:
                # All-day events span local midnight to next local midnight
                start_day = date.fromisoformat(start_raw["date"])
                end_day = (
                    date.fromisoformat(end_raw["date"])
                    if "date" in end_raw
                    else start_day + timedelta(days=1)
                )
                start = datetime.combine(start_day, time.min, tzinfo=tz)
                end = datetime.combine(end_day, time.min, tzinfo=tz)
                all_day = True
            else:
                return None
        except ValueError:
            logger.debug("google_calendar_event_unparseable", event_id=item.get("id"))
            return None

        if start.tzinfo is None:
            start = start.replace(tzinfo=tz)
        if end.tzinfo is None:
            end = end.replace(tzinfo=tz)
        if end <= start:
            return None

        return CalendarEvent(
            id=str(item.get("id", "")),
            start=start,
            end=end,
            title=item.get("summary") or "Untitled Event",
            all_day=all_day,
        )


def _is_invalid_grant(response: httpx.Response) -> bool:
    if response.status_code not in (400, 401):
        return False
    try:
        payload = response.json()
    except ValueError:
        return False
    return isinstance(payload, dict) and payload.get("error") == "invalid_grant"
