"""Google Calendar API v3 client."""

from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

import httpx

DEFAULT_BASE_URL = "https://www.googleapis.com/calendar/v3"


class GoogleCalendarError(RuntimeError):
    """Raised when the Google Calendar API call fails for any reason."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GoogleCalendarClient(Protocol):
    """Interface for Google Calendar API interactions."""

    async def list_calendars(self, token: str) -> list[dict[str, object]]:
        """Return the account's calendar list entries."""

    async def create_calendar(
        self, token: str, summary: str, description: str, time_zone: str
    ) -> dict[str, object]:
        """Create a secondary calendar and return it."""

    async def update_calendar_color(
        self, token: str, calendar_id: str, color_id: str
    ) -> None:
        """Set the colour of a calendar list entry."""

    async def list_events(  # noqa: PLR0913
        self,
        token: str,
        calendar_id: str,
        time_min: str,
        time_max: str,
        max_results: int,
    ) -> list[dict[str, object]]:
        """Return single-instance events in a window ordered by start time."""

    async def insert_event(
        self, token: str, calendar_id: str, event: dict[str, object]
    ) -> dict[str, object]:
        """Insert an event and return it."""

    async def delete_event(self, token: str, calendar_id: str, event_id: str) -> None:
        """Delete an event by id."""


@dataclass
class HttpxGoogleCalendarClient(GoogleCalendarClient):
    """HTTPX-backed Google Calendar client."""

    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str = DEFAULT_BASE_URL) -> "HttpxGoogleCalendarClient":
        """Create a calendar client with a managed httpx session."""
        return cls(base_url=base_url.rstrip("/"), http_client=httpx.AsyncClient())

    async def list_calendars(self, token: str) -> list[dict[str, object]]:
        """List calendars visible to the account."""
        payload = await self._request(token, "GET", "/users/me/calendarList")
        return list(payload.get("items") or [])

    async def create_calendar(
        self, token: str, summary: str, description: str, time_zone: str
    ) -> dict[str, object]:
        """Create a secondary calendar."""
        return await self._request(
            token,
            "POST",
            "/calendars",
            json={
                "summary": summary,
                "description": description,
                "timeZone": time_zone,
            },
        )

    async def update_calendar_color(
        self, token: str, calendar_id: str, color_id: str
    ) -> None:
        """Patch the calendar list entry colour."""
        await self._request(
            token,
            "PATCH",
            f"/users/me/calendarList/{quote(calendar_id, safe='')}",
            json={"colorId": color_id},
        )

    async def list_events(  # noqa: PLR0913
        self,
        token: str,
        calendar_id: str,
        time_min: str,
        time_max: str,
        max_results: int,
    ) -> list[dict[str, object]]:
        """List events with recurring events expanded into instances."""
        payload = await self._request(
            token,
            "GET",
            f"/calendars/{quote(calendar_id, safe='')}/events",
            params={
                "timeMin": time_min,
                "timeMax": time_max,
                "singleEvents": "true",
                "orderBy": "startTime",
                "maxResults": max_results,
            },
        )
        return list(payload.get("items") or [])

    async def insert_event(
        self, token: str, calendar_id: str, event: dict[str, object]
    ) -> dict[str, object]:
        """Insert an event into a calendar."""
        return await self._request(
            token,
            "POST",
            f"/calendars/{quote(calendar_id, safe='')}/events",
            json=event,
        )

    async def delete_event(self, token: str, calendar_id: str, event_id: str) -> None:
        """Delete an event from a calendar."""
        await self._request(
            token,
            "DELETE",
            f"/calendars/{quote(calendar_id, safe='')}/events/{quote(event_id, safe='')}",
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(
        self,
        token: str,
        method: str,
        path: str,
        *,
        params: dict[str, object] | None = None,
        json: dict[str, object] | None = None,
    ) -> dict[str, object]:
        try:
            response = await self.http_client.request(
                method,
                f"{self.base_url}{path}",
                params=params,
                json=json,
                headers={"Authorization": f"Bearer {token}"},
                timeout=15,
            )
        except httpx.HTTPError as exc:
            raise GoogleCalendarError(f"Google Calendar request failed: {exc}") from exc
        if response.is_error:
            raise GoogleCalendarError(
                f"Google Calendar {method} {path} failed: {_error_message(response)}",
                status_code=response.status_code,
            )
        if response.status_code == 204 or not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as exc:
            raise GoogleCalendarError(
                "Google Calendar returned invalid JSON",
                status_code=response.status_code,
            ) from exc
        if not isinstance(payload, dict):
            raise GoogleCalendarError(
                "Google Calendar returned an unexpected payload",
                status_code=response.status_code,
            )
        return payload


def _error_message(response: httpx.Response) -> str:
    """Extract a short error message from a Google API error response."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return f"{response.status_code} {error['message']}"
        if isinstance(error, str):
            return f"{response.status_code} {error}"
    return f"{response.status_code} {response.text.strip()[:200]}"
