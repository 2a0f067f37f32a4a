"""Mirror food expiry dates into a dedicated Google calendar."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum

from pydantic import ValidationError

from fridge_tracker.adapters.google_calendar_client import (
    GoogleCalendarClient,
    GoogleCalendarError,
)
from fridge_tracker.adapters.google_calendar_models import (
    GoogleCalendarListEntry,
    GoogleEvent,
    GoogleEventDateTime,
)
from fridge_tracker.domain.calendar import CalendarEvent
from fridge_tracker.domain.errors import (
    SyncErrorKind,
    SyncFailure,
    SyncResult,
    SyncSuccess,
)
from fridge_tracker.domain.identity import (
    GoogleAccount,
    NeedInteractiveSignIn,
    SignInCancelled,
    SignInError,
    SignInResult,
    SignInSuccess,
)
from fridge_tracker.services.calendar_math import day_bucket, month_window, start_of_day
from fridge_tracker.services.identity import IdentityBroker

PRIMARY_CALENDAR_ID = "primary"
MAX_EVENTS_PER_MONTH = 100
FOOD_CALENDAR_DESCRIPTION = "冷蔵庫データベースアプリの食材期限管理用カレンダー"
EXPIRY_EVENT_TITLE = "🍴 {name} 期限切れ"
EXPIRY_EVENT_DESCRIPTION = "冷蔵庫データベースアプリから追加された食材の期限日です。"
UNTITLED_EVENT = "(タイトルなし)"

_logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    """Connection state of the remote calendar account."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass
class CalendarSyncService:
    """Owns the remote calendar connection and its in-memory caches.

    Reads cover the whole account through the primary calendar, writes only
    ever target the dedicated food calendar. Every remote call is attempted
    once; failures come back as ``SyncFailure`` (writes) or empty results
    (reads) and are never retried.
    """

    identity_broker: IdentityBroker
    calendar_client: GoogleCalendarClient
    timezone: tzinfo
    calendar_name: str
    calendar_time_zone: str
    calendar_color_id: str
    event_dates: frozenset[date] = field(default_factory=frozenset)
    error_message: str | None = None
    displayed_month: tuple[int, int] | None = None
    _state: ConnectionState = field(default=ConnectionState.DISCONNECTED, init=False)
    _food_calendar_id: str | None = field(default=None, init=False, repr=False)
    _calendar_lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    def __post_init__(self) -> None:
        if self.identity_broker.is_signed_in():
            self._state = ConnectionState.CONNECTED
        if self.displayed_month is None:
            today = datetime.now(tz=self.timezone)
            self.displayed_month = (today.year, today.month)

    @property
    def state(self) -> ConnectionState:
        return self._state

    def is_connected(self) -> bool:
        """Return True when the broker holds an account with calendar scope."""
        return self.identity_broker.is_signed_in()

    async def connect(self) -> SyncResult[GoogleAccount]:
        """Try silent reauthentication and fetch the displayed month on success."""
        self._state = ConnectionState.CONNECTING
        self.error_message = None
        try:
            result = await self.identity_broker.try_silent_sign_in()
        except Exception as exc:
            _logger.exception("Silent sign-in raised")
            self._state = ConnectionState.DISCONNECTED
            self.error_message = f"Sign-in failed: {exc}"
            return SyncFailure(SyncErrorKind.PROVIDER_ERROR, self.error_message)
        return await self.handle_sign_in_result(result)

    async def handle_sign_in_result(
        self, result: SignInResult
    ) -> SyncResult[GoogleAccount]:
        """Apply the terminal outcome of a silent or interactive sign-in."""
        if isinstance(result, SignInSuccess):
            _logger.info("Calendar account connected")
            self._state = ConnectionState.CONNECTED
            self.error_message = None
            year, month = self.displayed_month or _current_month(self.timezone)
            await self.fetch_event_dates(year, month)
            return SyncSuccess(result.account)

        self._state = ConnectionState.DISCONNECTED
        if isinstance(result, NeedInteractiveSignIn):
            _logger.info("Interactive sign-in required")
            return SyncFailure(SyncErrorKind.NEEDS_INTERACTIVE_SIGN_IN)
        if isinstance(result, SignInCancelled):
            _logger.info("Sign-in cancelled")
            self.error_message = "Sign-in was cancelled"
            return SyncFailure(SyncErrorKind.CANCELLED, self.error_message)
        if isinstance(result, SignInError):
            _logger.error("Sign-in failed: %s", result.message)
            self.error_message = result.message
            return SyncFailure(SyncErrorKind.PROVIDER_ERROR, result.message)
        raise TypeError(f"Unknown sign-in result: {result!r}")

    async def disconnect(self) -> None:
        """Sign out and clear cached calendar state; remote data is left intact."""
        await self.identity_broker.sign_out()
        self._food_calendar_id = None
        self.event_dates = frozenset()
        self.error_message = None
        self._state = ConnectionState.DISCONNECTED
        _logger.info("Calendar account disconnected")

    async def get_or_create_food_calendar(self) -> str:
        """Return the dedicated calendar id, creating the calendar if needed.

        Falls back to the primary calendar when discovery or creation fails.
        """
        if self._food_calendar_id is not None:
            return self._food_calendar_id
        token = await self._access_token()
        if token is None:
            return PRIMARY_CALENDAR_ID
        async with self._calendar_lock:
            if self._food_calendar_id is not None:
                return self._food_calendar_id
            try:
                calendar_id = await self._find_food_calendar(token)
                if calendar_id is None:
                    calendar_id = await self._create_food_calendar(token)
            except (GoogleCalendarError, ValidationError) as exc:
                _logger.error(
                    "Failed to get or create food calendar, using primary: %s", exc
                )
                return PRIMARY_CALENDAR_ID
            self._food_calendar_id = calendar_id
            return calendar_id

    async def add_expiry_event(
        self, food_name: str, expiry_date: datetime
    ) -> SyncResult[str]:
        """Insert an all-day expiry event and return its provider id."""
        token = await self._access_token()
        if token is None:
            _logger.warning("Not signed in, skipping expiry event for %s", food_name)
            return SyncFailure(SyncErrorKind.NOT_SIGNED_IN)
        body = build_expiry_event(food_name, expiry_date, self.timezone)
        calendar_id = await self.get_or_create_food_calendar()
        try:
            created = await self.calendar_client.insert_event(token, calendar_id, body)
        except GoogleCalendarError as exc:
            _logger.warning("Failed to add expiry event for %s: %s", food_name, exc)
            return SyncFailure(SyncErrorKind.PROVIDER_ERROR, str(exc))
        event_id = str(created.get("id") or "")
        if not event_id:
            _logger.warning("Expiry event for %s created without an id", food_name)
            return SyncFailure(SyncErrorKind.PROVIDER_ERROR, "Created event has no id")
        _logger.info("Expiry event created: %s", event_id)
        return SyncSuccess(event_id)

    async def delete_event(self, event_id: str) -> SyncResult[None]:
        """Delete an event from the dedicated calendar."""
        token = await self._access_token()
        if token is None:
            return SyncFailure(SyncErrorKind.NOT_SIGNED_IN)
        calendar_id = await self.get_or_create_food_calendar()
        try:
            await self.calendar_client.delete_event(token, calendar_id, event_id)
        except GoogleCalendarError as exc:
            _logger.warning("Failed to delete event %s: %s", event_id, exc)
            return SyncFailure(SyncErrorKind.PROVIDER_ERROR, str(exc))
        _logger.info("Event deleted: %s", event_id)
        return SyncSuccess(None)

    async def fetch_events(self, year: int, month: int) -> SyncResult[list[CalendarEvent]]:
        """Fetch events of the primary calendar for one month."""
        token = await self._access_token()
        if token is None:
            return SyncFailure(SyncErrorKind.NOT_SIGNED_IN)
        time_min, time_max = month_window(year, month, self.timezone)
        try:
            items = await self.calendar_client.list_events(
                token,
                PRIMARY_CALENDAR_ID,
                time_min=time_min.isoformat(),
                time_max=time_max.isoformat(),
                max_results=MAX_EVENTS_PER_MONTH,
            )
        except GoogleCalendarError as exc:
            _logger.error("Failed to fetch events for %s/%s: %s", year, month, exc)
            return SyncFailure(SyncErrorKind.PROVIDER_ERROR, str(exc))
        events = [
            event
            for event in (_parse_event(item, self.timezone) for item in items)
            if event is not None
        ]
        _logger.debug("Fetched %s events for %s/%s", len(events), year, month)
        return SyncSuccess(events)

    async def fetch_event_dates(self, year: int, month: int) -> frozenset[date]:
        """Return the days of the month that have events, or nothing on failure."""
        self.displayed_month = (year, month)
        result = await self.fetch_events(year, month)
        if isinstance(result, SyncFailure):
            self.event_dates = frozenset()
            return self.event_dates
        self.event_dates = frozenset(
            day_bucket(event.start_time, self.timezone) for event in result.value
        )
        return self.event_dates

    async def fetch_events_for_day(self, day: date | datetime) -> list[CalendarEvent]:
        """Return events starting on the given day, or nothing on failure."""
        target = day_bucket(day, self.timezone) if isinstance(day, datetime) else day
        result = await self.fetch_events(target.year, target.month)
        if isinstance(result, SyncFailure):
            return []
        return [
            event
            for event in result.value
            if day_bucket(event.start_time, self.timezone) == target
        ]

    async def _access_token(self) -> str | None:
        if not self.is_connected():
            return None
        token = await self.identity_broker.get_access_token()
        if token is None and not self.is_connected():
            self._state = ConnectionState.DISCONNECTED
        return token

    async def _find_food_calendar(self, token: str) -> str | None:
        for item in await self.calendar_client.list_calendars(token):
            entry = GoogleCalendarListEntry.model_validate(item)
            if entry.summary == self.calendar_name:
                _logger.info("Found existing food calendar: %s", entry.id)
                return entry.id
        return None

    async def _create_food_calendar(self, token: str) -> str:
        created = await self.calendar_client.create_calendar(
            token,
            summary=self.calendar_name,
            description=FOOD_CALENDAR_DESCRIPTION,
            time_zone=self.calendar_time_zone,
        )
        calendar_id = str(created["id"]) if created.get("id") else None
        if calendar_id is None:
            raise GoogleCalendarError("Created calendar has no id")
        _logger.info("Created food calendar: %s", calendar_id)
        try:
            await self.calendar_client.update_calendar_color(
                token, calendar_id, self.calendar_color_id
            )
        except GoogleCalendarError as exc:
            _logger.warning("Failed to set food calendar colour: %s", exc)
        return calendar_id


def build_expiry_event(
    food_name: str, expiry_date: datetime, tz: tzinfo
) -> dict[str, object]:
    """Build an all-day event body; the end date is exclusive."""
    start = day_bucket(expiry_date, tz)
    end = start + timedelta(days=1)
    return {
        "summary": EXPIRY_EVENT_TITLE.format(name=food_name),
        "description": EXPIRY_EVENT_DESCRIPTION,
        "start": {"date": start.isoformat()},
        "end": {"date": end.isoformat()},
    }


def _current_month(tz: tzinfo) -> tuple[int, int]:
    today = datetime.now(tz=tz)
    return today.year, today.month


def _parse_event(item: dict[str, object], tz: tzinfo) -> CalendarEvent | None:
    try:
        event = GoogleEvent.model_validate(item)
    except ValidationError as exc:
        _logger.error("Failed to parse event %s: %s", item.get("id"), exc)
        return None
    start = _parse_event_time(event.start, tz)
    end = _parse_event_time(event.end, tz)
    if start is None or end is None:
        _logger.warning("Event %s has no start/end time", event.id)
        return None
    return CalendarEvent(
        id=event.id or "",
        title=event.summary or UNTITLED_EVENT,
        start_time=start,
        end_time=end,
        is_all_day=event.start is not None and event.start.date is not None,
    )


def _parse_event_time(value: GoogleEventDateTime | None, tz: tzinfo) -> datetime | None:
    if value is None:
        return None
    try:
        if value.date_time:
            parsed = datetime.fromisoformat(value.date_time.replace("Z", "+00:00"))
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=tz)
        if value.date:
            return start_of_day(date.fromisoformat(value.date), tz)
    except ValueError:
        _logger.warning("Unparseable event time: %s", value)
    return None
