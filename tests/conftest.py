"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest

from fridge_tracker.adapters.google_calendar_client import (
    GoogleCalendarClient,
    GoogleCalendarError,
)
from fridge_tracker.config import Settings
from fridge_tracker.containers import AppContainer
from fridge_tracker.domain.identity import (
    GoogleAccount,
    SignInResult,
    SignInSuccess,
)
from fridge_tracker.domain.inventory import Category, Food, FoodWithCategory
from fridge_tracker.services.calendar_sync import CalendarSyncService
from fridge_tracker.services.identity import CALENDAR_SCOPE, IdentityBroker
from fridge_tracker.services.inventory import InventoryService, RecordStore
from fridge_tracker.services.live_query import LiveQuery
from fridge_tracker.services.pantry import PantryService

TOKYO = ZoneInfo("Asia/Tokyo")


@dataclass
class InMemoryRecordStore(RecordStore):
    """In-memory record store for tests."""

    categories: dict[int, Category] = field(default_factory=dict)
    foods: dict[int, Food] = field(default_factory=dict)
    category_stream: LiveQuery[Category] = field(default_factory=LiveQuery)
    food_stream: LiveQuery[FoodWithCategory] = field(default_factory=LiveQuery)
    next_food_id: int = 1
    insert_calls: int = 0

    def insert_category(self, category: Category) -> None:
        self.insert_categories([category])

    def insert_categories(self, categories: list[Category]) -> None:
        self.insert_calls += 1
        for category in categories:
            self.categories[category.id] = category
        self.refresh()

    def get_all_categories(self) -> LiveQuery[Category]:
        return self.category_stream

    def get_category_count(self) -> int:
        return len(self.categories)

    def insert_food(self, food: Food) -> Food:
        if food.category_id not in self.categories:
            raise RuntimeError("Foreign key constraint failed")
        stored = replace(food, id=food.id or self.next_food_id)
        self.next_food_id = max(self.next_food_id, stored.id) + 1
        self.foods[stored.id] = stored
        self.refresh()
        return stored

    def update_food(self, food: Food) -> None:
        self.foods[food.id] = food
        self.refresh()

    def delete_food(self, food: Food) -> None:
        self.delete_food_by_id(food.id)

    def delete_food_by_id(self, food_id: int) -> None:
        self.foods.pop(food_id, None)
        self.refresh()

    def get_food_by_id(self, food_id: int) -> Food | None:
        return self.foods.get(food_id)

    def get_all_foods_with_category(self) -> LiveQuery[FoodWithCategory]:
        return self.food_stream

    def refresh(self) -> None:
        self.category_stream.publish(
            sorted(self.categories.values(), key=lambda item: item.name)
        )
        self.food_stream.publish(
            FoodWithCategory(food=food, category=self.categories[food.category_id])
            for food in sorted(self.foods.values(), key=lambda item: item.expiry_date)
        )


@dataclass
class FakeIdentityBroker(IdentityBroker):
    """Identity broker that returns a scripted sign-in result."""

    account: GoogleAccount | None = None
    silent_result: SignInResult | None = None
    sign_out_calls: int = 0

    def is_signed_in(self) -> bool:
        return self.account is not None and CALENDAR_SCOPE in self.account.scopes

    def get_current_account(self) -> GoogleAccount | None:
        return self.account

    async def get_access_token(self) -> str | None:
        if self.account is None or not self.is_signed_in():
            return None
        return self.account.access_token

    async def try_silent_sign_in(self) -> SignInResult:
        result = self.silent_result or SignInSuccess(make_account())
        if isinstance(result, SignInSuccess):
            self.account = result.account
        return result

    async def sign_out(self) -> None:
        self.sign_out_calls += 1
        self.account = None


@dataclass
class FakeGoogleCalendarClient(GoogleCalendarClient):
    """Fake calendar client that records calls."""

    calendars: list[dict[str, object]] = field(default_factory=list)
    events: list[dict[str, object]] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)
    inserted: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    deleted: list[tuple[str, str]] = field(default_factory=list)
    list_events_args: dict[str, object] | None = None
    fail_on: set[str] = field(default_factory=set)

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise GoogleCalendarError(f"{name} failed", status_code=500)

    async def list_calendars(self, token: str) -> list[dict[str, object]]:
        self._record("list_calendars")
        return self.calendars

    async def create_calendar(
        self, token: str, summary: str, description: str, time_zone: str
    ) -> dict[str, object]:
        self._record("create_calendar")
        created = {"id": f"cal-{len(self.calendars) + 1}", "summary": summary}
        self.calendars.append(created)
        return created

    async def update_calendar_color(
        self, token: str, calendar_id: str, color_id: str
    ) -> None:
        self._record("update_calendar_color")

    async def list_events(  # noqa: PLR0913
        self,
        token: str,
        calendar_id: str,
        time_min: str,
        time_max: str,
        max_results: int,
    ) -> list[dict[str, object]]:
        self._record("list_events")
        self.list_events_args = {
            "calendar_id": calendar_id,
            "time_min": time_min,
            "time_max": time_max,
            "max_results": max_results,
        }
        return self.events

    async def insert_event(
        self, token: str, calendar_id: str, event: dict[str, object]
    ) -> dict[str, object]:
        self._record("insert_event")
        self.inserted.append((calendar_id, event))
        return {"id": f"evt-{len(self.inserted)}", **event}

    async def delete_event(self, token: str, calendar_id: str, event_id: str) -> None:
        self._record("delete_event")
        self.deleted.append((calendar_id, event_id))


def make_account() -> GoogleAccount:
    return GoogleAccount(access_token="access-token", scopes=frozenset({CALENDAR_SCOPE}))


def make_food(  # noqa: PLR0913
    name: str,
    category_id: int = 1,
    expiry_date: datetime | None = None,
    food_id: int | None = None,
    remaining_percentage: int = 100,
) -> Food:
    return Food(
        id=food_id,
        category_id=category_id,
        name=name,
        expiry_date=expiry_date or datetime(2024, 12, 25, 9, 0, tzinfo=TOKYO),
        remaining_percentage=remaining_percentage,
        created_at=datetime(2024, 12, 1, tzinfo=UTC),
    )


def make_sync_service(
    broker: FakeIdentityBroker, client: FakeGoogleCalendarClient
) -> CalendarSyncService:
    return CalendarSyncService(
        identity_broker=broker,
        calendar_client=client,
        timezone=TOKYO,
        calendar_name="食材",
        calendar_time_zone="Asia/Tokyo",
        calendar_color_id="5",
        displayed_month=(2024, 12),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        api_token="api-token",
        google_client_id="client-id",
        google_client_secret="client-secret",
    )


@pytest.fixture
def record_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def identity_broker() -> FakeIdentityBroker:
    return FakeIdentityBroker()


@pytest.fixture
def calendar_client() -> FakeGoogleCalendarClient:
    return FakeGoogleCalendarClient()


@pytest.fixture
def container(
    settings: Settings,
    record_store: InMemoryRecordStore,
    identity_broker: FakeIdentityBroker,
    calendar_client: FakeGoogleCalendarClient,
) -> AppContainer:
    inventory_service = InventoryService(record_store)
    calendar_sync_service = make_sync_service(identity_broker, calendar_client)
    pantry_service = PantryService(
        inventory=inventory_service,
        timezone=TOKYO,
        calendar_sync=calendar_sync_service,
    )

    async def close_resources() -> None:
        pantry_service.close()

    return AppContainer(
        settings=settings,
        identity_broker=identity_broker,
        inventory_service=inventory_service,
        calendar_sync_service=calendar_sync_service,
        pantry_service=pantry_service,
        close_resources=close_resources,
    )
