"""Pantry workflows combining local records with calendar mirroring."""

import logging
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, tzinfo

from fridge_tracker.domain.calendar import DayView, MonthView
from fridge_tracker.domain.errors import InventoryValidationError, SyncFailure
from fridge_tracker.domain.inventory import Food, FoodWithCategory
from fridge_tracker.services.calendar_math import (
    expiry_marker_dates,
    foods_expiring_on,
    month_grid,
)
from fridge_tracker.services.calendar_sync import CalendarSyncService
from fridge_tracker.services.food_filter import FoodFilter
from fridge_tracker.services.inventory import InventoryService

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AddFoodOutcome:
    """Result of adding a food; the local insert always happened."""

    food: Food
    calendar_event_id: str | None = None
    calendar_warning: str | None = None


@dataclass
class PantryService:
    """Application service behind the inventory and calendar screens."""

    inventory: InventoryService
    timezone: tzinfo
    calendar_sync: CalendarSyncService | None = None
    food_filter: FoodFilter = field(init=False)
    _adding: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self.food_filter = FoodFilter(self.inventory.foods_with_category())

    @property
    def filtered_foods(self) -> tuple[FoodWithCategory, ...]:
        return self.food_filter.results.value

    def search(self, query: str) -> None:
        """Update the search text of the owned filter."""
        self.food_filter.set_query(query)

    def select_category(self, category_id: int | None) -> None:
        """Update the category selection of the owned filter."""
        self.food_filter.select_category(category_id)

    async def add_food(
        self,
        name: str | None,
        category_id: int | None,
        expiry_date: datetime | None,
    ) -> AddFoodOutcome | None:
        """Insert a food and mirror its expiry date when the calendar is connected.

        A naive ``expiry_date`` is taken to be in the viewer time zone. Returns
        ``None`` when another add is still in progress.
        """
        if self._adding:
            _logger.debug("Already adding food, ignoring duplicate request")
            return None
        if not name or not name.strip():
            raise InventoryValidationError("Food name must not be blank")
        if category_id is None:
            raise InventoryValidationError("Category is required")
        if expiry_date is None:
            raise InventoryValidationError("Expiry date is required")
        if expiry_date.tzinfo is None:
            expiry_date = expiry_date.replace(tzinfo=self.timezone)

        self._adding = True
        try:
            food = self.inventory.insert_food(
                Food(
                    id=None,
                    category_id=category_id,
                    name=name,
                    expiry_date=expiry_date,
                    remaining_percentage=100,
                    created_at=datetime.now(tz=UTC),
                )
            )
            if self.calendar_sync is None or not self.calendar_sync.is_connected():
                return AddFoodOutcome(food=food)

            result = await self.calendar_sync.add_expiry_event(name, expiry_date)
            if isinstance(result, SyncFailure):
                _logger.warning(
                    "Food %s saved locally but not mirrored: %s",
                    food.id,
                    result.detail or result.kind.value,
                )
                return AddFoodOutcome(
                    food=food, calendar_warning=result.detail or result.kind.value
                )
            year, month = self.calendar_sync.displayed_month or (
                expiry_date.year,
                expiry_date.month,
            )
            await self.calendar_sync.fetch_event_dates(year, month)
            return AddFoodOutcome(food=food, calendar_event_id=result.value)
        finally:
            self._adding = False

    def update_remaining(self, food_id: int, percentage: int) -> Food | None:
        """Set the remaining percentage, clamped to 0..100."""
        food = self.inventory.get_food(food_id)
        if food is None:
            return None
        updated = replace(food, remaining_percentage=max(0, min(100, percentage)))
        self.inventory.update_food(updated)
        return updated

    def delete_food(self, food_id: int) -> bool:
        """Delete a food locally. Returns False when it does not exist."""
        food = self.inventory.get_food(food_id)
        if food is None:
            return False
        self.inventory.delete_food(food)
        return True

    async def month_view(self, year: int, month: int) -> MonthView:
        """Return the month grid with expiry and remote event markers."""
        foods = self.inventory.foods_with_category().value
        event_dates: frozenset[date] = frozenset()
        if self.calendar_sync is not None and self.calendar_sync.is_connected():
            event_dates = await self.calendar_sync.fetch_event_dates(year, month)
        return MonthView(
            year=year,
            month=month,
            cells=month_grid(year, month),
            expiry_dates=expiry_marker_dates(foods, self.timezone),
            event_dates=event_dates,
        )

    async def day_view(self, day: date) -> DayView:
        """Return foods expiring and remote events starting on a day."""
        foods = foods_expiring_on(
            self.inventory.foods_with_category().value, day, self.timezone
        )
        events = []
        if self.calendar_sync is not None and self.calendar_sync.is_connected():
            events = await self.calendar_sync.fetch_events_for_day(day)
        return DayView(day=day, foods=foods, events=events)

    def close(self) -> None:
        """Detach the owned filter from the record stream."""
        self.food_filter.close()
