"""Domain models for calendar views and remote events."""

from dataclasses import dataclass
from datetime import date, datetime

from fridge_tracker.domain.inventory import FoodWithCategory


@dataclass(frozen=True)
class CalendarEvent:
    """Event read from the remote calendar for display."""

    id: str
    title: str
    start_time: datetime
    end_time: datetime
    is_all_day: bool = False


@dataclass(frozen=True)
class DayCell:
    """Single cell of a month grid."""

    day: date
    in_month: bool


@dataclass(frozen=True)
class MonthView:
    """Month grid decorated with marker dates."""

    year: int
    month: int
    cells: list[DayCell]
    expiry_dates: frozenset[date]
    event_dates: frozenset[date]


@dataclass(frozen=True)
class DayView:
    """Foods expiring and remote events starting on one day."""

    day: date
    foods: list[FoodWithCategory]
    events: list[CalendarEvent]
