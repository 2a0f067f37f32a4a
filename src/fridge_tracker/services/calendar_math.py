"""Pure date helpers for the month calendar view."""

import calendar
from collections.abc import Iterable
from datetime import date, datetime, timedelta, tzinfo

from fridge_tracker.domain.calendar import DayCell
from fridge_tracker.domain.inventory import FoodWithCategory

GRID_ROWS = 6
GRID_COLUMNS = 7
GRID_SIZE = GRID_ROWS * GRID_COLUMNS


def month_grid(year: int, month: int) -> list[DayCell]:
    """Return 42 cells covering the month, weeks starting on Sunday."""
    first = date(year, month, 1)
    # weekday(): Monday=0 .. Sunday=6, shift so Sunday is column 0
    leading = (first.weekday() + 1) % GRID_COLUMNS
    start = first - timedelta(days=leading)
    return [
        DayCell(day=day, in_month=(day.year, day.month) == (year, month))
        for day in (start + timedelta(days=offset) for offset in range(GRID_SIZE))
    ]


def day_bucket(instant: datetime, tz: tzinfo) -> date:
    """Return the calendar date of an instant in the given time zone."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=tz)
    return instant.astimezone(tz).date()


def is_same_day(first: datetime, second: datetime, tz: tzinfo) -> bool:
    """Return True when both instants fall on the same day in ``tz``."""
    return day_bucket(first, tz) == day_bucket(second, tz)


def start_of_day(day: date, tz: tzinfo) -> datetime:
    """Return local midnight for a date."""
    return datetime(day.year, day.month, day.day, tzinfo=tz)


def month_window(year: int, month: int, tz: tzinfo) -> tuple[datetime, datetime]:
    """Return the half-open window ``[first of month, first of next month)``."""
    _, days_in_month = calendar.monthrange(year, month)
    first = date(year, month, 1)
    return start_of_day(first, tz), start_of_day(first + timedelta(days=days_in_month), tz)


def expiry_marker_dates(
    foods: Iterable[FoodWithCategory], tz: tzinfo
) -> frozenset[date]:
    """Return the distinct expiry days of the given foods."""
    return frozenset(day_bucket(item.food.expiry_date, tz) for item in foods)


def foods_expiring_on(
    foods: Iterable[FoodWithCategory], day: date, tz: tzinfo
) -> list[FoodWithCategory]:
    """Return foods whose expiry falls on ``day``."""
    return [item for item in foods if day_bucket(item.food.expiry_date, tz) == day]
