"""Tests for calendar date helpers."""

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

from fridge_tracker.domain.inventory import Category, FoodWithCategory
from fridge_tracker.services.calendar_math import (
    day_bucket,
    expiry_marker_dates,
    foods_expiring_on,
    is_same_day,
    month_grid,
    month_window,
)
from tests.conftest import make_food

TOKYO = ZoneInfo("Asia/Tokyo")


def test_month_grid_always_has_42_cells_and_one_first_day() -> None:
    for year in (2023, 2024):
        for month in range(1, 13):
            cells = month_grid(year, month)
            firsts = [cell for cell in cells if cell.day == date(year, month, 1)]

            assert len(cells) == 42
            assert len(firsts) == 1
            assert firsts[0].in_month
            assert cells[0].day.weekday() == 6
            assert all(
                later.day - earlier.day == timedelta(days=1)
                for earlier, later in zip(cells, cells[1:], strict=False)
            )


def test_month_grid_pads_with_adjacent_months() -> None:
    cells = month_grid(2024, 12)

    assert cells[0].day == date(2024, 12, 1)
    assert cells[30].day == date(2024, 12, 31)
    assert cells[31].day == date(2025, 1, 1)
    assert not cells[31].in_month

    march = month_grid(2024, 3)
    assert march[0].day == date(2024, 2, 25)
    assert not march[0].in_month


def test_month_grid_is_repeatable() -> None:
    assert month_grid(2024, 2) == month_grid(2024, 2)


def test_day_bucket_ignores_time_of_day() -> None:
    morning = datetime(2024, 5, 10, 0, 0, 1, tzinfo=TOKYO)
    night = datetime(2024, 5, 10, 23, 59, 59, tzinfo=TOKYO)

    assert day_bucket(morning, TOKYO) == day_bucket(night, TOKYO) == date(2024, 5, 10)
    assert is_same_day(morning, night, TOKYO)
    assert is_same_day(morning, morning, TOKYO)


def test_day_bucket_uses_viewer_time_zone() -> None:
    instant = datetime(2024, 5, 10, 20, 0, tzinfo=UTC)

    assert day_bucket(instant, TOKYO) == date(2024, 5, 11)
    assert day_bucket(instant, UTC) == date(2024, 5, 10)


def test_month_window_is_half_open_across_year_end() -> None:
    start, end = month_window(2024, 12, TOKYO)

    assert start == datetime(2024, 12, 1, tzinfo=TOKYO)
    assert end == datetime(2025, 1, 1, tzinfo=TOKYO)


def test_expiry_markers_and_day_lookup() -> None:
    category = Category(id=1, name="野菜")
    foods = [
        FoodWithCategory(
            food=make_food("A", expiry_date=datetime(2024, 12, 25, 8, tzinfo=TOKYO)),
            category=category,
        ),
        FoodWithCategory(
            food=make_food("B", expiry_date=datetime(2024, 12, 25, 22, tzinfo=TOKYO)),
            category=category,
        ),
        FoodWithCategory(
            food=make_food("C", expiry_date=datetime(2024, 12, 31, tzinfo=TOKYO)),
            category=category,
        ),
    ]

    assert expiry_marker_dates(foods, TOKYO) == {date(2024, 12, 25), date(2024, 12, 31)}
    assert [item.food.name for item in foods_expiring_on(foods, date(2024, 12, 25), TOKYO)] == [
        "A",
        "B",
    ]
