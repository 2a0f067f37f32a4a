"""Tests for the Supabase record store."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest

from fridge_tracker.adapters.supabase_record_store import SupabaseRecordStore
from fridge_tracker.domain.inventory import Category, Food


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None
    count: int | None = None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "upsert": [], "update": [], "delete": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    last_columns: str | None = None
    count_mode: str | None = None
    actions: list[str] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, columns: str = "*", count: str | None = None) -> "FakeTable":
        self._action = "select"
        self.last_columns = columns
        self.count_mode = count
        return self

    def upsert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "upsert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        self.actions.append(action)
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        count = len(data) if action == "select" and self.count_mode else None
        return FakeResponse(data=data, count=count)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _food_row(food_id: int, name: str, *, with_category: bool = False) -> dict[str, object]:
    row: dict[str, object] = {
        "id": food_id,
        "category_id": 5,
        "name": name,
        "expiry_date": "2024-12-25T09:00:00+09:00",
        "remaining_percentage": 80,
        "created_at": "2024-12-01T00:00:00+00:00",
    }
    if with_category:
        row["categories"] = {"id": 5, "name": "乳製品"}
    return row


def test_record_store_starts_empty_until_refresh() -> None:
    client = FakeSupabaseClient()
    client.table("categories").queue("select", [{"id": 5, "name": "乳製品"}])
    client.table("foods").queue(
        "select",
        [_food_row(1, "Milk", with_category=True), _food_row(2, "Orphan")],
    )
    store = SupabaseRecordStore(client)

    assert store.get_all_categories().value == ()
    assert client.tables["categories"].actions == []

    store.refresh()

    assert store.get_all_categories().value == (Category(id=5, name="乳製品"),)
    foods = store.get_all_foods_with_category().value
    assert [item.food.name for item in foods] == ["Milk"]
    assert foods[0].category.name == "乳製品"
    assert foods[0].food.remaining_percentage == 80
    assert client.tables["foods"].last_columns == "*, categories(*)"


def test_category_count_and_bulk_insert() -> None:
    client = FakeSupabaseClient()
    categories = client.table("categories")
    categories.queue("select", [{"id": 1}, {"id": 2}])
    store = SupabaseRecordStore(client)

    assert store.get_category_count() == 2
    assert categories.count_mode == "exact"

    store.insert_categories([Category(id=1, name="野菜"), Category(id=2, name="果物")])

    assert categories.last_payload == [
        {"id": 1, "name": "野菜"},
        {"id": 2, "name": "果物"},
    ]


def test_insert_food_returns_stored_row() -> None:
    client = FakeSupabaseClient()
    foods = client.table("foods")
    foods.queue("upsert", [_food_row(7, "Milk")])
    store = SupabaseRecordStore(client)

    stored = store.insert_food(
        Food(
            id=None,
            category_id=5,
            name="Milk",
            expiry_date=datetime(2024, 12, 25, tzinfo=UTC),
            remaining_percentage=100,
            created_at=datetime(2024, 12, 1, tzinfo=UTC),
        )
    )

    assert stored.id == 7
    assert isinstance(foods.last_payload, dict)
    assert "id" not in foods.last_payload
    assert foods.last_payload["remaining_percentage"] == 100


def test_insert_food_without_response_raises() -> None:
    store = SupabaseRecordStore(FakeSupabaseClient())
    food = Food(
        id=None,
        category_id=99,
        name="Ghost",
        expiry_date=datetime(2024, 12, 25, tzinfo=UTC),
        remaining_percentage=100,
        created_at=datetime(2024, 12, 1, tzinfo=UTC),
    )

    with pytest.raises(RuntimeError):
        store.insert_food(food)


def test_update_get_and_delete_food() -> None:
    client = FakeSupabaseClient()
    foods = client.table("foods")
    foods.queue("select", [_food_row(3, "Milk")])
    store = SupabaseRecordStore(client)

    fetched = store.get_food_by_id(3)
    assert fetched is not None
    assert fetched.name == "Milk"
    assert store.get_food_by_id(4) is None

    store.update_food(fetched)
    assert ("id", 3) in foods.last_filters
    assert isinstance(foods.last_payload, dict)
    assert foods.last_payload["name"] == "Milk"

    store.delete_food(fetched)
    assert foods.actions.count("delete") == 1


def test_insert_food_sends_offset_aware_timestamps() -> None:
    client = FakeSupabaseClient()
    foods = client.table("foods")
    foods.queue("upsert", [_food_row(8, "Milk")])
    store = SupabaseRecordStore(client)

    store.insert_food(
        Food(
            id=None,
            category_id=5,
            name="Milk",
            expiry_date=datetime(2024, 12, 25, 23, 30, tzinfo=ZoneInfo("Asia/Tokyo")),
            remaining_percentage=100,
            created_at=datetime(2024, 12, 1, tzinfo=UTC),
        )
    )

    assert isinstance(foods.last_payload, dict)
    assert foods.last_payload["expiry_date"] == "2024-12-25T23:30:00+09:00"
