"""Supabase-backed record store for categories and foods."""

from dataclasses import dataclass, field
from datetime import datetime

from supabase import Client

from fridge_tracker.domain.inventory import Category, Food, FoodWithCategory
from fridge_tracker.services.inventory import RecordStore
from fridge_tracker.services.live_query import LiveQuery


@dataclass
class SupabaseRecordStore(RecordStore):
    """Record store over the ``categories`` and ``foods`` tables.

    ``foods.category_id`` references ``categories.id`` with ``ON DELETE
    CASCADE``. Live queries start empty until ``refresh`` runs; each write
    re-reads the affected table and publishes a fresh snapshot.
    """

    client: Client
    _categories: LiveQuery[Category] = field(default_factory=LiveQuery, init=False)
    _foods: LiveQuery[FoodWithCategory] = field(default_factory=LiveQuery, init=False)

    def insert_category(self, category: Category) -> None:
        """Insert or replace a category."""
        self.insert_categories([category])

    def insert_categories(self, categories: list[Category]) -> None:
        """Insert or replace several categories at once."""
        self.client.table("categories").upsert(
            [{"id": category.id, "name": category.name} for category in categories]
        ).execute()
        self._publish_categories()

    def get_all_categories(self) -> LiveQuery[Category]:
        """Return the live category stream."""
        return self._categories

    def get_category_count(self) -> int:
        """Return the number of categories."""
        response = self.client.table("categories").select("id", count="exact").execute()
        if response.count is not None:
            return int(response.count)
        return len(response.data or [])

    def insert_food(self, food: Food) -> Food:
        """Insert a food and return the stored row."""
        payload = _food_payload(food)
        if food.id is not None:
            payload["id"] = food.id
        response = self.client.table("foods").upsert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to insert food")
        self._publish_foods()
        return _parse_food(response.data[0])

    def update_food(self, food: Food) -> None:
        """Update an existing food row."""
        if food.id is None:
            raise ValueError("Cannot update a food without an id")
        self.client.table("foods").update(_food_payload(food)).eq(
            "id", food.id
        ).execute()
        self._publish_foods()

    def delete_food(self, food: Food) -> None:
        """Delete a food row."""
        if food.id is None:
            return
        self.delete_food_by_id(food.id)

    def delete_food_by_id(self, food_id: int) -> None:
        """Delete a food row by id."""
        self.client.table("foods").delete().eq("id", food_id).execute()
        self._publish_foods()

    def get_food_by_id(self, food_id: int) -> Food | None:
        """Return a food by id, if present."""
        response = (
            self.client.table("foods")
            .select("*")
            .eq("id", food_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_food(response.data[0])

    def get_all_foods_with_category(self) -> LiveQuery[FoodWithCategory]:
        """Return the live stream of foods joined to their category."""
        return self._foods

    def refresh(self) -> None:
        """Re-read both tables and publish new snapshots."""
        self._publish_categories()
        self._publish_foods()

    def _publish_categories(self) -> None:
        self._categories.publish(self._load_categories())

    def _publish_foods(self) -> None:
        self._foods.publish(self._load_foods())

    def _load_categories(self) -> list[Category]:
        response = self.client.table("categories").select("*").order("name").execute()
        return [_parse_category(row) for row in response.data or []]

    def _load_foods(self) -> list[FoodWithCategory]:
        response = (
            self.client.table("foods")
            .select("*, categories(*)")
            .order("expiry_date")
            .execute()
        )
        return [
            FoodWithCategory(
                food=_parse_food(row), category=_parse_category(row["categories"])
            )
            for row in response.data or []
            if row.get("categories")
        ]


def _food_payload(food: Food) -> dict[str, object]:
    return {
        "category_id": food.category_id,
        "name": food.name,
        "expiry_date": food.expiry_date.isoformat(),
        "remaining_percentage": food.remaining_percentage,
        "created_at": food.created_at.isoformat(),
    }


def _parse_category(row: dict[str, object]) -> Category:
    return Category(id=int(row["id"]), name=str(row.get("name", "")))


def _parse_food(row: dict[str, object]) -> Food:
    """Parse a foods row into a domain model."""
    return Food(
        id=int(row["id"]),
        category_id=int(row["category_id"]),
        name=str(row.get("name", "")),
        expiry_date=datetime.fromisoformat(str(row["expiry_date"])),
        remaining_percentage=int(row.get("remaining_percentage", 0)),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )
