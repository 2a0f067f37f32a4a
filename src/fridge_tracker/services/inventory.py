"""Inventory repository facade over the record store."""

import logging
from dataclasses import dataclass
from typing import Protocol

from fridge_tracker.domain.inventory import Category, Food, FoodWithCategory
from fridge_tracker.services.live_query import LiveQuery

_logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(id=1, name="野菜"),
    Category(id=2, name="果物"),
    Category(id=3, name="肉類"),
    Category(id=4, name="魚介類"),
    Category(id=5, name="乳製品"),
    Category(id=6, name="調味料"),
    Category(id=7, name="飲料"),
    Category(id=8, name="その他"),
)


class RecordStore(Protocol):
    """Durable storage for categories and foods with live query streams."""

    def insert_category(self, category: Category) -> None:
        """Insert or replace a category."""

    def insert_categories(self, categories: list[Category]) -> None:
        """Insert or replace several categories at once."""

    def get_all_categories(self) -> LiveQuery[Category]:
        """Return the live category stream ordered by name."""

    def get_category_count(self) -> int:
        """Return the number of stored categories."""

    def insert_food(self, food: Food) -> Food:
        """Insert a food and return it with its assigned id."""

    def update_food(self, food: Food) -> None:
        """Persist changes to an existing food."""

    def delete_food(self, food: Food) -> None:
        """Delete a food row."""

    def delete_food_by_id(self, food_id: int) -> None:
        """Delete a food row by id."""

    def get_food_by_id(self, food_id: int) -> Food | None:
        """Return a food by id, if present."""

    def get_all_foods_with_category(self) -> LiveQuery[FoodWithCategory]:
        """Return the live food stream ordered by expiry date ascending."""

    def refresh(self) -> None:
        """Re-read storage and publish current snapshots to the live queries."""


@dataclass
class InventoryService:
    """Application service for category and food records."""

    store: RecordStore

    def ensure_initial_categories(self) -> None:
        """Seed the default categories when the store has none."""
        if self.store.get_category_count() > 0:
            return
        self.store.insert_categories(list(DEFAULT_CATEGORIES))
        _logger.info("Seeded %s default categories", len(DEFAULT_CATEGORIES))

    def load(self) -> None:
        """Seed categories if needed and publish the current records."""
        self.ensure_initial_categories()
        self.store.refresh()

    def categories(self) -> LiveQuery[Category]:
        """Return the live category stream."""
        return self.store.get_all_categories()

    def foods_with_category(self) -> LiveQuery[FoodWithCategory]:
        """Return the live food stream."""
        return self.store.get_all_foods_with_category()

    def insert_category(self, category: Category) -> None:
        """Insert a category."""
        self.store.insert_category(category)

    def get_food(self, food_id: int) -> Food | None:
        """Return a food by id, if present."""
        return self.store.get_food_by_id(food_id)

    def insert_food(self, food: Food) -> Food:
        """Insert a food."""
        return self.store.insert_food(food)

    def update_food(self, food: Food) -> None:
        """Update a food."""
        self.store.update_food(food)

    def delete_food(self, food: Food) -> None:
        """Delete a food."""
        self.store.delete_food(food)

    def delete_food_by_id(self, food_id: int) -> None:
        """Delete a food by id."""
        self.store.delete_food_by_id(food_id)
