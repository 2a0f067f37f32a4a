"""Domain models for the food inventory."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Category:
    """A food category such as vegetables or dairy."""

    id: int
    name: str


@dataclass(frozen=True)
class Food:
    """A perishable item tracked in the fridge."""

    id: int | None
    category_id: int
    name: str
    expiry_date: datetime
    remaining_percentage: int
    created_at: datetime


@dataclass(frozen=True)
class FoodWithCategory:
    """Read-only join of a food row and its category."""

    food: Food
    category: Category
