"""Search and category filtering over the live food stream."""

from collections.abc import Iterable

from fridge_tracker.domain.inventory import FoodWithCategory
from fridge_tracker.services.live_query import LiveQuery, Subscription


def filter_foods(
    foods: Iterable[FoodWithCategory], query: str, category_id: int | None
) -> list[FoodWithCategory]:
    """Return foods matching the search text and category, keeping input order."""
    needle = query.casefold()
    return [
        item
        for item in foods
        if (not query or needle in item.food.name.casefold())
        and (category_id is None or item.food.category_id == category_id)
    ]


class FoodFilter:
    """Derived view that recomputes whenever the source or the criteria change."""

    def __init__(self, source: LiveQuery[FoodWithCategory]) -> None:
        self._query = ""
        self._category_id: int | None = None
        self._latest: tuple[FoodWithCategory, ...] = ()
        self.results: LiveQuery[FoodWithCategory] = LiveQuery()
        self._subscription: Subscription | None = source.subscribe(self._on_snapshot)

    @property
    def query(self) -> str:
        return self._query

    @property
    def category_id(self) -> int | None:
        return self._category_id

    def set_query(self, query: str) -> None:
        """Update the search text."""
        self._query = query
        self._recompute()

    def select_category(self, category_id: int | None) -> None:
        """Restrict results to one category, or clear with ``None``."""
        self._category_id = category_id
        self._recompute()

    def close(self) -> None:
        """Detach from the source stream."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_snapshot(self, snapshot: tuple[FoodWithCategory, ...]) -> None:
        self._latest = snapshot
        self._recompute()

    def _recompute(self) -> None:
        self.results.publish(filter_foods(self._latest, self._query, self._category_id))
