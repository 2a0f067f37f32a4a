"""Push-based live query streams."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

_logger = logging.getLogger(__name__)


@dataclass
class Subscription:
    """Handle returned by ``LiveQuery.subscribe``."""

    _detach: Callable[[], None]
    active: bool = True

    def unsubscribe(self) -> None:
        """Stop receiving snapshots. Safe to call more than once."""
        if not self.active:
            return
        self.active = False
        self._detach()


class LiveQuery(Generic[T]):
    """Holds the latest immutable snapshot and pushes new ones to subscribers.

    Subscribers receive the current snapshot as soon as they subscribe and then
    every snapshot published afterwards. Snapshots are tuples so that a
    subscriber can keep one without it changing underneath.
    """

    def __init__(self, initial: Iterable[T] = ()) -> None:
        self._snapshot: tuple[T, ...] = tuple(initial)
        self._subscribers: list[Callable[[tuple[T, ...]], None]] = []

    @property
    def value(self) -> tuple[T, ...]:
        """Return the latest snapshot."""
        return self._snapshot

    @property
    def subscriber_count(self) -> int:
        """Return the number of attached subscribers."""
        return len(self._subscribers)

    def subscribe(self, callback: Callable[[tuple[T, ...]], None]) -> Subscription:
        """Attach a callback and deliver the current snapshot to it."""
        self._subscribers.append(callback)
        subscription = Subscription(lambda: self._detach(callback))
        callback(self._snapshot)
        return subscription

    def publish(self, items: Iterable[T]) -> None:
        """Replace the snapshot and notify every subscriber."""
        self._snapshot = tuple(items)
        for callback in list(self._subscribers):
            try:
                callback(self._snapshot)
            except Exception:
                _logger.exception("Live query subscriber %r failed", callback)

    def _detach(self, callback: Callable[[tuple[T, ...]], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)
