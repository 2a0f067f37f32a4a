"""Error types shared by the inventory and calendar sync services."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class InventoryValidationError(ValueError):
    """Raised when a food cannot be written because input is incomplete."""


class SyncErrorKind(str, Enum):
    """Failure categories for remote calendar operations."""

    NOT_SIGNED_IN = "not_signed_in"
    PROVIDER_ERROR = "provider_error"
    CANCELLED = "cancelled"
    NEEDS_INTERACTIVE_SIGN_IN = "needs_interactive_sign_in"


@dataclass(frozen=True)
class SyncSuccess(Generic[T]):
    """Successful remote calendar operation."""

    value: T


@dataclass(frozen=True)
class SyncFailure:
    """Failed remote calendar operation."""

    kind: SyncErrorKind
    detail: str | None = None


SyncResult = SyncSuccess[T] | SyncFailure
