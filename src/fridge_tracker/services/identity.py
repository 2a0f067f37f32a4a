"""Identity broker port for the remote calendar account."""

from typing import Protocol

from fridge_tracker.domain.identity import GoogleAccount, SignInResult

CALENDAR_SCOPE = "https://www.googleapis.com/auth/calendar"


class IdentityBroker(Protocol):
    """Yields the signed-in account or a typed sign-in outcome."""

    def is_signed_in(self) -> bool:
        """Return True when an account with the calendar scope is cached."""

    def get_current_account(self) -> GoogleAccount | None:
        """Return the cached account, if any."""

    async def get_access_token(self) -> str | None:
        """Return a bearer token for the current account, refreshed if expired."""

    async def try_silent_sign_in(self) -> SignInResult:
        """Reauthenticate without user interaction."""

    async def sign_out(self) -> None:
        """Forget the cached identity."""
