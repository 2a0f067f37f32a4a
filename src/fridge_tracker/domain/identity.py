"""Identity models for the remote calendar account."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class GoogleAccount:
    """Signed-in account holding a bearer credential."""

    access_token: str
    scopes: frozenset[str]
    expires_at: datetime | None = None
    email: str | None = None


@dataclass(frozen=True)
class SignInSuccess:
    """Sign-in produced a usable account."""

    account: GoogleAccount


@dataclass(frozen=True)
class NeedInteractiveSignIn:
    """Silent reauthentication is not possible; the user must consent."""


@dataclass(frozen=True)
class SignInError:
    """Sign-in failed with a message suitable for display."""

    message: str


@dataclass(frozen=True)
class SignInCancelled:
    """The user dismissed the sign-in flow."""


SignInResult = SignInSuccess | NeedInteractiveSignIn | SignInError | SignInCancelled
