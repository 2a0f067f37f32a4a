"""Google OAuth identity broker using a cached refresh token."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import httpx

from fridge_tracker.domain.identity import (
    GoogleAccount,
    NeedInteractiveSignIn,
    SignInError,
    SignInResult,
    SignInSuccess,
)
from fridge_tracker.services.identity import CALENDAR_SCOPE, IdentityBroker

DEFAULT_TOKEN_URL = "https://oauth2.googleapis.com/token"
DEFAULT_REVOKE_URL = "https://oauth2.googleapis.com/revoke"
EXPIRY_SKEW = timedelta(seconds=60)

_logger = logging.getLogger(__name__)


@dataclass
class GoogleOAuthIdentityBroker(IdentityBroker):
    """Identity broker that refreshes access tokens over HTTPX."""

    client_id: str
    client_secret: str
    http_client: httpx.AsyncClient
    refresh_token: str | None = None
    token_url: str = DEFAULT_TOKEN_URL
    revoke_url: str = DEFAULT_REVOKE_URL
    _account: GoogleAccount | None = field(default=None, init=False, repr=False)
    _refresh_lock: asyncio.Lock = field(
        default_factory=asyncio.Lock, init=False, repr=False
    )

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        client_id: str,
        client_secret: str,
        refresh_token: str | None = None,
        token_url: str = DEFAULT_TOKEN_URL,
        revoke_url: str = DEFAULT_REVOKE_URL,
    ) -> "GoogleOAuthIdentityBroker":
        """Create a broker with a managed httpx session."""
        return cls(
            client_id=client_id,
            client_secret=client_secret,
            http_client=httpx.AsyncClient(),
            refresh_token=refresh_token,
            token_url=token_url,
            revoke_url=revoke_url,
        )

    def is_signed_in(self) -> bool:
        """Return True when the cached account holds the calendar scope."""
        return self._account is not None and CALENDAR_SCOPE in self._account.scopes

    def get_current_account(self) -> GoogleAccount | None:
        """Return the cached account, if any."""
        return self._account

    async def get_access_token(self) -> str | None:
        """Return a usable access token, refreshing it when it is about to expire.

        Returns ``None`` when there is no account or the refresh did not succeed;
        a refresh token rejected by Google also drops the cached account.
        """
        if not self.is_signed_in():
            return None
        if self._token_is_fresh():
            return self._account.access_token if self._account else None
        async with self._refresh_lock:
            if self._token_is_fresh():
                return self._account.access_token if self._account else None
            _logger.info("Access token expired, refreshing")
            result = await self.try_silent_sign_in()
            if isinstance(result, SignInSuccess):
                return result.account.access_token
            if isinstance(result, NeedInteractiveSignIn):
                self._account = None
            _logger.warning("Access token refresh failed: %s", result)
            return None

    def adopt_refresh_token(self, refresh_token: str) -> None:
        """Store a refresh token obtained by an interactive consent flow."""
        self.refresh_token = refresh_token

    async def try_silent_sign_in(self) -> SignInResult:
        """Exchange the refresh token for a fresh access token."""
        if not self.refresh_token:
            return NeedInteractiveSignIn()
        try:
            response = await self.http_client.post(
                self.token_url,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "refresh_token": self.refresh_token,
                    "grant_type": "refresh_token",
                },
                headers={"Accept": "application/json"},
                timeout=10,
            )
        except httpx.HTTPError as exc:
            _logger.error("Silent sign-in request failed: %s", exc)
            return SignInError(f"Sign-in request failed: {exc}")

        payload = _json_or_empty(response)
        if response.is_error:
            if payload.get("error") == "invalid_grant":
                _logger.warning("Refresh token rejected, need interactive sign-in")
                return NeedInteractiveSignIn()
            _logger.error("Silent sign-in failed with status %s", response.status_code)
            return SignInError(
                f"Sign-in failed ({response.status_code}): "
                f"{payload.get('error_description') or payload.get('error') or 'unknown'}"
            )

        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            return SignInError("Token response is missing an access token")
        scopes = frozenset(str(payload.get("scope", "")).split())
        if CALENDAR_SCOPE not in scopes:
            _logger.warning("Granted scopes lack calendar access: %s", sorted(scopes))
            return NeedInteractiveSignIn()

        expires_in = payload.get("expires_in")
        expires_at = (
            datetime.now(tz=UTC) + timedelta(seconds=int(expires_in))
            if isinstance(expires_in, int | float)
            else None
        )
        self._account = GoogleAccount(
            access_token=access_token, scopes=scopes, expires_at=expires_at
        )
        _logger.info("Silent sign-in successful")
        return SignInSuccess(self._account)

    async def sign_out(self) -> None:
        """Revoke the refresh token and drop the cached account."""
        token = self.refresh_token or (
            self._account.access_token if self._account else None
        )
        self._account = None
        self.refresh_token = None
        if not token:
            return
        try:
            response = await self.http_client.post(
                self.revoke_url, data={"token": token}, timeout=10
            )
            response.raise_for_status()
            _logger.info("Sign-out successful")
        except httpx.HTTPError as exc:
            _logger.error("Token revocation failed: %s", exc)

    def _token_is_fresh(self) -> bool:
        if self._account is None:
            return False
        if self._account.expires_at is None:
            return True
        return datetime.now(tz=UTC) < self._account.expires_at - EXPIRY_SKEW

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _json_or_empty(response: httpx.Response) -> dict[str, object]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}
