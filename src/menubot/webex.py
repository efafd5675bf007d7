"""
Webex messaging client.

Implements the OAuth integration flow described on
https://developer.webex.com/docs/integrations:

1. The user opens the authorize URL once and copies the `code` parameter of
   the redirect (see `scripts/authorize_webex.py`)
2. The code is exchanged for an access token and a refresh token
3. The access token is refreshed a while before it expires; every refresh
   also renews the refresh token

Tokens are kept in a small JSON file next to the bot.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

import httpx
import structlog
from pydantic import BaseModel, Field, ValidationError

from src.menubot.config import get_config

logger = structlog.get_logger(__name__)


class WebexError(Exception):
    """Raised when a Webex API call fails or no usable token is available."""
    pass


class AccessTokenResponse(BaseModel):
    """Body of a successful `/access_token` response."""

    access_token: str
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    refresh_token: str
    refresh_token_expires_in: int = Field(..., description="Refresh token lifetime in seconds")


class WebexTokens(BaseModel):
    """Persisted OAuth state."""

    auth_code: Optional[str] = None
    access_token: Optional[str] = None
    access_token_expires: Optional[datetime] = None
    refresh_token: Optional[str] = None
    refresh_token_expires: Optional[datetime] = None

    @classmethod
    def from_response(
        cls,
        response: AccessTokenResponse,
        *,
        now: datetime,
        auth_code: Optional[str] = None,
    ) -> "WebexTokens":
        return cls(
            auth_code=auth_code,
            access_token=response.access_token,
            access_token_expires=now + timedelta(seconds=response.expires_in),
            refresh_token=response.refresh_token,
            refresh_token_expires=now + timedelta(seconds=response.refresh_token_expires_in),
        )


class TokenStore:
    """JSON file holding the current `WebexTokens`."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.tmp_path = self.path.with_name(self.path.name + ".tmp")

    def load(self) -> WebexTokens:
        if not self.path.exists():
            return WebexTokens()
        try:
            return WebexTokens.model_validate_json(self.path.read_text(encoding="utf-8"))
        except ValidationError as e:
            raise WebexError(f"Token file {self.path} is corrupt: {e}") from e
        except OSError as e:
            raise WebexError(f"Token file {self.path} could not be read: {e}") from e

    def save(self, tokens: WebexTokens) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.tmp_path.write_text(tokens.model_dump_json(indent=2), encoding="utf-8")
        self.tmp_path.replace(self.path)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WebexClient:
    """
    Thin synchronous client for the token and message endpoints.
    """

    def __init__(self, config: Optional[Any] = None, *, http_client: Optional[httpx.Client] = None):
        self.config = config or get_config()
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            timeout=httpx.Timeout(self.config.http_timeout_seconds)
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "WebexClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def api_base(self) -> str:
        return self.config.webex_api_base.rstrip("/")

    def authorize_url(self) -> str:
        """URL the user opens in a browser to grant the bot access."""
        url = httpx.URL(
            f"{self.api_base}/authorize",
            params={
                "client_id": self.config.webex_client_id,
                "response_type": "code",
                "redirect_uri": self.config.webex_redirect_uri,
                "scope": self.config.webex_scope,
                "state": "menubot",
            },
        )
        return str(url)

    def _request_tokens(self, form: dict[str, str]) -> AccessTokenResponse:
        url = f"{self.api_base}/access_token"
        try:
            response = self._client.post(url, data=form)
        except httpx.RequestError as e:
            raise WebexError(f"Failed to connect to Webex API: {e}") from e

        if not response.is_success:
            logger.error(
                "Webex token request failed",
                grant_type=form.get("grant_type"),
                status_code=response.status_code,
                response=response.text[:200],
            )
            raise WebexError(f"Token request failed with status {response.status_code}")

        try:
            return AccessTokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise WebexError(f"Unexpected token response: {e}") from e

    def exchange_code(self, code: str, *, now: Optional[datetime] = None) -> WebexTokens:
        """Trade an authorization code for the initial token pair."""
        logger.info("Requesting initial access token")
        response = self._request_tokens(
            {
                "grant_type": "authorization_code",
                "client_id": self.config.webex_client_id,
                "client_secret": self.config.webex_client_secret,
                "code": code,
                "redirect_uri": self.config.webex_redirect_uri,
            }
        )
        return WebexTokens.from_response(response, now=now or _utcnow(), auth_code=code)

    def refresh(self, tokens: WebexTokens, *, now: Optional[datetime] = None) -> WebexTokens:
        """Request a new access token (this also renews the refresh token)."""
        if not tokens.refresh_token:
            raise WebexError("No refresh token stored. Run scripts/authorize_webex.py first.")

        logger.info("Requesting new access token")
        response = self._request_tokens(
            {
                "grant_type": "refresh_token",
                "client_id": self.config.webex_client_id,
                "client_secret": self.config.webex_client_secret,
                "refresh_token": tokens.refresh_token,
            }
        )
        return WebexTokens.from_response(response, now=now or _utcnow(), auth_code=tokens.auth_code)

    def needs_refresh(self, tokens: WebexTokens, *, now: Optional[datetime] = None) -> bool:
        if not tokens.access_token or tokens.access_token_expires is None:
            return True
        margin = timedelta(hours=self.config.webex_refresh_margin_hours)
        return tokens.access_token_expires < (now or _utcnow()) + margin

    def ensure_access_token(self, store: TokenStore, *, now: Optional[datetime] = None) -> str:
        """
        Return a valid access token, exchanging or refreshing as needed.

        New tokens are written back to `store`.
        """
        now = now or _utcnow()
        tokens = store.load()

        if not tokens.access_token:
            if not tokens.auth_code:
                raise WebexError("Bot is not authorized yet. Run scripts/authorize_webex.py first.")
            tokens = self.exchange_code(tokens.auth_code, now=now)
            store.save(tokens)

        if self.needs_refresh(tokens, now=now):
            if tokens.refresh_token_expires is not None and tokens.refresh_token_expires <= now:
                raise WebexError("Refresh token expired. Run scripts/authorize_webex.py again.")
            tokens = self.refresh(tokens, now=now)
            store.save(tokens)
            logger.info("Access token refreshed", expires=tokens.access_token_expires.isoformat())

        return tokens.access_token

    def post_message(self, markdown: str, access_token: str) -> None:
        """Post a markdown message to the configured room."""
        url = f"{self.api_base}/messages"
        try:
            response = self._client.post(
                url,
                json={"roomId": self.config.webex_room_id, "markdown": markdown},
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.RequestError as e:
            raise WebexError(f"Failed to connect to Webex API: {e}") from e

        if not response.is_success:
            logger.error(
                "Posting message failed",
                status_code=response.status_code,
                response=response.text[:200],
            )
            raise WebexError(f"Posting message failed with status {response.status_code}")

        logger.info("Message posted", num_chars=len(markdown))
