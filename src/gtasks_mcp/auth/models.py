"""Pydantic models for OAuth tokens and credential sources."""

import os
from datetime import datetime, timedelta, timezone
from enum import Enum

from google.oauth2.credentials import Credentials
from pydantic import BaseModel, Field

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"  # nosec B105 - public endpoint


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenStatus(str, Enum):
    """State of the stored token for a service."""

    VALID = "valid"
    EXPIRED = "expired"
    MISSING = "missing"
    INVALID = "invalid"


class CredentialSource(str, Enum):
    """Where the active session obtained its credentials."""

    ENVIRONMENT = "environment"
    TOKEN_FILE = "token_file"


class OAuthToken(BaseModel):
    """OAuth2 token data.

    Attributes:
        access_token: Bearer token sent to Google APIs.
        refresh_token: Long-lived token used to mint new access tokens.
        expires_at: Expiry of the access token (timezone-aware).
        scopes: Granted scopes.
        token_type: Token type, always "Bearer" for Google.
        client_id: OAuth client the token was issued to, needed for refresh.
        client_secret: Secret of that OAuth client.
    """

    access_token: str
    refresh_token: str | None = None
    expires_at: datetime
    scopes: list[str] = Field(default_factory=list)
    token_type: str = "Bearer"
    client_id: str | None = None
    client_secret: str | None = None

    def is_expired(self, buffer_seconds: int = 60) -> bool:
        """Check whether the token is expired or expires within the buffer.

        Args:
            buffer_seconds: Treat tokens expiring this soon as expired.

        Returns:
            True if the token should be refreshed before use.
        """
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return _utcnow() + timedelta(seconds=buffer_seconds) >= expires_at


class TokenMetadata(BaseModel):
    """Bookkeeping stored next to a token."""

    service_name: str
    provider: str = "google"
    created_at: datetime = Field(default_factory=_utcnow)
    last_refreshed: datetime | None = None


class StoredToken(BaseModel):
    """Token file entry: a versioned token with its metadata."""

    version: int = 1
    metadata: TokenMetadata
    token: OAuthToken


class EnvironmentCredentials(BaseModel):
    """Client id, secret and refresh token supplied through the environment."""

    client_id: str | None = None
    client_secret: str | None = None
    refresh_token: str | None = None

    @classmethod
    def from_env(cls) -> "EnvironmentCredentials":
        """Read GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET and GOOGLE_REFRESH_TOKEN."""
        return cls(
            client_id=os.environ.get("GOOGLE_CLIENT_ID") or None,
            client_secret=os.environ.get("GOOGLE_CLIENT_SECRET") or None,
            refresh_token=os.environ.get("GOOGLE_REFRESH_TOKEN") or None,
        )

    def is_complete(self) -> bool:
        return bool(self.client_id and self.client_secret and self.refresh_token)

    def to_credentials(self, scopes: list[str]) -> Credentials:
        """Build refreshable google-auth credentials without an access token."""
        return Credentials(  # nosec B106 - token_uri is public Google OAuth endpoint
            token=None,
            refresh_token=self.refresh_token,
            client_id=self.client_id,
            client_secret=self.client_secret,
            token_uri=GOOGLE_TOKEN_URI,
            scopes=scopes,
        )
