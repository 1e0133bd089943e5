"""Authenticated session shared by every request the server handles.

The session decides once where credentials come from and afterwards only
hands out access tokens, refreshing them as they expire. Resolution order:

1. GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET / GOOGLE_REFRESH_TOKEN
2. The token file written by ``gtasks-mcp setup``
"""

import asyncio
import logging

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from gtasks_mcp.auth.models import CredentialSource, EnvironmentCredentials, TokenStatus
from gtasks_mcp.auth.oauth_manager import GOOGLE_TASKS_SCOPES, OAuthManager
from gtasks_mcp.exceptions import AuthenticationRequiredError

logger = logging.getLogger(__name__)

AUTHENTICATION_REQUIRED_MESSAGE = (
    "Authentication required. Either run 'gtasks-mcp setup' to create a token file, "
    "or set GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, and GOOGLE_REFRESH_TOKEN."
)


class AuthSession:
    """Lazily initialized credential holder.

    Initialization is guarded by an asyncio.Lock so concurrent first
    requests resolve credentials exactly once. A failed resolution is not
    remembered; the next request tries again. Token minting and refresh
    run under a second lock, so concurrent callers share one refresh.

    Attributes:
        manager: OAuthManager backing the token-file source.
    """

    def __init__(
        self,
        manager: OAuthManager | None = None,
        environment: EnvironmentCredentials | None = None,
    ) -> None:
        self.manager = manager or OAuthManager()
        if environment is None:
            environment = EnvironmentCredentials.from_env()
        self._environment = environment
        self._source: CredentialSource | None = None
        self._credentials: Credentials | None = None
        self._lock = asyncio.Lock()
        self._token_lock = asyncio.Lock()

    @property
    def source(self) -> CredentialSource | None:
        """Credential source chosen during initialization, None before it."""
        return self._source

    @property
    def is_authenticated(self) -> bool:
        return self._source is not None

    async def initialize(self) -> CredentialSource:
        """Resolve the credential source once.

        Returns:
            The resolved CredentialSource.

        Raises:
            AuthenticationRequiredError: If no source is usable.
        """
        if self._source is not None:
            return self._source

        async with self._lock:
            if self._source is None:
                self._source = self._resolve_source()
        return self._source

    def _resolve_source(self) -> CredentialSource:
        if self._environment.is_complete():
            logger.info("Using credentials from environment variables")
            self._credentials = self._environment.to_credentials(GOOGLE_TASKS_SCOPES)
            return CredentialSource.ENVIRONMENT

        status, _ = self.manager.get_status()
        if status == TokenStatus.MISSING:
            raise AuthenticationRequiredError(AUTHENTICATION_REQUIRED_MESSAGE)
        if status == TokenStatus.INVALID:
            raise AuthenticationRequiredError(
                f"Token file {self.manager.token_path} is invalid or corrupted. "
                "Please re-authenticate using: gtasks-mcp setup"
            )

        logger.info(f"Using credentials from {self.manager.token_path}")
        return CredentialSource.TOKEN_FILE

    async def get_access_token(self) -> str:
        """Get a valid access token, refreshing if necessary.

        Returns:
            Access token string for the Authorization header.

        Raises:
            AuthenticationRequiredError: If credentials are missing or the
                refresh is rejected.
        """
        source = await self.initialize()

        async with self._token_lock:
            if source == CredentialSource.ENVIRONMENT:
                return await self._environment_token()
            return await self._token_file_token()

    async def _environment_token(self) -> str:
        credentials = self._credentials
        if credentials is None:
            raise AuthenticationRequiredError(AUTHENTICATION_REQUIRED_MESSAGE)

        if not credentials.valid:
            logger.info("Refreshing access token from environment refresh token")
            loop = asyncio.get_running_loop()
            try:
                await loop.run_in_executor(None, credentials.refresh, Request())
            except RefreshError as e:
                raise AuthenticationRequiredError(f"Token refresh failed: {e}") from e

        return credentials.token

    async def _token_file_token(self) -> str:
        status, stored = self.manager.get_status()

        if status == TokenStatus.EXPIRED:
            logger.info("Token expired, attempting refresh...")
            try:
                token = await self.manager.refresh_if_needed()
            except RefreshError as e:
                raise AuthenticationRequiredError(f"Token refresh failed: {e}") from e
            if token is None:
                raise AuthenticationRequiredError(
                    "Token refresh failed. Please re-authenticate using: gtasks-mcp setup"
                )
            return token.access_token

        if status != TokenStatus.VALID or stored is None:
            raise AuthenticationRequiredError(AUTHENTICATION_REQUIRED_MESSAGE)

        return stored.token.access_token
