"""OAuth manager for Google Tasks authentication.

Runs the interactive authorization flow once (``gtasks-mcp setup``),
persists the resulting token through TokenStorage, and refreshes it when
the server needs a fresh access token.

Environment Variables:
    GOOGLE_CLIENT_ID: Google OAuth client ID
    GOOGLE_CLIENT_SECRET: Google OAuth client secret
    GOOGLE_OAUTH_REDIRECT_URI: Redirect URI (default: http://127.0.0.1:8789/callback)
"""

import asyncio
import json
import os
import secrets
import webbrowser
from datetime import datetime, timedelta, timezone
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from urllib.parse import parse_qs, urlparse

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow

from gtasks_mcp.auth.models import (
    GOOGLE_TOKEN_URI,
    OAuthToken,
    StoredToken,
    TokenMetadata,
    TokenStatus,
)
from gtasks_mcp.auth.token_storage import TokenStorage

GOOGLE_TASKS_SCOPES = [
    "https://www.googleapis.com/auth/tasks",
]

SERVICE_NAME = "gtasks-mcp"

DEFAULT_OAUTH_HOST = "127.0.0.1"
DEFAULT_OAUTH_PORT = 8789
DEFAULT_REDIRECT_URI = "http://127.0.0.1:8789/callback"


def load_client_secrets(path: Path) -> tuple[str, str]:
    """Read client id and secret from a Google client secrets JSON file.

    Accepts the "installed" and "web" layouts that the Google Cloud console
    downloads (gcp-oauth.keys.json).

    Args:
        path: Path to the client secrets file.

    Returns:
        Tuple of (client_id, client_secret).

    Raises:
        ValueError: If the file has neither layout or lacks the keys.
    """
    with open(path) as f:
        data = json.load(f)

    section = data.get("installed") or data.get("web")
    if not section or not section.get("client_id") or not section.get("client_secret"):
        raise ValueError(
            f"{path} is not a Google OAuth client secrets file "
            "(expected an 'installed' or 'web' section with client_id and client_secret)"
        )
    return section["client_id"], section["client_secret"]


class OAuthManager:
    """OAuth authentication manager for Google Tasks.

    Attributes:
        storage: Token storage instance for persisting credentials.

    Example:
        ```python
        manager = OAuthManager()
        token = await manager.authenticate(client_id="...", client_secret="...")

        status, stored = manager.get_status()
        if status == TokenStatus.EXPIRED:
            token = await manager.refresh_if_needed()
        ```
    """

    def __init__(self, storage: TokenStorage | None = None) -> None:
        """Initialize OAuth manager.

        Args:
            storage: Token storage instance. Creates default if not provided.
        """
        self.storage = storage or TokenStorage()
        self._service_name = SERVICE_NAME

    def has_valid_tokens(self) -> bool:
        """Check if valid tokens exist."""
        return self.storage.get_status(self._service_name) == TokenStatus.VALID

    @property
    def token_path(self) -> Path:
        """Get the token storage path."""
        return self.storage.token_path

    def _credentials_to_token(
        self,
        credentials: Credentials,
        scopes: list[str],
        client_id: str | None = None,
        client_secret: str | None = None,
    ) -> OAuthToken:
        """Convert google-auth Credentials to OAuthToken.

        Args:
            credentials: Google OAuth2 credentials.
            scopes: List of granted scopes.
            client_id: OAuth client id to keep for later refreshes.
            client_secret: OAuth client secret to keep for later refreshes.

        Returns:
            OAuthToken with all credential data.
        """
        if credentials.expiry:
            expires_at = credentials.expiry
            # google-auth reports naive UTC
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=timezone.utc)
        else:
            expires_at = datetime.now(timezone.utc) + timedelta(hours=1)

        return OAuthToken(  # nosec B106 - "Bearer" is OAuth token type, not a password
            access_token=credentials.token,
            refresh_token=credentials.refresh_token,
            expires_at=expires_at,
            scopes=scopes,
            token_type="Bearer",
            client_id=client_id,
            client_secret=client_secret,
        )

    def _token_to_credentials(self, token: OAuthToken) -> Credentials:
        """Convert OAuthToken to google-auth Credentials."""
        return Credentials(  # nosec B106 - token_uri is public Google OAuth endpoint
            token=token.access_token,
            refresh_token=token.refresh_token,
            token_uri=GOOGLE_TOKEN_URI,
            client_id=token.client_id,
            client_secret=token.client_secret,
            scopes=token.scopes,
        )

    async def authenticate(
        self,
        scopes: list[str] | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
    ) -> OAuthToken:
        """Perform the complete OAuth2 authorization flow and store the token.

        Args:
            scopes: OAuth scopes to request. Uses GOOGLE_TASKS_SCOPES if not specified.
            client_id: Google OAuth client ID.
            client_secret: Google OAuth client secret.

        Returns:
            OAuthToken containing access and refresh tokens.

        Raises:
            ValueError: If client ID/secret not provided.
            Exception: If authentication fails.
        """
        if scopes is None:
            scopes = GOOGLE_TASKS_SCOPES

        if not client_id or not client_secret:
            raise ValueError(
                "Client ID and secret required. "
                "Pass as arguments or set GOOGLE_CLIENT_ID and "
                "GOOGLE_CLIENT_SECRET environment variables."
            )

        redirect_uri = os.environ.get("GOOGLE_OAUTH_REDIRECT_URI", DEFAULT_REDIRECT_URI)

        client_config = {
            "web": {
                "client_id": client_id,
                "client_secret": client_secret,
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": GOOGLE_TOKEN_URI,
                "redirect_uris": [redirect_uri],
            }
        }

        # Flow blocks on the local callback server
        loop = asyncio.get_running_loop()
        credentials = await loop.run_in_executor(
            None, self._run_oauth_flow, client_config, scopes, redirect_uri
        )

        token = self._credentials_to_token(credentials, scopes, client_id, client_secret)

        metadata = TokenMetadata(
            service_name=self._service_name,
            provider="google",
        )
        self.storage.store(self._service_name, token, metadata)

        return token

    def _run_oauth_flow(
        self, client_config: dict, scopes: list[str], redirect_uri: str
    ) -> Credentials:
        """Run the OAuth flow (blocking operation).

        Opens the browser for authorization and serves a single callback
        request on the redirect URI's host and port.

        Args:
            client_config: Google OAuth client configuration (web type).
            scopes: List of OAuth scopes.
            redirect_uri: Full redirect URI including path.

        Returns:
            Google OAuth2 credentials.
        """
        flow = Flow.from_client_config(
            client_config,
            scopes=scopes,
            redirect_uri=redirect_uri,
        )

        state = secrets.token_urlsafe(32)
        auth_url, _ = flow.authorization_url(
            access_type="offline",
            prompt="consent",
            state=state,
        )

        parsed = urlparse(redirect_uri)
        host = parsed.hostname or DEFAULT_OAUTH_HOST
        port = parsed.port or DEFAULT_OAUTH_PORT
        callback_path = parsed.path or "/callback"

        auth_code: list[str | None] = [None]
        error_message: list[str | None] = [None]

        class OAuthCallbackHandler(BaseHTTPRequestHandler):
            """HTTP handler for the OAuth redirect."""

            def log_message(self, format: str, *args) -> None:
                pass

            def do_GET(self) -> None:
                request_parsed = urlparse(self.path)

                if request_parsed.path != callback_path:
                    self.send_response(404)
                    self.end_headers()
                    self.wfile.write(b"Not Found")
                    return

                query_params = parse_qs(request_parsed.query)

                if "error" in query_params:
                    error_message[0] = query_params["error"][0]
                    self._respond(400, b"<h1>Authentication Failed</h1>")
                    return

                if query_params.get("state", [None])[0] != state:
                    error_message[0] = "state mismatch"
                    self._respond(400, b"<h1>Authentication Failed</h1>")
                    return

                if "code" in query_params:
                    auth_code[0] = query_params["code"][0]
                    self._respond(
                        200,
                        b"<h1>Authentication Successful!</h1>"
                        b"<p>You can close this window and return to the terminal.</p>",
                    )
                else:
                    self._respond(400, b"<h1>Authentication Failed</h1>")

            def _respond(self, status: int, body: bytes) -> None:
                self.send_response(status)
                self.send_header("Content-type", "text/html")
                self.end_headers()
                self.wfile.write(b"<html><body>" + body + b"</body></html>")

        server = HTTPServer((host, port), OAuthCallbackHandler)
        server.timeout = 300

        print("Opening browser for Google authorization...")
        print(f"If browser doesn't open, visit: {auth_url}")
        webbrowser.open(auth_url)

        server.handle_request()
        server.server_close()

        if error_message[0]:
            raise Exception(f"OAuth authentication failed: {error_message[0]}")

        if not auth_code[0]:
            raise Exception("No authorization code received from Google")

        flow.fetch_token(code=auth_code[0])

        return flow.credentials

    async def refresh_if_needed(self) -> OAuthToken | None:
        """Refresh token if expired or about to expire.

        Returns:
            New OAuthToken if refreshed, existing token if still valid,
            None if no token exists or it cannot be refreshed.
        """
        stored = self.storage.retrieve(self._service_name)
        if stored is None:
            return None

        if not stored.token.is_expired():
            return stored.token

        if stored.token.refresh_token is None:
            return None

        credentials = self._token_to_credentials(stored.token)

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, credentials.refresh, Request())

        new_token = self._credentials_to_token(
            credentials,
            stored.token.scopes,
            stored.token.client_id,
            stored.token.client_secret,
        )

        stored.metadata.last_refreshed = datetime.now(timezone.utc)
        self.storage.store(self._service_name, new_token, stored.metadata)

        return new_token

    def get_status(self) -> tuple[TokenStatus, StoredToken | None]:
        """Get the status of stored tokens.

        Returns:
            Tuple of (TokenStatus, StoredToken or None).
        """
        status = self.storage.get_status(self._service_name)
        stored = (
            self.storage.retrieve(self._service_name) if status != TokenStatus.MISSING else None
        )
        return (status, stored)

    def logout(self) -> bool:
        """Remove the stored token.

        Returns:
            True if a token was removed, False if none was stored.
        """
        return self.storage.delete(self._service_name)
