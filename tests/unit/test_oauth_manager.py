"""Unit tests for OAuthManager.

Tests cover the authentication entry point, token refresh, status
reporting, and client secrets file parsing.
"""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from gtasks_mcp.auth.models import OAuthToken, TokenMetadata, TokenStatus
from gtasks_mcp.auth.oauth_manager import (
    GOOGLE_TASKS_SCOPES,
    OAuthManager,
    load_client_secrets,
)


@pytest.fixture
def mock_google_credentials() -> MagicMock:
    """Create a mock Google OAuth2 Credentials object."""
    mock_creds = MagicMock()
    mock_creds.token = "mock_access_token"
    mock_creds.refresh_token = "mock_refresh_token"
    mock_creds.expiry = datetime.now(timezone.utc) + timedelta(hours=1)
    return mock_creds


@pytest.mark.unit
class TestOAuthManagerInit:
    def test_should_set_service_name(self, oauth_manager: OAuthManager) -> None:
        assert oauth_manager._service_name == "gtasks-mcp"

    def test_should_expose_storage_token_path(self, oauth_manager: OAuthManager) -> None:
        assert oauth_manager.token_path == oauth_manager.storage.token_path

    def test_should_request_tasks_scope_only(self) -> None:
        assert GOOGLE_TASKS_SCOPES == ["https://www.googleapis.com/auth/tasks"]


@pytest.mark.unit
class TestOAuthManagerHasValidTokens:
    def test_should_return_true_when_valid_token_exists(
        self,
        oauth_manager: OAuthManager,
        valid_token: OAuthToken,
        token_metadata: TokenMetadata,
    ) -> None:
        oauth_manager.storage.store("gtasks-mcp", valid_token, token_metadata)

        assert oauth_manager.has_valid_tokens() is True

    def test_should_return_false_when_no_token_exists(self, oauth_manager: OAuthManager) -> None:
        assert oauth_manager.has_valid_tokens() is False

    def test_should_return_false_when_token_expired(
        self,
        oauth_manager: OAuthManager,
        expired_token: OAuthToken,
        token_metadata: TokenMetadata,
    ) -> None:
        oauth_manager.storage.store("gtasks-mcp", expired_token, token_metadata)

        assert oauth_manager.has_valid_tokens() is False


@pytest.mark.unit
class TestOAuthManagerCredentialsConversion:
    def test_should_handle_naive_datetime_in_credentials(
        self, oauth_manager: OAuthManager, mock_google_credentials: MagicMock
    ) -> None:
        mock_google_credentials.expiry = datetime(2030, 1, 1, 12, 0, 0)

        token = oauth_manager._credentials_to_token(mock_google_credentials, ["scope"])

        assert token.expires_at.tzinfo == timezone.utc

    def test_should_default_expiry_when_missing(
        self, oauth_manager: OAuthManager, mock_google_credentials: MagicMock
    ) -> None:
        mock_google_credentials.expiry = None

        token = oauth_manager._credentials_to_token(mock_google_credentials, ["scope"])

        assert token.is_expired() is False

    def test_should_carry_client_credentials_into_google_credentials(
        self, oauth_manager: OAuthManager, valid_token: OAuthToken
    ) -> None:
        credentials = oauth_manager._token_to_credentials(valid_token)

        assert credentials.token == valid_token.access_token
        assert credentials.client_id == "test_client_id"
        assert credentials.client_secret == "test_client_secret"  # pragma: allowlist secret


@pytest.mark.unit
class TestOAuthManagerAuthenticate:
    @pytest.mark.asyncio
    async def test_should_raise_without_client_credentials(
        self, oauth_manager: OAuthManager
    ) -> None:
        with pytest.raises(ValueError, match="Client ID and secret required"):
            await oauth_manager.authenticate()

    @pytest.mark.asyncio
    async def test_should_use_default_scopes_when_none_provided(
        self, oauth_manager: OAuthManager, mock_google_credentials: MagicMock
    ) -> None:
        with patch.object(
            oauth_manager, "_run_oauth_flow", return_value=mock_google_credentials
        ) as mock_flow:
            token = await oauth_manager.authenticate(client_id="id", client_secret="secret")

        assert mock_flow.call_args[0][1] == GOOGLE_TASKS_SCOPES
        assert token.scopes == GOOGLE_TASKS_SCOPES

    @pytest.mark.asyncio
    async def test_should_store_token_with_client_credentials(
        self, oauth_manager: OAuthManager, mock_google_credentials: MagicMock
    ) -> None:
        with patch.object(oauth_manager, "_run_oauth_flow", return_value=mock_google_credentials):
            await oauth_manager.authenticate(client_id="id", client_secret="secret")

        stored = oauth_manager.storage.retrieve("gtasks-mcp")
        assert stored is not None
        assert stored.token.access_token == "mock_access_token"
        assert stored.token.client_id == "id"
        assert stored.token.client_secret == "secret"  # pragma: allowlist secret

    @pytest.mark.asyncio
    async def test_should_use_redirect_uri_from_environment(
        self,
        oauth_manager: OAuthManager,
        mock_google_credentials: MagicMock,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("GOOGLE_OAUTH_REDIRECT_URI", "http://127.0.0.1:9999/cb")

        with patch.object(
            oauth_manager, "_run_oauth_flow", return_value=mock_google_credentials
        ) as mock_flow:
            await oauth_manager.authenticate(client_id="id", client_secret="secret")

        client_config, _, redirect_uri = mock_flow.call_args[0]
        assert redirect_uri == "http://127.0.0.1:9999/cb"
        assert client_config["web"]["redirect_uris"] == ["http://127.0.0.1:9999/cb"]


@pytest.mark.unit
class TestOAuthManagerRefreshIfNeeded:
    @pytest.mark.asyncio
    async def test_should_return_none_when_no_token_exists(
        self, oauth_manager: OAuthManager
    ) -> None:
        assert await oauth_manager.refresh_if_needed() is None

    @pytest.mark.asyncio
    async def test_should_return_existing_token_when_valid(
        self,
        oauth_manager: OAuthManager,
        valid_token: OAuthToken,
        token_metadata: TokenMetadata,
    ) -> None:
        oauth_manager.storage.store("gtasks-mcp", valid_token, token_metadata)

        result = await oauth_manager.refresh_if_needed()

        assert result is not None
        assert result.access_token == valid_token.access_token

    @pytest.mark.asyncio
    async def test_should_return_none_when_expired_without_refresh_token(
        self, oauth_manager: OAuthManager, token_metadata: TokenMetadata
    ) -> None:
        expired_no_refresh = OAuthToken(
            access_token="expired",
            refresh_token=None,
            expires_at=datetime.now(timezone.utc) - timedelta(hours=1),
        )
        oauth_manager.storage.store("gtasks-mcp", expired_no_refresh, token_metadata)

        assert await oauth_manager.refresh_if_needed() is None

    @pytest.mark.asyncio
    async def test_should_refresh_and_store_expired_token(
        self,
        oauth_manager: OAuthManager,
        expired_token: OAuthToken,
        token_metadata: TokenMetadata,
    ) -> None:
        oauth_manager.storage.store("gtasks-mcp", expired_token, token_metadata)

        mock_creds = MagicMock()
        mock_creds.token = "refreshed_access_token"
        mock_creds.refresh_token = "refreshed_refresh_token"
        mock_creds.expiry = datetime.now(timezone.utc) + timedelta(hours=1)

        with patch.object(oauth_manager, "_token_to_credentials", return_value=mock_creds):
            result = await oauth_manager.refresh_if_needed()

        mock_creds.refresh.assert_called_once()
        assert result.access_token == "refreshed_access_token"
        stored = oauth_manager.storage.retrieve("gtasks-mcp")
        assert stored.token.access_token == "refreshed_access_token"
        assert stored.metadata.last_refreshed is not None


@pytest.mark.unit
class TestOAuthManagerGetStatus:
    def test_should_return_missing_when_no_token(self, oauth_manager: OAuthManager) -> None:
        status, stored = oauth_manager.get_status()

        assert status == TokenStatus.MISSING
        assert stored is None

    def test_should_return_valid_status_with_token(
        self,
        oauth_manager: OAuthManager,
        valid_token: OAuthToken,
        token_metadata: TokenMetadata,
    ) -> None:
        oauth_manager.storage.store("gtasks-mcp", valid_token, token_metadata)

        status, stored = oauth_manager.get_status()

        assert status == TokenStatus.VALID
        assert stored.token.access_token == valid_token.access_token


@pytest.mark.unit
class TestLoadClientSecrets:
    """Tests for load_client_secrets()."""

    def test_should_read_installed_layout(self, tmp_path: Path) -> None:
        path = tmp_path / "gcp-oauth.keys.json"
        path.write_text(
            json.dumps({"installed": {"client_id": "cid", "client_secret": "csecret"}})
        )

        assert load_client_secrets(path) == ("cid", "csecret")

    def test_should_read_web_layout(self, tmp_path: Path) -> None:
        path = tmp_path / "client_secret.json"
        path.write_text(json.dumps({"web": {"client_id": "wid", "client_secret": "wsecret"}}))

        assert load_client_secrets(path) == ("wid", "wsecret")

    def test_should_reject_unknown_layout(self, tmp_path: Path) -> None:
        path = tmp_path / "other.json"
        path.write_text(json.dumps({"type": "service_account"}))

        with pytest.raises(ValueError, match="not a Google OAuth client secrets file"):
            load_client_secrets(path)


@pytest.mark.unit
class TestOAuthManagerLogout:
    def test_should_remove_stored_token(
        self,
        oauth_manager: OAuthManager,
        valid_token: OAuthToken,
        token_metadata: TokenMetadata,
    ) -> None:
        oauth_manager.storage.store("gtasks-mcp", valid_token, token_metadata)

        assert oauth_manager.logout() is True
        assert oauth_manager.get_status()[0] == TokenStatus.MISSING

    def test_should_report_nothing_to_remove(self, oauth_manager: OAuthManager) -> None:
        assert oauth_manager.logout() is False
