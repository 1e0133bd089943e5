"""OAuth authentication for gtasks-mcp.

Quick Start:
    ```python
    from gtasks_mcp.auth import AuthSession, OAuthManager

    manager = OAuthManager()
    await manager.authenticate(client_id="...", client_secret="...")  # one-shot setup

    session = AuthSession(manager=manager)
    access_token = await session.get_access_token()
    ```
"""

from gtasks_mcp.auth.models import (
    CredentialSource,
    EnvironmentCredentials,
    OAuthToken,
    StoredToken,
    TokenMetadata,
    TokenStatus,
)
from gtasks_mcp.auth.oauth_manager import GOOGLE_TASKS_SCOPES, OAuthManager
from gtasks_mcp.auth.session import AuthSession
from gtasks_mcp.auth.token_storage import TokenStorage

__all__ = [
    "AuthSession",
    "CredentialSource",
    "EnvironmentCredentials",
    "OAuthManager",
    "TokenStorage",
    "OAuthToken",
    "StoredToken",
    "TokenMetadata",
    "TokenStatus",
    "GOOGLE_TASKS_SCOPES",
]
