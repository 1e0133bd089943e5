"""JSON token storage for gtasks-mcp.

Storage Location: ./.gtasks-mcp/tokens.json (project level)

The file holds one entry per service name. It is created with owner-only
permissions because it contains the refresh token and OAuth client secret.
"""

import json
import logging
from pathlib import Path

from gtasks_mcp.auth.models import (
    OAuthToken,
    StoredToken,
    TokenMetadata,
    TokenStatus,
)

logger = logging.getLogger(__name__)

CREDENTIALS_DIR_NAME = ".gtasks-mcp"
TOKEN_FILE_NAME = "tokens.json"


def get_token_path() -> Path:
    """Get the project-level token storage path.

    Returns:
        Path to tokens.json in ./.gtasks-mcp/ under the current directory.
    """
    return Path.cwd() / CREDENTIALS_DIR_NAME / TOKEN_FILE_NAME


class TokenStorage:
    """Simple JSON-based storage for OAuth tokens.

    Attributes:
        token_path: Path to the tokens.json file.

    Example:
        ```python
        storage = TokenStorage()
        storage.store("gtasks-mcp", token, TokenMetadata(service_name="gtasks-mcp"))

        stored = storage.retrieve("gtasks-mcp")
        if stored:
            print(f"Token expires at: {stored.token.expires_at}")
        ```
    """

    def __init__(self, token_path: Path | None = None) -> None:
        """Initialize token storage.

        Args:
            token_path: Custom path for tokens.json. Defaults to
                ./.gtasks-mcp/tokens.json.
        """
        self.token_path = token_path or get_token_path()
        self.credentials_dir = self.token_path.parent
        self._ensure_credentials_dir()

    def _ensure_credentials_dir(self) -> None:
        """Create credentials directory with secure permissions if needed."""
        creds_dir = self.token_path.parent
        if not creds_dir.exists():
            creds_dir.mkdir(parents=True, mode=0o700)
        else:
            creds_dir.chmod(0o700)

    def _load_tokens(self) -> dict[str, dict]:
        """Load all tokens from the JSON file.

        Returns:
            Dictionary mapping service names to token data. Empty when the
            file is missing or unreadable.
        """
        if not self.token_path.exists():
            return {}

        try:
            with open(self.token_path) as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read token file {self.token_path}: {e}")
            return {}

    def _save_tokens(self, tokens: dict[str, dict]) -> None:
        self._ensure_credentials_dir()

        with open(self.token_path, "w") as f:
            json.dump(tokens, f, indent=2, default=str)

        # Owner read/write only
        self.token_path.chmod(0o600)

    def store(
        self,
        service_name: str,
        token: OAuthToken,
        metadata: TokenMetadata,
    ) -> None:
        """Store an OAuth token.

        Args:
            service_name: Unique identifier for the service.
            token: OAuth token data to store.
            metadata: Token metadata including provider info.
        """
        stored_token = StoredToken(
            version=1,
            metadata=metadata,
            token=token,
        )

        tokens = self._load_tokens()
        tokens[service_name] = json.loads(stored_token.model_dump_json())
        self._save_tokens(tokens)

    def retrieve(self, service_name: str) -> StoredToken | None:
        """Retrieve a stored OAuth token.

        Args:
            service_name: Unique identifier for the service.

        Returns:
            StoredToken if found and valid, None otherwise.
        """
        tokens = self._load_tokens()

        if service_name not in tokens:
            return None

        try:
            return StoredToken.model_validate(tokens[service_name])
        except (ValueError, KeyError):
            return None

    def delete(self, service_name: str) -> bool:
        """Delete a stored token.

        Returns:
            True if token was deleted, False if it didn't exist.
        """
        tokens = self._load_tokens()

        if service_name not in tokens:
            return False

        del tokens[service_name]
        self._save_tokens(tokens)
        return True

    def get_status(self, service_name: str) -> TokenStatus:
        """Get the status of a stored token.

        Args:
            service_name: Unique identifier for the service.

        Returns:
            TokenStatus indicating the token's current state.
        """
        stored = self.retrieve(service_name)

        if stored is None:
            if service_name in self._load_tokens():
                # Entry exists but couldn't be parsed
                return TokenStatus.INVALID
            return TokenStatus.MISSING

        if stored.token.is_expired():
            return TokenStatus.EXPIRED

        return TokenStatus.VALID
