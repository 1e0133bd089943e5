"""Shared pytest fixtures for gtasks-mcp tests.

Provides token and storage fixtures for the auth layer and a mocked
TasksClient for exercising task operations without HTTP.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from gtasks_mcp.auth.models import OAuthToken, StoredToken, TokenMetadata
from gtasks_mcp.tasks.models import Task, TaskList, TaskListPage, TaskPage

# =============================================================================
# Token Fixtures
# =============================================================================


@pytest.fixture
def valid_token() -> OAuthToken:
    """Create a valid, non-expired OAuth token."""
    return OAuthToken(
        access_token="test_access_token_abc123",
        refresh_token="test_refresh_token_xyz789",
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        scopes=["https://www.googleapis.com/auth/tasks"],
        token_type="Bearer",
        client_id="test_client_id",
        client_secret="test_client_secret",  # pragma: allowlist secret
    )


@pytest.fixture
def expired_token() -> OAuthToken:
    """Create an expired OAuth token."""
    return OAuthToken(
        access_token="expired_access_token",
        refresh_token="test_refresh_token",
        expires_at=datetime.now(timezone.utc) - timedelta(hours=1),
        scopes=["https://www.googleapis.com/auth/tasks"],
        token_type="Bearer",
    )


@pytest.fixture
def token_metadata() -> TokenMetadata:
    return TokenMetadata(
        service_name="gtasks-mcp",
        provider="google",
        created_at=datetime.now(timezone.utc) - timedelta(days=1),
    )


@pytest.fixture
def stored_token(valid_token: OAuthToken, token_metadata: TokenMetadata) -> StoredToken:
    return StoredToken(version=1, metadata=token_metadata, token=valid_token)


# =============================================================================
# Token Storage Fixtures
# =============================================================================


@pytest.fixture
def temp_token_path(tmp_path: Path) -> Path:
    token_dir = tmp_path / ".gtasks-mcp"
    token_dir.mkdir(parents=True, mode=0o700)
    return token_dir / "tokens.json"


@pytest.fixture
def token_storage(temp_token_path: Path):
    """Create a TokenStorage instance with temporary storage."""
    from gtasks_mcp.auth.token_storage import TokenStorage

    return TokenStorage(token_path=temp_token_path)


@pytest.fixture
def oauth_manager(token_storage):
    """Create an OAuthManager with temporary storage."""
    from gtasks_mcp.auth.oauth_manager import OAuthManager

    return OAuthManager(storage=token_storage)


# =============================================================================
# Mock Tasks API
# =============================================================================


def _make_task_lists(*ids: str) -> TaskListPage:
    """Build a task-list page with one list per id, titled after the id."""
    return TaskListPage(items=[TaskList(id=list_id, title=f"List {list_id}") for list_id in ids])


def _make_tasks(*tasks: dict, next_page_token: str | None = None) -> TaskPage:
    """Build a task page from raw API-shaped dicts."""
    return TaskPage(
        items=[Task.model_validate(task) for task in tasks],
        nextPageToken=next_page_token,
    )


@pytest.fixture
def make_task_lists():
    return _make_task_lists


@pytest.fixture
def make_tasks():
    return _make_tasks


@pytest.fixture
def mock_tasks_client() -> MagicMock:
    """Create a mocked TasksClient with two task lists and no tasks.

    Tests override the return values or side effects of the individual
    coroutine methods as needed.
    """
    client = MagicMock()
    client.list_task_lists = AsyncMock(return_value=_make_task_lists("L1", "L2"))
    client.list_tasks = AsyncMock(return_value=_make_tasks())
    client.get_task = AsyncMock()
    client.insert_task = AsyncMock()
    client.update_task = AsyncMock()
    client.delete_task = AsyncMock(return_value=None)
    client.clear_completed = AsyncMock(return_value=None)
    return client


@pytest.fixture
def task_service(mock_tasks_client: MagicMock):
    from gtasks_mcp.tasks.service import TaskService

    return TaskService(mock_tasks_client)


@pytest.fixture
def task_actions(task_service):
    from gtasks_mcp.tasks.actions import TaskActions

    return TaskActions(task_service)


# =============================================================================
# CLI Test Fixtures
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
