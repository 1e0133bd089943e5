"""Async client for the Google Tasks REST API.

Every method is a single authenticated round trip. HTTP and transport
failures are converted to RemoteServiceError carrying Google's own error
message when the response body has one.
"""

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from gtasks_mcp.auth.session import AuthSession
from gtasks_mcp.exceptions import RemoteServiceError
from gtasks_mcp.tasks.models import Task, TaskListPage, TaskPage

logger = logging.getLogger(__name__)

TASKS_API_BASE = "https://tasks.googleapis.com/tasks/v1"

MAX_TASK_RESULTS = 100

ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse(model: type[ModelT], data: dict[str, Any]) -> ModelT:
    """Validate a response body, reporting shape mismatches as remote failures."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise RemoteServiceError(f"Unexpected {model.__name__} response: {e}") from e


def _error_message(error: httpx.HTTPStatusError) -> str:
    """Extract the message Google puts in its JSON error envelope."""
    try:
        body = error.response.json()
    except ValueError:
        return str(error)

    if isinstance(body, dict):
        detail = body.get("error")
        if isinstance(detail, dict) and detail.get("message"):
            return str(detail["message"])
        if isinstance(detail, str):
            return detail
    return str(error)


class TasksClient:
    """Thin wrapper over the Tasks v1 endpoints used by the server.

    Attributes:
        session: AuthSession providing bearer tokens.
    """

    def __init__(self, session: AuthSession) -> None:
        self.session = session
        self._http_client: httpx.AsyncClient | None = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create shared HTTP client with connection pooling."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                http2=True,
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
                timeout=httpx.Timeout(30.0, connect=10.0),
            )
        return self._http_client

    async def close(self) -> None:
        """Close the shared HTTP client and release resources."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def _make_request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make an authenticated request and decode the JSON body.

        Args:
            method: HTTP method.
            path: Path relative to TASKS_API_BASE.
            params: Optional query parameters.
            json_data: Optional JSON body.

        Returns:
            Decoded JSON body, or an empty dict for empty responses.

        Raises:
            AuthenticationRequiredError: If no access token is available.
            RemoteServiceError: If the request fails.
        """
        access_token = await self.session.get_access_token()
        client = await self._get_http_client()
        logger.debug(f"{method} {path}")

        try:
            response = await client.request(
                method=method,
                url=f"{TASKS_API_BASE}/{path}",
                params=params,
                json=json_data,
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Accept": "application/json",
                },
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RemoteServiceError(_error_message(e), status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            raise RemoteServiceError(str(e)) from e

        if not response.content:
            return {}
        try:
            result: dict[str, Any] = response.json()
        except ValueError as e:
            raise RemoteServiceError(f"Invalid JSON response: {e}") from e
        return result

    async def list_task_lists(self, max_results: int = MAX_TASK_RESULTS) -> TaskListPage:
        response = await self._make_request(
            "GET", "users/@me/lists", params={"maxResults": max_results}
        )
        return _parse(TaskListPage, response)

    async def list_tasks(
        self,
        tasklist_id: str,
        max_results: int = MAX_TASK_RESULTS,
        page_token: str | None = None,
    ) -> TaskPage:
        """List one page of tasks in a task list.

        Args:
            tasklist_id: Task list to read.
            max_results: Page size.
            page_token: Opaque cursor from a previous page, passed through as-is.
        """
        params: dict[str, Any] = {"maxResults": max_results}
        if page_token:
            params["pageToken"] = page_token

        response = await self._make_request("GET", f"lists/{tasklist_id}/tasks", params=params)
        return _parse(TaskPage, response)

    async def get_task(self, tasklist_id: str, task_id: str) -> Task:
        response = await self._make_request("GET", f"lists/{tasklist_id}/tasks/{task_id}")
        return _parse(Task, response)

    async def insert_task(self, tasklist_id: str, body: dict[str, Any]) -> Task:
        response = await self._make_request("POST", f"lists/{tasklist_id}/tasks", json_data=body)
        return _parse(Task, response)

    async def update_task(self, tasklist_id: str, task_id: str, body: dict[str, Any]) -> Task:
        response = await self._make_request(
            "PUT", f"lists/{tasklist_id}/tasks/{task_id}", json_data=body
        )
        return _parse(Task, response)

    async def delete_task(self, tasklist_id: str, task_id: str) -> None:
        await self._make_request("DELETE", f"lists/{tasklist_id}/tasks/{task_id}")

    async def clear_completed(self, tasklist_id: str) -> None:
        """Hide all completed tasks in a task list."""
        await self._make_request("POST", f"lists/{tasklist_id}/clear")
