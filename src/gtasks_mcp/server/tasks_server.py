"""Google Tasks MCP server.

Exposes six tools (search, list, create, update, delete, clear) and one
resource per task, addressed as ``gtasks:///<taskId>``. Credentials are
resolved lazily on the first request through a shared AuthSession, so the
tool list is available before authentication is set up.
"""

import asyncio
import logging
from typing import Any

from mcp import types
from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp.types import Resource, TextContent, Tool
from pydantic import AnyUrl

from gtasks_mcp.auth import AuthSession, OAuthManager, TokenStorage
from gtasks_mcp.exceptions import AuthenticationRequiredError
from gtasks_mcp.tasks.actions import TaskActions, ToolResult
from gtasks_mcp.tasks.client import TasksClient
from gtasks_mcp.tasks.formatting import format_task_details
from gtasks_mcp.tasks.service import TaskService

# stderr only; stdout carries the MCP stream
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SERVER_NAME = "gtasks-mcp"

RESOURCE_URI_PREFIX = "gtasks:///"

TASK_LIST_ID_PROPERTY = {
    "type": "string",
    "description": "Task list ID (default: first task list)",
}

TOOLS = [
    Tool(
        name="search",
        description="Search for a task in Google Tasks by title or notes",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search query (case-insensitive)",
                },
                "taskListId": TASK_LIST_ID_PROPERTY,
            },
            "required": ["query"],
        },
    ),
    Tool(
        name="list",
        description="List all tasks in Google Tasks",
        inputSchema={
            "type": "object",
            "properties": {
                "cursor": {
                    "type": "string",
                    "description": "Cursor for pagination",
                },
            },
            "required": [],
        },
    ),
    Tool(
        name="create",
        description="Create a new task in Google Tasks",
        inputSchema={
            "type": "object",
            "properties": {
                "taskListId": TASK_LIST_ID_PROPERTY,
                "title": {
                    "type": "string",
                    "description": "Task title",
                },
                "notes": {
                    "type": "string",
                    "description": "Task notes",
                },
                "status": {
                    "type": "string",
                    "enum": ["needsAction", "completed"],
                    "description": "Task status (default: needsAction)",
                },
                "due": {
                    "type": "string",
                    "description": "Due date in RFC3339 format (e.g., '2025-02-15T00:00:00Z')",
                },
            },
            "required": ["title"],
        },
    ),
    Tool(
        name="update",
        description="Update a task in Google Tasks",
        inputSchema={
            "type": "object",
            "properties": {
                "taskListId": TASK_LIST_ID_PROPERTY,
                "id": {
                    "type": "string",
                    "description": "Task ID",
                },
                "uri": {
                    "type": "string",
                    "description": "Task URI (informational, the ID is used for addressing)",
                },
                "title": {
                    "type": "string",
                    "description": "Task title",
                },
                "notes": {
                    "type": "string",
                    "description": "Task notes",
                },
                "status": {
                    "type": "string",
                    "enum": ["needsAction", "completed"],
                    "description": "Task status (needsAction or completed)",
                },
                "due": {
                    "type": "string",
                    "description": "Due date in RFC3339 format",
                },
            },
            "required": ["id"],
        },
    ),
    Tool(
        name="delete",
        description="Delete a task in Google Tasks",
        inputSchema={
            "type": "object",
            "properties": {
                "taskListId": TASK_LIST_ID_PROPERTY,
                "id": {
                    "type": "string",
                    "description": "Task ID",
                },
            },
            "required": ["id"],
        },
    ),
    Tool(
        name="clear",
        description="Clear completed tasks from a Google Tasks task list",
        inputSchema={
            "type": "object",
            "properties": {
                "taskListId": TASK_LIST_ID_PROPERTY,
            },
            "required": [],
        },
    ),
]


class GoogleTasksServer:
    """MCP server for Google Tasks.

    Attributes:
        server: MCP Server instance.
        session: AuthSession shared by every request.
        client: Tasks REST client.
        service: Account-level task operations.
        actions: Tool router.
    """

    def __init__(self, session: AuthSession | None = None) -> None:
        """Initialize the server.

        Args:
            session: Credential session. Defaults to one backed by the
                project token file and the environment.
        """
        self.server = Server(SERVER_NAME)
        self.session = session or AuthSession(manager=OAuthManager(storage=TokenStorage()))
        self.client = TasksClient(self.session)
        self.service = TaskService(self.client)
        self.actions = TaskActions(self.service)
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        """Register MCP request handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return TOOLS

        @self.server.read_resource()
        async def read_resource(uri: AnyUrl) -> list[ReadResourceContents]:
            text = await self.read_task(str(uri))
            return [ReadResourceContents(content=text, mime_type="text/plain")]

        # Registered directly so the error flag and next cursor reach the client.
        async def handle_call_tool(request: types.CallToolRequest) -> types.ServerResult:
            result = await self.call_tool(request.params.name, request.params.arguments)
            return types.ServerResult(
                types.CallToolResult(
                    content=[TextContent(type="text", text=result.text)],
                    isError=result.is_error,
                )
            )

        async def handle_list_resources(request: types.ListResourcesRequest) -> types.ServerResult:
            cursor = request.params.cursor if request.params else None
            return types.ServerResult(await self.list_task_resources(cursor))

        self.server.request_handlers[types.CallToolRequest] = handle_call_tool
        self.server.request_handlers[types.ListResourcesRequest] = handle_list_resources

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> ToolResult:
        """Run a tool call; never raises."""
        return await self.actions.dispatch(name, arguments)

    async def list_task_resources(self, cursor: str | None = None) -> types.ListResourcesResult:
        """List one page of task resources across all task lists.

        Args:
            cursor: Opaque cursor from a previous listing.

        Returns:
            Resources and the next cursor. Without credentials the listing
            is empty and carries the reason under ``_meta.error``.
        """
        try:
            tasks, next_cursor = await self.service.collect_page(cursor)
        except AuthenticationRequiredError as e:
            logger.warning(f"Listing resources without credentials: {e}")
            return types.ListResourcesResult(resources=[], _meta={"error": str(e)})

        resources = [
            Resource(
                uri=f"{RESOURCE_URI_PREFIX}{task.id}",
                name=task.title or task.id or "",
                mimeType="text/plain",
            )
            for task in tasks
        ]
        return types.ListResourcesResult(resources=resources, nextCursor=next_cursor)

    async def read_task(self, uri: str) -> str:
        """Render the task addressed by a ``gtasks:///<taskId>`` URI.

        Raises:
            TaskNotFoundError: If no task list contains the task.
        """
        task_id = uri.removeprefix(RESOURCE_URI_PREFIX)

        try:
            task = await self.service.find_task(task_id)
        except AuthenticationRequiredError as e:
            logger.warning(f"Reading {uri} without credentials: {e}")
            return str(e)

        return format_task_details(task)

    async def close(self) -> None:
        await self.client.close()

    async def run(self) -> None:
        """Run the MCP server using stdio transport."""
        try:
            async with stdio_server() as (read_stream, write_stream):
                logger.info("Google Tasks MCP server running on stdio")
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
        finally:
            await self.close()


def main() -> None:
    """Entry point for the Google Tasks MCP server."""
    server = GoogleTasksServer()
    asyncio.run(server.run())


if __name__ == "__main__":
    main()
