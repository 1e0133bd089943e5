"""Tool operations exposed over MCP.

Each operation turns a raw argument mapping into a typed request, runs it
against the Tasks API and returns a ToolResult. Failures of any kind become
error results here; nothing raised by an operation reaches the MCP layer.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from gtasks_mcp.tasks.formatting import format_task_list
from gtasks_mcp.tasks.models import (
    ClearTasksRequest,
    CreateTaskRequest,
    DeleteTaskRequest,
    ListTasksRequest,
    SearchTasksRequest,
    Task,
    UpdateTaskRequest,
)
from gtasks_mcp.tasks.service import TaskService

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    """Outcome of a tool call.

    Attributes:
        text: Display text for the caller.
        is_error: Whether the text describes a failure.
    """

    text: str
    is_error: bool = False


def _matches(task: Task, query: str) -> bool:
    needle = query.lower()
    return needle in (task.title or "").lower() or needle in (task.notes or "").lower()


class TaskActions:
    """Router from tool names to task operations.

    Attributes:
        service: TaskService used for resolution and aggregation.
    """

    def __init__(self, service: TaskService) -> None:
        self.service = service
        # name -> (handler, failure label)
        self._operations: dict[
            str, tuple[Callable[[dict[str, Any]], Awaitable[str]], str]
        ] = {
            "search": (self._search, "searching tasks"),
            "list": (self._list, "listing tasks"),
            "create": (self._create, "creating task"),
            "update": (self._update, "updating task"),
            "delete": (self._delete, "deleting task"),
            "clear": (self._clear, "clearing tasks"),
        }

    @property
    def names(self) -> list[str]:
        return list(self._operations)

    async def dispatch(self, name: str, arguments: dict[str, Any] | None) -> ToolResult:
        """Run the named operation and wrap its outcome.

        Args:
            name: Tool name.
            arguments: Raw tool arguments from the MCP request.

        Returns:
            ToolResult, with ``is_error`` set when anything failed.
        """
        operation = self._operations.get(name)
        if operation is None:
            return ToolResult(text=f"Unknown tool: {name}", is_error=True)

        handler, label = operation
        try:
            text = await handler(arguments or {})
        except Exception as e:
            logger.exception(f"Error {label}")
            return ToolResult(text=f"Error {label}: {e}", is_error=True)

        return ToolResult(text=text)

    async def _search(self, arguments: dict[str, Any]) -> str:
        request = SearchTasksRequest.from_arguments(arguments)

        tasks = await self.service.collect_all()
        matching = [task for task in tasks if _matches(task, request.query)]

        return (
            f'Found {len(matching)} tasks matching "{request.query}":\n'
            f"{format_task_list(matching)}"
        )

    async def _list(self, arguments: dict[str, Any]) -> str:
        # The cursor is only honoured by resource listing.
        ListTasksRequest.from_arguments(arguments)

        tasks = await self.service.collect_all()
        return f"Found {len(tasks)} tasks:\n{format_task_list(tasks)}"

    async def _create(self, arguments: dict[str, Any]) -> str:
        request = CreateTaskRequest.from_arguments(arguments)
        tasklist_id = await self.service.resolve_task_list_id(request.task_list_id)

        created = await self.service.client.insert_task(tasklist_id, request.to_body())
        return f"Task created: {created.title}"

    async def _update(self, arguments: dict[str, Any]) -> str:
        request = UpdateTaskRequest.from_arguments(arguments)
        tasklist_id = await self.service.resolve_task_list_id(request.task_list_id)

        updated = await self.service.client.update_task(
            tasklist_id, request.id, request.to_body()
        )
        return f"Task updated: {updated.title}"

    async def _delete(self, arguments: dict[str, Any]) -> str:
        request = DeleteTaskRequest.from_arguments(arguments)
        tasklist_id = await self.service.resolve_task_list_id(request.task_list_id)

        await self.service.client.delete_task(tasklist_id, request.id)
        return f"Task {request.id} deleted"

    async def _clear(self, arguments: dict[str, Any]) -> str:
        request = ClearTasksRequest.from_arguments(arguments)
        tasklist_id = await self.service.resolve_task_list_id(request.task_list_id)

        await self.service.client.clear_completed(tasklist_id)
        return "Cleared all completed tasks from list"
