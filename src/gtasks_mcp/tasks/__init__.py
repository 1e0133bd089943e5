"""Google Tasks access: REST client, aggregation, formatting and tool operations."""

from gtasks_mcp.tasks.actions import TaskActions, ToolResult
from gtasks_mcp.tasks.client import TasksClient
from gtasks_mcp.tasks.formatting import format_task, format_task_details, format_task_list
from gtasks_mcp.tasks.models import Task, TaskList
from gtasks_mcp.tasks.service import TaskService

__all__ = [
    "Task",
    "TaskActions",
    "TaskList",
    "TaskService",
    "TasksClient",
    "ToolResult",
    "format_task",
    "format_task_details",
    "format_task_list",
]
