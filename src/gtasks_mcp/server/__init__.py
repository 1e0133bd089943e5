"""MCP server implementation for Google Tasks.

Tools (6):
- search: Find tasks by title or notes across all task lists
- list: List tasks across all task lists
- create / update / delete: Manage a single task
- clear: Clear completed tasks from a task list

Resources:
- gtasks:///<taskId>, one per task, with cursor-based listing

Transport: Stdio
Authentication: OAuth 2.0 (environment refresh token or token file)
"""

from gtasks_mcp.server.tasks_server import GoogleTasksServer, main


def create_server() -> GoogleTasksServer:
    """Create a Google Tasks MCP server.

    Example:
        >>> server = create_server()
        >>> asyncio.run(server.run())
    """
    return GoogleTasksServer()


__all__ = ["create_server", "GoogleTasksServer", "main"]
