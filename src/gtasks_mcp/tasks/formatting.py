"""Plain-text rendering of tasks.

Two formats exist: a one-entry-per-task summary used by the list and search
tools, and a labelled detail view used when a task resource is read. The
summary is a pure projection, so absent fields render as ``None``.
"""

from collections.abc import Iterable

from gtasks_mcp.tasks.models import Task


def format_task(task: Task) -> str:
    """Render one task as a summary entry."""
    return (
        f"{task.title}\n"
        f" (Due: {task.due or 'Not set'})"
        f" - Notes: {task.notes}"
        f" - ID: {task.id}"
        f" - Status: {task.status}"
        f" - URI: {task.self_link}"
        f" - Hidden: {task.hidden}"
        f" - Parent: {task.parent}"
        f" - Deleted?: {task.deleted}"
        f" - Completed Date: {task.completed}"
        f" - Position: {task.position}"
        f" - Updated Date: {task.updated}"
        f" - ETag: {task.etag}"
        f" - Links: {task.links}"
        f" - Kind: {task.kind}"
    )


def format_task_list(tasks: Iterable[Task]) -> str:
    return "\n".join(format_task(task) for task in tasks)


def format_task_details(task: Task) -> str:
    """Render one task as ``Label: value`` lines with placeholders for gaps."""
    lines = [
        f"Title: {task.title or 'No title'}",
        f"Status: {task.status or 'Unknown'}",
        f"Due: {task.due or 'Not set'}",
        f"Notes: {task.notes or 'No notes'}",
        f"Hidden: {task.hidden or 'Unknown'}",
        f"Parent: {task.parent or 'Unknown'}",
        f"Deleted?: {task.deleted or 'Unknown'}",
        f"Completed Date: {task.completed or 'Unknown'}",
        f"Position: {task.position or 'Unknown'}",
        f"ETag: {task.etag or 'Unknown'}",
        f"Links: {task.links or 'Unknown'}",
        f"Kind: {task.kind or 'Unknown'}",
        # Tasks has no creation time; the last update stands in for it
        f"Created: {task.updated or 'Unknown'}",
        f"Updated: {task.updated or 'Unknown'}",
    ]
    return "\n".join(lines)
