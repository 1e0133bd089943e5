"""Error kinds raised by the Google Tasks adapter."""


class GoogleTasksMCPError(Exception):
    """Base class for all gtasks-mcp errors."""


class NoTaskListsError(GoogleTasksMCPError):
    """Raised when the account has no task lists to fall back on."""

    def __init__(self, message: str = "No task lists found in your Google Tasks account") -> None:
        super().__init__(message)


class MissingTitleError(GoogleTasksMCPError):
    """Raised when a create request has no title."""

    def __init__(self, message: str = "Task title is required") -> None:
        super().__init__(message)


class MissingIdError(GoogleTasksMCPError):
    """Raised when an update or delete request has no task id."""

    def __init__(self, message: str = "Task ID is required") -> None:
        super().__init__(message)


class MissingQueryError(GoogleTasksMCPError):
    """Raised when a search request has no query."""

    def __init__(self, message: str = "Search query is required") -> None:
        super().__init__(message)


class TaskNotFoundError(GoogleTasksMCPError):
    """Raised when no task list contains the requested task."""

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")


class AuthenticationRequiredError(GoogleTasksMCPError):
    """Raised when no usable Google credentials could be resolved."""


class RemoteServiceError(GoogleTasksMCPError):
    """Raised when the Google Tasks API rejects or fails a request.

    Attributes:
        status_code: HTTP status code, or None for transport failures.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
