"""Pydantic models for Google Tasks records and tool requests.

Remote records keep the API's camelCase names as aliases and retain any
fields this module does not declare. Tool requests are built from the raw
MCP argument mapping and check their required field before anything else
happens, so no remote call is made for an invalid request.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from gtasks_mcp.exceptions import MissingIdError, MissingQueryError, MissingTitleError

TaskStatus = Literal["needsAction", "completed"]

DEFAULT_TASK_LIST = "@default"


class TaskList(BaseModel):
    """A named container of tasks."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str | None = None
    title: str | None = None
    updated: str | None = None
    etag: str | None = None
    kind: str | None = None
    self_link: str | None = Field(default=None, alias="selfLink")


class Task(BaseModel):
    """A single to-do item as returned by the Tasks API."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str | None = None
    title: str | None = None
    notes: str | None = None
    status: str | None = None
    due: str | None = None
    completed: str | None = None
    parent: str | None = None
    position: str | None = None
    updated: str | None = None
    etag: str | None = None
    kind: str | None = None
    hidden: bool | None = None
    deleted: bool | None = None
    links: list[dict[str, Any]] | None = None
    self_link: str | None = Field(default=None, alias="selfLink")


class TaskListPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    items: list[TaskList] = Field(default_factory=list)
    next_page_token: str | None = Field(default=None, alias="nextPageToken")


class TaskPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    items: list[Task] = Field(default_factory=list)
    next_page_token: str | None = Field(default=None, alias="nextPageToken")


# =============================================================================
# Tool requests
# =============================================================================


class ToolRequest(BaseModel):
    """Base for typed tool arguments.

    Absent and null arguments are treated alike so field defaults apply.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @classmethod
    def _validate_arguments(cls, arguments: dict[str, Any] | None) -> Any:
        present = {key: value for key, value in (arguments or {}).items() if value is not None}
        return cls.model_validate(present)


class SearchTasksRequest(ToolRequest):
    query: str
    # Accepted for schema compatibility; search always spans every list.
    task_list_id: str | None = Field(default=None, alias="taskListId")

    @classmethod
    def from_arguments(cls, arguments: dict[str, Any] | None) -> "SearchTasksRequest":
        # An empty query would match every task; treat it as missing.
        if not (arguments or {}).get("query"):
            raise MissingQueryError()
        return cls._validate_arguments(arguments)


class ListTasksRequest(ToolRequest):
    cursor: str | None = None

    @classmethod
    def from_arguments(cls, arguments: dict[str, Any] | None) -> "ListTasksRequest":
        return cls._validate_arguments(arguments)


class CreateTaskRequest(ToolRequest):
    title: str
    notes: str | None = None
    status: TaskStatus = "needsAction"
    due: str | None = None
    task_list_id: str | None = Field(default=None, alias="taskListId")

    @classmethod
    def from_arguments(cls, arguments: dict[str, Any] | None) -> "CreateTaskRequest":
        if not (arguments or {}).get("title"):
            raise MissingTitleError()
        return cls._validate_arguments(arguments)

    def to_body(self) -> dict[str, Any]:
        """Request body for tasks.insert."""
        return self.model_dump(
            include={"title", "notes", "status", "due"},
            exclude_none=True,
        )


class UpdateTaskRequest(ToolRequest):
    id: str
    title: str | None = None
    notes: str | None = None
    status: TaskStatus | None = None
    due: str | None = None
    task_list_id: str | None = Field(default=None, alias="taskListId")
    # Accepted but not used for addressing; the id is authoritative.
    uri: str | None = None

    @classmethod
    def from_arguments(cls, arguments: dict[str, Any] | None) -> "UpdateTaskRequest":
        if not (arguments or {}).get("id"):
            raise MissingIdError()
        return cls._validate_arguments(arguments)

    def to_body(self) -> dict[str, Any]:
        """Request body for tasks.update; omitted fields stay absent."""
        return self.model_dump(
            include={"id", "title", "notes", "status", "due"},
            exclude_none=True,
        )


class DeleteTaskRequest(ToolRequest):
    id: str
    task_list_id: str | None = Field(default=None, alias="taskListId")

    @classmethod
    def from_arguments(cls, arguments: dict[str, Any] | None) -> "DeleteTaskRequest":
        if not (arguments or {}).get("id"):
            raise MissingIdError()
        return cls._validate_arguments(arguments)


class ClearTasksRequest(ToolRequest):
    task_list_id: str | None = Field(default=None, alias="taskListId")

    @classmethod
    def from_arguments(cls, arguments: dict[str, Any] | None) -> "ClearTasksRequest":
        return cls._validate_arguments(arguments)
