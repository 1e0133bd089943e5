"""Task list resolution and cross-list aggregation.

Google Tasks has no account-wide task endpoint, so everything that spans
the account walks the task lists in the order the API returns them.
"""

import logging

from gtasks_mcp.exceptions import (
    AuthenticationRequiredError,
    NoTaskListsError,
    TaskNotFoundError,
)
from gtasks_mcp.tasks.client import MAX_TASK_RESULTS, TasksClient
from gtasks_mcp.tasks.models import DEFAULT_TASK_LIST, Task, TaskList

logger = logging.getLogger(__name__)

RESOURCE_PAGE_SIZE = 10


class TaskService:
    """Account-level operations built on TasksClient.

    Attributes:
        client: Remote Tasks API client.
    """

    def __init__(self, client: TasksClient) -> None:
        self.client = client

    async def _task_lists(self) -> list[TaskList]:
        page = await self.client.list_task_lists(max_results=MAX_TASK_RESULTS)
        return page.items

    async def resolve_task_list_id(self, explicit_id: str | None = None) -> str:
        """Determine the task list an operation should act on.

        Args:
            explicit_id: Caller-supplied list id. ``None`` or ``"@default"``
                selects the first list the account returns.

        Returns:
            The effective task list id.

        Raises:
            NoTaskListsError: If a fallback is needed and the account has no lists.
        """
        if explicit_id and explicit_id != DEFAULT_TASK_LIST:
            return explicit_id

        task_lists = await self._task_lists()
        if not task_lists or not task_lists[0].id:
            raise NoTaskListsError()

        first = task_lists[0]
        logger.info(f"Using first task list: {first.title} ({first.id})")
        return first.id

    async def collect_page(self, cursor: str | None = None) -> tuple[list[Task], str | None]:
        """Fetch one page of tasks from every task list.

        The same cursor is sent to every list and the returned cursor is the
        last one any list reported, so paging is best-effort across lists.
        Failures propagate.

        Args:
            cursor: Opaque page token from a previous call.

        Returns:
            Tuple of (tasks in list order, next cursor or None).
        """
        tasks: list[Task] = []
        next_cursor: str | None = None

        for task_list in await self._task_lists():
            page = await self.client.list_tasks(
                task_list.id,
                max_results=RESOURCE_PAGE_SIZE,
                page_token=cursor,
            )
            tasks.extend(page.items)
            if page.next_page_token:
                next_cursor = page.next_page_token

        return tasks, next_cursor

    async def collect_all(self) -> list[Task]:
        """Fetch up to MAX_TASK_RESULTS tasks from every task list.

        A list that fails to load for any reason other than missing
        credentials is logged and skipped.
        """
        tasks: list[Task] = []

        for task_list in await self._task_lists():
            if not task_list.id:
                continue
            try:
                page = await self.client.list_tasks(task_list.id, max_results=MAX_TASK_RESULTS)
            except AuthenticationRequiredError:
                raise
            except Exception as e:
                logger.error(f"Error fetching tasks for list {task_list.id}: {e}")
                continue
            tasks.extend(page.items)

        return tasks

    async def find_task(self, task_id: str) -> Task:
        """Look a task up in each task list until one has it.

        Raises:
            TaskNotFoundError: If no list contains the task.
        """
        for task_list in await self._task_lists():
            if not task_list.id:
                continue
            try:
                return await self.client.get_task(task_list.id, task_id)
            except AuthenticationRequiredError:
                raise
            except Exception as e:
                logger.debug(f"Task {task_id} not in list {task_list.id}: {e}")

        raise TaskNotFoundError(task_id)
