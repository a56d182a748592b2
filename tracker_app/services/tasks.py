"""
Business rules for tasks.

``TaskService`` enforces two things the routes cannot express on their
own: a new task always starts in ``TO_DO``, and only a task's owner may
update or delete it. Administrators are held to the same ownership rule
unless ``admin_overrides_ownership`` is enabled.

Listings are read-only pages; an empty page is a normal result.
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import Forbidden, InvalidInput, TaskNotFound
from ..jwt import Principal
from ..models import Task, TaskStatus
from ..repositories import MAX_OFFSET, Page, TaskRepository
from .persons import PersonService

logger = logging.getLogger(__name__)


class TaskService:
    """
    Task CRUD and filtered listings.

    Args:
        tasks: Repository for task rows.
        persons: Used to resolve (and verify) a new task's owner.
        page_size: Number of tasks per page.
        admin_overrides_ownership: Let ADMIN principals mutate any task.
    """

    def __init__(
        self,
        tasks: TaskRepository,
        persons: PersonService,
        page_size: int = 10,
        admin_overrides_ownership: bool = False,
    ):
        self.tasks = tasks
        self.persons = persons
        self.page_size = page_size
        self.admin_overrides_ownership = admin_overrides_ownership

    # -----------------------------------------------------------------
    # Single-task operations
    # -----------------------------------------------------------------

    def _get(self, task_id: int) -> Task:
        task = self.tasks.find_by_id(task_id)
        if task is None:
            raise TaskNotFound(f"Task not found with ID: {task_id}")
        return task

    def _check_ownership(self, task: Task, requester: Principal, action: str) -> None:
        if task.person_id == requester.person_id:
            return
        if self.admin_overrides_ownership and requester.is_admin:
            logger.info("Admin %s %s task %s owned by %s",
                        requester.person_id, action, task.id, task.person_id)
            return
        logger.warning("Person %s may not %s task %s owned by %s",
                       requester.person_id, action, task.id, task.person_id)
        raise Forbidden(f"You do not have permission to {action} this task.")

    def create_task(self, details: dict[str, Any], owner_id: int) -> dict[str, Any]:
        """
        Create a task owned by *owner_id*.

        Any ``trackingStatus`` in *details* is ignored: new tasks are ``TO_DO``.

        Raises:
            PersonNotFound: If the owner does not exist.
        """
        owner = self.persons.find_by_id(owner_id)

        task = Task(
            title=details["title"],
            description=details.get("description"),
            tracking_status=TaskStatus.TO_DO.value,
            person_id=owner["personId"],
        )
        self.tasks.save(task)
        logger.info("Created task %s for person %s", task.id, owner_id)
        return task.to_dict()

    def get_task_by_id(self, task_id: int) -> dict[str, Any]:
        return self._get(task_id).to_dict()

    def update_task(
        self, task_id: int, details: dict[str, Any], requester: Principal
    ) -> dict[str, Any]:
        """
        Overwrite title and description; change status only when supplied.

        Raises:
            TaskNotFound: If the task does not exist.
            Forbidden: If *requester* may not modify the task.
        """
        task = self._get(task_id)
        self._check_ownership(task, requester, "update")

        task.title = details["title"]
        task.description = details.get("description")
        if details.get("trackingStatus") is not None:
            task.tracking_status = TaskStatus(details["trackingStatus"]).value

        self.tasks.save(task)
        logger.info("Updated task %s", task_id)
        return task.to_dict()

    def delete_task(self, task_id: int, requester: Principal) -> None:
        task = self._get(task_id)
        self._check_ownership(task, requester, "delete")
        self.tasks.delete(task)
        logger.info("Deleted task %s", task_id)

    # -----------------------------------------------------------------
    # Listings
    # -----------------------------------------------------------------

    def search_tasks(
        self,
        page: int,
        *,
        owner_id: int | None = None,
        status: TaskStatus | None = None,
        title: str | None = None,
    ) -> Page[dict[str, Any]]:
        """Return one page of tasks matching all given filters (ANDed)."""
        if page < 0:
            raise InvalidInput("Page index must not be less than zero.")
        if page * self.page_size > MAX_OFFSET:
            raise InvalidInput("Page index is too large.")
        result = self.tasks.find_tasks(
            page, self.page_size, owner_id=owner_id, status=status, title=title
        )
        return result.map(Task.to_dict)

    def get_all_tasks(self, page: int) -> Page[dict[str, Any]]:
        return self.search_tasks(page)

    def get_tasks_by_status(self, status: TaskStatus, page: int) -> Page[dict[str, Any]]:
        return self.search_tasks(page, status=status)

    def get_tasks_by_user_id(self, owner_id: int, page: int) -> Page[dict[str, Any]]:
        return self.search_tasks(page, owner_id=owner_id)

    def get_tasks_by_user_id_and_status(
        self, owner_id: int, status: TaskStatus, page: int
    ) -> Page[dict[str, Any]]:
        return self.search_tasks(page, owner_id=owner_id, status=status)

    def get_tasks_by_title(self, title: str, page: int) -> Page[dict[str, Any]]:
        return self.search_tasks(page, title=title)
