"""TaskStore abstract interface."""

from abc import ABC, abstractmethod
from typing import Any
from uuid import UUID

from slotwise.domain import ConflictRequest, Task, TaskStatus


class TaskStore(ABC):
    """Abstract interface for task persistence.

    Writes are single-row and atomic. Passing ``expected_status`` turns a
    write into a compare-and-set: when the stored status differs, nothing is
    written and ``None`` is returned.
    """

    @abstractmethod
    async def get_task(self, task_id: UUID) -> Task | None:
        """Get a fresh copy of a task."""
        pass

    @abstractmethod
    async def save_task(self, task: Task) -> Task:
        """Insert or replace a task."""
        pass

    @abstractmethod
    async def update_task(
        self,
        task_id: UUID,
        patch: dict[str, Any],
        expected_status: TaskStatus | None = None,
    ) -> Task | None:
        """Apply a partial update.

        Returns:
            The updated task, or None if missing or the precondition failed
        """
        pass

    @abstractmethod
    async def update_task_status(
        self,
        task_id: UUID,
        status: TaskStatus,
        expected_status: TaskStatus | None = None,
    ) -> Task | None:
        """Change only the status of a task."""
        pass

    @abstractmethod
    async def get_tasks_by_status(self, user_id: UUID, status: TaskStatus) -> list[Task]:
        """Get a user's tasks in a status, oldest first."""
        pass

    @abstractmethod
    async def set_conflict_request(self, task_id: UUID, request: ConflictRequest) -> bool:
        """Attach a conflict request to its task.

        Returns:
            False if the task does not exist
        """
        pass

    @abstractmethod
    async def take_conflict_request(
        self,
        task_id: UUID,
        request_id: UUID | None = None,
    ) -> ConflictRequest | None:
        """Atomically detach and return the task's conflict request.

        Returns None when there is nothing to take or ``request_id`` does
        not match the attached request.
        """
        pass

    @abstractmethod
    async def list_conflict_requests(self) -> list[ConflictRequest]:
        """All conflict requests still attached to tasks."""
        pass
