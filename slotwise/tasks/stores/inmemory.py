"""In-memory implementation of TaskStore."""

from typing import Any
from uuid import UUID

from slotwise.domain import ConflictRequest, Task, TaskStatus, utc_now
from slotwise.tasks.store import TaskStore


class InMemoryTaskStore(TaskStore):
    """In-memory implementation of TaskStore for testing and development.

    Callers always receive copies, so a held task is a snapshot and must be
    re-read to observe concurrent writes.
    """

    def __init__(self) -> None:
        self._tasks: dict[UUID, Task] = {}

    async def get_task(self, task_id: UUID) -> Task | None:
        task = self._tasks.get(task_id)
        return task.model_copy(deep=True) if task else None

    async def save_task(self, task: Task) -> Task:
        stored = task.model_copy(deep=True)
        stored.touch()
        self._tasks[stored.id] = stored
        return stored.model_copy(deep=True)

    async def update_task(
        self,
        task_id: UUID,
        patch: dict[str, Any],
        expected_status: TaskStatus | None = None,
    ) -> Task | None:
        current = self._tasks.get(task_id)
        if current is None:
            return None
        if expected_status is not None and current.status != expected_status:
            return None

        data = current.model_dump()
        data.update(patch)
        data["updated_at"] = utc_now()
        updated = Task.model_validate(data)
        self._tasks[task_id] = updated
        return updated.model_copy(deep=True)

    async def update_task_status(
        self,
        task_id: UUID,
        status: TaskStatus,
        expected_status: TaskStatus | None = None,
    ) -> Task | None:
        return await self.update_task(task_id, {"status": status}, expected_status)

    async def get_tasks_by_status(self, user_id: UUID, status: TaskStatus) -> list[Task]:
        results = [
            task.model_copy(deep=True)
            for task in self._tasks.values()
            if task.user_id == user_id and task.status == status
        ]
        results.sort(key=lambda t: t.created_at)
        return results

    async def set_conflict_request(self, task_id: UUID, request: ConflictRequest) -> bool:
        task = self._tasks.get(task_id)
        if task is None:
            return False
        task.conflict = request.model_copy(deep=True)
        task.touch()
        return True

    async def take_conflict_request(
        self,
        task_id: UUID,
        request_id: UUID | None = None,
    ) -> ConflictRequest | None:
        task = self._tasks.get(task_id)
        if task is None or task.conflict is None:
            return None
        if request_id is not None and task.conflict.id != request_id:
            return None

        request = task.conflict
        task.conflict = None
        task.touch()
        return request

    async def list_conflict_requests(self) -> list[ConflictRequest]:
        return [
            task.conflict.model_copy(deep=True)
            for task in self._tasks.values()
            if task.conflict is not None
        ]
