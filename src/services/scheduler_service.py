"""Scheduler service: load, apply and persist scheduler operations.

Completion, skip and restore read and then write the same task fields, so
each runs under a per-task lock; dependency edges are checked and inserted
under a per-household lock so two concurrent inserts cannot jointly form a
cycle. The store is only written after an operation succeeded.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime

from src.core.logging import span
from src.core.task_store import TaskStore
from src.domain.rotation import Occurrence
from src.domain.task import Task
from src.modules.tasks import rotation, service
from src.modules.tasks.dependency_graph import DependencyGraph
from src.modules.tasks.service import TaskUpdate


logger = logging.getLogger(__name__)


class KeyedLocks:
    """asyncio locks created per key on demand and dropped once unused.

    A lock lives only while at least one caller holds it or waits for it.
    """

    def __init__(self) -> None:
        self._locks: dict[int, asyncio.Lock] = {}
        self._users: dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, key: int) -> AsyncIterator[None]:
        """Hold the lock for `key` for the duration of the block."""
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]


class SchedulerService:
    """Serialises scheduler operations per task and per household graph."""

    def __init__(self, store: TaskStore) -> None:
        self._store = store
        self._task_locks = KeyedLocks()
        self._graph_locks = KeyedLocks()

    async def _commit(self, update: TaskUpdate) -> TaskUpdate:
        await self._store.save_task(task=update.task)
        if update.schedule is not None:
            await self._store.save_schedule(task_id=update.task.id, schedule=update.schedule)
        for entry in update.activities:
            await self._store.append_activity(entry=entry)
        return update

    async def complete_task(self, *, task_id: int, completed_by: int, now: datetime | None = None) -> TaskUpdate:
        """Complete a task and persist the result.

        Raises:
            TaskNotFoundError: If the task does not exist
            SchedulerError: If the completion is rejected (nothing is written)
        """
        async with self._task_locks.hold(task_id):
            with span("scheduler_service.complete_task"):
                task = await self._store.get_task(task_id=task_id)
                members = await self._store.list_members(household_id=task.household_id)
                schedule = await self._store.get_schedule(task_id=task_id) if task.enable_rotation else None

                update = service.complete_task(
                    task,
                    completed_by,
                    now or datetime.now(UTC),
                    members=members,
                    schedule=schedule,
                )
                logger.info("Completed task %s by member %s", task_id, completed_by)
                return await self._commit(update)

    async def skip_occurrence(
        self, *, task_id: int, value: str | date | datetime, member_id: int | None = None
    ) -> TaskUpdate:
        """Skip one occurrence of a task and persist the result."""
        async with self._task_locks.hold(task_id):
            task = await self._store.get_task(task_id=task_id)
            update = service.skip_occurrence(task, value, member_id=member_id)
            return await self._commit(update)

    async def restore_occurrence(
        self, *, task_id: int, value: str | date | datetime, member_id: int | None = None
    ) -> TaskUpdate:
        """Restore a skipped occurrence of a task and persist the result."""
        async with self._task_locks.hold(task_id):
            task = await self._store.get_task(task_id=task_id)
            update = service.restore_occurrence(task, value, member_id=member_id)
            return await self._commit(update)

    async def configure_rotation(
        self,
        *,
        task_id: int,
        enable_rotation: bool,
        required_persons: int | None = None,
        excluded_members: set[int] | None = None,
    ) -> Task:
        """Change a task's rotation settings after validating them against the household.

        Raises:
            InsufficientEligibleMembers: If the household cannot staff the rotation
        """
        async with self._task_locks.hold(task_id):
            task = await self._store.get_task(task_id=task_id)
            excluded = task.excluded_members if excluded_members is None else excluded_members

            if enable_rotation:
                members = await self._store.list_members(household_id=task.household_id)
                service.validate_rotation_config(rotation.eligible_pool(members), excluded, required_persons)

            updated = task.model_copy(
                update={
                    "enable_rotation": enable_rotation,
                    "required_persons": required_persons,
                    "excluded_members": set(excluded),
                },
                deep=True,
            )
            await self._store.save_task(task=updated)
            return updated

    async def add_dependency(self, *, household_id: int, prerequisite_id: int, dependent_id: int) -> DependencyGraph:
        """Insert a dependency edge with the cycle check under the household lock."""
        async with self._graph_locks.hold(household_id):
            graph = await self._store.get_graph(household_id=household_id)
            updated = service.add_dependency_edge(graph, prerequisite_id, dependent_id)
            await self._store.save_graph(graph=updated)
            return updated

    async def available_tasks(self, *, household_id: int, task_id: int) -> list[int]:
        """Tasks that can still be linked to `task_id`."""
        graph = await self._store.get_graph(household_id=household_id)
        return service.available_tasks_for(graph, task_id)

    async def upcoming_occurrences(self, *, task_id: int, count: int | None = None) -> list[Occurrence]:
        """Project the next occurrences of a stored task."""
        task = await self._store.get_task(task_id=task_id)
        members = await self._store.list_members(household_id=task.household_id)
        return service.list_upcoming_occurrences(task, count, members=members)
