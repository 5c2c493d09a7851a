"""Persistence boundary for the scheduler and an in-memory implementation."""

import copy
from typing import Protocol

from src.domain.log import ActivityEntry
from src.domain.member import Member
from src.domain.rotation import RotationOccurrence
from src.domain.task import Task
from src.modules.tasks.dependency_graph import DependencyGraph


class TaskNotFoundError(KeyError):
    """Raised when a task ID is unknown to the store."""


class TaskStore(Protocol):
    """Storage operations the scheduler service relies on."""

    async def get_task(self, *, task_id: int) -> Task: ...

    async def save_task(self, *, task: Task) -> None: ...

    async def list_members(self, *, household_id: int) -> list[Member]: ...

    async def get_schedule(self, *, task_id: int) -> list[RotationOccurrence] | None: ...

    async def save_schedule(self, *, task_id: int, schedule: list[RotationOccurrence]) -> None: ...

    async def get_graph(self, *, household_id: int) -> DependencyGraph: ...

    async def save_graph(self, *, graph: DependencyGraph) -> None: ...

    async def append_activity(self, *, entry: ActivityEntry) -> None: ...


class InMemoryTaskStore:
    """Dictionary-backed TaskStore.

    Returns copies on every read so callers never share state with the
    stored records.
    """

    def __init__(self) -> None:
        self._tasks: dict[int, Task] = {}
        self._members: dict[int, list[Member]] = {}
        self._schedules: dict[int, list[RotationOccurrence]] = {}
        self._graphs: dict[int, DependencyGraph] = {}
        self.activities: list[ActivityEntry] = []

    def add_member(self, member: Member) -> None:
        """Register a household member."""
        self._members.setdefault(member.household_id, []).append(member.model_copy())

    async def get_task(self, *, task_id: int) -> Task:
        """Get a task by ID.

        Raises:
            TaskNotFoundError: If no task has this ID
        """
        if task_id not in self._tasks:
            msg = f"Task not found: {task_id}"
            raise TaskNotFoundError(msg)
        return self._tasks[task_id].model_copy(deep=True)

    async def save_task(self, *, task: Task) -> None:
        """Insert or replace a task."""
        self._tasks[task.id] = task.model_copy(deep=True)

    async def list_members(self, *, household_id: int) -> list[Member]:
        """List the members of a household."""
        return [m.model_copy() for m in self._members.get(household_id, [])]

    async def get_schedule(self, *, task_id: int) -> list[RotationOccurrence] | None:
        """Get the planned rotation schedule of a task, if any."""
        schedule = self._schedules.get(task_id)
        return copy.deepcopy(schedule) if schedule is not None else None

    async def save_schedule(self, *, task_id: int, schedule: list[RotationOccurrence]) -> None:
        """Replace the planned rotation schedule of a task."""
        self._schedules[task_id] = copy.deepcopy(schedule)

    async def get_graph(self, *, household_id: int) -> DependencyGraph:
        """Get the household's dependency graph, listing its current tasks."""
        task_ids = [t.id for t in self._tasks.values() if t.household_id == household_id]
        graph = self._graphs.get(household_id)
        if graph is None:
            return DependencyGraph(household_id=household_id, task_ids=task_ids)
        return graph.model_copy(update={"task_ids": task_ids}, deep=True)

    async def save_graph(self, *, graph: DependencyGraph) -> None:
        """Replace the household's dependency graph."""
        self._graphs[graph.household_id] = graph.model_copy(deep=True)

    async def append_activity(self, *, entry: ActivityEntry) -> None:
        """Append an activity log entry."""
        self.activities.append(entry.model_copy(deep=True))
