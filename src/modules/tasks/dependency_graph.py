"""Acyclic prerequisite/follow-up graph over one household's tasks."""

import logging
from collections.abc import Iterable

from pydantic import BaseModel, Field

from src.core.errors import CycleDetected, SelfReference, TaskNotInHousehold
from src.domain.dependency import DependencyEdge, DependencyType, TaskEdges


logger = logging.getLogger(__name__)


class DependencyGraph(BaseModel):
    """Directed edges prerequisite -> dependent, scoped to one household.

    Prerequisites and follow-ups are two views of the same edge set: adding
    a follow-up B to task A stores the edge A -> B, exactly like adding A as
    a prerequisite of B.
    """

    household_id: int = Field(..., description="Household the graph belongs to")
    task_ids: list[int] = Field(
        default_factory=list,
        description="The household's task IDs in display order; empty means not checked",
    )
    edges: set[DependencyEdge] = Field(default_factory=set, description="Stored dependency edges")

    def _check_task(self, task_id: int) -> None:
        if self.task_ids and task_id not in self.task_ids:
            msg = f"Task {task_id} does not belong to household {self.household_id}"
            raise TaskNotInHousehold(msg)

    def _dependents(self, task_id: int) -> list[int]:
        return [e.dependent_id for e in self.edges if e.prerequisite_id == task_id]

    def reachable(self, source: int, target: int) -> bool:
        """Check whether `target` can be reached from `source` following edges."""
        stack = [source]
        seen = {source}
        while stack:
            node = stack.pop()
            if node == target:
                return True
            for nxt in self._dependents(node):
                if nxt not in seen:
                    seen.add(nxt)
                    stack.append(nxt)
        return False

    def check_edge(self, prerequisite_id: int, dependent_id: int) -> None:
        """Validate an edge without inserting it.

        Raises:
            SelfReference: If both ends are the same task
            TaskNotInHousehold: If either task is not one of the household's tasks
            CycleDetected: If the prerequisite is already reachable from the dependent
        """
        if prerequisite_id == dependent_id:
            msg = f"Task {prerequisite_id} cannot depend on itself"
            raise SelfReference(msg)
        self._check_task(prerequisite_id)
        self._check_task(dependent_id)
        if self.reachable(dependent_id, prerequisite_id):
            msg = f"Edge {prerequisite_id} -> {dependent_id} would create a cycle"
            raise CycleDetected(msg)

    def add_edge(self, prerequisite_id: int, dependent_id: int) -> None:
        """Insert an edge after the cycle check. Existing edges are left as they are."""
        self.check_edge(prerequisite_id, dependent_id)
        edge = DependencyEdge(prerequisite_id=prerequisite_id, dependent_id=dependent_id)
        if edge not in self.edges:
            self.edges.add(edge)
            logger.debug("Added dependency %s -> %s", prerequisite_id, dependent_id)

    def remove_edge(self, prerequisite_id: int, dependent_id: int) -> None:
        """Remove an edge if present."""
        self.edges.discard(DependencyEdge(prerequisite_id=prerequisite_id, dependent_id=dependent_id))

    def add_dependencies(
        self,
        task_id: int,
        *,
        prerequisites: Iterable[int] = (),
        followups: Iterable[int] = (),
    ) -> None:
        """Link several prerequisites and follow-ups to a task, all or nothing."""
        pending = [(p, task_id) for p in prerequisites] + [(task_id, f) for f in followups]

        staged = self.model_copy(deep=True)
        for prerequisite_id, dependent_id in pending:
            staged.add_edge(prerequisite_id, dependent_id)
        self.edges = staged.edges

    def edges_of(self, task_id: int) -> TaskEdges:
        """Return the prerequisites and follow-ups of a task, each sorted by ID."""
        return TaskEdges(
            prerequisites=sorted(e.prerequisite_id for e in self.edges if e.dependent_id == task_id),
            followups=sorted(e.dependent_id for e in self.edges if e.prerequisite_id == task_id),
        )

    def linked(self, task_id: int) -> dict[int, DependencyType]:
        """Map every task directly linked to `task_id` to the side it sits on."""
        view = self.edges_of(task_id)
        links = {t: DependencyType.PREREQUISITE for t in view.prerequisites}
        links.update({t: DependencyType.FOLLOWUP for t in view.followups})
        return links

    def available_tasks_for(self, task_id: int) -> list[int]:
        """Household tasks that can still be offered as a new link for `task_id`.

        Excludes the task itself and every task already directly linked to it.
        """
        taken = set(self.linked(task_id)) | {task_id}
        return [t for t in self.task_ids if t not in taken]
