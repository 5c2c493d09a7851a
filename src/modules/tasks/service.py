"""Scheduler operations exposed to the application layer.

Every operation takes explicit snapshots (task, member list, graph) and
returns fresh ones; nothing here reads ambient household state or touches
storage. Rejected mutations raise a SchedulerError subclass and leave the
inputs unchanged.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime

from pydantic import BaseModel, Field

from src.core.errors import SchedulerError
from src.core.logging import log_with_task_context, span
from src.domain.log import ActivityAction, ActivityEntry
from src.domain.member import Member
from src.domain.rotation import Occurrence, RotationOccurrence
from src.domain.task import Task
from src.modules.tasks import advancer, rotation, skip_set
from src.modules.tasks.dependency_graph import DependencyGraph
from src.modules.tasks.occurrences import upcoming_occurrences


logger = logging.getLogger(__name__)


class TaskUpdate(BaseModel):
    """Updated task snapshot plus the activity entries the caller should log."""

    task: Task
    activities: list[ActivityEntry] = Field(default_factory=list)
    schedule: list[RotationOccurrence] | None = None


def _household_pool(task: Task, members: Iterable[Member]) -> list[int]:
    return rotation.eligible_pool(m for m in members if m.household_id == task.household_id)


def _member_name(members: Iterable[Member], member_id: int) -> str:
    for member in members:
        if member.id == member_id and member.name:
            return member.name
    return f"member {member_id}"


def complete_task(
    task: Task,
    completed_by: int,
    now: datetime,
    *,
    members: Sequence[Member] = (),
    schedule: Sequence[RotationOccurrence] | None = None,
) -> TaskUpdate:
    """Complete the current occurrence of a task.

    One-off tasks are closed; recurring tasks move to their next non-skipped
    occurrence and rotate when rotation is enabled.

    Args:
        task: Current task snapshot
        completed_by: Member completing the task
        now: Current wall-clock time
        members: Household members (active flags decide rotation eligibility)
        schedule: Planned rotation schedule, if the household keeps one

    Returns:
        TaskUpdate with a "completed" entry and, if the assignee changed, a "rotated" entry
    """
    with span("task_scheduler.complete_task"):
        try:
            result = advancer.complete(
                task,
                completed_by,
                now,
                eligible=_household_pool(task, members),
                schedule=schedule,
            )
        except SchedulerError as e:
            log_with_task_context(logger, "warning", f"Completion rejected: {e}", task_id=task.id, code=e.code)
            raise

        metadata = {}
        if result.original_due_date is not None:
            metadata["original_due_date"] = result.original_due_date.isoformat()
        activities = [
            ActivityEntry(
                household_id=task.household_id,
                task_id=task.id,
                member_id=completed_by,
                action=ActivityAction.COMPLETED,
                description=f"Task completed: {task.name}" if task.name else "Task completed",
                metadata=metadata,
            )
        ]
        if result.rotated_to is not None:
            activities.append(
                ActivityEntry(
                    household_id=task.household_id,
                    task_id=task.id,
                    member_id=completed_by,
                    action=ActivityAction.ROTATED,
                    description=f"Task rotated to {_member_name(members, result.rotated_to)}",
                    metadata={"from_member_id": result.rotated_from, "to_member_id": result.rotated_to},
                )
            )

        return TaskUpdate(task=result.task, activities=activities, schedule=result.schedule)


def skip_occurrence(task: Task, value: str | date | datetime, *, member_id: int | None = None) -> TaskUpdate:
    """Skip one calendar occurrence of a recurring task.

    Skipping an already skipped date returns the task unchanged and no activity entry.
    """
    with span("task_scheduler.skip_occurrence"):
        try:
            updated = skip_set.skip(task, value)
        except SchedulerError as e:
            log_with_task_context(logger, "warning", f"Skip rejected: {e}", task_id=task.id, code=e.code)
            raise

        if updated.skipped_dates == task.skipped_dates:
            return TaskUpdate(task=updated)

        skipped = skip_set.normalize_date(value)
        entry = ActivityEntry(
            household_id=task.household_id,
            task_id=task.id,
            member_id=member_id,
            action=ActivityAction.SKIPPED,
            description=f"Occurrence skipped: {skipped}",
            metadata={"date": skipped},
        )
        return TaskUpdate(task=updated, activities=[entry])


def restore_occurrence(task: Task, value: str | date | datetime, *, member_id: int | None = None) -> TaskUpdate:
    """Restore a previously skipped occurrence.

    Restoring a date that is not skipped returns the task unchanged and no activity entry.
    """
    with span("task_scheduler.restore_occurrence"):
        try:
            updated = skip_set.restore(task, value)
        except SchedulerError as e:
            log_with_task_context(logger, "warning", f"Restore rejected: {e}", task_id=task.id, code=e.code)
            raise

        if updated.skipped_dates == task.skipped_dates:
            return TaskUpdate(task=updated)

        restored = skip_set.normalize_date(value)
        entry = ActivityEntry(
            household_id=task.household_id,
            task_id=task.id,
            member_id=member_id,
            action=ActivityAction.RESTORED,
            description=f"Occurrence restored: {restored}",
            metadata={"date": restored},
        )
        return TaskUpdate(task=updated, activities=[entry])


def validate_rotation_config(
    eligible_member_ids: Iterable[int],
    excluded_member_ids: Iterable[int],
    required_persons: int | None,
) -> None:
    """Reject a task create/edit whose rotation cannot be staffed."""
    rotation.validate_rotation_config(eligible_member_ids, excluded_member_ids, required_persons)


def add_dependency_edge(graph: DependencyGraph, prerequisite_id: int, dependent_id: int) -> DependencyGraph:
    """Return a copy of the graph with the edge prerequisite -> dependent added."""
    with span("task_scheduler.add_dependency_edge"):
        updated = graph.model_copy(deep=True)
        try:
            updated.add_edge(prerequisite_id, dependent_id)
        except SchedulerError as e:
            logger.warning(
                "Dependency %s -> %s rejected in household %s: %s",
                prerequisite_id,
                dependent_id,
                graph.household_id,
                e,
            )
            raise
        return updated


def remove_dependency_edge(graph: DependencyGraph, prerequisite_id: int, dependent_id: int) -> DependencyGraph:
    """Return a copy of the graph without the edge prerequisite -> dependent."""
    updated = graph.model_copy(deep=True)
    updated.remove_edge(prerequisite_id, dependent_id)
    return updated


def add_dependencies(
    graph: DependencyGraph,
    task_id: int,
    *,
    prerequisites: Iterable[int] = (),
    followups: Iterable[int] = (),
) -> DependencyGraph:
    """Return a copy of the graph with several links to `task_id` added at once."""
    with span("task_scheduler.add_dependencies"):
        updated = graph.model_copy(deep=True)
        updated.add_dependencies(task_id, prerequisites=prerequisites, followups=followups)
        return updated


def available_tasks_for(graph: DependencyGraph, task_id: int) -> list[int]:
    """Tasks that can be offered as new prerequisites or follow-ups of `task_id`."""
    return graph.available_tasks_for(task_id)


def auto_fill_rotation_schedule(
    eligible_member_ids: Sequence[int],
    slots: Sequence[RotationOccurrence],
) -> list[RotationOccurrence]:
    """Fill the unassigned slots of a planned schedule round robin."""
    return rotation.auto_fill_rotation_schedule(eligible_member_ids, slots)


def list_upcoming_occurrences(
    task: Task,
    count: int | None = None,
    *,
    members: Sequence[Member] = (),
) -> list[Occurrence]:
    """Project the next occurrences of a task with skip flags and assignees."""
    return upcoming_occurrences(task, count, eligible=_household_pool(task, members))
