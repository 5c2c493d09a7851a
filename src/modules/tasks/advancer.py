"""Occurrence advancer: the completion state transition for tasks.

A one-off task becomes terminally completed. A recurring task is re-armed in
place: its due date moves to the next occurrence that is not skipped, its
completion fields are cleared and, with rotation enabled, its primary
assignee moves on. Every transition works on a copy of the snapshot, so a
failure leaves the caller's task untouched.
"""

import logging
from collections.abc import Sequence
from datetime import datetime

from pydantic import BaseModel, Field

from src.core.config import constants, settings
from src.core.errors import RecurrenceExhausted
from src.core.logging import log_with_task_context
from src.core.recurrence import next_date
from src.domain.rotation import RotationOccurrence
from src.domain.task import Assignment, Task
from src.modules.tasks.rotation import next_assignee, planned_assignment, shift_schedule


logger = logging.getLogger(__name__)


class CompletionResult(BaseModel):
    """Outcome of completing a task."""

    task: Task = Field(..., description="Updated task snapshot")
    terminal: bool = Field(..., description="True when a one-off task was closed for good")
    original_due_date: datetime | None = Field(default=None, description="Due date before completion")
    rotated_from: int | None = Field(default=None, description="Primary assignee before rotation")
    rotated_to: int | None = Field(default=None, description="New primary assignee, if it changed")
    schedule: list[RotationOccurrence] | None = Field(
        default=None,
        description="Planned rotation schedule after dropping the completed occurrence",
    )


def next_due_date(task: Task, anchor: datetime, *, lookahead_limit: int | None = None) -> datetime:
    """Step from `anchor` to the next occurrence that is not skipped.

    Raises:
        InvalidRule: If the task's interval or unit is malformed
        RecurrenceExhausted: If more than `lookahead_limit` consecutive occurrences are skipped
    """
    limit = settings.skip_lookahead_limit if lookahead_limit is None else lookahead_limit
    skipped = set(task.skipped_dates)

    candidate = next_date(anchor, task.repeat_interval, task.repeat_unit, monthly_mode=task.monthly_recurrence_mode)
    steps = 0
    while candidate.strftime(constants.DATE_FORMAT) in skipped:
        if steps >= limit:
            msg = f"Task {task.id}: every occurrence within {limit} steps after {anchor.date()} is skipped"
            raise RecurrenceExhausted(msg)
        candidate = next_date(
            candidate, task.repeat_interval, task.repeat_unit, monthly_mode=task.monthly_recurrence_mode
        )
        steps += 1
    return candidate


def _rotate(
    task: Task,
    eligible: Sequence[int],
    schedule: Sequence[RotationOccurrence] | None,
) -> tuple[Assignment, list[RotationOccurrence] | None]:
    pool = [m for m in eligible if m not in task.excluded_members]

    shifted = None
    if schedule is not None:
        shifted = shift_schedule(schedule)
        planned = planned_assignment(shifted[0] if shifted else None, pool)
        if planned is not None:
            return planned, shifted

    primary = next_assignee(eligible, task.excluded_members, task.assigned_to.primary)
    return task.assigned_to.model_copy(update={"primary": primary}, deep=True), shifted


def complete(
    task: Task,
    completed_by: int,
    now: datetime,
    *,
    eligible: Sequence[int] = (),
    schedule: Sequence[RotationOccurrence] | None = None,
    lookahead_limit: int | None = None,
) -> CompletionResult:
    """Apply a completion event to a task snapshot.

    Args:
        task: Current task snapshot
        completed_by: Member who completed the occurrence
        now: Completion instant (only recorded, never compared to the due date)
        eligible: Ordered IDs of active household members for rotation
        schedule: Planned rotation schedule whose first occurrence was just completed
        lookahead_limit: Override for the skip-stepping bound

    Returns:
        CompletionResult with the updated copy of the task

    Raises:
        InvalidRule: If the recurrence rule is malformed
        RecurrenceExhausted: If the skip-stepping bound is exceeded
        NoEligibleMembers: If rotation is enabled but nobody is eligible
    """
    original_due_date = task.due_date

    if task.is_one_off:
        updated = task.model_copy(
            update={"is_completed": True, "completed_by": completed_by, "completed_at": now},
            deep=True,
        )
        log_with_task_context(logger, "info", "Completed one-off task", task_id=task.id, member_id=completed_by)
        return CompletionResult(task=updated, terminal=True, original_due_date=original_due_date)

    if task.irregular_recurrence:
        due_date = None
    else:
        # A recurring task without a due date anchors on the completion instant
        due_date = next_due_date(task, task.due_date or now, lookahead_limit=lookahead_limit)

    assignment = task.assigned_to
    shifted = None
    if task.enable_rotation:
        assignment, shifted = _rotate(task, eligible, schedule)

    updated = task.model_copy(
        update={
            "due_date": due_date,
            "assigned_to": assignment,
            "is_completed": False,
            "completed_by": None,
            "completed_at": None,
        },
        deep=True,
    )

    previous = task.assigned_to.primary
    rotated_to = assignment.primary if assignment.primary != previous else None
    log_with_task_context(
        logger,
        "info",
        "Advanced recurring task",
        task_id=task.id,
        due_date=due_date.isoformat() if due_date else None,
        rotated_to=rotated_to,
    )
    return CompletionResult(
        task=updated,
        terminal=False,
        original_due_date=original_due_date,
        rotated_from=previous if rotated_to is not None else None,
        rotated_to=rotated_to,
        schedule=shifted,
    )
