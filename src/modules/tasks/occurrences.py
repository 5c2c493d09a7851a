"""Projection of upcoming occurrences for a recurring task."""

from collections.abc import Sequence

from src.core.config import constants, settings
from src.core.recurrence import next_date
from src.domain.rotation import Occurrence
from src.domain.task import Task
from src.modules.tasks.rotation import next_assignee


def upcoming_occurrences(task: Task, count: int | None = None, *, eligible: Sequence[int] = ()) -> list[Occurrence]:
    """List the next occurrences of a task starting at its due date.

    Skipped dates are listed with ``is_skipped`` set and no assignee; they do
    not consume a rotation turn.

    Args:
        task: Task snapshot
        count: Number of occurrences to list (defaults to the configured value)
        eligible: Ordered IDs of active household members for rotation projection

    Returns:
        Occurrences in chronological order; empty when the task has no due date

    Raises:
        InvalidRule: If the task's recurrence rule is malformed
    """
    limit = settings.upcoming_occurrences_default if count is None else count
    if task.due_date is None or limit <= 0:
        return []

    first = task.due_date.strftime(constants.DATE_FORMAT)
    if task.is_one_off or task.irregular_recurrence:
        return [Occurrence(due_date=first, assignee=task.assigned_to.primary)]

    pool = [m for m in eligible if m not in task.excluded_members]
    rotate = task.enable_rotation and bool(pool)

    occurrences: list[Occurrence] = []
    current = task.due_date
    assignee = task.assigned_to.primary
    while len(occurrences) < limit:
        day = current.strftime(constants.DATE_FORMAT)
        if day in task.skipped_dates:
            occurrences.append(Occurrence(due_date=day, is_skipped=True))
        else:
            occurrences.append(Occurrence(due_date=day, assignee=assignee))
            if rotate:
                assignee = next_assignee(pool, task.excluded_members, assignee)
        current = next_date(current, task.repeat_interval, task.repeat_unit, monthly_mode=task.monthly_recurrence_mode)
    return occurrences
