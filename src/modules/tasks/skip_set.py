"""Skip and restore individual occurrences of recurring tasks."""

import logging
import re
from datetime import date, datetime

from src.core.config import constants
from src.core.errors import InvalidDate
from src.domain.task import Task


logger = logging.getLogger(__name__)

_DATE_PATTERN = re.compile(constants.DATE_PATTERN)


def normalize_date(value: str | date | datetime) -> str:
    """Return a calendar date as a YYYY-MM-DD string.

    Raises:
        InvalidDate: If the value is not a well-formed, real calendar date
    """
    if isinstance(value, datetime):
        return value.date().strftime(constants.DATE_FORMAT)
    if isinstance(value, date):
        return value.strftime(constants.DATE_FORMAT)
    if not isinstance(value, str) or not _DATE_PATTERN.match(value):
        msg = f"Invalid date: {value!r}. Expected YYYY-MM-DD"
        raise InvalidDate(msg)

    try:
        datetime.strptime(value, constants.DATE_FORMAT)
    except ValueError as e:
        msg = f"Invalid date: {value!r} is not a calendar date"
        raise InvalidDate(msg) from e
    return value


def skip(task: Task, value: str | date | datetime) -> Task:
    """Mark an occurrence as skipped. Skipping an already skipped date is a no-op.

    Raises:
        InvalidDate: If the date is malformed or the task does not recur
    """
    skipped = normalize_date(value)
    if task.is_one_off:
        msg = f"Cannot skip {skipped}: task {task.id} does not recur"
        raise InvalidDate(msg)

    if skipped in task.skipped_dates:
        return task.model_copy(deep=True)

    logger.debug("Skipping %s for task %s", skipped, task.id)
    return task.model_copy(update={"skipped_dates": sorted([*task.skipped_dates, skipped])}, deep=True)


def restore(task: Task, value: str | date | datetime) -> Task:
    """Remove a date from the skipped set. Restoring an absent date is a no-op."""
    restored = normalize_date(value)
    if restored not in task.skipped_dates:
        return task.model_copy(deep=True)

    logger.debug("Restoring %s for task %s", restored, task.id)
    return task.model_copy(
        update={"skipped_dates": [d for d in task.skipped_dates if d != restored]},
        deep=True,
    )


def is_skipped(task: Task, value: str | date | datetime) -> bool:
    """Check whether an occurrence date is skipped."""
    return normalize_date(value) in task.skipped_dates
