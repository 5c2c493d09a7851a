"""Task domain models and enums for recurring household chores."""

import re
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator, model_validator

from src.core.config import constants


_DATE_PATTERN = re.compile(constants.DATE_PATTERN)


class RepeatUnit(StrEnum):
    """Calendar unit of a recurrence interval."""

    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"


class MonthlyRecurrenceMode(StrEnum):
    """How a monthly task picks its day in the target month."""

    SAME_DATE = "same_date"  # the 15th stays the 15th (clamped to month end)
    SAME_WEEKDAY = "same_weekday"  # the 3rd Thursday stays the 3rd Thursday


class Assignment(BaseModel):
    """Responsible members of a task.

    Rotation only ever moves ``primary``; ``additional`` members are carried
    alongside untouched unless a planned rotation schedule names them.
    """

    primary: int | None = Field(default=None, description="Rotation-relevant member ID")
    additional: list[int] = Field(default_factory=list, description="Further responsible member IDs")

    @property
    def member_ids(self) -> list[int]:
        """All assigned member IDs, primary first."""
        ids = [self.primary] if self.primary is not None else []
        return ids + [m for m in self.additional if m != self.primary]


class Task(BaseModel):
    """Snapshot of a task's scheduling state."""

    id: int = Field(..., description="Unique task ID from database")
    household_id: int = Field(..., description="Owning household ID")
    name: str = Field(default="", description="Task name")
    due_date: datetime | None = Field(default=None, description="Next occurrence instant")
    repeat_interval: int | None = Field(default=None, description="Repeat every N units")
    repeat_unit: RepeatUnit | None = Field(default=None, description="days, weeks or months")
    monthly_recurrence_mode: MonthlyRecurrenceMode = Field(
        default=MonthlyRecurrenceMode.SAME_DATE,
        description="Day selection for monthly recurrence",
    )
    irregular_recurrence: bool = Field(
        default=False,
        description="Recurring without a calendar cadence (no due date is computed)",
    )
    enable_rotation: bool = Field(default=False, description="Rotate the primary assignee on completion")
    assigned_to: Assignment = Field(default_factory=Assignment, description="Responsible members")
    required_persons: int | None = Field(default=None, description="Members needed per occurrence")
    excluded_members: set[int] = Field(default_factory=set, description="Members never assigned by rotation")
    is_completed: bool = Field(default=False, description="Terminal completion flag (one-off tasks only)")
    completed_by: int | None = Field(default=None, description="Member who completed the task")
    completed_at: datetime | None = Field(default=None, description="Completion timestamp")
    skipped_dates: list[str] = Field(
        default_factory=list,
        description="Skipped occurrence dates (YYYY-MM-DD), sorted and unique",
    )

    @field_validator("skipped_dates")
    @classmethod
    def normalize_skipped_dates(cls, v: list[str]) -> list[str]:
        """Keep skipped dates well-formed, sorted and free of duplicates."""
        for value in v:
            if not _DATE_PATTERN.match(value):
                msg = f"Invalid skipped date: {value!r}. Expected YYYY-MM-DD"
                raise ValueError(msg)
            # Rejects impossible dates such as 2026-02-30
            datetime.strptime(value, constants.DATE_FORMAT)
        return sorted(set(v))

    @model_validator(mode="after")
    def one_off_has_no_skipped_dates(self) -> "Task":
        """Only recurring tasks can have skipped occurrences."""
        if self.is_one_off and self.skipped_dates:
            msg = f"Task {self.id} does not recur and cannot have skipped dates"
            raise ValueError(msg)
        return self

    @property
    def is_one_off(self) -> bool:
        """True when the task has no recurrence at all."""
        return self.repeat_interval is None and self.repeat_unit is None and not self.irregular_recurrence
