"""Activity log domain models for the household history."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ActivityAction(StrEnum):
    """Scheduler actions recorded in the activity log."""

    COMPLETED = "completed"
    ROTATED = "rotated"
    SKIPPED = "skipped"
    RESTORED = "restored"


class ActivityEntry(BaseModel):
    """Activity log entry produced by a scheduler operation.

    The scheduler only builds entries; appending them to the household's
    history is the caller's job.
    """

    household_id: int = Field(..., description="Household the entry belongs to")
    task_id: int = Field(..., description="ID of task this entry relates to")
    member_id: int | None = Field(default=None, description="ID of member who performed the action")
    action: ActivityAction = Field(..., description="Action performed")
    description: str = Field(default="", description="Human-readable summary")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Additional structured details")
