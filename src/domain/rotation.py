"""Rotation schedule domain models."""

from pydantic import BaseModel, Field


class RotationSlot(BaseModel):
    """One position of a planned occurrence."""

    position: int = Field(..., ge=1, description="1 = first person, 2 = second person, ...")
    member_id: int | None = Field(default=None, description="Assigned member ID (None or 0 = unassigned)")

    @property
    def is_assigned(self) -> bool:
        """True when a member is already set for this slot."""
        return bool(self.member_id)


class RotationOccurrence(BaseModel):
    """Planned assignment of one future occurrence of a rotating task."""

    occurrence_number: int = Field(..., ge=1, description="1 = next occurrence, 2 = the one after, ...")
    members: list[RotationSlot] = Field(default_factory=list, description="Slots ordered by position")
    notes: str | None = Field(default=None, description="Free-text note for this occurrence")


class Occurrence(BaseModel):
    """Projected occurrence of a recurring task."""

    due_date: str = Field(..., description="Calendar date (YYYY-MM-DD)")
    is_skipped: bool = Field(default=False, description="Whether the household skipped this date")
    assignee: int | None = Field(default=None, description="Projected primary assignee")
