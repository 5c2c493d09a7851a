"""Household member domain model."""

from pydantic import BaseModel, Field


class Member(BaseModel):
    """Household member data transfer object."""

    id: int = Field(..., description="Unique member ID from database")
    household_id: int = Field(..., description="Household the member belongs to")
    name: str = Field(default="", description="Display name of the member")
    is_active: bool = Field(default=True, description="Inactive members never take part in rotation")
