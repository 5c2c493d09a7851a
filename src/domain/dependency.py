"""Task dependency domain models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class DependencyType(StrEnum):
    """Which side of an edge a linked task sits on, seen from a given task."""

    PREREQUISITE = "prerequisite"
    FOLLOWUP = "followup"


class DependencyEdge(BaseModel):
    """Directed prerequisite -> dependent relationship between two tasks."""

    model_config = ConfigDict(frozen=True)

    prerequisite_id: int = Field(..., description="Task that must be done first")
    dependent_id: int = Field(..., description="Task that waits for the prerequisite")


class TaskEdges(BaseModel):
    """Both views of the edges touching one task."""

    prerequisites: list[int] = Field(default_factory=list, description="Tasks this task depends on")
    followups: list[int] = Field(default_factory=list, description="Tasks depending on this task")
