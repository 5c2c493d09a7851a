"""Domain models and DTOs."""

from src.domain.dependency import DependencyEdge, DependencyType, TaskEdges
from src.domain.log import ActivityAction, ActivityEntry
from src.domain.member import Member
from src.domain.rotation import Occurrence, RotationOccurrence, RotationSlot
from src.domain.task import Assignment, MonthlyRecurrenceMode, RepeatUnit, Task


__all__ = [
    "ActivityAction",
    "ActivityEntry",
    "Assignment",
    "DependencyEdge",
    "DependencyType",
    "Member",
    "MonthlyRecurrenceMode",
    "Occurrence",
    "RepeatUnit",
    "RotationOccurrence",
    "RotationSlot",
    "Task",
    "TaskEdges",
]
