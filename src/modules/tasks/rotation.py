"""Rotation policy: who takes over a rotating task next.

Key Features:
- Eligible pool = active household members minus the task's exclusions,
  ordered by member ID
- Single-assignee round robin that wraps around and self-loops for a
  one-member pool
- Headcount validation for multi-person tasks
- Planned rotation schedules (set, extend, shift, round-robin auto-fill)
"""

import logging
from collections.abc import Iterable, Sequence

from src.core.errors import InsufficientEligibleMembers, InvalidRule, NoEligibleMembers
from src.domain.member import Member
from src.domain.rotation import RotationOccurrence, RotationSlot
from src.domain.task import Assignment


logger = logging.getLogger(__name__)


def eligible_pool(members: Iterable[Member], excluded: Iterable[int] = ()) -> list[int]:
    """Return IDs of active, non-excluded members ordered by member ID."""
    excluded_ids = set(excluded)
    return sorted({m.id for m in members if m.is_active and m.id not in excluded_ids})


def next_assignee(eligible: Sequence[int], excluded: Iterable[int], current: int | None) -> int:
    """Pick the member following `current` in the eligible pool.

    Args:
        eligible: Ordered member IDs available for rotation
        excluded: Member IDs that must never be assigned
        current: Currently assigned member ID

    Returns:
        Next member ID; the first pool member if `current` is last or not in
        the pool, `current` itself if it is the only eligible member

    Raises:
        NoEligibleMembers: If no member is left after removing exclusions
    """
    excluded_ids = set(excluded)
    pool = [m for m in eligible if m not in excluded_ids]
    if not pool:
        msg = "No eligible members left for rotation"
        raise NoEligibleMembers(msg)

    if current not in pool:
        return pool[0]
    return pool[(pool.index(current) + 1) % len(pool)]


def validate_rotation_config(
    eligible_member_ids: Iterable[int],
    excluded_member_ids: Iterable[int],
    required_persons: int | None,
) -> None:
    """Reject rotation settings the household cannot staff.

    Raises:
        InvalidRule: If required_persons is not positive
        InsufficientEligibleMembers: If fewer members are eligible than required
    """
    required = 1 if required_persons is None else required_persons
    if required < 1:
        msg = f"Required persons must be at least 1, got {required}"
        raise InvalidRule(msg)

    pool = set(eligible_member_ids) - set(excluded_member_ids)
    if len(pool) < required:
        msg = f"Rotation needs {required} members but only {len(pool)} are eligible"
        raise InsufficientEligibleMembers(msg)


def auto_fill_rotation_schedule(
    eligible_member_ids: Sequence[int],
    slots: Sequence[RotationOccurrence],
) -> list[RotationOccurrence]:
    """Fill unassigned slots round robin across the eligible members.

    Slots that already hold a member are kept and do not consume a turn,
    so the cycle continues from where the last filled slot left off.

    Args:
        eligible_member_ids: Ordered member IDs to cycle through
        slots: Planned occurrences, in order

    Returns:
        New list of occurrences; the input is not modified
    """
    schedule = [occurrence.model_copy(deep=True) for occurrence in slots]
    if not eligible_member_ids:
        return schedule

    member_index = 0
    for occurrence in schedule:
        for slot in occurrence.members:
            if slot.is_assigned:
                continue
            slot.member_id = eligible_member_ids[member_index % len(eligible_member_ids)]
            member_index += 1

    logger.debug("Auto-filled %d slots across %d occurrences", member_index, len(schedule))
    return schedule


def _renumbered(occurrences: Iterable[RotationOccurrence]) -> list[RotationOccurrence]:
    return [
        occurrence.model_copy(
            update={
                "occurrence_number": number,
                "members": sorted(occurrence.members, key=lambda s: s.position),
            },
            deep=True,
        )
        for number, occurrence in enumerate(occurrences, start=1)
    ]


def set_schedule(occurrences: Iterable[RotationOccurrence]) -> list[RotationOccurrence]:
    """Replace a schedule, ordering occurrences and numbering them from 1."""
    return _renumbered(sorted(occurrences, key=lambda o: o.occurrence_number))


def extend_schedule(
    schedule: Sequence[RotationOccurrence],
    member_ids: Sequence[int | None],
    notes: str | None = None,
) -> list[RotationOccurrence]:
    """Append one occurrence with the given members at positions 1..n."""
    occurrence = RotationOccurrence(
        occurrence_number=len(schedule) + 1,
        members=[RotationSlot(position=pos, member_id=m) for pos, m in enumerate(member_ids, start=1)],
        notes=notes,
    )
    return [*_renumbered(schedule), occurrence]


def shift_schedule(schedule: Sequence[RotationOccurrence]) -> list[RotationOccurrence]:
    """Drop the first occurrence and move every later one down by one."""
    return _renumbered(sorted(schedule, key=lambda o: o.occurrence_number)[1:])


def planned_assignment(occurrence: RotationOccurrence | None, pool: Sequence[int]) -> Assignment | None:
    """Turn a planned occurrence into an assignment, ignoring ineligible members.

    Returns:
        Assignment with the first eligible slot as primary, or None when the
        occurrence names no eligible member
    """
    if occurrence is None:
        return None

    members: list[int] = []
    for slot in sorted(occurrence.members, key=lambda s: s.position):
        if slot.member_id in pool and slot.member_id not in members:
            members.append(slot.member_id)

    if not members:
        return None
    return Assignment(primary=members[0], additional=members[1:])
