"""Pytest configuration and fixtures for unit tests."""

from collections.abc import Callable
from datetime import datetime
from typing import Any

import pytest

from src.core.task_store import InMemoryTaskStore
from src.domain.member import Member
from src.domain.task import Assignment, RepeatUnit, Task


HOUSEHOLD_ID = 1


@pytest.fixture
def members() -> list[Member]:
    """Two active members of household 1."""
    return [
        Member(id=7, household_id=HOUSEHOLD_ID, name="Anna"),
        Member(id=9, household_id=HOUSEHOLD_ID, name="Ben"),
    ]


@pytest.fixture
def make_task() -> Callable[..., Task]:
    """Factory for task snapshots with sensible defaults."""

    def _make(**overrides: Any) -> Task:
        primary = overrides.pop("assigned", None)
        data: dict[str, Any] = {
            "id": 100,
            "household_id": HOUSEHOLD_ID,
            "name": "Take out the bins",
            "due_date": datetime(2026, 1, 10, 18, 30),
            "assigned_to": Assignment(primary=primary),
        }
        data.update(overrides)
        return Task(**data)

    return _make


@pytest.fixture
def daily_rotating_task(make_task) -> Task:
    """Daily task due 2026-01-10, rotating between members 7 and 9, assigned to 7."""
    return make_task(repeat_interval=1, repeat_unit=RepeatUnit.DAYS, enable_rotation=True, assigned=7)


@pytest.fixture
def in_memory_store(members) -> InMemoryTaskStore:
    """Provides a fresh InMemoryTaskStore with the household members registered."""
    store = InMemoryTaskStore()
    for member in members:
        store.add_member(member)
    return store
