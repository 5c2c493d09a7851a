"""Unit tests for the occurrence advancer."""

from datetime import datetime

import pytest

from src.core.errors import InvalidRule, NoEligibleMembers, RecurrenceExhausted
from src.domain.rotation import RotationOccurrence, RotationSlot
from src.domain.task import Assignment, MonthlyRecurrenceMode, RepeatUnit
from src.modules.tasks.advancer import complete, next_due_date


NOW = datetime(2026, 1, 10, 20, 0)


def _planned(*rows: list[int]) -> list[RotationOccurrence]:
    return [
        RotationOccurrence(
            occurrence_number=number,
            members=[RotationSlot(position=pos, member_id=m) for pos, m in enumerate(row, start=1)],
        )
        for number, row in enumerate(rows, start=1)
    ]


@pytest.mark.unit
class TestNextDueDate:
    """Tests for next_due_date function."""

    def test_no_skips(self, make_task):
        """Test a plain step forward."""
        task = make_task(repeat_interval=1, repeat_unit=RepeatUnit.WEEKS)
        assert next_due_date(task, task.due_date) == datetime(2026, 1, 17, 18, 30)

    def test_steps_over_skipped_dates(self, make_task):
        """Test that skipped occurrences are passed over."""
        task = make_task(repeat_interval=1, repeat_unit=RepeatUnit.DAYS, skipped_dates=["2026-01-11", "2026-01-12"])
        assert next_due_date(task, task.due_date) == datetime(2026, 1, 13, 18, 30)

    def test_lookahead_limit_exceeded(self, make_task):
        """Test that too many consecutive skips raise RecurrenceExhausted."""
        skipped = [f"2026-01-{day}" for day in range(11, 16)]
        task = make_task(repeat_interval=1, repeat_unit=RepeatUnit.DAYS, skipped_dates=skipped)
        with pytest.raises(RecurrenceExhausted):
            next_due_date(task, task.due_date, lookahead_limit=3)

    def test_lookahead_limit_reached_exactly(self, make_task):
        """Test that a free date inside the limit is still found."""
        skipped = [f"2026-01-{day}" for day in range(11, 16)]
        task = make_task(repeat_interval=1, repeat_unit=RepeatUnit.DAYS, skipped_dates=skipped)
        assert next_due_date(task, task.due_date, lookahead_limit=5) == datetime(2026, 1, 16, 18, 30)


@pytest.mark.unit
class TestCompleteRecurring:
    """Tests for completing recurring tasks."""

    def test_daily_rotation_scenario(self, daily_rotating_task):
        """Test that a daily task moves to the next day and rotates to the next member."""
        result = complete(daily_rotating_task, 7, NOW, eligible=[7, 9])

        assert result.task.due_date == datetime(2026, 1, 11, 18, 30)
        assert result.task.assigned_to.primary == 9
        assert result.terminal is False
        assert result.rotated_from == 7
        assert result.rotated_to == 9
        assert result.original_due_date == datetime(2026, 1, 10, 18, 30)

    def test_monthly_skip_scenario(self, make_task):
        """Test that a skipped month is stepped over on completion."""
        task = make_task(
            due_date=datetime(2026, 1, 15, 9, 0),
            repeat_interval=1,
            repeat_unit=RepeatUnit.MONTHS,
            skipped_dates=["2026-02-15"],
        )
        result = complete(task, 7, NOW)
        assert result.task.due_date == datetime(2026, 3, 15, 9, 0)

    def test_next_day_skipped(self, make_task):
        """Test that skipping tomorrow moves the due date two days out."""
        task = make_task(repeat_interval=1, repeat_unit=RepeatUnit.DAYS, skipped_dates=["2026-01-11"])
        result = complete(task, 7, NOW)
        assert result.task.due_date == datetime(2026, 1, 12, 18, 30)

    def test_same_weekday_monthly(self, make_task):
        """Test that same-weekday monthly tasks keep the weekday occurrence."""
        task = make_task(
            due_date=datetime(2026, 2, 19, 19, 0),
            repeat_interval=1,
            repeat_unit=RepeatUnit.MONTHS,
            monthly_recurrence_mode=MonthlyRecurrenceMode.SAME_WEEKDAY,
        )
        assert complete(task, 7, NOW).task.due_date == datetime(2026, 3, 19, 19, 0)

    def test_recurring_task_is_never_completed(self, daily_rotating_task):
        """Test that completion fields are cleared after re-arming."""
        task = daily_rotating_task.model_copy(update={"completed_by": 9, "completed_at": NOW})
        result = complete(task, 7, NOW, eligible=[7, 9])

        assert result.task.is_completed is False
        assert result.task.completed_by is None
        assert result.task.completed_at is None

    def test_two_completions_return_to_first_member(self, daily_rotating_task):
        """Test that a two-member rotation alternates back after two completions."""
        first = complete(daily_rotating_task, 7, NOW, eligible=[7, 9])
        second = complete(first.task, 9, NOW, eligible=[7, 9])

        assert second.task.assigned_to.primary == 7
        assert second.task.due_date == datetime(2026, 1, 12, 18, 30)

    def test_no_rotation_keeps_assignee(self, make_task):
        """Test that tasks without rotation keep their assignee."""
        task = make_task(repeat_interval=1, repeat_unit=RepeatUnit.DAYS, assigned=7)
        result = complete(task, 9, NOW, eligible=[7, 9])

        assert result.task.assigned_to.primary == 7
        assert result.rotated_to is None
        assert result.rotated_from is None

    def test_single_member_rotation_reports_no_change(self, daily_rotating_task):
        """Test that a self-loop rotation is not reported as a rotation."""
        result = complete(daily_rotating_task, 7, NOW, eligible=[7])
        assert result.task.assigned_to.primary == 7
        assert result.rotated_to is None

    def test_additional_members_are_carried(self, daily_rotating_task):
        """Test that rotation only moves the primary assignee."""
        task = daily_rotating_task.model_copy(update={"assigned_to": Assignment(primary=7, additional=[3])})
        result = complete(task, 7, NOW, eligible=[3, 7, 9])
        assert result.task.assigned_to == Assignment(primary=9, additional=[3])

    def test_missing_due_date_anchors_on_now(self, make_task):
        """Test that a recurring task without a due date starts from the completion instant."""
        task = make_task(due_date=None, repeat_interval=2, repeat_unit=RepeatUnit.DAYS)
        assert complete(task, 7, NOW).task.due_date == datetime(2026, 1, 12, 20, 0)

    def test_all_members_excluded(self, daily_rotating_task):
        """Test that rotation without eligible members raises NoEligibleMembers."""
        task = daily_rotating_task.model_copy(update={"excluded_members": {7, 9}})
        with pytest.raises(NoEligibleMembers):
            complete(task, 7, NOW, eligible=[7, 9])


@pytest.mark.unit
class TestCompleteTerminalAndIrregular:
    """Tests for one-off and irregular tasks."""

    def test_one_off_becomes_terminal(self, make_task):
        """Test that a one-off task is closed for good."""
        task = make_task(assigned=7)
        result = complete(task, 9, NOW)

        assert result.terminal is True
        assert result.task.is_completed is True
        assert result.task.completed_by == 9
        assert result.task.completed_at == NOW
        assert result.task.due_date == task.due_date

    def test_irregular_task_loses_due_date_and_rotates(self, make_task):
        """Test that an irregular task has no next date but still rotates."""
        task = make_task(irregular_recurrence=True, enable_rotation=True, assigned=9)
        result = complete(task, 9, NOW, eligible=[7, 9])

        assert result.terminal is False
        assert result.task.due_date is None
        assert result.task.assigned_to.primary == 7


@pytest.mark.unit
class TestCompleteWithSchedule:
    """Tests for completion driven by a planned rotation schedule."""

    def test_planned_members_take_over(self, daily_rotating_task):
        """Test that the next planned occurrence decides the assignment."""
        schedule = _planned([7], [7, 9], [9])
        result = complete(daily_rotating_task, 7, NOW, eligible=[7, 9], schedule=schedule)

        assert result.task.assigned_to == Assignment(primary=7, additional=[9])
        assert [o.occurrence_number for o in result.schedule] == [1, 2]
        assert result.rotated_to is None

    def test_falls_back_to_round_robin(self, daily_rotating_task):
        """Test that an exhausted schedule falls back to round robin."""
        result = complete(daily_rotating_task, 7, NOW, eligible=[7, 9], schedule=_planned([7]))

        assert result.task.assigned_to.primary == 9
        assert result.schedule == []

    def test_ineligible_planned_member_falls_back(self, daily_rotating_task):
        """Test that a schedule naming only excluded members is ignored."""
        task = daily_rotating_task.model_copy(update={"excluded_members": {5}})
        result = complete(task, 7, NOW, eligible=[5, 7, 9], schedule=_planned([7], [5]))
        assert result.task.assigned_to.primary == 9


@pytest.mark.unit
class TestCompleteErrors:
    """Tests for failed completions."""

    def test_zero_interval(self, make_task):
        """Test that a zero interval is rejected."""
        task = make_task(repeat_interval=0, repeat_unit=RepeatUnit.DAYS)
        with pytest.raises(InvalidRule):
            complete(task, 7, NOW)

    def test_interval_without_unit(self, make_task):
        """Test that a half-configured recurrence is rejected."""
        task = make_task(repeat_interval=2)
        with pytest.raises(InvalidRule):
            complete(task, 7, NOW)

    def test_failure_leaves_input_unchanged(self, make_task):
        """Test that a failed completion does not touch the snapshot."""
        task = make_task(
            repeat_interval=1,
            repeat_unit=RepeatUnit.DAYS,
            skipped_dates=["2026-01-11", "2026-01-12"],
            enable_rotation=True,
            assigned=7,
        )
        before = task.model_copy(deep=True)
        with pytest.raises(RecurrenceExhausted):
            complete(task, 7, NOW, eligible=[7, 9], lookahead_limit=0)
        assert task == before

    def test_success_leaves_input_unchanged(self, daily_rotating_task):
        """Test that completion returns a copy."""
        before = daily_rotating_task.model_copy(deep=True)
        complete(daily_rotating_task, 7, NOW, eligible=[7, 9])
        assert daily_rotating_task == before
