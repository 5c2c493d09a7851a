"""Recurrence date arithmetic for repeating tasks.

Uses `dateutil.relativedelta` for month steps so that the day of month is
clamped to the end of shorter months (Jan 31 + 1 month = Feb 28), never
rolled over into the following month.
"""

import calendar
import math
from datetime import date, datetime, timedelta
from typing import Any

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.core.errors import InvalidRule
from src.domain.task import MonthlyRecurrenceMode, RepeatUnit


DAYS_PER_WEEK = 7


def _coerce_unit(unit: RepeatUnit | str) -> RepeatUnit:
    try:
        return RepeatUnit(unit)
    except ValueError as e:
        msg = f"Invalid recurrence unit: {unit!r}. Use days, weeks or months"
        raise InvalidRule(msg) from e


def _check_interval(interval: int) -> None:
    if isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
        msg = f"Invalid recurrence interval: {interval!r}. Must be a positive integer"
        raise InvalidRule(msg)


def nth_weekday_of_month(year: int, month: int, weekday: int, occurrence: int) -> date | None:
    """Return the n-th given weekday of a month.

    Args:
        year: Calendar year
        month: Calendar month (1-12)
        weekday: Day of week (Monday == 0 ... Sunday == 6)
        occurrence: Which occurrence (1 = first, 2 = second, ...)

    Returns:
        The date, or None if the month has no such occurrence (e.g. a 5th Monday)
    """
    if occurrence < 1:
        return None

    first_weekday, days_in_month = calendar.monthrange(year, month)
    day = 1 + (weekday - first_weekday) % DAYS_PER_WEEK + (occurrence - 1) * DAYS_PER_WEEK
    if day > days_in_month:
        return None
    return date(year, month, day)


def weekday_occurrence(d: date) -> tuple[int, int]:
    """Return (weekday, occurrence) for a date, e.g. the 3rd Thursday is (3, 3)."""
    return d.weekday(), math.ceil(d.day / DAYS_PER_WEEK)


def _next_monthly_same_weekday(from_: datetime, months: int) -> datetime:
    weekday, occurrence = weekday_occurrence(from_.date())
    target = from_ + relativedelta(months=months)

    result = nth_weekday_of_month(target.year, target.month, weekday, occurrence)
    if result is None:
        # No 5th occurrence in the target month; fall back to the 4th
        result = nth_weekday_of_month(target.year, target.month, weekday, occurrence - 1)
    if result is None:
        return target
    return from_.replace(year=result.year, month=result.month, day=result.day)


def next_date(
    from_: datetime,
    interval: int,
    unit: RepeatUnit | str,
    *,
    monthly_mode: MonthlyRecurrenceMode = MonthlyRecurrenceMode.SAME_DATE,
) -> datetime:
    """Compute the next occurrence after `from_`.

    Time of day (and tzinfo) is preserved for every unit.

    Args:
        from_: Previous occurrence instant (the recurrence anchor)
        interval: Repeat every N units, must be positive
        unit: days, weeks or months
        monthly_mode: Day selection for the months unit

    Returns:
        The next occurrence instant, always later than `from_`

    Raises:
        InvalidRule: If the interval is not positive or the unit is unknown
    """
    _check_interval(interval)
    repeat_unit = _coerce_unit(unit)

    if repeat_unit == RepeatUnit.DAYS:
        return from_ + timedelta(days=interval)
    if repeat_unit == RepeatUnit.WEEKS:
        return from_ + timedelta(days=interval * DAYS_PER_WEEK)
    if monthly_mode == MonthlyRecurrenceMode.SAME_WEEKDAY:
        return _next_monthly_same_weekday(from_, interval)
    return from_ + relativedelta(months=interval)


class RecurrenceRule(BaseModel):
    """Value object for "repeat every N days/weeks/months".

    Raises:
        InvalidRule: If the interval is not a positive integer or the unit is unknown
    """

    model_config = ConfigDict(frozen=True)

    interval: int = Field(..., gt=0, description="Repeat every N units")
    unit: RepeatUnit = Field(..., description="days, weeks or months")
    monthly_mode: MonthlyRecurrenceMode = Field(
        default=MonthlyRecurrenceMode.SAME_DATE,
        description="Day selection for monthly recurrence",
    )

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as e:
            first = e.errors()[0]
            field = first["loc"][0] if first["loc"] else "rule"
            msg = f"Invalid recurrence {field}: {first['msg']}"
            raise InvalidRule(msg) from e

    def advance(self, from_: datetime) -> datetime:
        """Return the occurrence following `from_`."""
        return next_date(from_, self.interval, self.unit, monthly_mode=self.monthly_mode)
