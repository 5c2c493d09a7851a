"""Recurrence parsing utilities for task scheduling."""

import re
from datetime import date

from src.core.errors import InvalidRule
from src.core.recurrence import RecurrenceRule, weekday_occurrence
from src.domain.task import MonthlyRecurrenceMode, RepeatUnit


_FIXED_FREQUENCIES: dict[str, RecurrenceRule] = {
    "daily": RecurrenceRule(interval=1, unit=RepeatUnit.DAYS),
    "weekly": RecurrenceRule(interval=1, unit=RepeatUnit.WEEKS),
    "monthly": RecurrenceRule(interval=1, unit=RepeatUnit.MONTHS),
}

_ORDINALS = {1: "1st", 2: "2nd", 3: "3rd"}

_WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def parse_recurrence(recurrence: str) -> RecurrenceRule | None:
    """Parse a recurrence string into a rule.

    Supports:
    - "once" → None (one-off task)
    - "daily", "weekly", "monthly"
    - Interval format (e.g., "every 3 days", "every 2 weeks", "every month")

    Args:
        recurrence: Recurrence string

    Returns:
        RecurrenceRule, or None for a one-off task

    Raises:
        InvalidRule: If recurrence format is invalid
    """
    recurrence_lower = recurrence.lower().strip()

    if recurrence_lower == "once":
        return None

    if recurrence_lower in _FIXED_FREQUENCIES:
        return _FIXED_FREQUENCIES[recurrence_lower]

    match = re.match(r"^every\s+(?:(\d+)\s+)?(day|week|month)s?$", recurrence_lower)
    if match:
        interval = int(match.group(1)) if match.group(1) else 1
        if interval <= 0:
            msg = f"Invalid recurrence format: {recurrence}. Interval must be positive"
            raise InvalidRule(msg)
        return RecurrenceRule(interval=interval, unit=RepeatUnit(f"{match.group(2)}s"))

    msg = f"Invalid recurrence format: {recurrence}. Use 'daily', 'weekly', 'monthly' or 'every N days|weeks|months'"
    raise InvalidRule(msg)


def rule_from_frequency(
    frequency: str,
    *,
    custom_days: int | None = None,
    repeat_interval: int | None = None,
    repeat_unit: RepeatUnit | str | None = None,
) -> RecurrenceRule | None:
    """Map the legacy frequency field onto a recurrence rule.

    Args:
        frequency: One of "once", "daily", "weekly", "monthly", "custom"
        custom_days: Old-style day count for "custom" tasks
        repeat_interval: Interval for "custom" tasks
        repeat_unit: Unit for "custom" tasks

    Returns:
        RecurrenceRule, or None for a one-off task

    Raises:
        InvalidRule: If the frequency is unknown or a custom task has no usable interval
    """
    if frequency == "custom":
        # Interval/unit pair wins over the old day count
        if repeat_interval is not None and repeat_unit is not None:
            interval, unit = repeat_interval, repeat_unit
        elif custom_days is not None:
            interval, unit = custom_days, RepeatUnit.DAYS
        else:
            msg = "Custom frequency needs repeat_interval and repeat_unit or custom_days"
            raise InvalidRule(msg)

        if interval <= 0:
            msg = f"Invalid recurrence interval: {interval}. Interval must be positive"
            raise InvalidRule(msg)
        return RecurrenceRule(interval=interval, unit=unit)

    if frequency not in _FIXED_FREQUENCIES and frequency != "once":
        msg = f"Invalid frequency: {frequency}"
        raise InvalidRule(msg)
    return parse_recurrence(frequency)


def describe_rule(rule: RecurrenceRule | None) -> str:
    """Convert a recurrence rule to human-readable text.

    Args:
        rule: Recurrence rule, or None for a one-off task

    Returns:
        Human-readable description (e.g., "every 2 weeks", "monthly")
    """
    if rule is None:
        return "once"

    singular = rule.unit.value[:-1]
    if rule.interval == 1:
        text = {"day": "daily", "week": "weekly", "month": "monthly"}[singular]
    else:
        text = f"every {rule.interval} {rule.unit.value}"

    if rule.unit == RepeatUnit.MONTHS and rule.monthly_mode == MonthlyRecurrenceMode.SAME_WEEKDAY:
        text += " on the same weekday"
    return text


def format_weekday_occurrence(d: date) -> str:
    """Format a date as its weekday occurrence (e.g., "3rd Thursday")."""
    weekday, occurrence = weekday_occurrence(d)
    return f"{_ORDINALS.get(occurrence, f'{occurrence}th')} {_WEEKDAY_NAMES[weekday]}"
