"""Scheduler error types and user-facing error classification."""

from enum import Enum

from pydantic import BaseModel


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Recurrence errors
    ERR_INVALID_RULE = "ERR_INVALID_RULE"
    ERR_INVALID_DATE = "ERR_INVALID_DATE"
    ERR_RECURRENCE_EXHAUSTED = "ERR_RECURRENCE_EXHAUSTED"

    # Rotation errors
    ERR_NO_ELIGIBLE_MEMBERS = "ERR_NO_ELIGIBLE_MEMBERS"
    ERR_INSUFFICIENT_ELIGIBLE_MEMBERS = "ERR_INSUFFICIENT_ELIGIBLE_MEMBERS"

    # Dependency errors
    ERR_CYCLE_DETECTED = "ERR_CYCLE_DETECTED"
    ERR_SELF_REFERENCE = "ERR_SELF_REFERENCE"
    ERR_TASK_NOT_IN_HOUSEHOLD = "ERR_TASK_NOT_IN_HOUSEHOLD"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class SchedulerError(ValueError):
    """Base class for rejected scheduler mutations.

    The task or graph the operation was applied to is left unchanged.
    """

    code: str = ErrorCode.ERR_UNKNOWN


class InvalidRule(SchedulerError):
    """Malformed recurrence interval or unit."""

    code = ErrorCode.ERR_INVALID_RULE


class InvalidDate(SchedulerError):
    """Malformed calendar date passed to skip or restore."""

    code = ErrorCode.ERR_INVALID_DATE


class NoEligibleMembers(SchedulerError):
    """Rotation has nobody left to assign."""

    code = ErrorCode.ERR_NO_ELIGIBLE_MEMBERS


class InsufficientEligibleMembers(SchedulerError):
    """Eligible pool is smaller than the required headcount."""

    code = ErrorCode.ERR_INSUFFICIENT_ELIGIBLE_MEMBERS


class RecurrenceExhausted(SchedulerError):
    """Every occurrence inside the lookahead window is skipped."""

    code = ErrorCode.ERR_RECURRENCE_EXHAUSTED


class CycleDetected(SchedulerError):
    """Dependency edge would close a cycle."""

    code = ErrorCode.ERR_CYCLE_DETECTED


class SelfReference(SchedulerError):
    """Dependency edge from a task to itself."""

    code = ErrorCode.ERR_SELF_REFERENCE


class TaskNotInHousehold(SchedulerError):
    """Dependency edge names a task outside the graph's household."""

    code = ErrorCode.ERR_TASK_NOT_IN_HOUSEHOLD


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity


_RESPONSES: dict[str, tuple[str, str, ErrorSeverity]] = {
    ErrorCode.ERR_INVALID_RULE: (
        "Invalid repeat setting.",
        "Use a positive interval with days, weeks or months.",
        ErrorSeverity.LOW,
    ),
    ErrorCode.ERR_INVALID_DATE: (
        "That date could not be understood.",
        "Use the format YYYY-MM-DD, e.g. 2026-01-15.",
        ErrorSeverity.LOW,
    ),
    ErrorCode.ERR_RECURRENCE_EXHAUSTED: (
        "No upcoming occurrence is left after the skipped dates.",
        "Restore some skipped dates and try again.",
        ErrorSeverity.MEDIUM,
    ),
    ErrorCode.ERR_NO_ELIGIBLE_MEMBERS: (
        "Nobody is available for this rotation.",
        "Activate a member or remove someone from the exclusion list.",
        ErrorSeverity.MEDIUM,
    ),
    ErrorCode.ERR_INSUFFICIENT_ELIGIBLE_MEMBERS: (
        "Not enough members are available for this rotation.",
        "Lower the number of required persons or exclude fewer members.",
        ErrorSeverity.LOW,
    ),
    ErrorCode.ERR_CYCLE_DETECTED: (
        "These tasks would depend on each other in a loop.",
        "Remove one of the existing links first.",
        ErrorSeverity.LOW,
    ),
    ErrorCode.ERR_SELF_REFERENCE: (
        "A task cannot depend on itself.",
        "Pick a different task.",
        ErrorSeverity.LOW,
    ),
    ErrorCode.ERR_TASK_NOT_IN_HOUSEHOLD: (
        "That task does not belong to your household.",
        "Pick one of your household's tasks.",
        ErrorSeverity.MEDIUM,
    ),
}


def classify_error_with_response(exception: Exception) -> ErrorResponse:
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised by a scheduler operation

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    if isinstance(exception, SchedulerError) and exception.code in _RESPONSES:
        message, suggestion, severity = _RESPONSES[exception.code]
        return ErrorResponse(code=exception.code, message=message, suggestion=suggestion, severity=severity)

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, contact support.",
        severity=ErrorSeverity.MEDIUM,
    )
