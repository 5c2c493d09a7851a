"""Unit tests for scheduler errors and their classification."""

import pytest

from src.core.errors import (
    CycleDetected,
    ErrorCode,
    ErrorSeverity,
    InsufficientEligibleMembers,
    InvalidDate,
    InvalidRule,
    NoEligibleMembers,
    RecurrenceExhausted,
    SchedulerError,
    SelfReference,
    TaskNotInHousehold,
    classify_error_with_response,
)


@pytest.mark.unit
class TestSchedulerErrors:
    """Tests for the error hierarchy."""

    @pytest.mark.parametrize(
        ("error_cls", "code"),
        [
            (InvalidRule, ErrorCode.ERR_INVALID_RULE),
            (InvalidDate, ErrorCode.ERR_INVALID_DATE),
            (RecurrenceExhausted, ErrorCode.ERR_RECURRENCE_EXHAUSTED),
            (NoEligibleMembers, ErrorCode.ERR_NO_ELIGIBLE_MEMBERS),
            (InsufficientEligibleMembers, ErrorCode.ERR_INSUFFICIENT_ELIGIBLE_MEMBERS),
            (CycleDetected, ErrorCode.ERR_CYCLE_DETECTED),
            (SelfReference, ErrorCode.ERR_SELF_REFERENCE),
            (TaskNotInHousehold, ErrorCode.ERR_TASK_NOT_IN_HOUSEHOLD),
        ],
    )
    def test_codes(self, error_cls, code):
        """Test that every error carries its code and is a SchedulerError."""
        error = error_cls("boom")

        assert error.code == code
        assert isinstance(error, SchedulerError)
        assert isinstance(error, ValueError)


@pytest.mark.unit
class TestClassifyErrorWithResponse:
    """Tests for classify_error_with_response function."""

    def test_cycle_detected(self):
        """Test the response for a dependency loop."""
        response = classify_error_with_response(CycleDetected("1 -> 2"))

        assert response.code == ErrorCode.ERR_CYCLE_DETECTED
        assert "loop" in response.message.lower()
        assert response.severity == ErrorSeverity.LOW

    def test_invalid_date(self):
        """Test that invalid dates suggest the expected format."""
        response = classify_error_with_response(InvalidDate("2026-02-30"))

        assert response.code == ErrorCode.ERR_INVALID_DATE
        assert "YYYY-MM-DD" in response.suggestion
        assert response.severity == ErrorSeverity.LOW

    def test_recurrence_exhausted(self):
        """Test that exhausted recurrences suggest restoring dates."""
        response = classify_error_with_response(RecurrenceExhausted("all skipped"))

        assert response.code == ErrorCode.ERR_RECURRENCE_EXHAUSTED
        assert "restore" in response.suggestion.lower()

    def test_unknown_error(self):
        """Test that unrelated exceptions map to ERR_UNKNOWN."""
        response = classify_error_with_response(RuntimeError("database unavailable"))

        assert response.code == ErrorCode.ERR_UNKNOWN
        assert response.severity == ErrorSeverity.MEDIUM
        assert "try again" in response.suggestion.lower()
