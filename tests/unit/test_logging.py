"""Unit tests for logging helpers."""

import logging
from unittest.mock import patch

import pytest

from src.core.logging import configure_logfire, log_with_task_context, span


@pytest.mark.unit
class TestLogging:
    """Tests for Logfire configuration and structured logging."""

    def test_configure_logfire_uses_settings(self):
        """Test that Logfire is configured for the scheduler service."""
        with patch("src.core.logging.logfire.configure") as mock_configure:
            configure_logfire()

        kwargs = mock_configure.call_args.kwargs
        assert kwargs["service_name"] == "hausplan-scheduler"
        assert kwargs["send_to_logfire"] == "if-token-present"

    def test_log_with_task_context(self, caplog):
        """Test that task context ends up on the log record."""
        logger = logging.getLogger("tests.scheduler")
        with caplog.at_level(logging.INFO, logger="tests.scheduler"):
            log_with_task_context(logger, "info", "Task rotated", task_id=12, member_id=9)

        (record,) = caplog.records
        assert record.message == "Task rotated"
        assert record.task_id == 12
        assert record.member_id == 9

    def test_span_is_context_manager(self):
        """Test that span can wrap a block."""
        with span("tests.span"):
            pass
