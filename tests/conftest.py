"""Pytest configuration and shared fixtures."""

import logging

import logfire
import pytest


logger = logging.getLogger(__name__)


@pytest.fixture(scope="session", autouse=True)
def configure_test_logfire():
    """Configure Logfire for tests without exporting anything."""
    logfire.configure(send_to_logfire=False, console=False)
    logger.debug("Logfire configured for tests")
