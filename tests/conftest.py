"""Pytest configuration and fixtures for carrots tests."""

import logging
import os
import tempfile

# Keep test runs away from the user's real log file. Must happen before
# any carrots module creates its logger.
os.environ.setdefault(
    "CARROTS_LOG_DIR", os.path.join(tempfile.gettempdir(), "carrots-test-logs")
)

import pytest  # noqa: E402


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Enable log propagation for all loggers during tests.

    This allows pytest's caplog fixture to capture logs from all loggers,
    even those created with propagate=False in production code.
    """
    original_propagation = {}
    for name in list(logging.Logger.manager.loggerDict.keys()):
        if name.startswith("carrots"):
            logger = logging.getLogger(name)
            original_propagation[name] = logger.propagate
            logger.propagate = True

    yield

    for name, propagate_value in original_propagation.items():
        logger = logging.getLogger(name)
        logger.propagate = propagate_value


@pytest.fixture
def server_config():
    """Server configuration for tests."""
    return {
        "account": "owner",
        "repository": "app",
        "token": None,
        "host": "127.0.0.1",
        "port": 3000,
        "cache_minutes": 15,
        "log_level": "INFO",
        "console_log_level": "INFO",
        "network": {
            "timeout_seconds": 15,
            "retry_attempts": 2,
            "max_concurrent_fetches": 5,
        },
    }
