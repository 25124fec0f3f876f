# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Unit tests for logging configuration."""

import logging
from io import StringIO
from unittest.mock import patch

import pytest
from src.config import Settings
from src.utils.logging import (
    LOG_DATE_FORMAT,
    LOG_FORMAT,
    QUIET_LIBRARIES,
    get_log_level,
    get_logger,
    setup_logging,
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Restore root logger handlers after each test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestGetLogLevel:
    """Tests for get_log_level function."""

    def test_returns_debug_level(self):
        """Test returns DEBUG level from test config."""
        # conftest sets LOG_LEVEL=DEBUG
        assert get_log_level() == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        """Test an unknown level name yields INFO."""
        with patch(
            "src.utils.logging.get_settings",
            return_value=Settings(log_level="chatty"),
        ):
            assert get_log_level() == logging.INFO

    def test_level_is_case_insensitive(self):
        """Test lowercase names are accepted."""
        with patch(
            "src.utils.logging.get_settings",
            return_value=Settings(log_level="warning"),
        ):
            assert get_log_level() == logging.WARNING


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_configures_root_logger(self):
        """Test root logger is configured."""
        setup_logging(level=logging.INFO, stream=StringIO())

        root_logger = logging.getLogger()
        assert root_logger.level == logging.INFO
        assert len(root_logger.handlers) == 1

    def test_removes_existing_handlers(self):
        """Test repeated setup does not duplicate handlers."""
        setup_logging(level=logging.INFO, stream=StringIO())
        setup_logging(level=logging.INFO, stream=StringIO())

        assert len(logging.getLogger().handlers) == 1

    def test_writes_formatted_output(self):
        """Test messages are written with the standard format."""
        stream = StringIO()
        setup_logging(level=logging.INFO, stream=stream)

        get_logger("stayledger.test").info("Booking %d created", 5)

        output = stream.getvalue()
        assert "stayledger.test - INFO - Booking 5 created" in output

    def test_libraries_quiet_at_info(self):
        """Test noisy libraries stay at WARNING unless debugging."""
        setup_logging(level=logging.INFO, stream=StringIO())

        for name in QUIET_LIBRARIES:
            assert logging.getLogger(name).level == logging.WARNING

    def test_libraries_verbose_at_debug(self):
        """Test library loggers follow DEBUG."""
        setup_logging(level=logging.DEBUG, stream=StringIO())

        assert logging.getLogger("httpx").level == logging.DEBUG
        assert logging.getLogger("uvicorn.access").level == logging.INFO

    def test_format_constants(self):
        """Test the format strings include the logger name and level."""
        assert "%(name)s" in LOG_FORMAT
        assert "%(levelname)s" in LOG_FORMAT
        assert LOG_DATE_FORMAT.startswith("%Y")
