"""Tests for log.py module."""

import logging

import pytest
from rich.logging import RichHandler

from vela_img.log import parse_log_level, setup_logging


class TestParseLogLevel:
    """Test parse_log_level function."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("t", logging.DEBUG),
            ("Trace", logging.DEBUG),
            ("DEBUG", logging.DEBUG),
            ("info", logging.INFO),
            ("w", logging.WARNING),
            ("WARN", logging.WARNING),
            ("Error", logging.ERROR),
            ("fatal", logging.CRITICAL),
            ("PANIC", logging.CRITICAL),
        ],
    )
    def test_known_levels(self, value, expected):
        """Should map each accepted spelling."""
        assert parse_log_level(value) == expected

    @pytest.mark.parametrize("value", ["", "verbose", "dEbUg"])
    def test_unknown_defaults_to_info(self, value):
        """Should fall back to INFO."""
        assert parse_log_level(value) == logging.INFO


class TestSetupLogging:
    """Test setup_logging function."""

    def test_installs_single_handler(self):
        """Should add one rich handler no matter how often it is called."""
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        try:
            setup_logging("debug")
            setup_logging("warn")
            rich_handlers = [h for h in root.handlers if isinstance(h, RichHandler)]
            assert len(rich_handlers) == 1
            assert root.level == logging.WARNING
        finally:
            root.handlers = saved_handlers
            root.setLevel(saved_level)

    def test_logs_configured_level(self, caplog):
        """Should report the level it applied through the module logger."""
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        try:
            setup_logging("trace")
            assert "Log level set to DEBUG" in caplog.text
            assert any(r.name == "vela_img.log" for r in caplog.records)
        finally:
            root.handlers = saved_handlers
            root.setLevel(saved_level)
