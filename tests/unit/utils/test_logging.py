"""Tests for logging utility."""

import logging
from io import StringIO

import pytest


@pytest.fixture(autouse=True)
def _fresh_logging():
    from ecocoach.utils.logging import reset_logging

    reset_logging()
    yield
    reset_logging()


class TestLoggerConfiguration:
    """Test that logger configures correctly."""

    def test_configure_logging_creates_logger(self):
        """configure_logging should return the application logger."""
        from ecocoach.utils.logging import configure_logging

        logger = configure_logging()
        assert isinstance(logger, logging.Logger)
        assert logger.name == "ecocoach"
        assert logger.level == logging.INFO

    def test_configure_logging_respects_level(self):
        from ecocoach.utils.logging import configure_logging

        logger = configure_logging(level="DEBUG")
        assert logger.level == logging.DEBUG

        logger = configure_logging(level="warning")
        assert logger.level == logging.WARNING
        assert logger.handlers[0].level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        from ecocoach.utils.logging import configure_logging

        assert configure_logging(level="LOUD").level == logging.INFO

    def test_configure_logging_installs_single_handler(self):
        from ecocoach.utils.logging import configure_logging

        configure_logging()
        logger = configure_logging()

        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_reset_removes_handler(self):
        from ecocoach.utils.logging import configure_logging, reset_logging

        logger = configure_logging()
        reset_logging()

        assert logger.handlers == []
        assert logger.propagate is True


class TestLibraryLoggers:
    """Test that provider library loggers are kept quiet."""

    def test_libraries_held_at_warning(self):
        from ecocoach.utils.logging import LIBRARY_LOGGERS, configure_logging

        configure_logging(level="INFO")

        for name in LIBRARY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_debug_opens_library_loggers(self):
        from ecocoach.utils.logging import configure_logging

        configure_logging(level="DEBUG")

        assert logging.getLogger("LiteLLM").level == logging.DEBUG

    def test_error_level_applies_to_libraries(self):
        from ecocoach.utils.logging import configure_logging

        configure_logging(level="ERROR")

        assert logging.getLogger("httpx").level == logging.ERROR


class TestLogOutput:
    def test_module_logger_output_uses_app_format(self):
        """Records from module loggers carry their dotted name and level."""
        from ecocoach.utils.logging import configure_logging

        buffer = StringIO()
        configure_logging(level="INFO", stream=buffer)

        logging.getLogger("ecocoach.coach.resolver").warning("Search failed")
        logging.getLogger("ecocoach.profile.store").debug("hidden")

        output = buffer.getvalue()
        assert "ecocoach.coach.resolver - WARNING - Search failed" in output
        assert "hidden" not in output

    def test_reconfigure_switches_stream(self):
        from ecocoach.utils.logging import configure_logging

        first = StringIO()
        second = StringIO()
        configure_logging(stream=first)
        configure_logging(stream=second)

        logging.getLogger("ecocoach").info("hello")

        assert first.getvalue() == ""
        assert "hello" in second.getvalue()
