"""Tests for logging_config.py utility functions."""

import os
import sys
import logging
from unittest.mock import patch

from imagefit.core.logging_config import (
    get_logger,
    logger,
    setup_logger,
    stdout_handlers,
)


def _only_stdout_handler(test_logger):
    handlers = stdout_handlers(test_logger)
    assert len(handlers) == 1
    return handlers[0]


class TestSetupLogger:
    """Tests for setup_logger function."""

    def test_setup_logger_default_parameters(self):
        """Test that the package logger writes to stdout at INFO without propagating."""
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("LOG_LEVEL", None)
            test_logger = setup_logger()
        assert test_logger.name == "imagefit"
        assert test_logger.level == logging.INFO
        assert _only_stdout_handler(test_logger).stream is sys.stdout
        assert not test_logger.propagate

    def test_cli_debug_level(self):
        """Test the level override the CLI passes for --debug."""
        test_logger = setup_logger(name="imagefit.cli.test-debug", level="DEBUG")
        assert test_logger.level == logging.DEBUG

    def test_level_from_environment(self):
        """Test LOG_LEVEL when no explicit level is given."""
        with patch.dict(os.environ, {"LOG_LEVEL": "WARNING"}):
            test_logger = setup_logger(name="imagefit.test-env-level")
        assert test_logger.level == logging.WARNING

    def test_explicit_level_wins_over_environment(self):
        """Test that an explicit level overrides LOG_LEVEL."""
        with patch.dict(os.environ, {"LOG_LEVEL": "ERROR"}):
            test_logger = setup_logger(name="imagefit.test-override", level="debug")
        assert test_logger.level == logging.DEBUG

    def test_unknown_level_defaults_to_info(self):
        """Test that an unknown level name falls back to INFO."""
        test_logger = setup_logger(name="imagefit.test-invalid-level", level="VERBOSE")
        assert test_logger.level == logging.INFO

    def test_structured_format(self):
        """Test that the structured format carries source location."""
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("LOG_FORMAT", None)
            test_logger = setup_logger(name="imagefit.test-structured", format_type="structured")
        format_string = _only_stdout_handler(test_logger).formatter._fmt
        assert "%(filename)s:%(lineno)d" in format_string
        assert "%(funcName)s()" in format_string

    def test_simple_format_from_environment(self):
        """Test LOG_FORMAT=simple overriding the requested format."""
        with patch.dict(os.environ, {"LOG_FORMAT": "simple"}):
            test_logger = setup_logger(name="imagefit.test-env-format", format_type="structured")
        format_string = _only_stdout_handler(test_logger).formatter._fmt
        assert "%(filename)s" not in format_string

    def test_repeated_setup_adds_one_handler(self):
        """Test that configuring a logger twice keeps a single stdout handler."""
        first = setup_logger(name="imagefit.test-no-duplicates")
        second = setup_logger(name="imagefit.test-no-duplicates")

        assert first is second
        _only_stdout_handler(first)

    def test_foreign_handlers_do_not_block_stdout_handler(self):
        """Test that handlers added by other code do not count as ours."""
        test_logger = logging.getLogger("imagefit.test-foreign")
        foreign = logging.NullHandler()
        test_logger.addHandler(foreign)
        try:
            setup_logger(name="imagefit.test-foreign")
            assert foreign in test_logger.handlers
            _only_stdout_handler(test_logger)
        finally:
            test_logger.removeHandler(foreign)


class TestStdoutHandlers:
    """Tests for stdout_handlers."""

    def test_ignores_other_streams_and_subclasses(self):
        """Test that stderr handlers and StreamHandler subclasses are skipped."""
        test_logger = logging.getLogger("imagefit.test-filter")
        stderr_handler = logging.StreamHandler(sys.stderr)
        file_like = logging.FileHandler(os.devnull)
        test_logger.addHandler(stderr_handler)
        test_logger.addHandler(file_like)
        try:
            assert stdout_handlers(test_logger) == []
        finally:
            test_logger.removeHandler(stderr_handler)
            test_logger.removeHandler(file_like)
            file_like.close()


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_custom_name(self):
        """Test that get_logger configures the named logger."""
        test_logger = get_logger(name="imagefit.initializers.test")
        assert test_logger.name == "imagefit.initializers.test"
        assert not test_logger.propagate
        _only_stdout_handler(test_logger)


class TestDefaultLogger:
    """Tests for default logger instance."""

    def test_default_logger_exists(self):
        """Test the module-level package logger."""
        assert isinstance(logger, logging.Logger)
        assert logger.name == "imagefit"
        assert stdout_handlers(logger)
