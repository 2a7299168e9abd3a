"""
LoggerFactory level tests.

set_default_level() re-levels existing component loggers and the defaults
for new ones; pinned components keep their level.
"""

import logging

import pytest

from util_logger import ComponentType, JSONFormatter, LoggerFactory, LogLevel


@pytest.fixture
def restore_levels():
    yield
    LoggerFactory.set_default_level(LoggerFactory._default_level)


def _json_handler(logger):
    return next(h for h in logger.handlers if isinstance(h.formatter, JSONFormatter))


class TestSetDefaultLevel:

    def test_existing_loggers_relevelled(self, restore_levels):
        logger = LoggerFactory.create_logger(ComponentType.SERVICE, "LevelledService")

        LoggerFactory.set_default_level("WARNING")

        assert logger.level == logging.WARNING
        assert _json_handler(logger).level == logging.WARNING
        assert not logger.isEnabledFor(logging.INFO)

    def test_new_loggers_use_applied_level(self, restore_levels):
        applied = LoggerFactory.set_default_level(LogLevel.DEBUG)
        logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "LevelledAdapter")

        assert applied == LogLevel.DEBUG
        assert logger.level == logging.DEBUG
        assert LoggerFactory.DEFAULT_CONFIGS[ComponentType.SERVICE].enable_debug_context

    def test_pinned_component_untouched(self, restore_levels):
        logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "LevelledRepository")

        LoggerFactory.set_default_level("ERROR")

        assert logger.level == logging.DEBUG
        assert LoggerFactory.DEFAULT_CONFIGS[ComponentType.REPOSITORY].log_level == LogLevel.DEBUG

    def test_context_loggers_relevelled(self, restore_levels):
        logger = LoggerFactory.create_with_context(
            ComponentType.SERVICE, "LevelledContext", feed_name="current"
        )
        LoggerFactory.set_default_level("ERROR")
        assert logger.level == logging.ERROR
