"""
Тесты настройки structlog
"""

import logging

import pytest
import structlog
from structlog.testing import capture_logs

from rmm.core.log_config import configure_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    def test_level_filters_events(self):
        configure_logging(logging.WARNING)
        logger = structlog.get_logger("rmm.test")
        with capture_logs() as logs:
            logger.info("dropped")
            logger.warning("kept", reason="threshold")
        assert [entry["event"] for entry in logs] == ["kept"]
        assert logs[0]["reason"] == "threshold"

    def test_level_by_name(self):
        configure_logging("debug")
        logger = structlog.get_logger("rmm.test")
        with capture_logs() as logs:
            logger.debug("visible")
        assert [entry["event"] for entry in logs] == ["visible"]

    def test_json_renderer(self):
        configure_logging(json=True)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer_by_default(self):
        configure_logging()
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
