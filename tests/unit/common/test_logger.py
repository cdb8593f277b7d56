"""Tests for logging setup."""

import logging
import uuid

import pytest

from schooladmin.common.logger import get_logger, setup_logger


@pytest.fixture
def logger_name():
    name = f"test_{uuid.uuid4().hex[:8]}"
    yield name
    logger = logging.getLogger(f"schooladmin.{name}")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


class TestLogger:
    """Tests for setup_logger and get_logger."""

    def test_names_are_qualified(self):
        assert get_logger("access.evaluator").name == "schooladmin.access.evaluator"
        assert get_logger("schooladmin.api").name == "schooladmin.api"
        assert get_logger("schooladmin").name == "schooladmin"

    def test_console_logging(self, logger_name):
        logger = setup_logger(logger_name, level="debug")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)

    def test_file_logging(self, tmp_path, logger_name):
        logger = setup_logger(
            logger_name, log_dir=str(tmp_path / "logs"), file_logging=True, console_logging=False
        )
        logger.info("access level loaded")
        for handler in logger.handlers:
            handler.flush()

        log_file = tmp_path / "logs" / f"schooladmin.{logger_name}.log"
        assert log_file.exists()
        assert "access level loaded" in log_file.read_text()

    def test_repeated_setup_keeps_handlers(self, logger_name):
        setup_logger(logger_name)
        logger = setup_logger(logger_name, level="WARNING")
        assert len(logger.handlers) == 1
        assert logger.level == logging.WARNING

    def test_invalid_level(self, logger_name):
        with pytest.raises(ValueError, match="Invalid log level"):
            setup_logger(logger_name, level="LOUD")
