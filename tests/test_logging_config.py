"""Tests for logging setup."""

import logging

import pytest

from edge_offload.logging_config import LOG_FORMAT, setup_logging


@pytest.fixture
def logger_name(request):
    name = f"edge_offload_test.{request.node.name}"
    yield name
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_console_handler(logger_name):
    logger = setup_logging(logging.DEBUG, name=logger_name)
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert logger.handlers[0].formatter._fmt == LOG_FORMAT
    assert not logger.propagate


def test_idempotent(logger_name):
    setup_logging(name=logger_name)
    logger = setup_logging(logging.WARNING, name=logger_name)
    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING


def test_file_handler(logger_name, tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    logger = setup_logging(logging.INFO, log_file=log_file, name=logger_name)
    logger.info("cycle finished")
    for handler in logger.handlers:
        handler.flush()

    assert len(logger.handlers) == 2
    assert "cycle finished" in log_file.read_text()
