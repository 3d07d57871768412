"""Tests for logging configuration."""

import json
import logging
import logging.handlers

import pytest

from chatflow.observability.logging import ContextLogger, setup_logging


@pytest.fixture(autouse=True)
def restore_chatflow_logger():
    """setup_logging reconfigures the package logger; undo it after each test."""
    package_logger = logging.getLogger("chatflow")
    root = logging.getLogger()
    saved = (package_logger.handlers[:], package_logger.level, package_logger.propagate)
    saved_root = (root.handlers[:], root.level)
    yield
    for handler in package_logger.handlers:
        if handler not in saved[0]:
            handler.close()
    package_logger.handlers, package_logger.level, package_logger.propagate = saved
    root.handlers, root.level = saved_root


def test_setup_logging_sets_package_level():
    setup_logging("DEBUG")

    package_logger = logging.getLogger("chatflow")
    assert package_logger.level == logging.DEBUG
    assert package_logger.propagate is False
    assert any(isinstance(h, logging.StreamHandler) for h in package_logger.handlers)


def test_setup_logging_writes_json_file(tmp_path):
    log_file = tmp_path / "chatflow.log"

    setup_logging("INFO", str(log_file))
    logging.getLogger("chatflow.runtime.runner").info("flow started")
    for handler in logging.getLogger("chatflow").handlers:
        handler.flush()

    record = json.loads(log_file.read_text().splitlines()[-1])
    assert record["message"] == "flow started"
    assert record["levelname"] == "INFO"
    assert record["name"] == "chatflow.runtime.runner"
    assert any(
        isinstance(h, logging.handlers.RotatingFileHandler)
        for h in logging.getLogger("chatflow").handlers
    )


def test_context_logger_adds_context():
    adapter = ContextLogger("chatflow.tests").with_context(run="abc123")

    assert isinstance(adapter, logging.LoggerAdapter)
    assert adapter.extra == {"run": "abc123"}
    assert adapter.logger is logging.getLogger("chatflow.tests")
