from __future__ import annotations

import logging
from io import StringIO
from unittest.mock import patch

import excel_read.logging.init
from excel_read.logging.init import LabeledFormatter, get_logger, log_summary, reset_logging, setup_logging


def _capturing_logger(name: str) -> tuple[logging.Logger, StringIO]:
    captured = StringIO()
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logging.addLevelName(25, "SUMMARY")
    handler = logging.StreamHandler(captured)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger, captured


def test_setup_logging_creates_logger_with_labeled_formatter():
    reset_logging()
    logger = setup_logging()
    assert logger.name == "excel_read"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.StreamHandler)
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_logging_labeled_prefixes():
    logger, captured = _capturing_logger("test_excel_read_labels")
    logger.debug("Test debug message")
    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    logger.log(25, "Test summary message")

    lines = captured.getvalue().strip().split("\n")
    assert lines == [
        "DEBUG Test debug message",
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY Test summary message",
    ]


def test_get_logger_returns_configured_logger():
    reset_logging()
    configured = setup_logging()
    assert get_logger() is configured


def test_setup_logging_idempotent():
    reset_logging()
    logger1 = setup_logging()
    logger2 = setup_logging()
    assert logger1 is logger2
    assert len(logger1.handlers) == 1


def test_setup_logging_debug_switches_level():
    reset_logging()
    logger = setup_logging()
    setup_logging(debug=True)
    assert logger.level == logging.DEBUG
    assert logger.handlers[0].level == logging.DEBUG
    reset_logging()
    assert setup_logging().level == logging.INFO


def test_module_loggers_share_handler():
    reset_logging()
    logger = setup_logging()
    captured = StringIO()
    logger.handlers[0].setStream(captured)
    logging.getLogger("excel_read.services.orchestrator").error("people.xlsx: MALFORMED_CELL bad")
    assert captured.getvalue() == "ERROR people.xlsx: MALFORMED_CELL bad\n"


def test_summary_level_logging():
    reset_logging()
    logger = setup_logging()
    assert logging.getLevelName(25) == "SUMMARY"
    with patch.object(logger, "_log") as mock_log:
        logger.log(25, "files=1/1 success=1 failed=0 rows=2 elapsed_sec=0.1 throughput_rps=20")
        mock_log.assert_called_once()


def test_log_summary_convenience_function():
    logger, captured = _capturing_logger("excel_read_summary_test")
    excel_read.logging.init._logger = logger
    try:
        log_summary("files=2/2 success=2 failed=0 rows=150 elapsed_sec=2.5 throughput_rps=60")
    finally:
        reset_logging()
    assert captured.getvalue().strip() == (
        "SUMMARY files=2/2 success=2 failed=0 rows=150 elapsed_sec=2.5 throughput_rps=60"
    )
