"""Tests for logger module."""

import logging
from logging.handlers import RotatingFileHandler
from unittest.mock import patch

from guildguard.util.logger import (
    DATE_FORMAT,
    LOG_FORMAT,
    ColorFormatter,
    PromptToolkitHandler,
    get_log_filepath,
    get_logger,
    handle_exception,
    should_use_color,
)


def test_get_logger_is_idempotent():
    first = get_logger("test_logger_idem")
    second = get_logger("test_logger_idem")

    assert first is second
    assert len(first.handlers) == 2
    assert first.propagate is False


def test_logger_has_console_and_rotating_file_handlers():
    logger = get_logger("test_logger_handlers")

    assert any(isinstance(h, PromptToolkitHandler) for h in logger.handlers)
    file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].level == logging.DEBUG


def test_log_filepath_is_shared():
    assert get_log_filepath() == get_log_filepath()
    assert get_log_filepath().suffix == ".log"


def test_color_formatter_applies_color():
    formatter = ColorFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    record = logging.LogRecord("test", logging.ERROR, "", 0, "error occurred", None, None)

    formatted = formatter.format(record)

    assert formatted.startswith("\033[31m")
    assert "error occurred" in formatted


@patch("sys.stderr.isatty")
def test_should_use_color_exception(mock_isatty):
    mock_isatty.side_effect = Exception("Error")

    assert should_use_color() is False


def test_handle_exception_defers_keyboard_interrupt():
    with patch("sys.__excepthook__") as default_hook:
        handle_exception(KeyboardInterrupt, KeyboardInterrupt(), None)

    default_hook.assert_called_once()


def test_handle_exception_logs_other_errors():
    with patch("logging.error") as log_error:
        handle_exception(ValueError, ValueError("boom"), None)

    log_error.assert_called_once()
