"""
Error Handling and Logging Tests
--------------------------------
Tests for the error taxonomy, ErrorHandler and request-scoped logging.
"""

import json
import logging

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from core.errors import (
    ActionFailure,
    CommandNotFoundError,
    DuplicateIdentifierError,
    ErrorCategory,
    ErrorHandler,
    ErrorReport,
    PaletteError,
    classify_exception,
)
from infra.logging import (
    JSONFormatter,
    RequestContext,
    RequestIdFilter,
    get_logger,
    get_request_id,
)


class TestErrorTaxonomy:
    """Exception classes and classification."""

    def test_hierarchy(self):
        for error_type in (DuplicateIdentifierError, CommandNotFoundError, ActionFailure):
            assert issubclass(error_type, PaletteError)

    def test_classification(self):
        assert classify_exception(DuplicateIdentifierError("x")) == ErrorCategory.DUPLICATE_IDENTIFIER
        assert classify_exception(CommandNotFoundError("x")) == ErrorCategory.COMMAND_NOT_FOUND
        assert classify_exception(ActionFailure("x")) == ErrorCategory.ACTION_FAILURE
        assert classify_exception(RuntimeError("x")) == ErrorCategory.ACTION_FAILURE

    def test_messages_name_the_id(self):
        assert str(CommandNotFoundError("open-settings")) == 'Command with id "open-settings" not found'
        assert str(DuplicateIdentifierError("a")) == 'Command with id "a" already exists'

    def test_report_from_exception(self):
        try:
            raise ActionFailure("boom")
        except ActionFailure as e:
            report = ErrorReport.from_exception(e, {"command_id": "x"})

        assert report.category == ErrorCategory.ACTION_FAILURE
        assert report.message == "boom"
        assert "ActionFailure" in report.stack_trace


class TestErrorHandler:
    """Logging, history and user messages."""

    def test_user_message(self):
        handler = ErrorHandler()
        message = handler.handle_exception(CommandNotFoundError("missing"))
        assert "missing" in message

    def test_system_error_message_is_generic(self):
        handler = ErrorHandler()
        report = ErrorReport(category=ErrorCategory.SYSTEM_ERROR, message="stack overflow in x")
        assert handler.handle(report) == "Something went wrong internally."

    def test_history_is_bounded(self):
        handler = ErrorHandler(max_history=3)
        for i in range(5):
            handler.handle_exception(ActionFailure(f"fail {i}"))

        assert [r.message for r in handler.history] == ["fail 2", "fail 3", "fail 4"]
        assert handler.get_error_stats() == {"ACTION_FAILURE": 3}

        handler.clear_history()
        assert handler.history == []

    def test_log_levels(self, caplog):
        handler = ErrorHandler()
        with caplog.at_level(logging.DEBUG, logger="palette.errors"):
            handler.handle_exception(CommandNotFoundError("x"))
            handler.handle_exception(ActionFailure("y"))

        levels = [r.levelno for r in caplog.records if r.name == "palette.errors"]
        assert levels[:2] == [logging.WARNING, logging.ERROR]


class TestRequestLogging:
    """request_id propagation."""

    def test_context_sets_and_resets(self):
        assert get_request_id() is None
        with RequestContext("req_test") as request_id:
            assert request_id == "req_test"
            assert get_request_id() == "req_test"
        assert get_request_id() is None

    def test_generated_ids_are_unique(self):
        with RequestContext() as first:
            pass
        with RequestContext() as second:
            pass
        assert first != second
        assert first.startswith("req_")

    def test_filter_and_json_formatter(self):
        record = logging.LogRecord("palette.test", logging.INFO, __file__, 1, "hello", None, None)
        record.command_id = "open-settings"

        with RequestContext("req_abc"):
            RequestIdFilter().filter(record)

        entry = json.loads(JSONFormatter().format(record))
        assert entry["request_id"] == "req_abc"
        assert entry["message"] == "hello"
        assert entry["command_id"] == "open-settings"

    def test_get_logger_namespace(self):
        assert get_logger("commands.registry").name == "palette.commands.registry"
        assert get_logger("palette.main").name == "palette.main"
