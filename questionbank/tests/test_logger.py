"""
Tests for the application logging helpers.
"""

import json
import logging

import pytest

from questionbank.common.logger import (
    JsonFormatter,
    LoggerAdapter,
    app_logger,
    configure_logger,
    get_logger,
    log_execution_time,
    with_context,
)


@pytest.fixture
def restore_app_logger():
    """Put the application logger's handlers and level back after a test."""
    handlers, level = list(app_logger.handlers), app_logger.level
    yield
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        app_logger.addHandler(handler)
    app_logger.setLevel(level)


class TestLoggers:

    def test_get_logger_places_names_under_the_app_logger(self):
        assert get_logger("questionbank.questions.controller").name == "questionbank.questions.controller"
        assert get_logger("alembic").name == "questionbank.alembic"

    def test_adapter_appends_context(self, caplog):
        caplog.set_level(logging.INFO, logger="questionbank")
        adapter = with_context("questionbank.tests", question_id="q-1")

        adapter.with_context(field="title").info("Updated question")

        record = caplog.records[-1]
        assert record.getMessage() == "Updated question (question_id=q-1, field=title)"
        assert record.context == {"question_id": "q-1", "field": "title"}

    def test_adapter_without_context_leaves_message(self, caplog):
        caplog.set_level(logging.INFO, logger="questionbank")

        LoggerAdapter(get_logger("questionbank.tests")).info("Plain message")

        assert caplog.records[-1].getMessage() == "Plain message"


class TestJsonFormatter:

    def test_context_and_exception(self):
        try:
            raise ValueError("bad content")
        except ValueError as e:
            record = logging.LogRecord(
                "questionbank.tests", logging.ERROR, __file__, 1, "Create failed", None, (type(e), e, e.__traceback__)
            )
        record.context = {"question_id": "q-1"}

        entry = json.loads(JsonFormatter().format(record))

        assert entry["level"] == "ERROR"
        assert entry["logger"] == "questionbank.tests"
        assert entry["message"] == "Create failed"
        assert entry["context"] == {"question_id": "q-1"}
        assert "ValueError: bad content" in entry["exception"]


class TestConfigureLogger:

    def test_file_output_in_json(self, tmp_path, restore_app_logger):
        log_file = tmp_path / "logs" / "questionbank.log"

        configure_logger(level="debug", use_json=True, log_file=str(log_file))
        get_logger("questionbank.tests").info("Service ready")
        for handler in app_logger.handlers:
            handler.flush()

        assert app_logger.level == logging.DEBUG
        assert json.loads(log_file.read_text().splitlines()[-1])["message"] == "Service ready"

    def test_reconfiguring_replaces_handlers(self, restore_app_logger):
        configure_logger(level="WARNING")
        configure_logger(level="not-a-level")

        assert len(app_logger.handlers) == 1
        assert app_logger.level == logging.INFO


class TestLogExecutionTime:

    @pytest.mark.asyncio
    async def test_logs_success_and_failure(self, caplog):
        caplog.set_level(logging.DEBUG, logger="questionbank")
        timed_logger = get_logger("questionbank.tests.timing")

        @log_execution_time(timed_logger)
        async def load_page():
            return ["q-1"]

        @log_execution_time(timed_logger)
        async def load_missing():
            raise LookupError("q-2")

        assert await load_page() == ["q-1"]
        with pytest.raises(LookupError):
            await load_missing()

        messages = [record.getMessage() for record in caplog.records if record.name == timed_logger.name]
        assert messages[0].startswith("load_page completed in ")
        assert messages[1].startswith("load_missing failed in ")
