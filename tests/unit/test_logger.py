"""Unit tests for logging infrastructure."""

import json
import logging
import sys
from io import BytesIO, StringIO

import pytest
from PIL import Image

from src.models.models import ScanMode
from src.utils.errors import DetectionFailed
from src.utils.logger import JSONFormatter, RichTextFormatter, get_logger, logger
from src.vision.normalizer import DetectionNormalizer


def make_record(level=logging.INFO, msg="Test message", name="test_logger", exc_info=None, **extra):
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def fresh_logger_name(request):
    """Logger name unique to the test, with no handlers left from earlier runs."""
    name = f"test_{request.node.name}"
    logging.getLogger(name).handlers.clear()
    yield name
    logging.getLogger(name).handlers.clear()


class TestJSONFormatter:
    """Test JSONFormatter produces valid JSON output."""

    def test_outputs_valid_json(self):
        parsed = json.loads(JSONFormatter().format(make_record()))

        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "test_logger"
        assert parsed["message"] == "Test message"
        assert "timestamp" in parsed

    def test_includes_exception_traceback(self):
        try:
            raise ValueError("Test error")
        except ValueError:
            record = make_record(logging.ERROR, "Error occurred", exc_info=sys.exc_info())

        parsed = json.loads(JSONFormatter().format(record))

        assert "ValueError" in parsed["exception"]

    def test_includes_context_fields(self):
        record = make_record(user_id="user-123", provider="mealdb", scan_mode="ingredient")

        parsed = json.loads(JSONFormatter().format(record))

        assert (parsed["user_id"], parsed["provider"], parsed["scan_mode"]) == ("user-123", "mealdb", "ingredient")

    def test_absent_context_fields_omitted(self):
        parsed = json.loads(JSONFormatter().format(make_record(provider="spoonacular")))

        assert parsed["provider"] == "spoonacular"
        assert "user_id" not in parsed
        assert "scan_mode" not in parsed

    def test_extra_passed_through_logger_call(self, fresh_logger_name):
        stream = StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(JSONFormatter())
        test_logger = logging.getLogger(fresh_logger_name)
        test_logger.addHandler(handler)
        test_logger.propagate = False

        test_logger.warning("Quota reached", extra={"provider": "spoonacular"})

        parsed = json.loads(stream.getvalue())
        assert parsed["message"] == "Quota reached"
        assert parsed["provider"] == "spoonacular"


class TestRichTextFormatter:
    """Test RichTextFormatter produces colored text output."""

    @pytest.mark.parametrize(
        "level,icon",
        [
            (logging.DEBUG, "🔍"),
            (logging.INFO, "ℹ️"),
            (logging.WARNING, "⚠️"),
            (logging.ERROR, "❌"),
        ],
    )
    def test_icon_per_level(self, level, icon):
        output = RichTextFormatter().format(make_record(level))

        assert icon in output
        assert logging.getLevelName(level) in output

    def test_includes_name_message_and_color_reset(self):
        output = RichTextFormatter().format(make_record(name="my_logger", msg="Detected 2 item(s)"))

        assert output.startswith(RichTextFormatter.COLORS["INFO"])
        assert "my_logger" in output
        assert "Detected 2 item(s)" in output
        assert output.endswith(RichTextFormatter.COLORS["RESET"])

    def test_includes_exception_traceback(self):
        try:
            raise RuntimeError("Test error")
        except RuntimeError:
            record = make_record(logging.ERROR, "Error occurred", exc_info=sys.exc_info())

        output = RichTextFormatter().format(record)

        assert "RuntimeError" in output
        assert "Test error" in output


class TestGetLogger:
    """Test get_logger environment handling."""

    def test_respects_log_level(self, monkeypatch, fresh_logger_name):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        assert get_logger(fresh_logger_name).level == logging.DEBUG

    def test_invalid_log_level_defaults_to_info(self, monkeypatch, fresh_logger_name):
        monkeypatch.setenv("LOG_LEVEL", "INVALID")

        assert get_logger(fresh_logger_name).level == logging.INFO

    def test_json_log_type(self, monkeypatch, fresh_logger_name):
        monkeypatch.setenv("LOG_TYPE", "json")

        handlers = get_logger(fresh_logger_name).handlers

        assert [type(h.formatter) for h in handlers] == [JSONFormatter]

    def test_text_is_default(self, monkeypatch, fresh_logger_name):
        monkeypatch.delenv("LOG_TYPE", raising=False)

        handlers = get_logger(fresh_logger_name).handlers

        assert [type(h.formatter) for h in handlers] == [RichTextFormatter]

    def test_configured_logger_is_reused(self, fresh_logger_name):
        first = get_logger(fresh_logger_name)
        second = get_logger(fresh_logger_name)

        assert first is second
        assert len(second.handlers) == 1


class TestServiceLogger:
    """Test the shared service logger and third-party clamps."""

    def test_module_logger(self):
        assert logger.name == "ingredient_scan"
        assert logger.handlers

    @pytest.mark.parametrize("name", ["google.genai", "aiohttp"])
    def test_third_party_loggers_clamped(self, name):
        assert logging.getLogger(name).level == logging.WARNING

    @pytest.mark.asyncio
    async def test_failed_scan_logs_scan_mode(self, caplog):
        class DownClassifier:
            name = "down"

            async def classify(self, image_bytes, mode):
                raise DetectionFailed("vision backend down")

        buffer = BytesIO()
        Image.new("RGB", (8, 8)).save(buffer, format="PNG")

        with caplog.at_level(logging.WARNING, logger="ingredient_scan"):
            await DetectionNormalizer(DownClassifier()).detect(buffer.getvalue(), ScanMode.FOOD)

        records = [r for r in caplog.records if r.name == "ingredient_scan"]
        assert records
        assert records[-1].scan_mode == "food"
