"""
Тесты структурированного логирования и контекста выполнения.
"""

import io
import json
import logging

import pytest

from gateway_inventory.core.context import RunContext, get_current_context, use_context
from gateway_inventory.core.logging import (
    HumanFormatter,
    JSONFormatter,
    LogConfig,
    OperationLog,
    RotationType,
    get_logger,
    setup_logging,
)


@pytest.fixture
def json_stream():
    """JSON логирование в буфер; handlers восстанавливаются после теста."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    stream = io.StringIO()
    setup_logging(json_format=True, level=logging.DEBUG, stream=stream)
    yield stream
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)


def _records(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


@pytest.mark.unit
class TestStructuredLogger:
    """Тесты StructuredLogger."""

    def test_extra_fields_in_json(self, json_stream):
        get_logger("test.structured").info("Снапшот принят", project="site-9", gateway="00:11:22:33:44:55")
        record = _records(json_stream)[-1]
        assert record["message"] == "Снапшот принят"
        assert record["project"] == "site-9"
        assert record["gateway"] == "00:11:22:33:44:55"
        assert "run_id" not in record

    def test_bind(self, json_stream):
        log = get_logger("test.bind").bind(project="site-9")
        log.warning("Sweep пропущен", device="d1")
        record = _records(json_stream)[-1]
        assert record["level"] == "WARNING"
        assert record["project"] == "site-9"
        assert record["device"] == "d1"

    def test_run_id_from_context(self, json_stream):
        ctx = RunContext.create(triggered_by="test", command="device-sync")
        with use_context(ctx):
            assert get_current_context() is ctx
            get_logger("test.ctx").info("внутри контекста")
        assert get_current_context() is None
        assert _records(json_stream)[-1]["run_id"] == ctx.run_id


@pytest.mark.unit
class TestFormatters:
    """Тесты форматтеров."""

    def test_human_formatter_extras(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)
        record.project = "site-9"
        record.run_id = "abc12345"
        output = HumanFormatter().format(record)
        assert "[abc12345] hello" in output
        assert "(project=site-9)" in output

    def test_json_formatter_skips_empty_run_id(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)
        record.run_id = "-"
        data = json.loads(JSONFormatter().format(record))
        assert "run_id" not in data


@pytest.mark.unit
class TestLogConfig:
    """Тесты LogConfig.from_dict."""

    def test_from_dict(self):
        config = LogConfig.from_dict({"level": "debug", "rotation": "time", "file_path": "logs/app.log"})
        assert config.level == logging.DEBUG
        assert config.rotation == RotationType.TIME
        assert config.file_path == "logs/app.log"


@pytest.mark.unit
class TestOperationLog:
    """Тесты OperationLog."""

    def test_success(self, json_stream):
        op = OperationLog(operation="device-sync", project="site-9").start()
        op.success(processed=2, failed=1).log()
        data = op.to_dict()
        assert data["status"] == "success"
        assert data["result"] == {"processed": 2, "failed": 1}
        record = _records(json_stream)[-1]
        assert record["operation"] == "device-sync"
        assert record["processed"] == 2

    def test_failure(self):
        op = OperationLog(operation="device-sync").start().failure("boom")
        assert op.to_dict()["error"] == "boom"
        assert op.duration_ms is not None
