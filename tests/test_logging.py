"""Tests for taskflow.core.logging."""

import json
import logging
import sys

import pytest

from taskflow.core.logging import PLAIN_FORMAT, StructuredFormatter, configure_logging
from taskflow.store.documents import DocumentStore


@pytest.fixture
def restore_taskflow_logger():
    """configure_logging mutates the shared 'taskflow' logger; put it back."""
    logger = logging.getLogger("taskflow")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield logger
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


def _record(msg="hello %s", args=("world",), exc_info=None, name="taskflow.store"):
    return logging.LogRecord(
        name=name,
        level=logging.INFO,
        pathname=__file__,
        lineno=42,
        msg=msg,
        args=args,
        exc_info=exc_info,
    )


class TestStructuredFormatter:
    def test_fields(self):
        entry = json.loads(StructuredFormatter().format(_record()))
        assert entry["msg"] == "hello world"
        assert entry["level"] == "INFO"
        assert entry["component"] == "store"
        assert entry["where"] == "test_logging:42"
        assert entry["ts"].endswith("Z")
        assert "exception" not in entry
        assert "file_name" not in entry
        assert "operation_id" not in entry

    def test_foreign_logger_name_kept(self):
        entry = json.loads(StructuredFormatter().format(_record(name="mcp.server")))
        assert entry["component"] == "mcp.server"

    def test_context_ids_included(self):
        record = _record()
        record.file_name = "progress.md"
        record.operation_id = "op-1"
        entry = json.loads(StructuredFormatter().format(record))
        assert entry["file_name"] == "progress.md"
        assert entry["operation_id"] == "op-1"

    @pytest.mark.asyncio
    async def test_store_write_carries_file_name(self, tmp_dir, caplog):
        caplog.set_level(logging.INFO, logger="taskflow.store")
        await DocumentStore(tmp_dir).write("notes.md", "x")
        records = [r for r in caplog.records if r.name == "taskflow.store"]
        assert records[-1].file_name == "notes.md"
        entry = json.loads(StructuredFormatter().format(records[-1]))
        assert entry["file_name"] == "notes.md"

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record(exc_info=sys.exc_info())
        entry = json.loads(StructuredFormatter().format(record))
        assert "RuntimeError: boom" in entry["exception"]


class TestConfigureLogging:
    def test_single_stderr_handler(self, restore_taskflow_logger):
        logger = configure_logging(level="DEBUG")
        configure_logging(level="DEBUG")
        assert logger is restore_taskflow_logger
        assert len(logger.handlers) == 1
        assert logger.handlers[0].stream is sys.stderr
        assert logger.level == logging.DEBUG
        assert logger.propagate is False

    def test_plain_format(self, restore_taskflow_logger):
        logger = configure_logging()
        assert logger.handlers[0].formatter._fmt == PLAIN_FORMAT

    def test_structured(self, restore_taskflow_logger):
        logger = configure_logging(structured=True)
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("warn", logging.WARNING),
            ("error", logging.ERROR),
            ("info", logging.INFO),
            ("bogus", logging.INFO),
        ],
    )
    def test_level_names(self, restore_taskflow_logger, name, expected):
        assert configure_logging(level=name).level == expected
