"""Tests for peergate.core.logging module."""

from __future__ import annotations

import json
import logging

from peergate.core.logging import (
    JSONFormatter,
    StandardFormatter,
    configure_logging,
    correlation_context,
    generate_correlation_id,
    get_correlation_id,
    get_logger,
)


def _record(msg: str = "hello", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="peergate.test",
        level=level,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )


# ============================================================================
# Correlation ID Tests
# ============================================================================


class TestCorrelationId:
    """Tests for correlation ID functionality."""

    def test_default_none(self):
        assert get_correlation_id() is None

    def test_generate_unique(self):
        id1 = generate_correlation_id()
        id2 = generate_correlation_id()

        assert id1 != id2
        assert len(id1) == 36  # UUID format

    def test_context_sets_and_restores(self):
        with correlation_context() as cid:
            assert get_correlation_id() == cid
        assert get_correlation_id() is None

    def test_context_uses_given_id(self):
        with correlation_context("join-42") as cid:
            assert cid == "join-42"
            assert get_correlation_id() == "join-42"

    def test_nested_contexts_restore_outer(self):
        with correlation_context("outer"):
            with correlation_context("inner"):
                assert get_correlation_id() == "inner"
            assert get_correlation_id() == "outer"


# ============================================================================
# Formatter Tests
# ============================================================================


class TestJSONFormatter:
    """Tests for the production formatter."""

    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "peergate.test"
        assert data["message"] == "hello"
        assert "timestamp" in data
        assert "source" not in data

    def test_includes_correlation_id(self):
        with correlation_context("abc123"):
            data = json.loads(JSONFormatter().format(_record()))

        assert data["correlation_id"] == "abc123"

    def test_warning_includes_source(self):
        data = json.loads(JSONFormatter().format(_record(level=logging.WARNING)))

        assert data["source"]["line"] == 10


class TestStandardFormatter:
    """Tests for the development formatter."""

    def test_prefixes_short_correlation_id(self):
        formatter = StandardFormatter(use_colors=False)
        with correlation_context("0123456789abcdef"):
            line = formatter.format(_record())

        assert "[01234567] hello" in line

    def test_does_not_mutate_record(self):
        formatter = StandardFormatter(use_colors=False)
        record = _record()
        with correlation_context("0123456789abcdef"):
            formatter.format(record)

        assert record.msg == "hello"


# ============================================================================
# configure_logging
# ============================================================================


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_sets_level_and_json_handler(self, clean_env):
        root = logging.getLogger()
        saved = root.handlers[:], root.level
        try:
            configure_logging(level="DEBUG", json_format=True)

            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, JSONFormatter)
        finally:
            root.handlers[:] = saved[0]
            root.setLevel(saved[1])

    def test_log_file_gets_json(self, clean_env, tmp_path):
        root = logging.getLogger()
        saved = root.handlers[:], root.level
        log_file = tmp_path / "peergate.log"
        try:
            configure_logging(level="INFO", json_format=False, log_file=str(log_file))
            get_logger("peergate.test").info("to file")
            for handler in root.handlers:
                handler.flush()

            assert json.loads(log_file.read_text().splitlines()[-1])["message"] == "to file"
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers[:] = saved[0]
            root.setLevel(saved[1])
