"""
Tests for bankgen_core.logger_utils.
"""

import io
import json
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bankgen_core.logger_utils import JsonFormatter, PhaseFormatter, configure_logging, get_logger


def make_record(msg="Wrote batch 3", **extra):
    record = logging.LogRecord("bankgen", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_basic_fields(self):
        data = json.loads(JsonFormatter().format(make_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "bankgen"
        assert data["message"] == "Wrote batch 3"
        assert "timestamp" in data

    def test_structured_fields(self):
        record = make_record(run_id="gen_1", phase="accounts", batch=3, row_count=1000)
        data = json.loads(JsonFormatter().format(record))
        assert data["run_id"] == "gen_1"
        assert data["phase"] == "accounts"
        assert data["batch"] == 3
        assert data["row_count"] == 1000

    def test_unknown_extra_ignored(self):
        data = json.loads(JsonFormatter().format(make_record(colour="blue")))
        assert "colour" not in data

    def test_exception_included(self):
        try:
            raise RuntimeError("disk full")
        except RuntimeError:
            record = make_record()
            record.exc_info = sys.exc_info()
        data = json.loads(JsonFormatter().format(record))
        assert "disk full" in data["exception"]


class TestConfigureLogging:
    def teardown_method(self):
        configure_logging(json_format=False)

    def test_json_from_env(self, monkeypatch):
        monkeypatch.setenv("BANKGEN_JSON_LOGS", "1")
        configure_logging()
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0].formatter, JsonFormatter)

    def test_text_by_default(self, monkeypatch):
        monkeypatch.delenv("BANKGEN_JSON_LOGS", raising=False)
        configure_logging(level=logging.DEBUG)
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_get_logger(self):
        assert get_logger("bankgen_core.x").name == "bankgen_core.x"


class TestPhaseFormatter:
    def test_phase_prefix(self):
        formatter = PhaseFormatter("%(phase_tag)s%(message)s")
        assert formatter.format(make_record(phase="accounts")) == "[accounts] Wrote batch 3"

    def test_stage_used_when_no_phase(self):
        formatter = PhaseFormatter("%(phase_tag)s%(message)s")
        assert formatter.format(make_record(stage="clearing")) == "[clearing] Wrote batch 3"

    def test_no_prefix(self):
        formatter = PhaseFormatter("%(phase_tag)s%(message)s")
        assert formatter.format(make_record()) == "Wrote batch 3"

    def test_configured_stream(self):
        stream = io.StringIO()
        configure_logging(json_format=False, stream=stream)
        try:
            get_logger("bankgen_core.test").info("hello", extra={"phase": "customers"})
            assert "INFO - [customers] hello" in stream.getvalue()
        finally:
            configure_logging(json_format=False)

    def test_faker_quieted(self):
        configure_logging(level=logging.DEBUG, json_format=False)
        assert logging.getLogger("faker").level == logging.WARNING
