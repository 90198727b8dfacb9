"""Tests for JSON and console log formatters."""

import json
import logging
import sys

from core.logging.context import set_log_context
from core.logging.formatters import ConsoleFormatter, JSONFormatter


def _make_record(
    msg="test message",
    level=logging.INFO,
    name="test.logger",
    exc_info=None,
    **extras,
):
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extras.items():
        setattr(record, key, value)
    return record


def _exc_info(message="boom"):
    try:
        raise RuntimeError(message)
    except RuntimeError:
        return sys.exc_info()


class TestJSONFormatter:

    def test_formats_basic_json_with_required_fields(self):
        output = json.loads(JSONFormatter().format(_make_record()))

        assert output["level"] == "INFO"
        assert output["logger"] == "test.logger"
        assert output["message"] == "test message"
        assert output["ts"].endswith("Z")

    def test_includes_context(self):
        set_log_context(sink="EventBridgeSink", cluster_id="c1234", batch_id="abc")
        output = json.loads(JSONFormatter().format(_make_record()))

        assert output["sink"] == "EventBridgeSink"
        assert output["cluster_id"] == "c1234"
        assert output["batch_id"] == "abc"

    def test_empty_context_omitted(self):
        output = json.loads(JSONFormatter().format(_make_record()))
        assert "sink" not in output
        assert "batch_id" not in output

    def test_extra_fields(self):
        record = _make_record(
            event_count=17,
            chunk_index=1,
            event_namespace="default",
            subject="acs:cs:cn-hangzhou:1:c/apis/v1/namespaces/default/pods/nginx",
        )
        output = json.loads(JSONFormatter().format(record))

        assert output["event_count"] == 17
        assert output["chunk_index"] == 1
        assert output["event_namespace"] == "default"
        assert output["subject"].endswith("/pods/nginx")

    def test_unknown_extras_ignored(self):
        output = json.loads(JSONFormatter().format(_make_record(not_a_field="x")))
        assert "not_a_field" not in output

    def test_numeric_fields_coerced(self):
        output = json.loads(JSONFormatter().format(_make_record(event_count="5", duration_ms="1.5")))
        assert output["event_count"] == 5
        assert output["duration_ms"] == 1.5

    def test_bad_numeric_becomes_null(self):
        output = json.loads(JSONFormatter().format(_make_record(chunk_count="many")))
        assert output["chunk_count"] is None

    def test_url_secrets_redacted(self):
        record = _make_record(http_url="http://x/api?SecurityToken=abc&Region=cn&Signature=zzz")
        output = json.loads(JSONFormatter().format(record))

        assert "abc" not in output["http_url"]
        assert "zzz" not in output["http_url"]
        assert "Region=cn" in output["http_url"]

    def test_source_location_on_error(self):
        output = json.loads(JSONFormatter().format(_make_record(level=logging.ERROR)))
        assert output["file"] == "test.py:42"

    def test_no_source_location_on_info(self):
        output = json.loads(JSONFormatter().format(_make_record()))
        assert "file" not in output

    def test_exception_block(self):
        record = _make_record(level=logging.ERROR, exc_info=_exc_info("put failed"))
        output = json.loads(JSONFormatter().format(record))

        assert output["exception"]["type"] == "RuntimeError"
        assert output["exception"]["message"] == "put failed"
        assert "Traceback" in output["exception"]["stacktrace"]


class TestConsoleFormatter:

    def test_prefix_includes_context(self):
        set_log_context(sink="EventBridgeSink", cluster_id="c1234")
        output = ConsoleFormatter().format(_make_record())

        assert "[EventBridgeSink]" in output
        assert "[c1234]" in output
        assert output.endswith("test message")

    def test_batch_and_chunk_tags(self):
        set_log_context(batch_id="0123456789abcdef")
        output = ConsoleFormatter().format(_make_record(chunk_index=2))

        assert "[batch:01234567]" in output
        assert "[chunk:2]" in output

    def test_no_tags_without_context(self):
        output = ConsoleFormatter().format(_make_record())
        assert "[batch:" not in output
        assert "[chunk:" not in output

    def test_exception_appended(self):
        output = ConsoleFormatter().format(_make_record(level=logging.ERROR, exc_info=_exc_info()))
        assert "RuntimeError: boom" in output
