import json
import logging
import threading

import pytest

from thermal_printer.core.logging import (
    DocumentIdFilter,
    JsonFormatter,
    configure_logging,
    current_document_id,
    document_context,
)


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


def _record(msg="hello"):
    return logging.LogRecord("thermal_printer.test", logging.INFO, __file__, 1, msg, (), None)


def test_document_context_binds_and_resets():
    assert current_document_id() == "-"
    with document_context("abc123") as doc_id:
        assert doc_id == "abc123"
        assert current_document_id() == "abc123"
    assert current_document_id() == "-"


def test_document_context_generates_ids():
    with document_context() as first:
        pass
    with document_context() as second:
        pass
    assert len(first) == 32
    assert first != second


def test_document_ids_are_isolated_per_thread():
    seen = {}
    barrier = threading.Barrier(2)

    def worker(name):
        with document_context(name):
            barrier.wait()
            seen[name] = current_document_id()

    threads = [threading.Thread(target=worker, args=(n,)) for n in ("one", "two")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert seen == {"one": "one", "two": "two"}


def test_filter_attaches_document_id():
    record = _record()
    with document_context("doc-7"):
        assert DocumentIdFilter().filter(record) is True
    assert record.document_id == "doc-7"


def test_json_formatter_fields():
    record = _record("built %d bytes")
    record.args = (42,)
    record.document_id = "doc-9"
    data = json.loads(JsonFormatter().format(record))
    assert data["msg"] == "built 42 bytes"
    assert data["level"] == "INFO"
    assert data["logger"] == "thermal_printer.test"
    assert data["document_id"] == "doc-9"
    assert "exc" not in data


def test_configure_logging_plain(monkeypatch, restore_root_logging):
    monkeypatch.setenv("THERMALPRINTER_LOG_LEVEL", "debug")
    root = configure_logging()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    handler = root.handlers[0]
    assert not isinstance(handler.formatter, JsonFormatter)
    assert any(isinstance(f, DocumentIdFilter) for f in handler.filters)


def test_configure_logging_json_and_explicit_level(monkeypatch, restore_root_logging):
    monkeypatch.setenv("THERMALPRINTER_JSON_LOGS", "true")
    root = configure_logging(logging.WARNING)
    assert root.level == logging.WARNING
    assert isinstance(root.handlers[0].formatter, JsonFormatter)


def test_configure_logging_is_idempotent(restore_root_logging):
    configure_logging()
    root = configure_logging()
    assert len(root.handlers) == 1
