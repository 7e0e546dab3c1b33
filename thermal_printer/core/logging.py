"""
Logging utilities for Thermal Printer.

- DocumentIdFilter attaches the id of the document being built to every record
- JsonFormatter for structured logs when THERMALPRINTER_JSON_LOGS=true
- configure_logging() initializes root logging with journald or console

Library modules only call logging.getLogger(__name__); nothing here runs on import.
"""

from __future__ import annotations

import contextvars
import logging
import os
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional, Union

_DOCUMENT_ID: contextvars.ContextVar[str] = contextvars.ContextVar("thermal_printer_document_id", default="-")


def current_document_id() -> str:
    """Id of the document currently being built in this context, or '-'."""
    return _DOCUMENT_ID.get()


@contextmanager
def document_context(document_id: Optional[str] = None) -> Iterator[str]:
    """
    Bind a document id for the duration of a build.

    Context variables keep concurrent builds on separate threads isolated.
    """
    doc_id = document_id or uuid.uuid4().hex
    token = _DOCUMENT_ID.set(doc_id)
    try:
        yield doc_id
    finally:
        _DOCUMENT_ID.reset(token)


class DocumentIdFilter(logging.Filter):
    """
    Attach document-scoped metadata (document_id) to log records.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.document_id = _DOCUMENT_ID.get()
        return True


class JsonFormatter(logging.Formatter):
    """
    Minimal JSON formatter that includes timestamp, level, logger, message and document_id.
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        from json import dumps

        base = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "document_id": getattr(record, "document_id", "-"),
        }
        if record.exc_info:
            base["exc"] = self.formatException(record.exc_info)
        return dumps(base, ensure_ascii=False)


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "false").lower() in ("1", "true", "yes")


def configure_logging(level: Optional[Union[int, str]] = None) -> logging.Logger:
    """
    Configure root logging for applications embedding the printer core.

    Behavior:
    - Level from the argument, else THERMALPRINTER_LOG_LEVEL, else INFO
    - Clears any existing handlers to avoid duplicates on repeated calls
    - Chooses JSON or plain formatter based on THERMALPRINTER_JSON_LOGS
    - Prefer systemd's JournalHandler, fallback to StreamHandler
    - Adds DocumentIdFilter so formatters can reference %(document_id)s

    Returns the configured root logger.
    """
    root = logging.getLogger()
    if level is None:
        level = os.environ.get("THERMALPRINTER_LOG_LEVEL", "INFO").upper()
    root.setLevel(level)

    root.handlers = []

    formatter: logging.Formatter
    if _env_flag("THERMALPRINTER_JSON_LOGS"):
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter("[%(asctime)s] %(levelname)s %(document_id)s %(message)s")

    try:
        from systemd.journal import JournalHandler  # type: ignore

        handler: logging.Handler = JournalHandler()
    except Exception:
        handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    handler.addFilter(DocumentIdFilter())
    root.addHandler(handler)
    return root


__all__ = [
    "DocumentIdFilter",
    "JsonFormatter",
    "configure_logging",
    "current_document_id",
    "document_context",
]
