"""SQLAlchemy adapter: a small document store implementing the write ports."""

from __future__ import annotations

from .collection import SqlAlchemyCollection
from .engine import (
    StartupError,
    configured_engine,
    create_document_engine,
    is_started,
    shutdown,
    startup,
)
from .mappings import create_all_tables, document_table, metadata
from .session import SqlAlchemyDocumentSession

__all__ = [
    "SqlAlchemyCollection",
    "SqlAlchemyDocumentSession",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "create_document_engine",
    "document_table",
    "is_started",
    "metadata",
    "shutdown",
    "startup",
]
