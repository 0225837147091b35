"""SQLAlchemy table metadata for the document store."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Column, Integer, MetaData, String, Table, UniqueConstraint

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

# insertion order within a collection is the ``id`` order
document_table = Table(
    "document",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("collection", String, nullable=False),
    Column("doc_id", String, nullable=False),
    Column("body", JSON, nullable=False),
    UniqueConstraint("collection", "doc_id"),
)


def encode_doc_id(value: Any) -> str:
    """Canonical text form of an ``_id`` used for the uniqueness constraint."""

    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def create_all_tables(engine: Engine) -> None:
    log.info("Creating all tables")
    metadata.create_all(engine)
