from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.orm import Session, sessionmaker

from docwrite.adapters.sqlalchemy import (
    SqlAlchemyDocumentSession,
    create_all_tables,
    create_document_engine,
    shutdown,
)
from docwrite.domain.ports import WriteStats

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy.engine import Engine


@pytest.fixture
def sqlite_engine(tmp_path: Path) -> Iterator[Engine]:
    # file-backed so every ORM session gets its own connection
    engine = create_document_engine(f"sqlite+pysqlite:///{tmp_path / 'documents.db'}")
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=sqlite_engine, expire_on_commit=False)


@pytest.fixture
def write_stats() -> WriteStats:
    return WriteStats()


@pytest.fixture
def document_session(
    session_factory: sessionmaker[Session], write_stats: WriteStats
) -> Iterator[SqlAlchemyDocumentSession]:
    with SqlAlchemyDocumentSession(session_factory, metrics=write_stats) as session:
        yield session


@pytest.fixture
def reset_adapter_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()
