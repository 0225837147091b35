"""Module-level engine and session-factory state for the SQLAlchemy adapter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from docwrite.adapters.sqlalchemy.mappings import create_all_tables
from docwrite.config import get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine


class StartupError(RuntimeError):
    """Raised when the SQLAlchemy adapter is used before initialisation."""


def create_document_engine(uri: str, *, echo: bool = False) -> Engine:
    """Create an engine suitable for document sessions.

    pysqlite defers its own BEGIN until the first DML statement, which breaks
    SAVEPOINT handling. For that driver the engine emits BEGIN itself.
    """

    engine = create_engine(uri, echo=echo, future=True)
    if engine.dialect.name == "sqlite" and engine.dialect.driver == "pysqlite":
        event.listen(engine, "connect", _disable_driver_transactions)
        event.listen(engine, "begin", _emit_begin)
    return engine


def _disable_driver_transactions(dbapi_connection: Any, _record: Any) -> None:
    dbapi_connection.isolation_level = None


def _emit_begin(connection: Connection) -> None:
    connection.exec_driver_sql("BEGIN")


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    def session_factory(self) -> sessionmaker[Session]:
        if self.engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call docwrite.adapters.sqlalchemy."
                "engine.startup() before opening a document session."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Create the document table and bind the adapter to an engine.

    Without ``engine`` one is built from :func:`get_database_config`.
    """

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    if engine is None:
        config = get_database_config(uri=database_uri)
        engine = create_document_engine(config.uri, echo=config.echo)
    create_all_tables(engine)
    _STATE.engine = engine
    _STATE._session_factory = None


def session_factory() -> sessionmaker[Session]:
    return _STATE.session_factory()


def configured_engine() -> Engine | None:
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the bound engine and forget it."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None
    _STATE._session_factory = None
