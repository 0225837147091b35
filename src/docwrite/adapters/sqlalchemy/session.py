"""Transaction-capable document session backed by SQLAlchemy ORM sessions."""

from __future__ import annotations

from contextlib import contextmanager
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import exc as sa_exc

from docwrite.adapters.sqlalchemy.collection import SqlAlchemyCollection
from docwrite.adapters.sqlalchemy.engine import session_factory as configured_session_factory
from docwrite.domain.errors import NoSuchTransactionError, TransactionError, TransactionStateError
from docwrite.domain.ports import NullMetrics
from docwrite.domain.transaction import Transaction

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import TracebackType

    from sqlalchemy.orm import Session, sessionmaker

    from docwrite.domain.ports import MetricsSink

log = getLogger(__name__)


class SqlAlchemyDocumentSession:
    """Hands out collection dispatchers and owns server-side transactions.

    Writes made without a transaction run in their own ORM session and commit
    per request. Writes made through a :class:`Transaction` lazily begin one
    ORM session on the first write, number it, and keep it open until
    :meth:`commit_transaction` or :meth:`abort_transaction`. Each request in
    a transaction runs under its own savepoint, so a request that fails is
    undone without closing the transaction.

    SQLite engines must come from :func:`create_document_engine` for
    savepoints to behave.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        *,
        metrics: MetricsSink | None = None,
    ) -> None:
        self.session_factory = session_factory or configured_session_factory()
        self.metrics: MetricsSink = metrics or NullMetrics()
        self._open: dict[int, Session] = {}
        self._last_txn_number = 0

    def collection(
        self, name: str, *, transaction: Transaction | None = None
    ) -> SqlAlchemyCollection:
        if transaction is None:
            return SqlAlchemyCollection(name, scope=self._autocommit_scope, metrics=self.metrics)
        if transaction.session is not self:
            raise TransactionError("Transaction is bound to a different session")
        return SqlAlchemyCollection(
            name, scope=partial(self._transaction_scope, transaction), metrics=self.metrics
        )

    def start_transaction(self) -> Transaction:
        return Transaction(self)

    @property
    def open_transactions(self) -> tuple[int, ...]:
        return tuple(self._open)

    # --------------------------- TransactionalSession

    def commit_transaction(self, txn_number: int) -> None:
        session = self._pop(txn_number)
        try:
            session.commit()
        except sa_exc.SQLAlchemyError as exc:
            self.metrics.incr("transactions.failed")
            session.rollback()
            raise TransactionError(f"Commit of transaction {txn_number} failed: {exc}") from exc
        finally:
            session.close()
        self.metrics.incr("transactions.committed")
        log.debug("Committed transaction %d", txn_number)

    def abort_transaction(self, txn_number: int) -> None:
        session = self._pop(txn_number)
        try:
            session.rollback()
        finally:
            session.close()
        self.metrics.incr("transactions.aborted")
        log.debug("Aborted transaction %d", txn_number)

    # --------------------------- lifecycle

    def close(self) -> None:
        """Roll back and release every transaction still open on this session."""

        for txn_number in tuple(self._open):
            log.warning("Rolling back transaction %d left open at close", txn_number)
            self.abort_transaction(txn_number)

    def __enter__(self) -> SqlAlchemyDocumentSession:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        self.close()
        return False

    # --------------------------- internals

    def _pop(self, txn_number: int) -> Session:
        session = self._open.pop(txn_number, None)
        if session is None:
            raise NoSuchTransactionError(f"No open transaction with number {txn_number}")
        return session

    def _begin(self) -> int:
        self._last_txn_number += 1
        txn_number = self._last_txn_number
        session = self.session_factory()
        session.begin()
        self._open[txn_number] = session
        self.metrics.incr("transactions.started")
        return txn_number

    @contextmanager
    def _autocommit_scope(self) -> Iterator[Session]:
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def _transaction_scope(self, transaction: Transaction) -> Iterator[Session]:
        if transaction.finished:
            raise TransactionStateError("Cannot write through a finished transaction")
        txn_number = transaction.txn_number
        if txn_number is None:
            txn_number = self._begin()
            transaction.mark_started(txn_number)
        session = self._open.get(txn_number)
        if session is None:
            raise NoSuchTransactionError(f"No open transaction with number {txn_number}")
        # a failing request rolls back to here; the transaction stays open
        with session.begin_nested():
            yield session
