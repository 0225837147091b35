"""One-shot transaction controller bound to a session."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Literal

from docwrite.domain.errors import TransactionStateError
from docwrite.domain.model import TransactionState

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from docwrite.domain.ports import TransactionalSession

log = getLogger(__name__)


class Transaction:
    """State of a multi-statement transaction on one session.

    The transaction starts when the session issues its first transactional
    write and reports the transaction number through :meth:`mark_started`. It
    finishes on the first :meth:`commit` or :meth:`abort`, whether or not the
    session call succeeds; finished is terminal. The session itself is not
    closed here.
    """

    def __init__(self, session: TransactionalSession) -> None:
        self._session = session
        self._state = TransactionState.NOT_STARTED
        self._txn_number: int | None = None

    @property
    def session(self) -> TransactionalSession:
        return self._session

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def started(self) -> bool:
        return self._txn_number is not None

    @property
    def finished(self) -> bool:
        return self._state is TransactionState.FINISHED

    @property
    def txn_number(self) -> int | None:
        return self._txn_number

    def mark_started(self, txn_number: int) -> None:
        """Record the number the session assigned on the first transactional write."""

        if self._state is TransactionState.FINISHED:
            raise TransactionStateError("Transaction already finished")
        if self._txn_number is not None:
            if txn_number != self._txn_number:
                raise TransactionStateError(
                    f"Transaction already bound to number {self._txn_number}, got {txn_number}"
                )
            return
        self._txn_number = txn_number
        self._state = TransactionState.STARTED
        log.debug("Transaction %d started", txn_number)

    def commit(self) -> None:
        """Commit and finalise the transaction."""

        self._finish("commit", self._session.commit_transaction)

    def abort(self) -> None:
        """Abort and finalise the transaction."""

        self._finish("abort", self._session.abort_transaction)

    def _finish(self, action: str, close: Callable[[int], None]) -> None:
        if self._state is TransactionState.FINISHED:
            raise TransactionStateError(f"Cannot {action}: transaction already finished")
        self._state = TransactionState.FINISHED
        if self._txn_number is None:
            log.debug("Transaction %s before any write; nothing to close", action)
            return
        log.debug("Transaction %d: %s", self._txn_number, action)
        close(self._txn_number)

    def __enter__(self) -> Transaction:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if not self.finished:
            self.abort()
        return False

    def __repr__(self) -> str:
        return f"Transaction(state={self._state.value!r}, txn_number={self._txn_number!r})"
