from __future__ import annotations

import pytest

from docwrite.domain.errors import TransactionStateError
from docwrite.domain.model import TransactionState
from docwrite.domain.transaction import Transaction
from tests.helpers.fakes import RecordingSession


def _started(session: RecordingSession, txn_number: int = 7) -> Transaction:
    transaction = Transaction(session)
    transaction.mark_started(txn_number)
    return transaction


def test_new_transaction_is_not_started() -> None:
    transaction = Transaction(RecordingSession())

    assert transaction.state is TransactionState.NOT_STARTED
    assert not transaction.started
    assert not transaction.finished
    assert transaction.txn_number is None


def test_mark_started_records_number_once() -> None:
    transaction = Transaction(RecordingSession())

    transaction.mark_started(3)
    transaction.mark_started(3)

    assert transaction.state is TransactionState.STARTED
    assert transaction.txn_number == 3


def test_mark_started_rejects_a_different_number() -> None:
    transaction = _started(RecordingSession(), 3)

    with pytest.raises(TransactionStateError):
        transaction.mark_started(4)

    assert transaction.txn_number == 3


def test_commit_closes_transaction_by_number() -> None:
    session = RecordingSession()
    transaction = _started(session)

    transaction.commit()

    assert session.calls == [("commit", 7)]
    assert transaction.finished
    assert transaction.state is TransactionState.FINISHED


def test_abort_closes_transaction_by_number() -> None:
    session = RecordingSession()
    transaction = _started(session)

    transaction.abort()

    assert session.calls == [("abort", 7)]
    assert transaction.finished


def test_commit_error_is_surfaced_and_transaction_still_finishes() -> None:
    session = RecordingSession(error=RuntimeError("commit lost"))
    transaction = _started(session)

    with pytest.raises(RuntimeError, match="commit lost"):
        transaction.commit()

    assert transaction.finished


def test_abort_error_is_surfaced_and_transaction_still_finishes() -> None:
    session = RecordingSession(error=RuntimeError("abort lost"))
    transaction = _started(session)

    with pytest.raises(RuntimeError, match="abort lost"):
        transaction.abort()

    assert transaction.finished


@pytest.mark.parametrize(
    ("first", "second"),
    [("commit", "commit"), ("commit", "abort"), ("abort", "commit"), ("abort", "abort")],
)
def test_second_close_is_rejected_without_touching_session(first: str, second: str) -> None:
    session = RecordingSession()
    transaction = _started(session)
    getattr(transaction, first)()

    with pytest.raises(TransactionStateError):
        getattr(transaction, second)()

    assert session.calls == [(first, 7)]
    assert transaction.finished
    assert transaction.txn_number == 7


def test_closing_a_transaction_that_never_started_skips_session() -> None:
    session = RecordingSession()
    transaction = Transaction(session)

    transaction.commit()

    assert session.calls == []
    assert transaction.finished
    assert not transaction.started


def test_finished_transaction_cannot_start() -> None:
    transaction = Transaction(RecordingSession())
    transaction.abort()

    with pytest.raises(TransactionStateError):
        transaction.mark_started(1)


def test_context_manager_aborts_open_transaction_on_error() -> None:
    session = RecordingSession()

    with pytest.raises(ValueError, match="boom"), Transaction(session) as transaction:
        transaction.mark_started(9)
        raise ValueError("boom")

    assert session.calls == [("abort", 9)]


def test_context_manager_leaves_committed_transaction_alone() -> None:
    session = RecordingSession()

    with Transaction(session) as transaction:
        transaction.mark_started(2)
        transaction.commit()

    assert session.calls == [("commit", 2)]
