"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

from docwrite.adapters.ndjson import InsertLine, parse_operation_lines
from docwrite.adapters.sqlalchemy import SqlAlchemyDocumentSession, is_started, startup
from docwrite.domain.bulk import OperationSet
from docwrite.domain.ports import WriteStats

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from docwrite.adapters.ndjson import UpdateLine
    from docwrite.domain.model import BulkResult


log = getLogger(__name__)


def open_session() -> SqlAlchemyDocumentSession:
    """Start the storage adapter if needed and open a document session."""

    if not is_started():
        startup()
    return SqlAlchemyDocumentSession(metrics=WriteStats())


def queue_operations(operations: OperationSet, lines: Iterable[InsertLine | UpdateLine]) -> None:
    for line in lines:
        if isinstance(line, InsertLine):
            operations.insert(*line.documents)
        elif line.multi:
            operations.update_all(line.selector, line.update)
        else:
            operations.update(line.selector, line.update)


def apply_operations(
    lines: Iterable[str],
    *,
    collection: str,
    ordered: bool = True,
    transactional: bool = False,
    session: SqlAlchemyDocumentSession | None = None,
) -> BulkResult:
    """Queue every operation in ``lines`` and run them as one operation set.

    With ``transactional=True`` the run happens inside a transaction that is
    committed on success and aborted when the run fails.
    """

    parsed = parse_operation_lines(lines)
    active_session = session or open_session()
    log.info(
        "Applying %d operation(s) to %s: ordered=%s, transactional=%s",
        len(parsed),
        collection,
        ordered,
        transactional,
    )

    if transactional:
        with active_session.start_transaction() as transaction:
            operations = OperationSet(
                active_session.collection(collection, transaction=transaction), ordered=ordered
            )
            queue_operations(operations, parsed)
            result = operations.run()
            transaction.commit()
    else:
        operations = OperationSet(active_session.collection(collection), ordered=ordered)
        queue_operations(operations, parsed)
        result = operations.run()

    log.info(
        "Finished applying operations to %s: batches=%d, dispatched=%d",
        collection,
        result.batches,
        result.dispatched,
    )
    return result


def count_documents(
    *,
    collection: str,
    selector: Mapping[str, Any] | None = None,
    session: SqlAlchemyDocumentSession | None = None,
) -> int:
    active_session = session or open_session()
    return active_session.collection(collection).count(selector)
