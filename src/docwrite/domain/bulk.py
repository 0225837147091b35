"""Caller-facing accumulator for heterogeneous write intents."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

from docwrite.domain.coalescing import OperationQueue
from docwrite.domain.errors import MalformedRequestError, OperationSetStateError
from docwrite.domain.execution import BulkExecutor
from docwrite.domain.model import BatchKind, UpdateDirective

if TYPE_CHECKING:
    from docwrite.domain.model import BatchedOperation, BulkResult
    from docwrite.domain.ports import WriteDispatcher

log = getLogger(__name__)


def _directives(method: str, pairs: tuple[Any, ...], *, multi: bool) -> list[UpdateDirective]:
    if len(pairs) % 2 != 0:
        raise MalformedRequestError(
            f"OperationSet.{method} requires an even number of parameters, got {len(pairs)}"
        )
    return [
        UpdateDirective.from_pair(pairs[i], pairs[i + 1], multi=multi)
        for i in range(0, len(pairs), 2)
    ]


class OperationSet:
    """Several orthogonal writes prepared together and delivered by ``run``.

    Usage::

        ops = OperationSet(collection)
        ops.insert({"_id": 1}, {"_id": 2})
        ops.update({"_id": 1}, {"$set": {"seen": True}})
        result = ops.run()

    Operations are ordered by default: they are sent in queue order and the run
    stops at the first failure. Call :meth:`unordered` before running to let
    same-kind operations merge across the queue and to keep going past failures.

    ``run`` does not clear the queue; running the same set twice replays every
    batch.
    """

    def __init__(self, dispatcher: WriteDispatcher, *, ordered: bool = True) -> None:
        self._dispatcher = dispatcher
        self._queue = OperationQueue(ordered=ordered)
        self._dispatched = False

    @property
    def ordered(self) -> bool:
        return self._queue.ordered

    @property
    def batches(self) -> tuple[BatchedOperation, ...]:
        return self._queue.batches

    def unordered(self) -> None:
        """Put the set in unordered mode; only allowed before the first run."""

        if self._dispatched and self._queue.ordered:
            raise OperationSetStateError("Cannot relax ordering after the operation set has run")
        self._queue.relax_ordering()

    def insert(self, *documents: Any) -> None:
        """Queue the provided documents for insertion."""

        self._queue.enqueue(BatchKind.INSERT, documents)

    def update(self, *pairs: Any) -> None:
        """Queue (selector, update) pairs, each updating at most one document."""

        self._queue.enqueue(BatchKind.UPDATE_ONE, _directives("update", pairs, multi=False))

    def update_all(self, *pairs: Any) -> None:
        """Queue (selector, update) pairs, each updating every matching document."""

        self._queue.enqueue(BatchKind.UPDATE_MANY, _directives("update_all", pairs, multi=True))

    def run(self) -> BulkResult:
        """Dispatch all queued batches.

        Returns a ``BulkResult`` on success and raises ``BulkWriteError`` if any
        dispatch failed.
        """

        self._dispatched = True
        log.debug(
            "Running %s operation set with %d batch(es)",
            "ordered" if self.ordered else "unordered",
            len(self._queue),
        )
        return BulkExecutor(self._dispatcher, ordered=self.ordered).run(self._queue)
