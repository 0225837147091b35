"""Sequential execution of queued batches under an ordering policy."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from docwrite.domain.errors import BulkWriteError, DispatchError, InvariantViolation
from docwrite.domain.model import (
    BatchedOperation,
    BatchFailure,
    BatchKind,
    BulkResult,
    InsertRequest,
    UpdateDirective,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from docwrite.domain.ports import WriteDispatcher

log = getLogger(__name__)


class ResultAggregator:
    """Collects the single outcome of a run: a result, or the failures seen."""

    def __init__(self, *, ordered: bool) -> None:
        self._ordered = ordered
        self._batches = 0
        self._dispatched = 0
        self._failures: list[BatchFailure] = []

    @property
    def failed(self) -> bool:
        return bool(self._failures)

    def record_batch(self) -> None:
        self._batches += 1

    def record_dispatch(self) -> None:
        self._dispatched += 1

    def record_failure(self, batch_index: int, kind: BatchKind, error: DispatchError) -> None:
        self._failures.append(BatchFailure(batch_index=batch_index, kind=kind, error=error))

    def finish(self) -> BulkResult:
        """Return the run result, or raise ``BulkWriteError`` if anything failed."""

        if self._failures:
            raise BulkWriteError(self._failures) from self._failures[-1].error
        return BulkResult(ordered=self._ordered, batches=self._batches, dispatched=self._dispatched)


class BulkExecutor:
    """Walk batches in queue order and dispatch them one at a time.

    Insert batches go out as one request. Update batches go out one directive
    per request. In ordered mode the first failure stops all further dispatches;
    in unordered mode every batch is attempted.
    """

    def __init__(self, dispatcher: WriteDispatcher, *, ordered: bool) -> None:
        self.dispatcher = dispatcher
        self.ordered = ordered

    def run(self, batches: Iterable[BatchedOperation]) -> BulkResult:
        aggregator = ResultAggregator(ordered=self.ordered)
        for index, batch in enumerate(batches):
            aggregator.record_batch()
            if self._run_batch(index, batch, aggregator):
                continue
            if self.ordered:
                log.warning("Ordered bulk run stopped at batch %d (%s)", index, batch.kind)
                break
        return aggregator.finish()

    def _run_batch(self, index: int, batch: BatchedOperation, aggregator: ResultAggregator) -> bool:
        log.debug("Dispatching batch %d: kind=%s, payloads=%d", index, batch.kind, len(batch))
        if batch.kind is BatchKind.INSERT:
            return self._run_insert(index, batch, aggregator)
        if batch.kind in (BatchKind.UPDATE_ONE, BatchKind.UPDATE_MANY):
            return self._run_updates(index, batch, aggregator)
        raise InvariantViolation(f"Unknown bulk operation kind: {batch.kind!r}")

    def _run_insert(self, index: int, batch: BatchedOperation, aggregator: ResultAggregator) -> bool:
        request = InsertRequest(documents=batch.payloads, continue_on_error=not self.ordered)
        aggregator.record_dispatch()
        try:
            self.dispatcher.execute(request, ordered=self.ordered)
        except DispatchError as exc:
            log.warning("Insert batch %d failed: %s", index, exc)
            aggregator.record_failure(index, batch.kind, exc)
            return False
        return True

    def _run_updates(
        self, index: int, batch: BatchedOperation, aggregator: ResultAggregator
    ) -> bool:
        ok = True
        for directive in batch.payloads:
            if not isinstance(directive, UpdateDirective):
                raise InvariantViolation(
                    f"Update batch {index} holds a non-directive payload: {directive!r}"
                )
            aggregator.record_dispatch()
            try:
                self.dispatcher.execute(directive, ordered=self.ordered)
            except DispatchError as exc:
                log.warning("Update in batch %d failed: %s", index, exc)
                aggregator.record_failure(index, batch.kind, exc)
                ok = False
                if self.ordered:
                    break
        return ok
