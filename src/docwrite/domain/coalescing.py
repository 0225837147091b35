"""Arrival-ordered queue of batches with same-kind coalescing."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from docwrite.domain.model import BatchedOperation, BatchKind

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


class OperationQueue:
    """Arena of batches plus a by-kind index.

    A new payload always joins the most recent batch when the kinds match. When
    they differ, ordered queues open a new batch so cross-kind order is kept,
    while unordered queues join the earliest batch of that kind.
    """

    def __init__(self, *, ordered: bool = True) -> None:
        self._ordered = ordered
        self._batches: list[BatchedOperation] = []
        self._first_by_kind: dict[BatchKind, int] = {}

    @property
    def ordered(self) -> bool:
        return self._ordered

    def relax_ordering(self) -> None:
        self._ordered = False

    def enqueue(self, kind: BatchKind, payloads: Sequence[Any]) -> None:
        if not payloads:
            return
        self.batch_for(kind).extend(payloads)

    def batch_for(self, kind: BatchKind) -> BatchedOperation:
        if self._batches and self._batches[-1].kind is kind:
            return self._batches[-1]
        if not self._ordered:
            index = self._first_by_kind.get(kind)
            if index is not None:
                return self._batches[index]
        batch = BatchedOperation(kind)
        self._batches.append(batch)
        self._first_by_kind.setdefault(kind, len(self._batches) - 1)
        return batch

    @property
    def batches(self) -> tuple[BatchedOperation, ...]:
        return tuple(self._batches)

    def __iter__(self) -> Iterator[BatchedOperation]:
        return iter(tuple(self._batches))

    def __len__(self) -> int:
        return len(self._batches)
