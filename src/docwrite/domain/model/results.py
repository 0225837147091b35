"""Outcomes reported by dispatchers and by a bulk run."""

from __future__ import annotations

from dataclasses import dataclass

from .enums import BatchKind  # noqa: TC001


@dataclass(frozen=True, slots=True)
class WriteOutcome:
    """What a dispatcher observed for one wire-level request.

    A ``matched`` count of zero on an update is a normal outcome, not a failure.
    """

    inserted: int = 0
    matched: int = 0
    modified: int = 0


@dataclass(frozen=True, slots=True)
class BulkResult:
    """Success marker for a bulk run.

    Deliberately conservative: no per-document counts are aggregated.
    """

    ordered: bool
    batches: int
    dispatched: int


@dataclass(frozen=True, slots=True)
class BatchFailure:
    """A dispatch failure recorded while running one queued batch."""

    batch_index: int
    kind: BatchKind
    error: Exception
