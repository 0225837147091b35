"""Reusable fakes for the dispatcher and session ports."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from docwrite.domain.errors import DispatchError
from docwrite.domain.model import InsertRequest, UpdateDirective, WriteOutcome

if TYPE_CHECKING:
    from docwrite.domain.model import WriteRequest


@dataclass(slots=True)
class RecordingDispatcher:
    """Records every request; fails the calls whose 0-based index is in ``fail_on``."""

    fail_on: frozenset[int] = frozenset()
    requests: list[WriteRequest] = field(default_factory=list["WriteRequest"])
    ordered_hints: list[bool] = field(default_factory=list[bool])

    def execute(self, request: WriteRequest, *, ordered: bool) -> WriteOutcome:
        call_index = len(self.requests)
        self.requests.append(request)
        self.ordered_hints.append(ordered)
        if call_index in self.fail_on:
            raise DispatchError(f"scripted failure #{call_index}")
        if isinstance(request, InsertRequest):
            return WriteOutcome(inserted=len(request.documents))
        return WriteOutcome(matched=1, modified=1)

    @property
    def inserts(self) -> list[InsertRequest]:
        return [request for request in self.requests if isinstance(request, InsertRequest)]

    @property
    def updates(self) -> list[UpdateDirective]:
        return [request for request in self.requests if isinstance(request, UpdateDirective)]


@dataclass(slots=True)
class RecordingSession:
    """Transactional session fake recording commit/abort calls."""

    error: Exception | None = None
    calls: list[tuple[str, int]] = field(default_factory=list[tuple[str, int]])

    def commit_transaction(self, txn_number: int) -> None:
        self.calls.append(("commit", txn_number))
        if self.error is not None:
            raise self.error

    def abort_transaction(self, txn_number: int) -> None:
        self.calls.append(("abort", txn_number))
        if self.error is not None:
            raise self.error
