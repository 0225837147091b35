"""Port for sending one wire-level write request."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from docwrite.domain.model import WriteOutcome, WriteRequest


@runtime_checkable
class WriteDispatcher(Protocol):
    """Dispatch contract provided by the session/collection layer.

    Implementations raise ``DispatchError`` (or a subclass) on failure and must
    report "nothing matched" as a ``WriteOutcome`` instead of an error. The
    ``ordered`` hint tells the dispatcher whether it may continue past
    per-document errors embedded in one request.
    """

    def execute(self, request: WriteRequest, *, ordered: bool) -> WriteOutcome: ...
