"""Port for closing out a multi-statement transaction on a session."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TransactionalSession(Protocol):
    """Session that maps opaque transaction numbers to server-side state."""

    def commit_transaction(self, txn_number: int) -> None: ...

    def abort_transaction(self, txn_number: int) -> None: ...
