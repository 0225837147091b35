"""Error taxonomy for queuing, dispatching and transaction control."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from docwrite.domain.model import BatchFailure


class DocwriteError(Exception):
    """Base class for all errors raised by docwrite."""


class MalformedRequestError(DocwriteError, ValueError):
    """Raised at queuing time when a write intent cannot be understood."""


class OperationSetStateError(DocwriteError):
    """Raised when an operation set is reconfigured after it was dispatched."""


class DispatchError(DocwriteError):
    """Raised by a write dispatcher when a request fails."""


class DuplicateKeyError(DispatchError):
    """An inserted document collides with an existing ``_id``."""


class InvalidUpdateError(DispatchError):
    """An update expression cannot be applied."""


class InvalidSelectorError(DispatchError):
    """A selector uses a form the dispatcher does not understand."""


class InvalidDocumentError(DispatchError):
    """A document cannot be stored as given."""


class DispatchTimeout(DispatchError):
    """The underlying call did not complete in time."""


class BulkWriteError(DocwriteError):
    """Raised by ``OperationSet.run`` when any dispatch failed.

    ``errors`` keeps every failure in the order encountered; the most recent one
    is also chained as ``__cause__``.
    """

    def __init__(self, failures: Sequence[BatchFailure]) -> None:
        if not failures:
            raise ValueError("BulkWriteError requires at least one failure")
        self.errors: tuple[BatchFailure, ...] = tuple(failures)
        super().__init__(str(self.last_error))

    @property
    def last_error(self) -> Exception:
        return self.errors[-1].error


class TransactionError(DocwriteError):
    """Base class for transaction lifecycle failures."""


class TransactionStateError(TransactionError):
    """A transition was requested that the current transaction state forbids."""


class NoSuchTransactionError(TransactionError):
    """The session has no open transaction with the given number."""


class InvariantViolation(AssertionError):
    """Internal defect: the queue produced something the executor cannot run."""
