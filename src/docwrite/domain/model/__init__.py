"""Domain model for queued writes, their outcomes and transaction state."""

from __future__ import annotations

from .enums import BatchKind, TransactionState
from .operations import (
    UPDATE_FLAG_MULTI,
    UPDATE_FLAG_UPSERT,
    BatchedOperation,
    InsertRequest,
    UpdateDirective,
    WriteRequest,
)
from .results import BatchFailure, BulkResult, WriteOutcome

__all__ = [
    "UPDATE_FLAG_MULTI",
    "UPDATE_FLAG_UPSERT",
    "BatchFailure",
    "BatchKind",
    "BatchedOperation",
    "BulkResult",
    "InsertRequest",
    "TransactionState",
    "UpdateDirective",
    "WriteOutcome",
    "WriteRequest",
]
