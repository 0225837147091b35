"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class BatchKind(StrEnum):
    INSERT = "insert"
    UPDATE_ONE = "update-one"
    UPDATE_MANY = "update-many"

    @property
    def is_update(self) -> bool:
        return self is not BatchKind.INSERT


class TransactionState(StrEnum):
    """Lifecycle of a transaction bound to one session. ``FINISHED`` is terminal."""

    NOT_STARTED = "not-started"
    STARTED = "started"
    FINISHED = "finished"
