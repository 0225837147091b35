"""Domain port definitions for adapters."""

from __future__ import annotations

from .dispatch import WriteDispatcher
from .metrics import MetricsSink, NullMetrics, WriteStats
from .session import TransactionalSession

__all__ = [
    "MetricsSink",
    "NullMetrics",
    "TransactionalSession",
    "WriteDispatcher",
    "WriteStats",
]
