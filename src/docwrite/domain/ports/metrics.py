"""Injectable diagnostic counters for the session layer."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from prometheus_client import CollectorRegistry, Counter

_EVENTS_METRIC = "docwrite_events"


@runtime_checkable
class MetricsSink(Protocol):
    def incr(self, name: str, amount: int = 1) -> None: ...


class NullMetrics:
    """Sink that discards everything."""

    def incr(self, name: str, amount: int = 1) -> None:
        _ = (name, amount)


class WriteStats:
    """Prometheus counters on a private registry, one per owner.

    Every event name is a label value of a single ``docwrite_events_total``
    counter, so the registry can also be handed to an exporter.
    """

    def __init__(self) -> None:
        self.reset()

    def incr(self, name: str, amount: int = 1) -> None:
        self._events.labels(name=name).inc(amount)

    def __getitem__(self, name: str) -> int:
        value = self.registry.get_sample_value(f"{_EVENTS_METRIC}_total", {"name": name})
        return int(value or 0)

    def snapshot(self) -> dict[str, int]:
        return {
            sample.labels["name"]: int(sample.value)
            for metric in self.registry.collect()
            for sample in metric.samples
            if sample.name == f"{_EVENTS_METRIC}_total"
        }

    def reset(self) -> None:
        self.registry = CollectorRegistry()
        self._events = Counter(
            _EVENTS_METRIC,
            "Write dispatches, document counts and transaction outcomes",
            ["name"],
            registry=self.registry,
        )
