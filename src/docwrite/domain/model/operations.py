"""Write intents queued on an operation set and handed to a dispatcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final

from .enums import BatchKind

if TYPE_CHECKING:
    from collections.abc import Iterable

UPDATE_FLAG_UPSERT: Final[int] = 1
UPDATE_FLAG_MULTI: Final[int] = 2


def _empty_selector() -> dict[str, Any]:
    return {}


@dataclass(frozen=True, slots=True)
class UpdateDirective:
    """A single (selector, update) pair.

    ``multi`` distinguishes "match at most one document" from "update every
    matching document". A ``None`` selector is stored as ``{}`` and matches
    everything.
    """

    selector: Any = field(default_factory=_empty_selector)
    update: Any = None
    multi: bool = False

    def __post_init__(self) -> None:
        if self.selector is None:
            object.__setattr__(self, "selector", _empty_selector())

    @classmethod
    def from_pair(cls, selector: Any, update: Any, *, multi: bool = False) -> UpdateDirective:
        return cls(selector=selector, update=update, multi=multi)

    @property
    def flags(self) -> int:
        return UPDATE_FLAG_MULTI if self.multi else 0


@dataclass(frozen=True, slots=True)
class InsertRequest:
    """One wire-level insert carrying every document of an insert batch."""

    documents: tuple[Any, ...]
    continue_on_error: bool = False


type WriteRequest = InsertRequest | UpdateDirective


class BatchedOperation:
    """Same-kind write intents coalesced for a single (or tightly grouped) dispatch.

    The kind is fixed at construction; payloads only ever grow by appending.
    """

    __slots__ = ("_kind", "_payloads")

    def __init__(self, kind: BatchKind, payloads: Iterable[Any] = ()) -> None:
        self._kind = kind
        self._payloads: list[Any] = list(payloads)

    @property
    def kind(self) -> BatchKind:
        return self._kind

    @property
    def payloads(self) -> tuple[Any, ...]:
        return tuple(self._payloads)

    def extend(self, payloads: Iterable[Any]) -> None:
        self._payloads.extend(payloads)

    def __len__(self) -> int:
        return len(self._payloads)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BatchedOperation):
            return NotImplemented
        return self._kind is other._kind and self._payloads == other._payloads

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"BatchedOperation(kind={self._kind.value!r}, payloads={self._payloads!r})"
