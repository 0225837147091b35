"""Pydantic models for one-operation-per-line write files.

Each non-blank line is one of::

    {"op": "insert", "documents": [{...}, ...]}
    {"op": "update", "selector": {...}, "update": {...}}
    {"op": "update_all", "selector": {...}, "update": {...}}
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from docwrite.domain.errors import MalformedRequestError

if TYPE_CHECKING:
    from collections.abc import Iterable


class OperationLineModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class InsertLine(OperationLineModel):
    op: Literal["insert"]
    documents: list[dict[str, Any]] = Field(min_length=1)


class UpdateLine(OperationLineModel):
    op: Literal["update", "update_all"]
    selector: dict[str, Any] | None = None
    update: dict[str, Any]

    @property
    def multi(self) -> bool:
        return self.op == "update_all"


OperationLine = Annotated[InsertLine | UpdateLine, Field(discriminator="op")]

_OPERATION_LINE: TypeAdapter[InsertLine | UpdateLine] = TypeAdapter(OperationLine)


def parse_operation_lines(lines: Iterable[str]) -> list[InsertLine | UpdateLine]:
    """Validate every line up front; nothing is queued if any line is malformed."""

    parsed: list[InsertLine | UpdateLine] = []
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            parsed.append(_OPERATION_LINE.validate_json(line))
        except ValidationError as exc:
            raise MalformedRequestError(f"Invalid operation on line {number}: {exc}") from exc
    return parsed
