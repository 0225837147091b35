"""Selector matching and update application over JSON documents."""

from __future__ import annotations

import copy
import operator
from collections.abc import Callable, Mapping
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from docwrite.domain.errors import InvalidSelectorError, InvalidUpdateError

_MISSING: Final = object()

type Document = dict[str, Any]


class UpdateOperators(BaseModel):
    """Validated form of an operator update document."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    set_: dict[str, Any] = Field(default_factory=dict, alias="$set")
    unset: dict[str, Any] = Field(default_factory=dict, alias="$unset")
    inc: dict[str, int | float] = Field(default_factory=dict, alias="$inc")

    def touched_paths(self) -> set[str]:
        return {*self.set_, *self.unset, *self.inc}


def resolve_path(document: Mapping[str, Any], path: str) -> Any:
    """Return the value at a dotted ``path`` or ``_MISSING``."""

    current: Any = document
    for part in path.split("."):
        if isinstance(current, Mapping):
            if part not in current:
                return _MISSING
            current = current[part]
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return _MISSING
    return current


def _equals(value: Any, expected: Any) -> bool:
    if value is _MISSING:
        return expected is None
    if isinstance(value, list) and not isinstance(expected, list):
        return expected in value
    return value == expected


def _compare(compare: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def check(value: Any, argument: Any) -> bool:
        if value is _MISSING or value is None:
            return False
        try:
            return bool(compare(value, argument))
        except TypeError:
            return False

    return check


def _in(value: Any, argument: Any) -> bool:
    if not isinstance(argument, list):
        raise InvalidSelectorError("$in/$nin needs an array")
    return any(_equals(value, candidate) for candidate in argument)


_OPERATORS: Final[dict[str, Callable[[Any, Any], bool]]] = {
    "$eq": _equals,
    "$ne": lambda value, argument: not _equals(value, argument),
    "$gt": _compare(operator.gt),
    "$gte": _compare(operator.ge),
    "$lt": _compare(operator.lt),
    "$lte": _compare(operator.le),
    "$in": _in,
    "$nin": lambda value, argument: not _in(value, argument),
    "$exists": lambda value, argument: (value is not _MISSING) == bool(argument),
}


def _is_operator_condition(condition: Any) -> bool:
    return (
        isinstance(condition, Mapping)
        and bool(condition)
        and all(isinstance(key, str) and key.startswith("$") for key in condition)
    )


def matches(document: Mapping[str, Any], selector: Mapping[str, Any]) -> bool:
    """Return whether ``document`` satisfies every clause of ``selector``.

    Clauses compare dotted paths by equality (an array field matches when any
    element is equal) or through the ``$eq``-style operators above.
    """

    for path, condition in selector.items():
        if not isinstance(path, str) or path.startswith("$"):
            raise InvalidSelectorError(f"Unsupported selector clause: {path!r}")
        value = resolve_path(document, path)
        if not _is_operator_condition(condition):
            if not _equals(value, condition):
                return False
            continue
        for name, argument in condition.items():
            check = _OPERATORS.get(name)
            if check is None:
                raise InvalidSelectorError(f"Unsupported selector operator: {name}")
            if not check(value, argument):
                return False
    return True


def is_operator_update(update: Mapping[str, Any]) -> bool:
    operator_keys = [key for key in update if str(key).startswith("$")]
    if operator_keys and len(operator_keys) != len(update):
        raise InvalidUpdateError("Update mixes $-operators with plain fields")
    return bool(operator_keys)


def apply_update(document: Document, update: Mapping[str, Any]) -> tuple[Document, bool]:
    """Return the updated copy of ``document`` and whether anything changed."""

    if is_operator_update(update):
        updated = _apply_operators(document, update)
    else:
        updated = _replace(document, update)
    return updated, updated != document


def _replace(document: Document, replacement: Mapping[str, Any]) -> Document:
    doc_id = document.get("_id")
    if "_id" in replacement and replacement["_id"] != doc_id:
        raise InvalidUpdateError("Replacement would modify the immutable field '_id'")
    body = {key: value for key, value in replacement.items() if key != "_id"}
    return {"_id": doc_id, **copy.deepcopy(body)}


def _apply_operators(document: Document, update: Mapping[str, Any]) -> Document:
    try:
        operators = UpdateOperators.model_validate(update)
    except ValidationError as exc:
        raise InvalidUpdateError(f"Invalid update document: {exc}") from exc
    if any(path == "_id" or path.startswith("_id.") for path in operators.touched_paths()):
        raise InvalidUpdateError("Update would modify the immutable field '_id'")

    updated = copy.deepcopy(document)
    for path, value in operators.set_.items():
        _set_path(updated, path, copy.deepcopy(value))
    for path in operators.unset:
        _unset_path(updated, path)
    for path, amount in operators.inc.items():
        current = resolve_path(updated, path)
        if current is _MISSING:
            _set_path(updated, path, amount)
            continue
        if isinstance(current, bool) or not isinstance(current, int | float):
            raise InvalidUpdateError(f"Cannot apply $inc to non-numeric field {path!r}")
        _set_path(updated, path, current + amount)
    return updated


def _as_document(value: Any, path: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise InvalidUpdateError(f"Cannot traverse non-document at {path!r}")
    return value


def _set_path(document: Document, path: str, value: Any) -> None:
    *parents, leaf = path.split(".")
    current: Any = document
    for part in parents:
        current = _as_document(current, path).setdefault(part, {})
    _as_document(current, path)[leaf] = value


def _unset_path(document: Document, path: str) -> None:
    *parents, leaf = path.split(".")
    current: Any = document
    for part in parents:
        current = _as_document(current, path).get(part, _MISSING)
        if current is _MISSING:
            return
    _as_document(current, path).pop(leaf, None)
