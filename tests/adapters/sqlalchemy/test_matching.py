from __future__ import annotations

from typing import Any

import pytest

from docwrite.adapters.sqlalchemy.matching import apply_update, is_operator_update, matches
from docwrite.domain.errors import InvalidSelectorError, InvalidUpdateError

DOCUMENT: dict[str, Any] = {
    "_id": "a",
    "name": "ada",
    "age": 36,
    "tags": ["math", "engines"],
    "address": {"city": "London"},
}


@pytest.mark.parametrize(
    ("selector", "expected"),
    [
        ({}, True),
        ({"name": "ada"}, True),
        ({"name": "bob"}, False),
        ({"address.city": "London"}, True),
        ({"tags": "math"}, True),
        ({"missing": None}, True),
        ({"age": {"$gt": 30, "$lte": 36}}, True),
        ({"age": {"$lt": 30}}, False),
        ({"age": {"$gt": "thirty"}}, False),
        ({"name": {"$in": ["bob", "ada"]}}, True),
        ({"name": {"$nin": ["ada"]}}, False),
        ({"name": {"$ne": "bob"}}, True),
        ({"missing": {"$exists": False}}, True),
        ({"address.city": {"$exists": True}}, True),
        ({"tags.1": "engines"}, True),
    ],
)
def test_matches(selector: dict[str, Any], expected: bool) -> None:
    assert matches(DOCUMENT, selector) is expected


@pytest.mark.parametrize(
    "selector",
    [{"$where": "1"}, {"age": {"$regex": "x"}}, {"name": {"$in": "ada"}}],
)
def test_unsupported_selectors_raise(selector: dict[str, Any]) -> None:
    with pytest.raises(InvalidSelectorError):
        matches(DOCUMENT, selector)


def test_set_unset_inc_apply_to_a_copy() -> None:
    updated, changed = apply_update(
        DOCUMENT,
        {"$set": {"address.zip": "N1"}, "$unset": {"tags": ""}, "$inc": {"age": 1, "visits": 2}},
    )

    assert changed
    assert updated == {
        "_id": "a",
        "name": "ada",
        "age": 37,
        "visits": 2,
        "address": {"city": "London", "zip": "N1"},
    }
    assert DOCUMENT["age"] == 36
    assert "zip" not in DOCUMENT["address"]


def test_setting_same_value_reports_no_change() -> None:
    _, changed = apply_update(DOCUMENT, {"$set": {"name": "ada"}})

    assert not changed


def test_replacement_keeps_id() -> None:
    updated, changed = apply_update(DOCUMENT, {"name": "grace"})

    assert changed
    assert updated == {"_id": "a", "name": "grace"}


@pytest.mark.parametrize(
    "update",
    [
        {"$set": {"a": 1}, "b": 2},
        {"$push": {"tags": "x"}},
        {"$set": {"_id": "b"}},
        {"$inc": {"name": 1}},
        {"$inc": {"age": "one"}},
        {"_id": "other", "name": "x"},
        {"$set": {"name.first": "ada"}},
    ],
)
def test_invalid_updates_raise(update: dict[str, Any]) -> None:
    with pytest.raises(InvalidUpdateError):
        apply_update(DOCUMENT, update)


def test_is_operator_update() -> None:
    assert is_operator_update({"$set": {"a": 1}})
    assert not is_operator_update({"a": 1})
    assert not is_operator_update({})


def test_nested_paths_are_created_and_missing_parents_ignored() -> None:
    updated, changed = apply_update(
        DOCUMENT, {"$set": {"meta.source.kind": "import"}, "$unset": {"missing.leaf": ""}}
    )

    assert changed
    assert updated["meta"] == {"source": {"kind": "import"}}
    assert "missing" not in updated


@pytest.mark.parametrize(
    "update",
    [{"$set": {"name.first": "A"}}, {"$unset": {"age.years": ""}}],
)
def test_traversing_a_scalar_raises(update: dict[str, Any]) -> None:
    with pytest.raises(InvalidUpdateError):
        apply_update(DOCUMENT, update)
