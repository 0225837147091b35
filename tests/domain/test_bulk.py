from __future__ import annotations

import pytest

from docwrite.domain.bulk import OperationSet
from docwrite.domain.errors import MalformedRequestError, OperationSetStateError
from docwrite.domain.model import BatchKind, UpdateDirective
from tests.helpers.fakes import RecordingDispatcher


def test_operation_set_is_ordered_by_default() -> None:
    assert OperationSet(RecordingDispatcher()).ordered


def test_insert_update_insert_shape_in_ordered_mode() -> None:
    operations = OperationSet(RecordingDispatcher())

    operations.insert({"n": "A"})
    operations.insert({"n": "B"})
    operations.update({"n": "A"}, {"$set": {"x": 1}})
    operations.insert({"n": "C"})

    assert [(batch.kind, len(batch)) for batch in operations.batches] == [
        (BatchKind.INSERT, 2),
        (BatchKind.UPDATE_ONE, 1),
        (BatchKind.INSERT, 1),
    ]


def test_insert_update_insert_shape_in_unordered_mode() -> None:
    operations = OperationSet(RecordingDispatcher(), ordered=False)

    operations.insert({"n": "A"})
    operations.insert({"n": "B"})
    operations.update({"n": "A"}, {"$set": {"x": 1}})
    operations.insert({"n": "C"})

    first, second = operations.batches
    assert first.kind is BatchKind.INSERT
    assert first.payloads == ({"n": "A"}, {"n": "B"}, {"n": "C"})
    assert second.kind is BatchKind.UPDATE_ONE


@pytest.mark.parametrize("method", ["update", "update_all"])
def test_odd_pair_count_fails_and_enqueues_nothing(method: str) -> None:
    operations = OperationSet(RecordingDispatcher())

    with pytest.raises(MalformedRequestError) as exc:
        getattr(operations, method)({"a": 1}, {"$set": {"b": 2}}, {"c": 3})

    assert "even number" in str(exc.value)
    assert operations.batches == ()


def test_update_builds_match_one_directives() -> None:
    operations = OperationSet(RecordingDispatcher())

    operations.update({"a": 1}, {"$set": {"b": 1}}, {"a": 2}, {"$set": {"b": 2}})

    (batch,) = operations.batches
    assert batch.payloads == (
        UpdateDirective(selector={"a": 1}, update={"$set": {"b": 1}}),
        UpdateDirective(selector={"a": 2}, update={"$set": {"b": 2}}),
    )
    assert all(not directive.multi and directive.flags == 0 for directive in batch.payloads)


def test_update_all_marks_directives_multi() -> None:
    operations = OperationSet(RecordingDispatcher())

    operations.update_all({"a": 1}, {"$inc": {"n": 1}})

    (batch,) = operations.batches
    (directive,) = batch.payloads
    assert batch.kind is BatchKind.UPDATE_MANY
    assert directive.multi
    assert directive.flags == 2


def test_none_selector_is_normalised_to_empty_selector() -> None:
    with_none = OperationSet(RecordingDispatcher())
    with_empty = OperationSet(RecordingDispatcher())

    with_none.update(None, {"$set": {"x": 1}})
    with_empty.update({}, {"$set": {"x": 1}})

    assert with_none.batches == with_empty.batches
    assert with_none.batches[0].payloads[0].selector == {}


def test_update_and_update_all_do_not_share_a_batch() -> None:
    operations = OperationSet(RecordingDispatcher(), ordered=False)

    operations.update({"a": 1}, {"$set": {"b": 1}})
    operations.update_all({"a": 1}, {"$set": {"b": 2}})
    operations.update({"a": 2}, {"$set": {"b": 3}})

    assert [(batch.kind, len(batch)) for batch in operations.batches] == [
        (BatchKind.UPDATE_ONE, 2),
        (BatchKind.UPDATE_MANY, 1),
    ]


def test_unordered_is_rejected_after_run() -> None:
    operations = OperationSet(RecordingDispatcher())
    operations.insert({"a": 1})
    operations.run()

    with pytest.raises(OperationSetStateError):
        operations.unordered()

    assert operations.ordered


def test_unordered_before_run_relaxes_ordering() -> None:
    operations = OperationSet(RecordingDispatcher())

    operations.unordered()
    operations.unordered()

    assert not operations.ordered


def test_running_twice_replays_every_batch() -> None:
    dispatcher = RecordingDispatcher()
    operations = OperationSet(dispatcher)
    operations.insert({"a": 1})
    operations.update({"a": 1}, {"$set": {"b": 1}})

    operations.run()
    operations.run()

    assert len(dispatcher.requests) == 4
    assert dispatcher.requests[:2] == dispatcher.requests[2:]


def test_directive_built_directly_normalises_none_selector() -> None:
    directive = UpdateDirective(selector=None, update={"$set": {"x": 1}})

    assert directive.selector == {}
    assert directive == UpdateDirective(update={"$set": {"x": 1}})
