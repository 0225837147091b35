"""Write dispatcher for one named collection of the document store."""

from __future__ import annotations

import json
import uuid
from collections.abc import Mapping
from logging import getLogger
from typing import TYPE_CHECKING, Any

from sqlalchemy import exc as sa_exc
from sqlalchemy import func, select

from docwrite.adapters.sqlalchemy.errors import map_db_error
from docwrite.adapters.sqlalchemy.mappings import document_table, encode_doc_id
from docwrite.adapters.sqlalchemy.matching import apply_update, is_operator_update, matches
from docwrite.domain.errors import (
    DispatchError,
    DuplicateKeyError,
    InvalidDocumentError,
    InvalidSelectorError,
    InvalidUpdateError,
)
from docwrite.domain.model import InsertRequest, UpdateDirective, WriteOutcome

if TYPE_CHECKING:
    from collections.abc import Callable
    from contextlib import AbstractContextManager

    from sqlalchemy.orm import Session

    from docwrite.domain.model import WriteRequest
    from docwrite.domain.ports import MetricsSink

    type SessionScope = Callable[[], AbstractContextManager[Session]]

log = getLogger(__name__)


class SqlAlchemyCollection:
    """Dispatch inserts and update directives against one collection.

    ``scope`` yields the ORM session a request runs in: a short-lived
    autocommit session, or the session of an open transaction.
    """

    def __init__(self, name: str, *, scope: SessionScope, metrics: MetricsSink) -> None:
        self.name = name
        self._scope = scope
        self._metrics = metrics

    def execute(self, request: WriteRequest, *, ordered: bool) -> WriteOutcome:
        try:
            if isinstance(request, InsertRequest):
                return self._insert(request, keep_going=request.continue_on_error or not ordered)
            if isinstance(request, UpdateDirective):
                return self._update(request)
        except DispatchError:
            self._metrics.incr("dispatch.errors")
            raise
        except sa_exc.SQLAlchemyError as exc:
            self._metrics.incr("dispatch.errors")
            raise map_db_error(exc) from exc
        raise TypeError(f"Unsupported write request: {request!r}")

    # --------------------------- reads

    def find(self, selector: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        selector = _check_selector(selector)
        with self._scope() as session:
            return [body for _, body in self._rows(session) if matches(body, selector)]

    def count(self, selector: Mapping[str, Any] | None = None) -> int:
        if not selector:
            stmt = (
                select(func.count())
                .select_from(document_table)
                .where(document_table.c.collection == self.name)
            )
            with self._scope() as session:
                return int(session.execute(stmt).scalar_one())
        return len(self.find(selector))

    # --------------------------- writes

    def _insert(self, request: InsertRequest, *, keep_going: bool) -> WriteOutcome:
        self._metrics.incr("dispatch.insert")
        failures: list[DispatchError] = []
        inserted = 0
        with self._scope() as session:
            for position, document in enumerate(request.documents):
                try:
                    self._insert_one(session, document)
                except DispatchError as exc:
                    log.debug("Insert of document #%d into %s failed: %s", position, self.name, exc)
                    failures.append(exc)
                    if not keep_going:
                        break
                else:
                    inserted += 1
        self._metrics.incr("documents.inserted", inserted)

        # documents stored before a failure stay stored
        if len(failures) == 1:
            raise failures[0]
        if failures:
            summary = "; ".join(str(failure) for failure in failures)
            raise DispatchError(f"{len(failures)} documents failed to insert: {summary}")
        return WriteOutcome(inserted=inserted)

    def _insert_one(self, session: Session, document: Any) -> None:
        if not isinstance(document, Mapping):
            raise InvalidDocumentError(f"Documents must be mappings, got {type(document).__name__}")
        body = dict(document)
        if "_id" not in body:
            body = {"_id": uuid.uuid4().hex, **body}
        try:
            json.dumps(body)
        except (TypeError, ValueError) as exc:
            raise InvalidDocumentError(f"Document is not JSON serialisable: {exc}") from exc

        doc_id = encode_doc_id(body["_id"])
        exists = session.execute(
            select(document_table.c.id)
            .where(document_table.c.collection == self.name)
            .where(document_table.c.doc_id == doc_id)
        ).first()
        if exists is not None:
            raise DuplicateKeyError(
                f"Duplicate key in collection {self.name!r}: _id={body['_id']!r}"
            )
        session.execute(
            document_table.insert().values(collection=self.name, doc_id=doc_id, body=body)
        )

    def _update(self, directive: UpdateDirective) -> WriteOutcome:
        self._metrics.incr("dispatch.update")
        selector = _check_selector(directive.selector)
        if not isinstance(directive.update, Mapping):
            raise InvalidUpdateError(
                f"Update must be a mapping, got {type(directive.update).__name__}"
            )
        if directive.multi and not is_operator_update(directive.update):
            raise InvalidUpdateError("Multi-document updates only accept $-operators")

        matched = modified = 0
        with self._scope() as session:
            for row_id, body in self._rows(session):
                if not matches(body, selector):
                    continue
                matched += 1
                updated, changed = apply_update(body, directive.update)
                if changed:
                    session.execute(
                        document_table.update()
                        .where(document_table.c.id == row_id)
                        .values(body=updated)
                    )
                    modified += 1
                if not directive.multi:
                    break
        self._metrics.incr("documents.matched", matched)
        self._metrics.incr("documents.modified", modified)
        return WriteOutcome(matched=matched, modified=modified)

    def _rows(self, session: Session) -> list[tuple[int, dict[str, Any]]]:
        stmt = (
            select(document_table.c.id, document_table.c.body)
            .where(document_table.c.collection == self.name)
            .order_by(document_table.c.id)
        )
        return [(row.id, row.body) for row in session.execute(stmt)]

    def __repr__(self) -> str:
        return f"SqlAlchemyCollection(name={self.name!r})"


def _check_selector(selector: Any) -> Mapping[str, Any]:
    if selector is None:
        return {}
    if not isinstance(selector, Mapping):
        raise InvalidSelectorError(f"Selector must be a mapping, got {type(selector).__name__}")
    return selector
