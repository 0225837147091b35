"""Translate SQLAlchemy failures into dispatch errors."""

from __future__ import annotations

from sqlalchemy import exc as sa_exc

from docwrite.domain.errors import DispatchError, DispatchTimeout, DuplicateKeyError


def map_db_error(e: sa_exc.SQLAlchemyError) -> DispatchError:
    if isinstance(e, sa_exc.IntegrityError):
        return DuplicateKeyError(str(e))
    if isinstance(e, sa_exc.TimeoutError):
        return DispatchTimeout(str(e))
    if isinstance(e, sa_exc.OperationalError) and "locked" in str(e).lower():
        return DispatchTimeout(str(e))
    return DispatchError(str(e))
