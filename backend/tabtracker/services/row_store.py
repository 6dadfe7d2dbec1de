# Overview: Row store adapter; every multi-statement write goes through execute_batch.

from __future__ import annotations

from typing import Any, Callable, Iterable

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..validation import StoreError, TrackerError


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def find_by_key(model, *, lock: bool = False, **key):
    query = db.session.query(model).filter_by(**key)
    if lock:
        query = lock_for_update(query)
    return query.first()


def insert_or_replace(model, values: dict):
    """Upsert by primary key; a second call with the same key overwrites the first."""
    return db.session.merge(model(**values))


def delete_by_key(model, **key) -> int:
    """Delete immediately and return the affected row count (0 when already gone)."""
    result = db.session.execute(delete(model).filter_by(**key))
    return result.rowcount


def execute_batch(statements: Iterable[Callable[[], Any]]) -> list[Any]:
    """
    Run statements in order inside one transaction and commit them together.

    Any failure rolls back the whole batch. Domain errors raised by a
    statement propagate unchanged; store failures surface as StoreError.
    """
    results = []
    try:
        for statement in statements:
            results.append(statement())
        db.session.commit()
    except TrackerError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StoreError(f"Store rejected the batch ({exc.__class__.__name__})") from exc
    return results
