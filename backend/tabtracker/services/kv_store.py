# Overview: Key-value adapter over the kv_entries table.

from __future__ import annotations

from typing import Any

from ..extensions import db
from ..models import KvEntry
from . import row_store


def put(namespace: str, key: str, value: Any) -> None:
    row_store.execute_batch([
        lambda: row_store.insert_or_replace(KvEntry, {"namespace": namespace, "key": key, "value": value}),
    ])


def get(namespace: str, key: str) -> Any | None:
    entry = row_store.find_by_key(KvEntry, namespace=namespace, key=key)
    return entry.value if entry is not None else None


def list_entries(namespace: str, *, prefix: str = "", limit: int = 1000, descending: bool = False) -> list[tuple[str, Any]]:
    """Entries in key order (never value order), capped at limit."""
    query = db.session.query(KvEntry).filter(KvEntry.namespace == namespace)
    if prefix:
        query = query.filter(KvEntry.key.startswith(prefix, autoescape=True))
    order = KvEntry.key.desc() if descending else KvEntry.key.asc()
    entries = query.order_by(order).limit(limit).all()
    return [(entry.key, entry.value) for entry in entries]
