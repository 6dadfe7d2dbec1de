# Overview: Append-only sign-in log kept in the key-value store.

from __future__ import annotations

from ..validation import InvalidInput
from tabtracker.time_utils import to_epoch_ms, utcnow
from . import kv_store


SIGNIN_NAMESPACE = "signin_logs"


def write_signin(name, email, *, now=None) -> dict:
    email = ("" if email is None else str(email)).strip().lower()
    if not email:
        raise InvalidInput("Missing email")
    name = ("" if name is None else str(name)).strip() or email

    timestamp = to_epoch_ms(now or utcnow())
    entry = {"name": name, "email": email, "timestamp": timestamp}
    kv_store.put(SIGNIN_NAMESPACE, f"signin:{timestamp}:{email}", entry)
    return entry


def list_signins(*, limit: int = 1000) -> list[dict]:
    """Newest first; keys are listed then sorted on the stored timestamp."""
    entries = [value for _, value in kv_store.list_entries(
        SIGNIN_NAMESPACE, prefix="signin:", limit=limit, descending=True,
    )]
    entries = [entry for entry in entries if isinstance(entry, dict)]
    entries.sort(key=lambda entry: int(entry.get("timestamp") or 0), reverse=True)
    return entries
