# Overview: Service-layer operations for game issues (add, list, fix).

from __future__ import annotations

from sqlalchemy import delete

from ..extensions import db
from ..models import GameIssue
from ..validation import InvalidInput, parse_finite_number
from tabtracker.time_utils import utcnow
from . import row_store


def add_issue(key, issue, *, max_length: int = 500, now=None) -> GameIssue:
    key = "" if key is None else str(key).strip()
    text = "" if issue is None else str(issue).strip()
    if not key or not text:
        raise InvalidInput("Missing key/issue")
    if len(text) > max_length:
        raise InvalidInput(f"Issue too long (max {max_length})")

    row = GameIssue(game_key=key, issue=text, created_at=now or utcnow())
    row_store.execute_batch([lambda: db.session.add(row)])
    return row


def list_issues(*, limit: int = 500) -> list[GameIssue]:
    """Newest first."""
    return db.session.query(GameIssue).order_by(GameIssue.id.desc()).limit(limit).all()


def fix_issue(issue_id) -> bool:
    """Fixing is a hard delete. Returns False when the id was already gone."""
    number = parse_finite_number(issue_id, "id")
    if not number.is_integer():
        raise InvalidInput("Missing id")
    statement = delete(GameIssue).where(GameIssue.id == int(number))
    (result,) = row_store.execute_batch([lambda: db.session.execute(statement)])
    return result.rowcount > 0
