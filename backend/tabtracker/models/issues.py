from __future__ import annotations

from ..extensions import db
from tabtracker.time_utils import to_utc_z


class GameIssue(db.Model):
    """Free-text problem report against a game key; fixing an issue deletes it."""
    __tablename__ = "game_issues"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    game_key = db.Column(db.String(128), nullable=False, index=True)
    issue = db.Column(db.String(500), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "game_key": self.game_key,
            "issue": self.issue,
            "created_at": to_utc_z(self.created_at),
        }
