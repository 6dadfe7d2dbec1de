from __future__ import annotations

from ..extensions import db


class KvEntry(db.Model):
    """
    Namespaced key-value pairs with JSON values.

    Backs the sign-in log; keys are ordered strings so prefix scans work.
    """
    __tablename__ = "kv_entries"
    __table_args__ = (
        db.PrimaryKeyConstraint("namespace", "key", name="pk_kv_entries"),
    )

    namespace = db.Column(db.String(64), nullable=False)
    key = db.Column(db.String(255), nullable=False)
    value = db.Column(db.JSON, nullable=False)

    def __repr__(self) -> str:
        return f"<KvEntry {self.namespace}:{self.key}>"
