from __future__ import annotations

from ..extensions import db
from tabtracker.time_utils import to_utc_z


STAGE_INVENTORY = "INVENTORY"
STAGE_OPEN = "OPEN"
STAGE_CLOSED = "CLOSED"

LOCATION_STAGES = (STAGE_INVENTORY, STAGE_OPEN, STAGE_CLOSED)

# Columns a record carries unchanged from stage to stage unless a transition sets them
GAME_FIELDS = (
    "game_key",
    "game_name",
    "distributor_id",
    "game_type",
    "game_cost",
    "site_number",
    "inventory_number",
    "ticket_price",
    "total_tickets",
    "tickets_sold",
    "current_tickets",
    "total_winners",
    "winners_sold",
    "current_winners",
    "ideal_gross",
    "ideal_prize",
    "ideal_net",
    "purchase_date",
    "cash_on_hand",
    "date_opened",
    "date_closed",
    "box_number",
    "status",
)


def Money():
    return db.Numeric(12, 2, asdecimal=False)


class GameFieldsMixin:
    """
    Canonical game record schema shared by every table that holds a full record.

    Identifiers are strings, money is 2-place decimal, counters are integers.
    purchase_date is kept as the YYYY-MM-DD string the upload produced.
    """
    game_key = db.Column(db.String(128), nullable=False)
    game_name = db.Column(db.String(255), nullable=True)
    distributor_id = db.Column(db.String(64), nullable=True)
    game_type = db.Column(db.String(64), nullable=True)
    game_cost = db.Column(Money(), nullable=True)
    site_number = db.Column(db.String(32), nullable=True)
    inventory_number = db.Column(db.String(64), nullable=True)

    ticket_price = db.Column(Money(), nullable=True)
    total_tickets = db.Column(db.Integer, nullable=True)
    tickets_sold = db.Column(db.Integer, nullable=True)
    current_tickets = db.Column(db.Integer, nullable=True)
    total_winners = db.Column(db.Integer, nullable=True)
    winners_sold = db.Column(db.Integer, nullable=True)
    current_winners = db.Column(db.Integer, nullable=True)

    ideal_gross = db.Column(Money(), nullable=True)
    ideal_prize = db.Column(Money(), nullable=True)
    ideal_net = db.Column(Money(), nullable=True)
    purchase_date = db.Column(db.String(10), nullable=True)

    cash_on_hand = db.Column(Money(), nullable=True)
    date_opened = db.Column(db.DateTime(timezone=True), nullable=True)
    date_closed = db.Column(db.DateTime(timezone=True), nullable=True)

    # Only meaningful while OPEN: the physical selling position
    box_number = db.Column(db.Integer, nullable=True)
    status = db.Column(db.String(16), nullable=True)

    def game_values(self) -> dict:
        return {name: getattr(self, name) for name in GAME_FIELDS}

    def game_dict(self) -> dict:
        data = self.game_values()
        data["date_opened"] = to_utc_z(self.date_opened)
        data["date_closed"] = to_utc_z(self.date_closed)
        return data


class StageGame(GameFieldsMixin, db.Model):
    """
    One game in one location stage (Inventory, Open or Closed).

    The four locations share this table; (location, stage) plays the role of
    the per-location physical tables. A key should live in at most one
    (location, stage) pair; moves delete the source row before inserting the
    destination row inside one transaction.
    """
    __tablename__ = "stage_games"
    __table_args__ = (
        db.PrimaryKeyConstraint("location", "stage", "game_key", name="pk_stage_games"),
        db.Index("ix_stage_games_key", "game_key"),
        db.Index("ix_stage_games_location_stage_entered", "location", "stage", "entered_at"),
        db.Index("ix_stage_games_box", "location", "stage", "box_number"),
    )

    location = db.Column(db.String(64), nullable=False)
    stage = db.Column(db.String(16), nullable=False)
    entered_at = db.Column(db.DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<StageGame {self.location}_{self.stage} key={self.game_key!r}>"

    def to_dict(self) -> dict:
        data = self.game_dict()
        data.update({
            "location": self.location,
            "stage": self.stage,
            "entered_at": to_utc_z(self.entered_at),
        })
        return data


class FinalClosedGame(GameFieldsMixin, db.Model):
    """Permanent archive of every game collected at pickup."""
    __tablename__ = "final_closed"
    __table_args__ = (
        db.PrimaryKeyConstraint("game_key", name="pk_final_closed"),
    )

    location = db.Column(db.String(64), nullable=True)
    archived_at = db.Column(db.DateTime(timezone=True), nullable=False)

    def to_dict(self) -> dict:
        data = self.game_dict()
        data.update({
            "location": self.location,
            "archived_at": to_utc_z(self.archived_at),
        })
        return data
