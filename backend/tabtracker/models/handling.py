from __future__ import annotations

from ..extensions import db
from tabtracker.time_utils import to_utc_z
from .games import Money


class TransportationEntry(db.Model):
    """A closed game picked up at a location and not yet dropped at the office."""
    __tablename__ = "transportation"

    game_key = db.Column(db.String(128), primary_key=True)
    game_name = db.Column(db.String(255), nullable=True)
    location = db.Column(db.String(64), nullable=True)
    cash_on_hand = db.Column(Money(), nullable=True)
    picked_up_by = db.Column(db.String(64), nullable=False)
    picked_up_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    def to_dict(self) -> dict:
        return {
            "game_key": self.game_key,
            "game_name": self.game_name,
            "location": self.location,
            "cash_on_hand": self.cash_on_hand,
            "picked_up_by": self.picked_up_by,
            "picked_up_at": to_utc_z(self.picked_up_at),
        }


class OfficeEntry(db.Model):
    """
    Office intake record.

    LIFECYCLE: audit_office -> river_room -> bin_number -> storage, filled
    strictly in that order by the office scan service. audit_office holds
    the scan timestamp; the other three hold "<value> @ <timestamp>".
    """
    __tablename__ = "office"

    game_key = db.Column(db.String(128), primary_key=True)
    game_name = db.Column(db.String(255), nullable=True)
    cash_on_hand = db.Column(Money(), nullable=True)
    picked_up_by = db.Column(db.String(64), nullable=True)
    received_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    # ScanState value; the columns below are written only through it
    scan_state = db.Column(db.String(32), nullable=False, default="AwaitingAudit")
    audit_office = db.Column(db.String(64), nullable=True)
    river_room = db.Column(db.String(128), nullable=True)
    bin_number = db.Column(db.String(128), nullable=True)
    storage = db.Column(db.String(128), nullable=True)

    def to_dict(self) -> dict:
        return {
            "game_key": self.game_key,
            "game_name": self.game_name,
            "cash_on_hand": self.cash_on_hand,
            "picked_up_by": self.picked_up_by,
            "received_at": to_utc_z(self.received_at),
            "scan_state": self.scan_state,
            "audit_office": self.audit_office,
            "river_room": self.river_room,
            "bin_number": self.bin_number,
            "storage": self.storage,
        }


class DepositEntry(db.Model):
    """Cash from one game on its way to the bank (two-phase: going, then dropped)."""
    __tablename__ = "deposit"

    game_key = db.Column(db.String(128), primary_key=True)
    cash_on_hand = db.Column(Money(), nullable=True)
    picked_up_by = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    going_to_bank_at = db.Column(db.DateTime(timezone=True), nullable=True)
    dropped_at_bank_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def to_dict(self) -> dict:
        return {
            "game_key": self.game_key,
            "cash_on_hand": self.cash_on_hand,
            "picked_up_by": self.picked_up_by,
            "created_at": to_utc_z(self.created_at),
            "going_to_bank_at": to_utc_z(self.going_to_bank_at),
            "dropped_at_bank_at": to_utc_z(self.dropped_at_bank_at),
        }
