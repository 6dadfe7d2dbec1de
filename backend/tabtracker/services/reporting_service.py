# Overview: Read-only listings and dashboard counts across stages.

from __future__ import annotations

from sqlalchemy import func

from ..extensions import db
from ..models import StageGame, TransportationEntry, DepositEntry, STAGE_INVENTORY, STAGE_OPEN, STAGE_CLOSED
from .location_registry import LocationRegistry


def live_inventory(registry: LocationRegistry, *, limit_per_location: int = 1000) -> list[dict]:
    results = []
    for location in registry.locations:
        rows = (
            db.session.query(StageGame.game_key, StageGame.game_name)
            .filter_by(location=location, stage=STAGE_INVENTORY)
            .order_by(StageGame.entered_at.desc())
            .limit(limit_per_location)
            .all()
        )
        results.extend({"location": location, "key": key, "gname": name} for key, name in rows)
    return results


def pickup_list(registry: LocationRegistry, *, limit_per_location: int = 2000) -> dict[str, list[dict]]:
    """Closed games waiting for pickup, grouped by location."""
    by_location = {}
    for location in registry.locations:
        rows = (
            db.session.query(StageGame)
            .filter_by(location=location, stage=STAGE_CLOSED)
            .order_by(StageGame.entered_at.desc())
            .limit(limit_per_location)
            .all()
        )
        by_location[location] = [
            {"key": row.game_key, "gname": row.game_name, "cash_on_hand": row.cash_on_hand}
            for row in rows
        ]
    return by_location


def open_games(registry: LocationRegistry, location: str) -> list[dict]:
    """Open games sitting in a selling box, in box order."""
    registry.require_location(location)
    rows = (
        db.session.query(StageGame)
        .filter(
            StageGame.location == location,
            StageGame.stage == STAGE_OPEN,
            StageGame.box_number.is_not(None),
        )
        .order_by(StageGame.box_number.asc())
        .all()
    )
    return [
        {
            "key": row.game_key,
            "gname": row.game_name,
            "box_number": row.box_number,
            "ticket_price": row.ticket_price,
            "cash_on_hand": row.cash_on_hand,
            "current_tickets": row.current_tickets,
            "current_winners": row.current_winners,
        }
        for row in rows
    ]


def transportation_list(*, limit: int = 5000) -> list[dict]:
    rows = (
        db.session.query(TransportationEntry)
        .order_by(TransportationEntry.picked_up_at.desc())
        .limit(limit)
        .all()
    )
    return [row.to_dict() for row in rows]


def deposit_list(*, limit: int = 5000) -> list[dict]:
    rows = db.session.query(DepositEntry).order_by(DepositEntry.created_at.desc()).limit(limit).all()
    return [row.to_dict() for row in rows]


def dashboard_summary(registry: LocationRegistry) -> dict:
    counts = dict(
        db.session.query(StageGame.location, func.count())
        .filter(StageGame.stage == STAGE_CLOSED)
        .group_by(StageGame.location)
        .all()
    )
    closed_counts = {location: int(counts.get(location, 0)) for location in registry.locations}

    deposit_pending = (
        db.session.query(func.count(DepositEntry.game_key))
        .filter(DepositEntry.going_to_bank_at.is_(None), DepositEntry.dropped_at_bank_at.is_(None))
        .scalar()
    )
    return {"closedCounts": closed_counts, "depositPending": int(deposit_pending or 0)}
