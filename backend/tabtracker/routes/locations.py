# backend/tabtracker/routes/locations.py
"""
Per-location seller routes.

- POST /api/location/<loc>/open/check     {key}                    -> {ok, found, row}
- POST /api/location/<loc>/open/confirm   {key, boxNumber?}        -> {ok, moved, row}
- POST /api/location/<loc>/close/check    {key}                    -> {ok, found, row}
- POST /api/location/<loc>/close/confirm  {key, cashHand}          -> {ok, moved, row}
- GET  /api/location/<loc>/open/games                              -> {ok, games}
- POST /api/location/<loc>/sell     {key|boxNumber, count|moneyInserted}
- POST /api/location/<loc>/winners  {key|boxNumber, winnersPaid, payoutCash}
"""

from flask import Blueprint

from ..decorators import api_route, json_body, ok
from ..models import STAGE_INVENTORY, STAGE_OPEN
from ..services import reporting_service, tracker
from ..validation import require_text


locations_bp = Blueprint("locations", __name__, url_prefix="/api/location")


def _check(location: str, stage: str):
    key = require_text(json_body(), "key")
    row = tracker().engine.find_in_stage(location, stage, key)
    return ok(found=row is not None, row=row.to_dict() if row is not None else None)


@locations_bp.post("/<location>/open/check")
@api_route("Failed to check inventory game")
def open_check_route(location: str):
    return _check(location, STAGE_INVENTORY)


@locations_bp.post("/<location>/open/confirm")
@api_route("Failed to open game")
def open_confirm_route(location: str):
    data = json_body()
    row = tracker().engine.open_game(location, data.get("key"), box_number=data.get("boxNumber"))
    return ok(moved=True, row=row.to_dict())


@locations_bp.post("/<location>/close/check")
@api_route("Failed to check open game")
def close_check_route(location: str):
    return _check(location, STAGE_OPEN)


@locations_bp.post("/<location>/close/confirm")
@api_route("Failed to close game")
def close_confirm_route(location: str):
    data = json_body()
    row = tracker().engine.close_game(location, data.get("key"), data.get("cashHand"))
    return ok(moved=True, row=row.to_dict())


@locations_bp.get("/<location>/open/games")
@api_route("Failed to list open games")
def open_games_route(location: str):
    return ok(games=reporting_service.open_games(tracker().registry, location))


@locations_bp.post("/<location>/sell")
@api_route("Failed to record ticket sale")
def sell_route(location: str):
    data = json_body()
    row = tracker().engine.sell_tickets(
        location,
        key=data.get("key"),
        box_number=data.get("boxNumber"),
        count=data.get("count"),
        money_inserted=data.get("moneyInserted"),
    )
    return ok(
        ticketsSold=row.tickets_sold,
        currentTickets=row.current_tickets,
        cashOnHand=row.cash_on_hand,
    )


@locations_bp.post("/<location>/winners")
@api_route("Failed to record winners")
def winners_route(location: str):
    data = json_body()
    row = tracker().engine.record_winners(
        location,
        key=data.get("key"),
        box_number=data.get("boxNumber"),
        winners_paid=data.get("winnersPaid"),
        payout_cash=data.get("payoutCash"),
    )
    return ok(
        winnersSold=row.winners_sold,
        currentWinners=row.current_winners,
        cashOnHand=row.cash_on_hand,
    )
