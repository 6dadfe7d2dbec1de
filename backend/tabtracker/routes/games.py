# Overview: Key lookups across every stage and hand entry of new inventory games.

from flask import Blueprint

from ..decorators import api_route, json_body, ok
from ..services import tracker


games_bp = Blueprint("games", __name__, url_prefix="/api/game")


@games_bp.post("/find")
@api_route("Failed to find game")
def find_game_route():
    """
    Request body: {key}

    Response: {ok, found, table, location, stage, row}; found=false when the
    key is not tracked anywhere.
    """
    result = tracker().engine.find_anywhere(json_body().get("key"))
    if result is None:
        return ok(found=False, table=None, row=None)
    return ok(found=True, **result)


@games_bp.post("/inventory/create")
@api_route("Failed to create inventory game")
def create_inventory_game_route():
    """
    Request body: {location, key, game_name, ticket_price?, total_tickets?,
    total_winners?, game_cost?, ideal_gross?, ideal_prize?, ...}

    409 when the key is already tracked in any stage.
    """
    data = json_body()
    row = tracker().intake.create_game(data.get("location"), data)
    return ok(row=row.to_dict())
