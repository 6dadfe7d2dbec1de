# Overview: Service-layer operations for the game lifecycle; moves records between stages.

"""
Game Lifecycle Engine

STATE MACHINE (per location, then shared):
    Inventory -> Open -> Closed -> [pickup] -> Transportation -> [drop-off] -> Office + Deposit
                                      +-> Final_Closed (permanent archive)

    Deposit rows then pass a two-phase bank gate:
    going_to_bank_at (only while both bank fields are null)
    -> dropped_at_bank_at (only once going_to_bank_at is set)

    Emergency move relocates a record between two Inventory stages without
    passing through Open/Closed.

RULES:
1. A move deletes the source row, requires exactly one affected row, then
   inserts (or replaces) the destination row; both statements commit in one
   transaction. A request that loses a race on the same key gets NotFound
   instead of writing a duplicate.
2. Only the fields a transition names change (dates, cash on hand, box,
   status); everything else is carried over unchanged.
3. Pickup and drop-off handle each item in its own transaction and report
   per-item failures without aborting the rest.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Iterable

from flask import current_app
from sqlalchemy import update

from ..extensions import db
from ..models import (
    StageGame,
    FinalClosedGame,
    TransportationEntry,
    OfficeEntry,
    DepositEntry,
    STAGE_INVENTORY,
    STAGE_OPEN,
    STAGE_CLOSED,
)
from ..validation import (
    InvalidInput,
    NotFound,
    TrackerError,
    Unauthorized,
    parse_finite_number,
    parse_int_in_range,
    parse_non_negative_number,
)
from tabtracker.time_utils import utcnow
from . import row_store
from .location_registry import LocationRegistry, StageTable


CENT = Decimal("0.01")

# find_anywhere search order: stages inside each location, then the shared tables
LOCATION_SEARCH_ORDER = (STAGE_OPEN, STAGE_INVENTORY, STAGE_CLOSED)
HANDLING_TABLES = (
    ("Transportation", TransportationEntry),
    ("Office", OfficeEntry),
    ("Final_Closed", FinalClosedGame),
)


@dataclass
class MoveResult:
    moved: bool
    from_location: str | None = None
    to_location: str | None = None
    reason: str | None = None

    def to_dict(self) -> dict:
        data = {"moved": self.moved}
        if self.from_location is not None:
            data["fromLocation"] = self.from_location
        if self.to_location is not None:
            data["toLocation"] = self.to_location
        if self.reason is not None:
            data["reason"] = self.reason
        return data


@dataclass
class PickupResult:
    picker: str
    moved: int = 0
    errors: list[dict] = field(default_factory=list)


def _money(value) -> Decimal:
    return Decimal(str(value if value is not None else 0))


def _as_float(value: Decimal) -> float:
    return float(value.quantize(CENT))


def _clean_key(value) -> str:
    return "" if value is None else str(value).strip()


class LifecycleEngine:
    def __init__(self, registry: LocationRegistry, *, clock: Callable = utcnow):
        self.registry = registry
        self.settings = registry.settings
        self.clock = clock

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_in_stage(self, location: str, stage: str, key: str, *, lock: bool = False) -> StageGame | None:
        table = self.registry.table_for(location, stage)
        return row_store.find_by_key(StageGame, lock=lock, **table.key(key))

    def lookup_inventory(self, key: str) -> str | None:
        """First location (in configured order) whose Inventory holds the key."""
        for location in self.registry.locations:
            if self.find_in_stage(location, STAGE_INVENTORY, key) is not None:
                return location
        return None

    def find_anywhere(self, key) -> dict | None:
        """
        Locate a key wherever it currently lives.

        Location stages are searched first (configured location order, then
        Open, Inventory, Closed), then Transportation, Office and Final_Closed.
        Returns {table, location, stage, row} or None.
        """
        key = _clean_key(key)
        if not key:
            raise InvalidInput("Missing key")

        rows = db.session.query(StageGame).filter_by(game_key=key).all()
        rows = [row for row in rows if row.location in self.registry.locations]
        if rows:
            row = min(rows, key=lambda r: (
                self.registry.locations.index(r.location),
                LOCATION_SEARCH_ORDER.index(r.stage),
            ))
            return {
                "table": self.registry.table_for(row.location, row.stage).name,
                "location": row.location,
                "stage": row.stage,
                "row": row.to_dict(),
            }

        for name, model in HANDLING_TABLES:
            entry = row_store.find_by_key(model, game_key=key)
            if entry is not None:
                return {
                    "table": name,
                    "location": getattr(entry, "location", None),
                    "stage": name.upper(),
                    "row": entry.to_dict(),
                }
        return None

    def find_open_game(self, location: str, *, key: str | None = None, box_number=None) -> StageGame:
        if key:
            row = self.find_in_stage(location, STAGE_OPEN, key, lock=True)
            if row is None:
                raise NotFound(f"{key} is not open at {location}")
            return row
        if box_number is None or box_number == "":
            raise InvalidInput("Provide key or boxNumber")
        box = self._parse_box(box_number)
        self.registry.require_location(location)
        query = db.session.query(StageGame).filter_by(location=location, stage=STAGE_OPEN, box_number=box)
        row = row_store.lock_for_update(query).first()
        if row is None:
            raise NotFound(f"No open game in box {box} at {location}")
        return row

    # ------------------------------------------------------------------
    # Stage moves
    # ------------------------------------------------------------------

    def _move(self, source: StageTable, destination: StageTable, key: str, values: dict) -> StageGame:
        def _delete_source():
            if row_store.delete_by_key(StageGame, **source.key(key)) != 1:
                raise NotFound(f"{key} is no longer in {source.name}")

        def _insert_destination():
            row = dict(values)
            row.update(destination.key(key))
            row["entered_at"] = self.clock()
            return row_store.insert_or_replace(StageGame, row)

        _, moved = row_store.execute_batch([_delete_source, _insert_destination])
        current_app.logger.info("Moved %s from %s to %s", key, source.name, destination.name)
        return moved

    def _parse_box(self, value) -> int:
        return parse_int_in_range(
            value,
            "boxNumber",
            minimum=self.settings.box_min,
            maximum=self.settings.box_max,
        )

    def open_game(self, location: str, key: str, *, box_number=None) -> StageGame:
        """Inventory -> Open, stamping date_opened (and the selling box when given)."""
        source = self.registry.table_for(location, STAGE_INVENTORY)
        destination = self.registry.table_for(location, STAGE_OPEN)
        key = _clean_key(key)
        if not key:
            raise InvalidInput("Missing key")
        box = None
        if box_number is not None and box_number != "":
            box = self._parse_box(box_number)

        row = row_store.find_by_key(StageGame, lock=True, **source.key(key))
        if row is None:
            raise NotFound(f"{key} not found in {source.name}")

        if box is not None:
            occupant = (
                db.session.query(StageGame)
                .filter_by(location=location, stage=STAGE_OPEN, box_number=box)
                .first()
            )
            if occupant is not None and occupant.game_key != key:
                raise InvalidInput(f"Box {box} at {location} already holds {occupant.game_key}")

        values = row.game_values()
        values.update(date_opened=self.clock(), box_number=box, status=STAGE_OPEN)
        return self._move(source, destination, key, values)

    def close_game(self, location: str, key: str, cash_on_hand) -> StageGame:
        """Open -> Closed, recording the counted cash and date_closed."""
        source = self.registry.table_for(location, STAGE_OPEN)
        destination = self.registry.table_for(location, STAGE_CLOSED)
        key = _clean_key(key)
        if not key:
            raise InvalidInput("Missing key")
        cash = parse_finite_number(cash_on_hand, "cashHand")

        row = row_store.find_by_key(StageGame, lock=True, **source.key(key))
        if row is None:
            raise NotFound(f"{key} not found in {source.name}")

        values = row.game_values()
        values.update(
            cash_on_hand=_as_float(_money(cash)),
            date_closed=self.clock(),
            box_number=None,
            status=STAGE_CLOSED,
        )
        return self._move(source, destination, key, values)

    def emergency_move(self, key: str, to_location: str) -> MoveResult:
        """Relocate an Inventory record to another location's Inventory."""
        to_location = self.registry.require_location(_clean_key(to_location))
        key = _clean_key(key)
        if not key:
            raise InvalidInput("Missing key")

        from_location = self.lookup_inventory(key)
        if from_location is None:
            raise NotFound("Not found in any inventory")
        if from_location == to_location:
            return MoveResult(moved=False, from_location=from_location, to_location=to_location,
                              reason="same_location")

        source = self.registry.table_for(from_location, STAGE_INVENTORY)
        destination = self.registry.table_for(to_location, STAGE_INVENTORY)
        row = row_store.find_by_key(StageGame, lock=True, **source.key(key))
        if row is None:
            raise NotFound(f"{key} is no longer in {source.name}")
        self._move(source, destination, key, row.game_values())
        return MoveResult(moved=True, from_location=from_location, to_location=to_location)

    # ------------------------------------------------------------------
    # Pickup, drop-off and bank gates
    # ------------------------------------------------------------------

    def require_picker(self, picker) -> str:
        name = _clean_key(picker)
        if name not in self.settings.pickers:
            raise Unauthorized("Picker is not authorized")
        return name

    def confirm_pickup(self, picker, items: Iterable) -> PickupResult:
        """
        Closed -> Transportation for each {location, key}, archiving the full
        record into Final_Closed. Missing rows are skipped; bad items are
        reported in errors without stopping the batch.
        """
        picker = self.require_picker(picker)
        items = list(items or [])
        if not items:
            raise InvalidInput("No games selected")

        result = PickupResult(picker=picker)
        for item in items:
            location = key = None
            try:
                if not isinstance(item, dict):
                    raise InvalidInput("Each item needs a location and key")
                location = _clean_key(item.get("location"))
                key = _clean_key(item.get("key"))
                table = self.registry.table_for(location, STAGE_CLOSED)
                if not key:
                    continue
                row = row_store.find_by_key(StageGame, lock=True, **table.key(key))
                if row is None:
                    continue
                self._pick_up(table, row, picker)
                result.moved += 1
            except TrackerError as exc:
                result.errors.append({"location": location, "key": key, "error": exc.message})

        current_app.logger.info("Pickup by %s: %d moved, %d errors", picker, result.moved, len(result.errors))
        return result

    def _pick_up(self, table: StageTable, row: StageGame, picker: str) -> None:
        now = self.clock()
        key = row.game_key
        values = row.game_values()

        def _delete_closed():
            if row_store.delete_by_key(StageGame, **table.key(key)) != 1:
                raise NotFound(f"{key} is no longer in {table.name}")

        row_store.execute_batch([
            _delete_closed,
            lambda: row_store.insert_or_replace(TransportationEntry, {
                "game_key": key,
                "game_name": values["game_name"],
                "location": table.location,
                "cash_on_hand": values["cash_on_hand"],
                "picked_up_by": picker,
                "picked_up_at": now,
            }),
            lambda: row_store.insert_or_replace(FinalClosedGame, {
                **values,
                "location": table.location,
                "archived_at": now,
            }),
        ])

    def drop_off(self, keys: Iterable) -> int:
        """Transportation -> Office + Deposit. Keys not in transit are skipped."""
        keys = [_clean_key(k) for k in (keys or [])]
        keys = [k for k in keys if k]
        if not keys:
            raise InvalidInput("No keys selected")

        moved = 0
        for key in keys:
            entry = row_store.find_by_key(TransportationEntry, lock=True, game_key=key)
            if entry is None:
                continue
            now = self.clock()
            game_name, cash, picker = entry.game_name, entry.cash_on_hand, entry.picked_up_by

            def _delete_transport(key=key):
                if row_store.delete_by_key(TransportationEntry, game_key=key) != 1:
                    raise NotFound(f"{key} is no longer in transportation")

            try:
                row_store.execute_batch([
                    _delete_transport,
                    lambda: row_store.insert_or_replace(OfficeEntry, {
                        "game_key": key,
                        "game_name": game_name,
                        "cash_on_hand": cash,
                        "picked_up_by": picker,
                        "received_at": now,
                    }),
                    lambda: row_store.insert_or_replace(DepositEntry, {
                        "game_key": key,
                        "cash_on_hand": cash,
                        "picked_up_by": picker,
                        "created_at": now,
                    }),
                ])
            except NotFound:
                # Another request dropped it off first
                continue
            moved += 1

        current_app.logger.info("Dropped off %d of %d games at the office", moved, len(keys))
        return moved

    def _bank_keys(self, keys: Iterable) -> list[str]:
        keys = [_clean_key(k) for k in (keys or [])]
        keys = [k for k in keys if k]
        if not keys:
            raise InvalidInput("No keys selected")
        return keys

    def send_to_bank(self, keys: Iterable) -> int:
        """Stamp going_to_bank_at where both bank timestamps are still null."""
        keys = self._bank_keys(keys)
        statement = (
            update(DepositEntry)
            .where(
                DepositEntry.game_key.in_(keys),
                DepositEntry.going_to_bank_at.is_(None),
                DepositEntry.dropped_at_bank_at.is_(None),
            )
            .values(going_to_bank_at=self.clock())
            .execution_options(synchronize_session=False)
        )
        (result,) = row_store.execute_batch([lambda: db.session.execute(statement)])
        current_app.logger.info("Marked %d deposits as going to bank", result.rowcount)
        return result.rowcount

    def confirm_at_bank(self, keys: Iterable) -> int:
        """Stamp dropped_at_bank_at only after going_to_bank_at is set."""
        keys = self._bank_keys(keys)
        statement = (
            update(DepositEntry)
            .where(
                DepositEntry.game_key.in_(keys),
                DepositEntry.going_to_bank_at.is_not(None),
                DepositEntry.dropped_at_bank_at.is_(None),
            )
            .values(dropped_at_bank_at=self.clock())
            .execution_options(synchronize_session=False)
        )
        (result,) = row_store.execute_batch([lambda: db.session.execute(statement)])
        current_app.logger.info("Confirmed %d deposits at bank", result.rowcount)
        return result.rowcount

    # ------------------------------------------------------------------
    # In-place mutations on Open games
    # ------------------------------------------------------------------

    def sell_tickets(self, location: str, *, key=None, box_number=None, count=None, money_inserted=None) -> StageGame:
        """
        Record a ticket sale on an Open game.

        Without an explicit count the count is floor(money / price). Cash on
        hand grows by count * price; change is never banked.
        """
        if (count is None or count == "") and (money_inserted is None or money_inserted == ""):
            raise InvalidInput("Provide count or moneyInserted")
        row = self.find_open_game(location, key=_clean_key(key) or None, box_number=box_number)

        if row.ticket_price is None:
            raise InvalidInput(f"{row.game_key} has no ticket price")
        price = _money(row.ticket_price)

        if count is not None and count != "":
            number = parse_finite_number(count, "count")
            if not number.is_integer():
                raise InvalidInput("count must be a whole number")
            tickets = int(number)
        else:
            money = _money(parse_non_negative_number(money_inserted, "moneyInserted"))
            if price <= 0:
                raise InvalidInput(f"{row.game_key} has no ticket price")
            tickets = int(money // price)

        if tickets <= 0:
            raise InvalidInput("Ticket count must be positive")

        remaining = row.current_tickets
        if remaining is None and row.total_tickets is not None:
            remaining = row.total_tickets - (row.tickets_sold or 0)
        if remaining is None or tickets > remaining:
            raise InvalidInput(f"Only {remaining or 0} tickets remain")

        def _apply():
            row.tickets_sold = (row.tickets_sold or 0) + tickets
            row.current_tickets = remaining - tickets
            row.cash_on_hand = _as_float(_money(row.cash_on_hand) + price * tickets)
            db.session.flush()
            return row

        row_store.execute_batch([_apply])
        current_app.logger.info("Sold %d tickets on %s at %s", tickets, row.game_key, location)
        return row

    def record_winners(self, location: str, *, key=None, box_number=None, winners_paid=None,
                       payout_cash=None) -> StageGame:
        """Credit paid winners (never below zero remaining) and take the payout from cash."""
        paid = parse_non_negative_number(winners_paid, "winnersPaid")
        if not paid.is_integer():
            raise InvalidInput("winnersPaid must be a whole number")
        paid = int(paid)
        payout = _money(parse_non_negative_number(payout_cash, "payoutCash"))
        row = self.find_open_game(location, key=_clean_key(key) or None, box_number=box_number)

        available = row.current_winners
        if available is None and row.total_winners is not None:
            available = row.total_winners - (row.winners_sold or 0)

        def _apply():
            if available is None:
                row.winners_sold = (row.winners_sold or 0) + paid
            else:
                credited = min(paid, max(available, 0))
                row.winners_sold = (row.winners_sold or 0) + credited
                row.current_winners = max(available, 0) - credited
            row.cash_on_hand = _as_float(_money(row.cash_on_hand) - payout)
            db.session.flush()
            return row

        row_store.execute_batch([_apply])
        current_app.logger.info("Recorded %d winners on %s at %s", paid, row.game_key, location)
        return row
