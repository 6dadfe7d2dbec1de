# Overview: Service-layer operations for DBF intake; parses uploads into Inventory rows.

"""
Intake Pipeline

One uploaded DBF file = one location's new inventory.

    raw DBF records
      -> composite key (MFCID PARTNO SERNO)
      -> site code (last 3 digits of SITENO) -> location (skip when unmapped)
      -> every usable record must resolve to the same location
      -> field mapping + value coercion
      -> hold back keys already tracked outside this Inventory
      -> insert-or-replace into <Location>_Inventory in one transaction

Nothing is written unless the whole file passes.
"""

from __future__ import annotations

import os
import struct
import tempfile
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable

from dbfread import DBF
from dbfread.exceptions import DBFNotFound, MissingMemoFile
from flask import current_app
from sqlalchemy import or_

from ..extensions import db
from ..models import StageGame, FinalClosedGame, OfficeEntry, TransportationEntry, STAGE_INVENTORY
from ..validation import (
    AlreadyTracked,
    InvalidInput,
    MixedLocations,
    NoLocationDetermined,
    NoUsableRows,
    parse_non_negative_number,
    require_text,
)
from tabtracker.time_utils import to_iso_date, utcnow
from . import row_store
from .location_registry import LocationRegistry


# DBF column -> canonical game field
DBF_FIELD_MAP = {
    "GNAME": "game_name",
    "DIST_ID": "distributor_id",
    "GTYPE": "game_type",
    "GCOST": "game_cost",
    "SITENO": "site_number",
    "INV_NUM": "inventory_number",
    "PLCOST": "ticket_price",
    "PLNOS": "total_tickets",
    "IDLGRS": "ideal_gross",
    "IDLPRZ": "ideal_prize",
    "DPURCH": "purchase_date",
}

MONEY_FIELDS = {"game_cost", "ticket_price", "ideal_gross", "ideal_prize"}
INTEGER_FIELDS = {"total_tickets", "total_winners"}

# Fields a new Inventory record is built from (DBF columns map onto the first ones)
INPUT_FIELDS = tuple(DBF_FIELD_MAP.values()) + ("total_winners",)

# Tables that count as "already tracked" besides stage_games
HELD_ELSEWHERE_MODELS = (TransportationEntry, OfficeEntry, FinalClosedGame)
KEY_CHUNK = 500


@dataclass
class IngestResult:
    location: str
    inserted: int
    skipped: int = 0
    held: int = 0

    def to_dict(self) -> dict:
        return {
            "location": self.location,
            "inserted": self.inserted,
            "skipped": self.skipped,
            "held": self.held,
        }


def to_sql_value(value: Any):
    """Reduce a parsed DBF value to something the store accepts: primitives or None."""
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return to_iso_date(value)
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def composite_key(mfcid, partno, serno) -> str | None:
    parts = [to_sql_value(part) for part in (mfcid, partno, serno)]
    texts = ["" if part is None else str(part).strip() for part in parts]
    if not all(texts):
        return None
    return " ".join(texts)


def _to_text(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def _to_money(value) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(Decimal(str(value)).quantize(Decimal("0.01")))
    except (InvalidOperation, ValueError):
        return None


def _to_int(value) -> int | None:
    money = _to_money(value)
    if money is None:
        return None
    return int(money)


def read_dbf_records(file_bytes: bytes) -> list[dict]:
    """Parse DBF bytes into plain dicts keyed by upper-case field name."""
    if not file_bytes:
        raise InvalidInput("Uploaded file is empty")
    with tempfile.TemporaryDirectory() as tmp_dir:
        path = os.path.join(tmp_dir, "upload.dbf")
        with open(path, "wb") as fh:
            fh.write(file_bytes)
        try:
            table = DBF(path, load=True, ignore_missing_memofile=True, char_decode_errors="replace")
            return [{str(k).upper(): v for k, v in record.items()} for record in table.records]
        except (DBFNotFound, MissingMemoFile, ValueError, struct.error, EOFError) as exc:
            raise InvalidInput("Could not read DBF file") from exc


def tracked_keys(keys: Iterable[str], *, inventory_of: str | None = None) -> set[str]:
    """
    Keys already living in some stage or handling table.

    With inventory_of, that location's own Inventory does not count, so a
    re-upload can refresh records that have not moved yet.
    """
    keys = list(dict.fromkeys(keys))
    found = set()
    for start in range(0, len(keys), KEY_CHUNK):
        chunk = keys[start:start + KEY_CHUNK]
        query = db.session.query(StageGame.game_key).filter(StageGame.game_key.in_(chunk))
        if inventory_of is not None:
            query = query.filter(or_(StageGame.location != inventory_of, StageGame.stage != STAGE_INVENTORY))
        found.update(key for (key,) in query)
        for model in HELD_ELSEWHERE_MODELS:
            found.update(key for (key,) in db.session.query(model.game_key).filter(model.game_key.in_(chunk)))
    return found


class IntakePipeline:
    def __init__(self, registry: LocationRegistry, *, clock: Callable = utcnow,
                 reader: Callable[[bytes], list[dict]] = read_dbf_records):
        self.registry = registry
        self.clock = clock
        self.reader = reader

    def ingest(self, file_bytes: bytes) -> IngestResult:
        return self.ingest_records(self.reader(file_bytes))

    def canonical_row(self, key: str, values: dict) -> dict:
        """Coerce input values into a fresh Inventory record with zeroed sale counters."""
        row = {"game_key": key}
        for target in INPUT_FIELDS:
            value = to_sql_value(values.get(target))
            if target in MONEY_FIELDS:
                row[target] = _to_money(value)
            elif target in INTEGER_FIELDS:
                row[target] = _to_int(value)
            else:
                row[target] = _to_text(value)

        gross, prize = row["ideal_gross"], row["ideal_prize"]
        row["ideal_net"] = _to_money(Decimal(str(gross)) - Decimal(str(prize))) \
            if gross is not None and prize is not None else None
        row.update(
            tickets_sold=0,
            current_tickets=row["total_tickets"],
            winners_sold=0,
            current_winners=row["total_winners"],
            cash_on_hand=None,
            date_opened=None,
            date_closed=None,
            box_number=None,
            status=STAGE_INVENTORY,
        )
        return row

    def convert_record(self, raw: dict, key: str) -> dict:
        return self.canonical_row(key, {target: raw.get(source) for source, target in DBF_FIELD_MAP.items()})

    def ingest_records(self, records: Iterable[dict]) -> IngestResult:
        target = None
        converted = []
        skipped = 0

        for raw in records:
            site_code = self.registry.site_code_from_site_number(to_sql_value(raw.get("SITENO")))
            location = self.registry.location_for_site_code(site_code)
            if location is None:
                skipped += 1
                continue

            if target is None:
                target = location
            elif location != target:
                raise MixedLocations(
                    "Each DBF must be for exactly one location (mixed SITENO codes found)."
                )

            key = composite_key(raw.get("MFCID"), raw.get("PARTNO"), raw.get("SERNO"))
            if key is None:
                skipped += 1
                continue
            converted.append(self.convert_record(raw, key))

        if target is None:
            raise NoLocationDetermined("Could not determine location from SITENO mapping.")
        if not converted:
            raise NoUsableRows("No usable rows found in DBF.")

        # Games already opened, moved or collected stay where they are
        held = tracked_keys((row["game_key"] for row in converted), inventory_of=target)
        fresh = [row for row in converted if row["game_key"] not in held]
        held_count = len(converted) - len(fresh)

        table = self.registry.table_for(target, STAGE_INVENTORY)
        now = self.clock()
        row_store.execute_batch([
            (lambda row=row: row_store.insert_or_replace(StageGame, {
                **row,
                **table.key(row["game_key"]),
                "entered_at": now,
            }))
            for row in fresh
        ])

        current_app.logger.info(
            "Ingested %d games into %s (%d skipped, %d already tracked)",
            len(fresh), table.name, skipped + held_count, held_count,
        )
        return IngestResult(
            location=target,
            inserted=len(fresh),
            skipped=skipped + held_count,
            held=held_count,
        )

    def create_game(self, location, payload: dict) -> StageGame:
        """
        Add one game to a location's Inventory by hand, without a DBF file.

        payload uses the canonical field names (game_name, ticket_price,
        total_tickets, ...). The key must not be tracked anywhere yet.
        """
        location = self.registry.require_location(require_text({"location": location}, "location"))
        key = require_text(payload, "key")
        require_text(payload, "game_name")
        for field in sorted(MONEY_FIELDS | INTEGER_FIELDS):
            value = payload.get(field)
            if value is None or value == "":
                continue
            number = parse_non_negative_number(value, field)
            if field in INTEGER_FIELDS and not number.is_integer():
                raise InvalidInput(f"{field} must be a whole number")

        if tracked_keys([key]):
            raise AlreadyTracked(f"{key} is already tracked")

        table = self.registry.table_for(location, STAGE_INVENTORY)
        row = self.canonical_row(key, payload)
        (created,) = row_store.execute_batch([
            lambda: row_store.insert_or_replace(StageGame, {
                **row,
                **table.key(key),
                "entered_at": self.clock(),
            }),
        ])
        current_app.logger.info("Created %s by hand in %s", key, table.name)
        return created
