# Overview: Office intake scans; a four-step state machine persisted on the office row.

"""
Office Scan State Machine

    AWAITING_AUDIT -> AWAITING_RIVER_ROOM -> AWAITING_BIN -> AWAITING_STORAGE -> COMPLETE

Each step accepts exactly one kind of scan:
    AWAITING_AUDIT       the audit sentinel phrase (case-insensitive)  -> audit timestamp
    AWAITING_RIVER_ROOM  one of the river room names (case-insensitive) -> "<value> @ <ts>"
    AWAITING_BIN         integer 0..900                                -> "<n> @ <ts>"
    AWAITING_STORAGE     "<word> <1-3 digits>", number 0..100          -> "<value> @ <ts>"

A rejected scan raises InvalidScan and leaves the row untouched. COMPLETE
rejects everything with AlreadyComplete.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from flask import current_app

from ..config import TrackerSettings
from ..models import OfficeEntry
from ..validation import AlreadyComplete, InvalidInput, InvalidScan, NotFound
from tabtracker.time_utils import to_utc_z, utcnow
from . import row_store


class ScanState(enum.Enum):
    AWAITING_AUDIT = "AwaitingAudit"
    AWAITING_RIVER_ROOM = "AwaitingRiverRoom"
    AWAITING_BIN = "AwaitingBin"
    AWAITING_STORAGE = "AwaitingStorage"
    COMPLETE = "Complete"


# State -> (office column it fills, state it advances to)
TRANSITIONS = {
    ScanState.AWAITING_AUDIT: ("audit_office", ScanState.AWAITING_RIVER_ROOM),
    ScanState.AWAITING_RIVER_ROOM: ("river_room", ScanState.AWAITING_BIN),
    ScanState.AWAITING_BIN: ("bin_number", ScanState.AWAITING_STORAGE),
    ScanState.AWAITING_STORAGE: ("storage", ScanState.COMPLETE),
}

BIN_PATTERN = re.compile(r"^-?\d+$")
STORAGE_PATTERN = re.compile(r"^[A-Za-z]+\s+(\d{1,3})$")


@dataclass(frozen=True)
class ScanStep:
    state: ScanState
    column: str
    value: str


def state_of(entry: OfficeEntry) -> ScanState:
    return ScanState(entry.scan_state or ScanState.AWAITING_AUDIT.value)


def advance(state: ScanState, scanned: str, now: datetime, settings: TrackerSettings) -> ScanStep:
    """Pure transition: (state, scan) -> next state plus the column value to write."""
    if state is ScanState.COMPLETE:
        raise AlreadyComplete("All columns are filled")

    value = (scanned or "").strip()
    stamp = to_utc_z(now)
    column, next_state = TRANSITIONS[state]

    if state is ScanState.AWAITING_AUDIT:
        if value.lower() != settings.audit_sentinel.lower():
            raise InvalidScan(f"Expected scan: {settings.audit_sentinel.lower()}")
        return ScanStep(next_state, column, stamp)

    if state is ScanState.AWAITING_RIVER_ROOM:
        if value.lower() not in {room.lower() for room in settings.river_rooms}:
            raise InvalidScan(f"Expected {'/'.join(settings.river_rooms)}")
        return ScanStep(next_state, column, f"{value} @ {stamp}")

    if state is ScanState.AWAITING_BIN:
        if not BIN_PATTERN.match(value) or not 0 <= int(value) <= settings.bin_max:
            raise InvalidScan(f"Expected bin number 0-{settings.bin_max}")
        return ScanStep(next_state, column, f"{int(value)} @ {stamp}")

    match = STORAGE_PATTERN.match(value)
    if not match or int(match.group(1)) > settings.storage_slot_max:
        raise InvalidScan(f"Expected: Word + number (0-{settings.storage_slot_max})")
    return ScanStep(next_state, column, f"{value} @ {stamp}")


class OfficeScanner:
    def __init__(self, settings: TrackerSettings, *, clock: Callable = utcnow):
        self.settings = settings
        self.clock = clock

    def find(self, key: str) -> OfficeEntry | None:
        return row_store.find_by_key(OfficeEntry, game_key=key)

    def scan(self, key: str, scanned_value: str) -> dict:
        key = (key or "").strip()
        scanned_value = (scanned_value or "").strip()
        if not key or not scanned_value:
            raise InvalidInput("Missing key/scannedValue")

        entry = row_store.find_by_key(OfficeEntry, lock=True, game_key=key)
        if entry is None:
            raise NotFound("Not found")

        now = self.clock()
        step = advance(state_of(entry), scanned_value, now, self.settings)

        def _apply():
            setattr(entry, step.column, step.value)
            entry.scan_state = step.state.value

        row_store.execute_batch([_apply])
        current_app.logger.info("Office scan on %s filled %s", key, step.column)
        return {
            "updated": step.column.upper(),
            "step": step.state.value,
            "dt": to_utc_z(now),
        }
