# backend/tabtracker/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


def _env_list(name: str, default: str) -> list[str]:
    raw = os.environ.get(name, default)
    return [part.strip() for part in raw.split(",") if part.strip()]


def _env_pairs(name: str, default: str) -> dict[str, str]:
    """Parse "006=Chanticlear,014=McDuffs" style variables."""
    pairs = {}
    for item in _env_list(name, default):
        code, _, location = item.partition("=")
        if code.strip() and location.strip():
            pairs[code.strip()] = location.strip()
    return pairs


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///tabtracker.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Uploaded DBF files are small; anything past this is a mistake
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", str(16 * 1024 * 1024)))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    CORS_ALLOWED_ORIGIN = os.environ.get("CORS_ALLOWED_ORIGIN", "https://thedatatab.com")

    # Order matters: emergency lookups walk locations in this order
    TRACKER_LOCATIONS = _env_list("TRACKER_LOCATIONS", "Chanticlear,McDuffs,Willies,Northwoods")
    TRACKER_SITE_CODES = _env_pairs(
        "TRACKER_SITE_CODES",
        "014=McDuffs,006=Chanticlear,012=Willies,009=Northwoods",
    )
    TRACKER_PICKERS = _env_list("TRACKER_PICKERS", "Josh,Steve")
    TRACKER_RIVER_ROOMS = _env_list("TRACKER_RIVER_ROOMS", "Silver,Sockeye,King,Pink,Chumb")
    TRACKER_AUDIT_SENTINEL = os.environ.get("TRACKER_AUDIT_SENTINEL", "Auditors Office")

    # Row caps for list endpoints
    INVENTORY_LIST_LIMIT = 1000
    PICKUP_LIST_LIMIT = 2000
    STAGE_LIST_LIMIT = 5000
    ISSUES_PAGE_SIZE = 500
    SIGNIN_LOG_LIMIT = 1000


@dataclass(frozen=True)
class TrackerSettings:
    """
    Immutable per-deployment settings handed to the services at construction.

    Built once from the flat Flask config in create_app(); tests build their
    own with from_mapping() or the dataclass constructor.
    """
    locations: tuple[str, ...]
    site_codes: Mapping[str, str]
    pickers: frozenset[str]
    river_rooms: tuple[str, ...]
    audit_sentinel: str = "Auditors Office"
    bin_max: int = 900
    storage_slot_max: int = 100
    box_min: int = 1
    box_max: int = 7
    issue_max_length: int = 500

    def __post_init__(self):
        unknown = sorted(set(self.site_codes.values()) - set(self.locations))
        if unknown:
            raise ValueError(f"Site codes map to unknown locations: {', '.join(unknown)}")
        # Freeze whatever mapping the caller passed in
        object.__setattr__(self, "site_codes", MappingProxyType(dict(self.site_codes)))

    @classmethod
    def from_mapping(cls, config: Mapping) -> "TrackerSettings":
        return cls(
            locations=tuple(config["TRACKER_LOCATIONS"]),
            site_codes=dict(config["TRACKER_SITE_CODES"]),
            pickers=frozenset(config["TRACKER_PICKERS"]),
            river_rooms=tuple(config["TRACKER_RIVER_ROOMS"]),
            audit_sentinel=config.get("TRACKER_AUDIT_SENTINEL", "Auditors Office"),
        )
