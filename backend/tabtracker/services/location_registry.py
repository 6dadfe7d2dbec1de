# Overview: Location names, their stage tables, and site-code routing for uploads.

from __future__ import annotations

from dataclasses import dataclass

from ..config import TrackerSettings
from ..models import LOCATION_STAGES
from ..validation import InvalidInput, UnknownLocation


@dataclass(frozen=True)
class StageTable:
    """One (location, stage) partition of stage_games, e.g. McDuffs_Open."""
    location: str
    stage: str

    @property
    def name(self) -> str:
        return f"{self.location}_{self.stage.title()}"

    def key(self, game_key: str) -> dict:
        return {"location": self.location, "stage": self.stage, "game_key": game_key}


class LocationRegistry:
    def __init__(self, settings: TrackerSettings):
        self.settings = settings

    @property
    def locations(self) -> tuple[str, ...]:
        return self.settings.locations

    def require_location(self, location: str) -> str:
        if location not in self.settings.locations:
            raise UnknownLocation(f"Unknown location: {location!r}")
        return location

    def table_for(self, location: str, stage: str) -> StageTable:
        self.require_location(location)
        if stage not in LOCATION_STAGES:
            raise InvalidInput(f"Unknown stage: {stage!r}")
        return StageTable(location, stage)

    def location_for_site_code(self, site_code: str | None) -> str | None:
        """None for unmapped codes; callers skip those records."""
        if not site_code:
            return None
        return self.settings.site_codes.get(site_code)

    @staticmethod
    def site_code_from_site_number(site_number) -> str | None:
        """Trailing three characters of SITENO, only when they are all digits."""
        text = "" if site_number is None else str(site_number).strip()
        last3 = text[-3:]
        if len(last3) == 3 and last3.isascii() and last3.isdigit():
            return last3
        return None
