# Overview: Pytest coverage for location settings, stage tables, and input parsing helpers.

import pytest

from tabtracker.config import TrackerSettings
from tabtracker.models import STAGE_INVENTORY, STAGE_OPEN, STAGE_CLOSED
from tabtracker.services.location_registry import LocationRegistry
from tabtracker.validation import (
    InvalidInput,
    UnknownLocation,
    parse_finite_number,
    parse_int_in_range,
    require_list,
    require_text,
)


@pytest.fixture
def settings():
    return TrackerSettings(
        locations=("Chanticlear", "McDuffs", "Willies", "Northwoods"),
        site_codes={"014": "McDuffs", "006": "Chanticlear", "012": "Willies", "009": "Northwoods"},
        pickers=frozenset({"Josh", "Steve"}),
        river_rooms=("Silver", "Sockeye"),
    )


class TestTrackerSettings:
    def test_site_codes_must_name_known_locations(self):
        with pytest.raises(ValueError, match="Atlantis"):
            TrackerSettings(
                locations=("McDuffs",),
                site_codes={"014": "McDuffs", "020": "Atlantis"},
                pickers=frozenset(),
                river_rooms=(),
            )

    def test_site_codes_are_read_only(self, settings):
        with pytest.raises(TypeError):
            settings.site_codes["099"] = "McDuffs"

    def test_from_app_config(self, app):
        """Defaults match the four deployed locations."""
        settings = TrackerSettings.from_mapping(app.config)
        assert settings.locations == ("Chanticlear", "McDuffs", "Willies", "Northwoods")
        assert settings.site_codes["014"] == "McDuffs"
        assert settings.pickers == frozenset({"Josh", "Steve"})


class TestLocationRegistry:
    def test_stage_table_names(self, settings):
        registry = LocationRegistry(settings)
        assert registry.table_for("McDuffs", STAGE_INVENTORY).name == "McDuffs_Inventory"
        assert registry.table_for("McDuffs", STAGE_OPEN).name == "McDuffs_Open"
        assert registry.table_for("Willies", STAGE_CLOSED).name == "Willies_Closed"

    def test_stage_table_key(self, settings):
        table = LocationRegistry(settings).table_for("Northwoods", STAGE_OPEN)
        assert table.key("K1") == {"location": "Northwoods", "stage": STAGE_OPEN, "game_key": "K1"}

    def test_unknown_location(self, settings):
        with pytest.raises(UnknownLocation):
            LocationRegistry(settings).table_for("mcduffs", STAGE_OPEN)

    def test_unknown_stage(self, settings):
        with pytest.raises(InvalidInput, match="Unknown stage"):
            LocationRegistry(settings).table_for("McDuffs", "ARCHIVE")

    @pytest.mark.parametrize("site_number,expected", [
        ("0000014", "014"),
        ("006", "006"),
        (" 12012 ", "012"),
        ("12", None),
        ("00A14", None),
        ("", None),
        (None, None),
    ])
    def test_site_code_from_site_number(self, site_number, expected):
        assert LocationRegistry.site_code_from_site_number(site_number) == expected

    def test_location_for_site_code(self, settings):
        registry = LocationRegistry(settings)
        assert registry.location_for_site_code("009") == "Northwoods"
        assert registry.location_for_site_code("999") is None
        assert registry.location_for_site_code(None) is None


class TestParsing:
    @pytest.mark.parametrize("value,expected", [(3, 3.0), ("2.5", 2.5), (" 10 ", 10.0), (0, 0.0)])
    def test_finite_numbers(self, value, expected):
        assert parse_finite_number(value, "cashHand") == expected

    @pytest.mark.parametrize("value", [None, "", "  ", "NaN", "inf", "-Infinity", True, "12abc", [1], 10 ** 400])
    def test_rejected_numbers(self, value):
        with pytest.raises(InvalidInput, match="Missing/invalid cashHand"):
            parse_finite_number(value, "cashHand")

    def test_int_in_range(self):
        assert parse_int_in_range("7", "boxNumber", minimum=1, maximum=7) == 7
        assert parse_int_in_range(3.0, "boxNumber", minimum=1, maximum=7) == 3
        with pytest.raises(InvalidInput, match="between 1 and 7"):
            parse_int_in_range(0, "boxNumber", minimum=1, maximum=7)
        with pytest.raises(InvalidInput, match="whole number"):
            parse_int_in_range("2.5", "boxNumber", minimum=1, maximum=7)

    def test_require_text(self):
        assert require_text({"key": "  K1 "}, "key") == "K1"
        with pytest.raises(InvalidInput, match="Missing key"):
            require_text({"key": "   "}, "key")

    def test_require_list(self):
        assert require_list({"keys": ["a"]}, "keys", empty_message="No keys selected") == ["a"]
        with pytest.raises(InvalidInput, match="No keys selected"):
            require_list({"keys": "a"}, "keys", empty_message="No keys selected")
