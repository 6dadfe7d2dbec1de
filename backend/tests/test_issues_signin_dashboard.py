# Overview: Pytest coverage for the issue log, the sign-in log, and dashboard counts.

from datetime import datetime

import pytest

from tabtracker.models import STAGE_CLOSED, STAGE_OPEN
from tabtracker.services import issue_service, kv_store, reporting_service, signin_service
from tabtracker.validation import InvalidInput


class TestIssues:
    def test_add_and_list_newest_first(self, app):
        first = issue_service.add_issue("K1", "Torn ticket")
        second = issue_service.add_issue(" K2 ", "  Missing flare ")

        issues = issue_service.list_issues(limit=10)

        assert [issue.id for issue in issues] == [second.id, first.id]
        assert issues[0].game_key == "K2"
        assert issues[0].issue == "Missing flare"

    def test_list_limit(self, app):
        for n in range(5):
            issue_service.add_issue(f"K{n}", "Problem")
        assert len(issue_service.list_issues(limit=3)) == 3

    def test_missing_fields(self, app):
        with pytest.raises(InvalidInput, match="Missing key/issue"):
            issue_service.add_issue("K1", "   ")

    def test_length_limit(self, app):
        issue_service.add_issue("K1", "x" * 500)
        with pytest.raises(InvalidInput, match="Issue too long"):
            issue_service.add_issue("K1", "x" * 501)

    def test_fix_deletes(self, app):
        issue = issue_service.add_issue("K1", "Torn ticket")

        assert issue_service.fix_issue(issue.id) is True
        assert issue_service.fix_issue(issue.id) is False
        assert issue_service.list_issues() == []

    def test_fix_requires_id(self, app):
        with pytest.raises(InvalidInput):
            issue_service.fix_issue(None)


class TestSignin:
    def test_write_normalizes_email(self, app):
        entry = signin_service.write_signin("", "  Pat@Example.COM ", now=datetime(2026, 3, 14, 12, 0, 0))
        assert entry["email"] == "pat@example.com"
        assert entry["name"] == "pat@example.com"
        assert entry["timestamp"] == 1773489600000

    def test_missing_email(self, app):
        with pytest.raises(InvalidInput, match="Missing email"):
            signin_service.write_signin("Pat", None)

    def test_list_newest_first(self, app):
        signin_service.write_signin("Early", "a@x.com", now=datetime(2026, 1, 1, 8, 0, 0))
        signin_service.write_signin("Late", "b@x.com", now=datetime(2026, 1, 2, 8, 0, 0))
        signin_service.write_signin("Middle", "c@x.com", now=datetime(2026, 1, 1, 20, 0, 0))

        names = [entry["name"] for entry in signin_service.list_signins()]

        assert names == ["Late", "Middle", "Early"]

    def test_entry_readable_by_key(self, app):
        """Each sign-in is stored under signin:<timestamp>:<email> and can be fetched directly."""
        entry = signin_service.write_signin("Pat", "pat@x.com", now=datetime(2026, 3, 14, 12, 0, 0))

        assert kv_store.get(signin_service.SIGNIN_NAMESPACE, "signin:1773489600000:pat@x.com") == entry
        assert kv_store.get(signin_service.SIGNIN_NAMESPACE, "signin:0:nobody@x.com") is None


class TestDashboard:
    def test_closed_counts_cover_every_location(self, registry, seed_game):
        seed_game("K1", location="McDuffs", stage=STAGE_CLOSED)
        seed_game("K2", location="McDuffs", stage=STAGE_CLOSED)
        seed_game("K3", location="Willies", stage=STAGE_CLOSED)
        seed_game("K4", location="Willies", stage=STAGE_OPEN)

        summary = reporting_service.dashboard_summary(registry)

        assert summary["closedCounts"] == {"Chanticlear": 0, "McDuffs": 2, "Willies": 1, "Northwoods": 0}
        assert summary["depositPending"] == 0

    def test_deposit_pending(self, registry, engine, seed_game):
        for key in ("K1", "K2"):
            seed_game(key, stage=STAGE_CLOSED, cash_on_hand=10)
        engine.confirm_pickup("Josh", [{"location": "McDuffs", "key": "K1"}, {"location": "McDuffs", "key": "K2"}])
        engine.drop_off(["K1", "K2"])
        engine.send_to_bank(["K1"])

        assert reporting_service.dashboard_summary(registry)["depositPending"] == 1

    def test_open_games_in_box_order(self, registry, seed_game):
        seed_game("K1", stage=STAGE_OPEN, box_number=5)
        seed_game("K2", stage=STAGE_OPEN, box_number=1)
        seed_game("K3", stage=STAGE_OPEN)

        games = reporting_service.open_games(registry, "McDuffs")

        assert [game["key"] for game in games] == ["K2", "K1"]

    def test_pickup_list_groups_by_location(self, registry, seed_game):
        seed_game("K1", location="Northwoods", stage=STAGE_CLOSED, cash_on_hand=12.5)

        by_location = reporting_service.pickup_list(registry)

        assert set(by_location) == {"Chanticlear", "McDuffs", "Willies", "Northwoods"}
        assert by_location["Northwoods"] == [{"key": "K1", "gname": "Lucky Sevens", "cash_on_hand": 12.5}]
