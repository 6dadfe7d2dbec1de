# Overview: Pytest coverage for the flask tracker CLI group.

from tabtracker.extensions import db
from tabtracker.models import StageGame


class TestTrackerCli:
    def test_locations(self, app):
        result = app.test_cli_runner().invoke(args=["tracker", "locations"])

        assert result.exit_code == 0
        assert "McDuffs_Inventory" in result.output
        assert "014" in result.output
        assert "Pickers: Josh, Steve" in result.output

    def test_ingest_file(self, app, tmp_path, make_dbf, make_dbf_row):
        path = tmp_path / "export.dbf"
        path.write_bytes(make_dbf([make_dbf_row("1", siteno="0000009")]))

        result = app.test_cli_runner().invoke(args=["tracker", "ingest", str(path)])

        assert result.exit_code == 0, result.output
        assert "1 games added to Northwoods inventory" in result.output
        assert db.session.query(StageGame).filter_by(location="Northwoods").count() == 1

    def test_ingest_rejected_file(self, app, tmp_path, make_dbf, make_dbf_row):
        path = tmp_path / "export.dbf"
        path.write_bytes(make_dbf([make_dbf_row("1", siteno="0000999")]))

        result = app.test_cli_runner().invoke(args=["tracker", "ingest", str(path)])

        assert result.exit_code != 0
        assert "Could not determine location" in result.output

    def test_reset_db_requires_confirmation(self, app):
        result = app.test_cli_runner().invoke(args=["tracker", "reset-db"], input="n\n")
        assert result.exit_code != 0
