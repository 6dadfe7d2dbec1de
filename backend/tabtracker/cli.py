# Overview: Flask CLI commands for schema setup, inspection, and offline intake.

# backend/tabtracker/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Use: flask --app wsgi tracker <command> [options]
#
# - flask --app wsgi tracker init-db
#   Create all tables that do not exist yet.
# - flask --app wsgi tracker reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - flask --app wsgi tracker locations
#   Print locations, their stage tables, and the site codes routed to them.
# - flask --app wsgi tracker ingest path/to/export.dbf
#   Run the DBF intake pipeline on a local file (same rules as /api/upload-dbf).

from pathlib import Path

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import LOCATION_STAGES
from .services import tracker
from .validation import TrackerError


@click.group('tracker')
def tracker_group():
    """Game tracker setup and maintenance commands."""


@tracker_group.command('init-db')
@with_appcontext
def init_db():
    """Create missing tables."""
    db.create_all()
    click.echo("PASS Tables created")


@tracker_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()
    click.echo("BUILD Creating all tables...")
    db.create_all()
    click.echo("PASS Database reset complete")


@tracker_group.command('locations')
@with_appcontext
def list_locations():
    """Show configured locations and site-code routing."""
    services = tracker()
    codes_by_location = {}
    for code, location in sorted(services.settings.site_codes.items()):
        codes_by_location.setdefault(location, []).append(code)

    for location in services.registry.locations:
        tables = ", ".join(services.registry.table_for(location, stage).name for stage in LOCATION_STAGES)
        codes = ", ".join(codes_by_location.get(location, [])) or "-"
        click.echo(f"{location:<14} site codes: {codes:<12} tables: {tables}")
    click.echo(f"\nPickers: {', '.join(sorted(services.settings.pickers))}")


@tracker_group.command('ingest')
@click.argument('path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@with_appcontext
def ingest(path):
    """Load one DBF export into its location's inventory."""
    try:
        result = tracker().intake.ingest(path.read_bytes())
    except TrackerError as e:
        raise click.ClickException(e.message)
    click.echo(f"PASS {result.inserted} games added to {result.location} inventory ({result.skipped} skipped, {result.held} already tracked)")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(tracker_group)
