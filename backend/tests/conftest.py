"""
Pytest fixtures for tracker backend tests.

Provides a fresh in-memory database per test, a fixed clock for the
services, record seeding helpers, and a small dBase III writer so intake
tests can feed real DBF bytes through the upload path.
"""

import struct
from datetime import date, datetime, timedelta

import pytest

from tabtracker import create_app
from tabtracker.extensions import db
from tabtracker.models import StageGame, OfficeEntry, STAGE_INVENTORY
from tabtracker.services import tracker
from tabtracker.services.import_service import IntakePipeline
from tabtracker.services.lifecycle_service import LifecycleEngine
from tabtracker.services.office_scan_service import OfficeScanner


class FixedClock:
    """Callable clock that only moves when a test tells it to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def tick(self, **delta) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now


@pytest.fixture(scope='function')
def app():
    """Create application for testing with a private in-memory database."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def clock():
    return FixedClock(datetime(2026, 3, 14, 12, 0, 0))


@pytest.fixture(scope='function')
def registry(app):
    return tracker().registry


@pytest.fixture(scope='function')
def engine(registry, clock):
    """Lifecycle engine sharing the app's registry but driven by the fixed clock."""
    return LifecycleEngine(registry, clock=clock)


@pytest.fixture(scope='function')
def intake(registry, clock):
    return IntakePipeline(registry, clock=clock)


@pytest.fixture(scope='function')
def scanner(app, clock):
    return OfficeScanner(tracker().settings, clock=clock)


@pytest.fixture(scope='function')
def seed_game(app, clock):
    """Insert a game straight into one location stage."""
    def _seed(key="ARX 7711 100001", *, location="McDuffs", stage=STAGE_INVENTORY, **fields):
        values = {
            "game_name": "Lucky Sevens",
            "site_number": "0000014",
            "ticket_price": 1.0,
            "total_tickets": 100,
            "tickets_sold": 0,
            "current_tickets": 100,
            "total_winners": 10,
            "winners_sold": 0,
            "current_winners": 10,
            "ideal_gross": 100.0,
            "ideal_prize": 70.0,
            "ideal_net": 30.0,
            "status": stage,
        }
        values.update(fields)
        row = StageGame(location=location, stage=stage, game_key=key, entered_at=clock(), **values)
        db.session.add(row)
        db.session.commit()
        return row

    return _seed


@pytest.fixture(scope='function')
def seed_office(app, clock):
    """Insert an office record waiting for its first scan."""
    def _seed(key="ARX 7711 100001", **fields):
        values = {"game_name": "Lucky Sevens", "cash_on_hand": 42.0, "picked_up_by": "Josh"}
        values.update(fields)
        entry = OfficeEntry(game_key=key, received_at=clock(), **values)
        db.session.add(entry)
        db.session.commit()
        return entry

    return _seed


# =============================================================================
# DBF WRITER
# =============================================================================

# (name, type, length, decimals) in the layout the distributor exports use
DBF_FIELDS = [
    ("MFCID", "C", 10, 0),
    ("PARTNO", "C", 10, 0),
    ("SERNO", "C", 12, 0),
    ("GNAME", "C", 30, 0),
    ("DIST_ID", "C", 8, 0),
    ("GTYPE", "C", 8, 0),
    ("GCOST", "N", 10, 2),
    ("SITENO", "C", 10, 0),
    ("INV_NUM", "C", 10, 0),
    ("PLCOST", "N", 8, 2),
    ("PLNOS", "N", 8, 0),
    ("IDLGRS", "N", 10, 2),
    ("IDLPRZ", "N", 10, 2),
    ("DPURCH", "D", 8, 0),
]


def _dbf_cell(value, ftype: str, length: int, decimals: int) -> bytes:
    if value is None:
        return b" " * length
    if ftype == "D":
        text = value.strftime("%Y%m%d") if isinstance(value, date) else str(value)
        return text.encode("ascii")[:length].ljust(length)
    if ftype == "N":
        text = f"{value:.{decimals}f}" if decimals else str(int(value))
        return text.encode("ascii")[:length].rjust(length)
    return str(value).encode("ascii")[:length].ljust(length)


def build_dbf(rows, fields=DBF_FIELDS) -> bytes:
    """Serialize dict rows into a dBase III file (no memo fields)."""
    header_length = 32 + 32 * len(fields) + 1
    record_length = 1 + sum(length for _, _, length, _ in fields)

    out = bytearray(struct.pack('<BBBBLHH20x', 0x03, 126, 1, 15, len(rows), header_length, record_length))
    for name, ftype, length, decimals in fields:
        out += struct.pack('<11sc4xBB14x', name.encode("ascii"), ftype.encode("ascii"), length, decimals)
    out += b"\r"
    for row in rows:
        out += b" "
        for name, ftype, length, decimals in fields:
            out += _dbf_cell(row.get(name), ftype, length, decimals)
    out += b"\x1a"
    return bytes(out)


def dbf_row(serial="100001", *, siteno="0000014", **overrides) -> dict:
    row = {
        "MFCID": "ARX",
        "PARTNO": "7711",
        "SERNO": serial,
        "GNAME": "Lucky Sevens",
        "DIST_ID": "D42",
        "GTYPE": "PT",
        "GCOST": 45.5,
        "SITENO": siteno,
        "INV_NUM": "INV9",
        "PLCOST": 1.0,
        "PLNOS": 2400,
        "IDLGRS": 2400.0,
        "IDLPRZ": 1750.0,
        "DPURCH": date(2026, 1, 15),
    }
    row.update(overrides)
    return row


@pytest.fixture(scope='function')
def make_dbf():
    """Build DBF bytes from dbf_row(...) dicts."""
    return build_dbf


@pytest.fixture(scope='function')
def make_dbf_row():
    return dbf_row
