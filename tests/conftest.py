"""Shared pytest fixtures for tripledger tests."""

import tempfile
import os
from decimal import Decimal
import pytest

from tripledger.database.factories import create_sqlite_database
from tripledger.domain.balances import BalanceService
from tripledger.domain.breakdown import BreakdownService
from tripledger.domain.entities import MemberRole, SplitPolicy
from tripledger.domain.settlement import SettlementService
from tripledger.domain.splits import SplitService
from tripledger.domain.trip import TripService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def trip_service(temp_db):
    """Create a TripService with a temporary database."""
    return TripService(temp_db)


@pytest.fixture
def split_service(temp_db):
    """Create a SplitService with a temporary database."""
    return SplitService(temp_db)


@pytest.fixture
def balance_service(temp_db):
    """Create a BalanceService with a temporary database."""
    return BalanceService(temp_db)


@pytest.fixture
def settlement_service(temp_db):
    """Create a SettlementService with a temporary database."""
    return SettlementService(temp_db)


@pytest.fixture
def breakdown_service(temp_db):
    """Create a BreakdownService with a temporary database."""
    return BreakdownService(temp_db)


@pytest.fixture
def sample_trip(trip_service):
    """Create a trip owned by Ana with editors Bruno and Carla.

    Returns a dict with the trip and the three members keyed by first name.
    """
    trip, ana = trip_service.create_trip(
        name="Lisbon", currency="EUR", owner_name="Ana", owner_email="ana@example.com"
    )
    bruno = trip_service.add_member(trip.id, ana.id, "Bruno", "bruno@example.com", MemberRole.EDITOR)
    carla = trip_service.add_member(trip.id, ana.id, "Carla", "carla@example.com", MemberRole.EDITOR)
    return {"trip": trip, "ana": ana, "bruno": bruno, "carla": carla}


@pytest.fixture
def shared_dinner(split_service, sample_trip):
    """Ana pays 300 for dinner, split equally between the three members."""
    ana, bruno, carla = sample_trip["ana"], sample_trip["bruno"], sample_trip["carla"]
    return split_service.create_expense(
        trip_id=sample_trip["trip"].id,
        actor_id=ana.id,
        title="Dinner",
        amount=Decimal("300.00"),
        paid_by=ana.id,
        participant_ids=[ana.id, bruno.id, carla.id],
        policy=SplitPolicy.EQUAL,
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
