"""Shared pytest fixtures for fleetledger tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal

import pytest

from fleetledger.config import Settings
from fleetledger.database.factories import create_database
from fleetledger.utils.name_normalizer import normalize_name
from fleetledger.domain.entities import Identity


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep FLEETLEDGER_* variables of the developer shell out of the tests."""
    for name in list(os.environ):
        if name.startswith("FLEETLEDGER_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_database(f"sqlite:///{db_path}", timeout=10)
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
def settings(temp_db):
    """Settings pointing at the temporary database."""
    return Settings(database_url=temp_db.database_url)


def make_identity(identity_id, name, commission_rate=None, signature=None):
    return Identity(
        id=identity_id,
        display_name=name,
        normalized_name=normalize_name(name),
        commission_rate=commission_rate,
        signature=signature,
    )


@pytest.fixture
def directory():
    """Small user directory with one ambiguous first name."""
    return [
        make_identity("u1", "Ana Torres", commission_rate=10, signature="data:image/png;base64,ANA"),
        make_identity("u2", "Juliana Ana Ruiz", commission_rate=12),
        make_identity("u3", "José Pérez", commission_rate=15, signature="data:image/png;base64,JOSE"),
        make_identity("u4", "Luis Gómez"),
    ]


@pytest.fixture
def seeded_directory(temp_db, directory):
    """Store the sample directory in the temporary database."""
    for identity in directory:
        temp_db.create_identity(
            identity.id,
            identity.display_name,
            commission_rate=identity.commission_rate,
            signature=identity.signature,
            role="technician",
        )
    return directory


@pytest.fixture
def seeded_fleet(temp_db):
    """Two vehicles and drivers with different contract dates."""
    temp_db.create_resource("v1", "ABC-123", Decimal("250.00"))
    temp_db.create_resource("v2", "XYZ-987", Decimal("300.00"))
    temp_db.create_subscriber("d1", "Carlos Ruiz", assigned_resource_id="v1", contract_start_date=date(2025, 1, 10))
    temp_db.create_subscriber("d2", "Marta Díaz", assigned_resource_id="v2", contract_start_date=date(2025, 1, 14))
    temp_db.create_subscriber("d3", "Pedro Sol", assigned_resource_id="v1", archived=True)
    temp_db.create_subscriber("d4", "Raúl Vega")
    return temp_db


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def identity_factory():
    """Build directory identities with their normalized names filled in."""
    return make_identity
