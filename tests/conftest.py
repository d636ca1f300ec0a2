"""
Shared pytest fixtures: a SQLite-backed Database per test, the fake Aladhan
client, and a ServiceContext/TestClient wired to both.
"""
from datetime import date

import pytest

from athan_service.core.context import ServiceContext
from athan_service.core.db import Database
from athan_service.core.models import City
from athan_service.plugins.prayer.strategies import AthanService
from tests.fake_client import FakeAladhanClient

FIXED_TODAY = date(2024, 7, 15)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "athan_test.db"


@pytest.fixture
def database(db_path):
    db = Database(f"sqlite:///{db_path}")
    db.init()
    yield db
    db.close()


@pytest.fixture
def cities(database):
    """Cairo, Alexandria (Egypt) and Casablanca (Morocco); returns name -> id."""
    with database.session_scope() as session:
        rows = [
            City(name="Cairo", country_name="Egypt"),
            City(name="Alexandria", country_name="Egypt"),
            City(name="Casablanca", country_name="Morocco"),
        ]
        session.add_all(rows)
        session.flush()
        return {r.name: r.id for r in rows}


@pytest.fixture
def fake_client():
    return FakeAladhanClient()


@pytest.fixture
def athan_service(fake_client):
    return AthanService(fake_client, today=lambda: FIXED_TODAY)


@pytest.fixture
def ctx(database, fake_client):
    context = ServiceContext({"prayer": {"default_method": 2}}, database, client=fake_client)
    context.athan_service = AthanService(fake_client, today=lambda: FIXED_TODAY)
    return context


@pytest.fixture
def api_client(ctx):
    from fastapi.testclient import TestClient

    from athan_service.api.server import create_app

    with TestClient(create_app(ctx)) as client:
        yield client
