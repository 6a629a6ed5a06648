"""Shared fixtures for API tests."""

from __future__ import annotations

import httpx
import pytest

from airport.api.app import app
from airport.api.deps import get_current_user
from tests.factories import make_flight, make_network, make_passenger, make_ticket

TEST_USER_ID = 1


@pytest.fixture
def test_app(db_manager):
    """FastAPI app on a temporary database, authenticated as a fixed user."""
    app.dependency_overrides[get_current_user] = lambda: TEST_USER_ID
    app.state.db_manager = db_manager
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(test_app):
    """httpx AsyncClient wired to the test app."""
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def anonymous_client(db_manager, monkeypatch):
    """Client without the auth override: requests need a real bearer token."""
    monkeypatch.delenv("AIRPORT_AUTH_DISABLED", raising=False)
    app.dependency_overrides.clear()
    app.state.db_manager = db_manager
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def network(db_manager):
    return make_network(db_manager)


@pytest.fixture
def flight(db_manager, network):
    return make_flight(db_manager, network)


@pytest.fixture
def passenger(db_manager):
    return make_passenger(db_manager)


@pytest.fixture
def ticket(db_manager, passenger, flight):
    return make_ticket(db_manager, passenger.passenger_id, flight.flight_id, seat_number="A1")
