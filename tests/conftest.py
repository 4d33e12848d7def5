"""Shared fixtures for FlightSurety tests."""

from __future__ import annotations

from typing import Callable, List

import pytest

from flightsurety.app import FlightSuretyApp
from flightsurety.config import UNIT, Settings

OWNER = "owner"
FIRST_AIRLINE = "airline-0"
PASSENGER = "passenger-1"
FLIGHT = "ND1309"
DEPARTURE = 1_700_000_000


@pytest.fixture
def settings() -> Settings:
    """Settings with an index range of three so every oracle holds every index."""
    return Settings(index_range=3)


@pytest.fixture
def app(settings: Settings) -> FlightSuretyApp:
    return FlightSuretyApp(OWNER, FIRST_AIRLINE, "Genesis Air", settings)


@pytest.fixture
def fund(app: FlightSuretyApp) -> Callable[[str], None]:
    """Return a helper that deposits and pays the minimum funding for an airline."""

    def _fund(airline: str) -> None:
        app.deposit(airline, app.settings.min_funds)
        app.fund_airline(airline, app.settings.min_funds)

    return _fund


@pytest.fixture
def active_airlines(app: FlightSuretyApp, fund: Callable[[str], None]) -> List[str]:
    """Four funded airlines admitted during the bootstrap phase."""
    fund(FIRST_AIRLINE)
    airlines = [FIRST_AIRLINE]
    for n in range(1, 4):
        candidate = f"airline-{n}"
        app.apply_airline(FIRST_AIRLINE, candidate, f"Airline {n}")
        fund(candidate)
        airlines.append(candidate)
    return airlines


@pytest.fixture
def flight(app: FlightSuretyApp, active_airlines: List[str]):
    return app.register_flight(FIRST_AIRLINE, FLIGHT, DEPARTURE)


@pytest.fixture
def oracles(app: FlightSuretyApp) -> List[str]:
    """Five registered oracles, each holding indexes 0, 1 and 2."""
    identities = [f"oracle-{n}" for n in range(5)]
    for identity in identities:
        app.deposit(identity, app.settings.registration_fee)
        app.register_oracle(identity, app.settings.registration_fee)
    return identities


@pytest.fixture
def passenger(app: FlightSuretyApp) -> str:
    app.deposit(PASSENGER, 5 * UNIT)
    return PASSENGER
