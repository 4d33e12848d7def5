"""Tests for the operational guard and caller authorization."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

import pytest

from flightsurety.app import FlightSuretyApp
from flightsurety.errors import SystemPaused, Unauthorized
from flightsurety.events import EventBus, EventType
from flightsurety.guard import OperationalGuard

from conftest import FIRST_AIRLINE, OWNER

if TYPE_CHECKING:
    from _pytest.fixtures import FixtureRequest


def test_initial_operational_status(app: FlightSuretyApp) -> None:
    """The system starts operational."""
    assert app.is_operational() is True


def test_non_owner_cannot_change_status(app: FlightSuretyApp) -> None:
    """Only the owner may pause the system."""
    with pytest.raises(Unauthorized):
        app.set_operational_status("mallory", False)
    assert app.is_operational() is True


def test_owner_can_pause_and_resume(app: FlightSuretyApp) -> None:
    """The owner may flip the status both ways, and a no-op flip is rejected."""
    app.set_operational_status(OWNER, False)
    assert app.is_operational() is False

    with pytest.raises(ValueError):
        app.set_operational_status(OWNER, False)

    app.set_operational_status(OWNER, True)
    assert app.is_operational() is True


def test_paused_system_blocks_mutations(app: FlightSuretyApp, active_airlines: List[str]) -> None:
    """Every mutating call fails with SystemPaused while paused."""
    app.apply_airline(FIRST_AIRLINE, "airline-4", "Airline 4")
    app.set_operational_status(OWNER, False)

    with pytest.raises(SystemPaused):
        app.apply_airline(FIRST_AIRLINE, "airline-9", "Airline 9")
    with pytest.raises(SystemPaused):
        app.submit_airline_vote(active_airlines[1], "airline-4")
    with pytest.raises(SystemPaused):
        app.fund_airline("airline-4", app.settings.min_funds)
    with pytest.raises(SystemPaused):
        app.register_flight(FIRST_AIRLINE, "ND1309", 1)
    with pytest.raises(SystemPaused):
        app.request_flight_status(OWNER, FIRST_AIRLINE, "ND1309", 1)
    with pytest.raises(SystemPaused):
        app.register_oracle("oracle", app.settings.registration_fee)
    with pytest.raises(SystemPaused):
        app.submit_oracle_response("oracle", 0, FIRST_AIRLINE, "ND1309", 1, 20)
    with pytest.raises(SystemPaused):
        app.buy_insurance("passenger", "ND1309", 1)
    with pytest.raises(SystemPaused):
        app.withdraw_credit("passenger")
    with pytest.raises(SystemPaused):
        app.deposit("passenger", 1)

    # Reads stay available.
    assert app.is_airline_active(FIRST_AIRLINE) is True
    assert app.list_airlines() == active_airlines + ["airline-4"]
    assert app.is_airline_registered("airline-4") is False


def test_status_change_is_published() -> None:
    """Flipping the status notifies observers."""
    events = EventBus()
    guard = OperationalGuard("owner", events=events)

    guard.set_operational_status("owner", False)

    history = events.history(EventType.OPERATIONAL_STATUS_CHANGED)
    assert len(history) == 1
    assert history[0].payload == {"operational": False}


def test_authorized_callers_are_owner_managed() -> None:
    """Only the owner grants or revokes caller authorization."""
    guard = OperationalGuard("owner")

    with pytest.raises(Unauthorized):
        guard.authorize_caller("mallory", "app")
    guard.authorize_caller("owner", "app")
    assert guard.is_caller_authorized("app")
    guard.require_authorized_caller("app")

    guard.deauthorize_caller("owner", "app")
    with pytest.raises(Unauthorized):
        guard.require_authorized_caller("app")
