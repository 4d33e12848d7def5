"""Tests for persisting and restoring the full system state."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, List

import pytest

from flightsurety.app import FlightSuretyApp
from flightsurety.config import UNIT, Settings
from flightsurety.errors import DuplicatePurchase, DuplicateResponse, SystemPaused
from flightsurety.snapshot import SNAPSHOT_VERSION

from conftest import DEPARTURE, FIRST_AIRLINE, FLIGHT, OWNER

if TYPE_CHECKING:
    from _pytest.fixtures import FixtureRequest


def test_save_and_load_preserves_state(
    app: FlightSuretyApp,
    settings: Settings,
    flight,
    passenger: str,
    oracles: List[str],
    tmp_path: Path,
) -> None:
    app.apply_airline(FIRST_AIRLINE, "airline-4", "Airline 4")
    app.submit_airline_vote("airline-1", "airline-4")
    app.buy_insurance(passenger, FLIGHT, UNIT)
    app.submit_oracle_response(oracles[0], 0, FIRST_AIRLINE, FLIGHT, DEPARTURE, 20)

    path = app.save(tmp_path / "state" / "flightsurety.json")
    restored = FlightSuretyApp.load(path, settings)

    assert restored.list_airlines() == app.list_airlines()
    assert restored.airlines.get_airline("airline-4").votes == {"airline-1"}
    assert restored.is_airline_active("airline-3") is True
    assert restored.balance_of(passenger) == app.balance_of(passenger)
    assert restored.get_my_indexes(oracles[0]) == app.get_my_indexes(oracles[0])
    assert restored.ledger.balances() == app.ledger.balances()

    # Pending vote, purchase and tally carry on after the restore.
    with pytest.raises(DuplicatePurchase):
        restored.buy_insurance(passenger, FLIGHT, UNIT)
    with pytest.raises(DuplicateResponse):
        restored.submit_oracle_response(oracles[0], 0, FIRST_AIRLINE, FLIGHT, DEPARTURE, 20)
    assert restored.submit_airline_vote("airline-2", "airline-4") is True
    restored.submit_oracle_response(oracles[1], 0, FIRST_AIRLINE, FLIGHT, DEPARTURE, 20)
    assert restored.submit_oracle_response(oracles[2], 0, FIRST_AIRLINE, FLIGHT, DEPARTURE, 20) == 20
    assert restored.get_credit(passenger) == UNIT * 3 // 2


def test_snapshot_keeps_operational_flag(app: FlightSuretyApp, settings: Settings) -> None:
    app.set_operational_status(OWNER, False)

    restored = FlightSuretyApp.from_snapshot(json.loads(json.dumps(app.snapshot())), settings)

    assert restored.is_operational() is False
    with pytest.raises(SystemPaused):
        restored.deposit("anyone", 1)
    assert restored.guard.is_caller_authorized(restored.oracles.identity)


def test_snapshot_version_is_checked(app: FlightSuretyApp) -> None:
    payload = app.snapshot()
    assert payload["version"] == SNAPSHOT_VERSION

    payload["version"] = SNAPSHOT_VERSION + 1
    with pytest.raises(ValueError):
        FlightSuretyApp.from_snapshot(payload)
