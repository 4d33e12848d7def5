"""Tests for the simulated oracle agents."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from flightsurety.agents import OraclePool, fixed_status
from flightsurety.app import FlightSuretyApp
from flightsurety.types import FlightStatusCode

from conftest import DEPARTURE, FIRST_AIRLINE, FLIGHT, OWNER

if TYPE_CHECKING:
    from pytest_mock.plugin import MockerFixture


def test_requests_are_queued_until_dispatch(app: FlightSuretyApp, flight) -> None:
    pool = OraclePool(app, picker=fixed_status(FlightStatusCode.LATE_AIRLINE))
    pool.register_many(3)

    app.request_flight_status(OWNER, FIRST_AIRLINE, FLIGHT, DEPARTURE)

    assert pool.pending() == 1
    assert app.view_flight_status(FLIGHT, FIRST_AIRLINE) is None

    assert pool.dispatch() == 20
    assert pool.pending() == 0
    assert app.view_flight_status(FLIGHT, FIRST_AIRLINE) == 20


def test_only_index_holders_answer(app: FlightSuretyApp, flight, mocker: "MockerFixture") -> None:
    pool = OraclePool(app)
    agents = pool.register_many(4)
    agents[3].indexes = (7, 8, 9)
    submit = mocker.spy(app, "submit_oracle_response")

    app.request_flight_status(OWNER, FIRST_AIRLINE, FLIGHT, DEPARTURE)
    pool.dispatch()

    callers: List[str] = [call.args[0] for call in submit.call_args_list]
    assert agents[3].identity not in callers
    assert len(callers) == 3
    assert app.view_flight_status(FLIGHT, FIRST_AIRLINE) == int(FlightStatusCode.ON_TIME)


def test_repeated_requests_are_tolerated(app: FlightSuretyApp, flight) -> None:
    """A second request on a finalized flight is answered without errors."""
    pool = OraclePool(app, picker=fixed_status(FlightStatusCode.LATE_WEATHER))
    pool.register_many(3)

    app.request_flight_status(OWNER, FIRST_AIRLINE, FLIGHT, DEPARTURE)
    app.request_flight_status(OWNER, FIRST_AIRLINE, FLIGHT, DEPARTURE)

    assert pool.dispatch() == 30
    assert app.view_flight_status(FLIGHT, FIRST_AIRLINE) == 30


def test_agent_specific_picker(app: FlightSuretyApp, flight) -> None:
    pool = OraclePool(app, picker=fixed_status(FlightStatusCode.ON_TIME))
    for n in range(3):
        pool.register(f"late-{n}", picker=fixed_status(FlightStatusCode.LATE_TECHNICAL))
    pool.register_many(2)

    app.request_flight_status(OWNER, FIRST_AIRLINE, FLIGHT, DEPARTURE)

    assert pool.dispatch() == 40
