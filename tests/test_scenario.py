"""End-to-end flow: airline admission, insurance purchase, oracle quorum, payout."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flightsurety.agents import OraclePool, fixed_status
from flightsurety.app import FlightSuretyApp
from flightsurety.config import UNIT, Settings
from flightsurety.events import EventType
from flightsurety.types import FlightStatusCode

if TYPE_CHECKING:
    from _pytest.fixtures import FixtureRequest

OWNER = "owner"
AIRLINES = [f"airline-{n}" for n in range(5)]
PASSENGER = "passenger-10"
FLIGHT = "ND1309"
DEPARTURE = 1_700_000_000


def _fund(app: FlightSuretyApp, airline: str) -> None:
    app.deposit(airline, app.settings.min_funds)
    app.fund_airline(airline, app.settings.min_funds)


def test_delayed_flight_pays_passenger() -> None:
    settings = Settings()
    app = FlightSuretyApp(OWNER, AIRLINES[0], "Genesis Air", settings)

    # Four airlines join without votes.
    _fund(app, AIRLINES[0])
    for airline in AIRLINES[1:4]:
        app.apply_airline(AIRLINES[0], airline, airline.title())
        _fund(app, airline)
    assert all(app.is_airline_active(airline) for airline in AIRLINES[:4])

    # The fifth needs ceil(4 / 2) = 2 votes.
    app.apply_airline(AIRLINES[0], AIRLINES[4], "United Test Airline")
    app.submit_airline_vote(AIRLINES[1], AIRLINES[4])
    assert app.is_airline_registered(AIRLINES[4]) is False
    app.submit_airline_vote(AIRLINES[2], AIRLINES[4])
    assert app.is_airline_registered(AIRLINES[4]) is True
    _fund(app, AIRLINES[4])

    app.register_flight(AIRLINES[4], FLIGHT, DEPARTURE)
    app.deposit(PASSENGER, 2 * UNIT)
    app.buy_insurance(PASSENGER, FLIGHT, settings.max_insurance_amt)

    pool = OraclePool(app, picker=fixed_status(FlightStatusCode.LATE_AIRLINE))
    pool.register_many(20)
    index = app.request_flight_status(OWNER, AIRLINES[4], FLIGHT, DEPARTURE)
    # Keep enrolling oracles until the requested index has enough holders.
    while len(pool.holders(index)) < settings.min_responses:
        assert pool.register_many(1)
        assert len(pool.agents) < 500

    assert pool.dispatch() == FlightStatusCode.LATE_AIRLINE
    assert app.view_flight_status(FLIGHT, AIRLINES[4]) == 20

    credit = app.get_credit(PASSENGER)
    assert credit == settings.max_insurance_amt * 3 // 2 == UNIT + UNIT // 2

    balance_before = app.balance_of(PASSENGER)
    assert app.withdraw_credit(PASSENGER) == credit
    assert app.get_credit(PASSENGER) == 0
    assert app.balance_of(PASSENGER) == balance_before + credit

    paid = app.events.history(EventType.CREDIT_PAID)
    assert [event.payload for event in paid] == [{"passenger": PASSENGER, "amount": credit}]
