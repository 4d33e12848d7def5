"""Caller-facing facade over the FlightSurety state machine.

Every public method takes the identity of the caller first (where the call
needs one) and runs under a single re-entrant lock, so each call is applied
as one atomic transition before the next one starts.
"""

from __future__ import annotations

import functools
import logging
import threading
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple, TypeVar, Union

from flightsurety.airlines import AirlineRegistry
from flightsurety.config import Settings, get_settings
from flightsurety.consensus.oracles import OracleConsensus
from flightsurety.events import EventBus, EventType, Handler
from flightsurety.flights import FlightRegistry
from flightsurety.guard import OperationalGuard
from flightsurety.insurance import InsurancePolicy
from flightsurety.ledger import Ledger
from flightsurety.types import Airline, Amount, FlightKey, Identity

LOGGER = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def synchronized(method: F) -> F:
    """Run *method* while holding the app-wide lock."""

    @functools.wraps(method)
    def wrapper(self: "FlightSuretyApp", *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


class FlightSuretyApp:
    """Owns every registry and exposes the call interface used by clients."""

    def __init__(
        self,
        owner: Identity,
        first_airline: Identity,
        first_airline_name: str = "First Airline",
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.owner = owner
        self._lock = threading.RLock()

        self.events = EventBus(history_size=self.settings.event_history_size)
        self.ledger = Ledger()
        self.guard = OperationalGuard(owner, events=self.events)
        self.airlines = AirlineRegistry(self.ledger, self.guard, self.events, self.settings)
        self.flights = FlightRegistry(self.airlines, self.guard, self.events)
        self.oracles = OracleConsensus(self.flights, self.ledger, self.guard, self.events, self.settings)
        self.insurance = InsurancePolicy(self.ledger, self.flights, self.guard, self.events, self.settings)

        self.guard.authorize_caller(owner, self.oracles.identity)
        self.airlines.add_genesis(first_airline, first_airline_name)
        LOGGER.info("FlightSurety deployed by %s with first airline %s", owner, first_airline)

    # ------------------------------------------------------------------
    # Operations and settings
    # ------------------------------------------------------------------

    def is_operational(self) -> bool:
        return self.guard.is_operational()

    @synchronized
    def set_operational_status(self, caller: Identity, value: bool) -> None:
        self.guard.set_operational_status(caller, value)

    @synchronized
    def authorize_caller(self, caller: Identity, identity: Identity) -> None:
        self.guard.authorize_caller(caller, identity)

    @synchronized
    def deauthorize_caller(self, caller: Identity, identity: Identity) -> None:
        self.guard.deauthorize_caller(caller, identity)

    # ------------------------------------------------------------------
    # Wallet
    # ------------------------------------------------------------------

    @synchronized
    def deposit(self, identity: Identity, amount: Amount) -> Amount:
        """Top up *identity*'s balance from outside the system."""
        self.guard.require_operational()
        return self.ledger.credit(identity, amount)

    def balance_of(self, identity: Identity) -> Amount:
        return self.ledger.balance_of(identity)

    # ------------------------------------------------------------------
    # Airlines
    # ------------------------------------------------------------------

    @synchronized
    def apply_airline(self, caller: Identity, candidate: Identity, name: str) -> Airline:
        return self.airlines.apply(candidate, name, sponsor=caller)

    @synchronized
    def submit_airline_vote(self, caller: Identity, candidate: Identity) -> bool:
        return self.airlines.submit_vote(candidate, voter=caller)

    @synchronized
    def fund_airline(self, caller: Identity, amount: Amount) -> Airline:
        return self.airlines.fund(caller, amount)

    def is_airline_active(self, identity: Identity) -> bool:
        return self.airlines.is_active(identity)

    def is_airline_registered(self, identity: Identity) -> bool:
        return self.airlines.is_registered(identity)

    @synchronized
    def list_airlines(self) -> List[Identity]:
        return [airline.identity for airline in self.airlines.list_airlines()]

    # ------------------------------------------------------------------
    # Flights and oracles
    # ------------------------------------------------------------------

    @synchronized
    def register_flight(self, caller: Identity, flight_key: FlightKey, timestamp: int):
        return self.flights.register_flight(caller, flight_key, timestamp)

    @synchronized
    def view_flight_status(self, flight_key: FlightKey, airline: Identity) -> Optional[int]:
        return self.flights.view_status(flight_key, airline)

    @synchronized
    def request_flight_status(
        self, caller: Identity, airline: Identity, flight_key: FlightKey, timestamp: int
    ) -> int:
        return self.oracles.request_status(caller, airline, flight_key, timestamp)

    @synchronized
    def register_oracle(self, caller: Identity, fee: Amount) -> Tuple[int, ...]:
        return self.oracles.register_oracle(caller, fee)

    def get_my_indexes(self, caller: Identity) -> Tuple[int, ...]:
        return self.oracles.get_my_indexes(caller)

    @synchronized
    def submit_oracle_response(
        self,
        caller: Identity,
        index: int,
        airline: Identity,
        flight_key: FlightKey,
        timestamp: int,
        status_code: int,
    ) -> Optional[int]:
        return self.oracles.submit_response(caller, index, airline, flight_key, timestamp, status_code)

    # ------------------------------------------------------------------
    # Insurance
    # ------------------------------------------------------------------

    @synchronized
    def buy_insurance(self, caller: Identity, flight_key: FlightKey, amount: Amount):
        return self.insurance.buy(caller, flight_key, amount)

    @synchronized
    def get_credit(self, caller: Identity) -> Amount:
        return self.insurance.get_credit(caller)

    @synchronized
    def is_passenger(self, identity: Identity) -> bool:
        return self.insurance.is_passenger(identity)

    @synchronized
    def withdraw_credit(self, caller: Identity) -> Amount:
        return self.insurance.pay(caller)

    # ------------------------------------------------------------------
    # Observers and persistence
    # ------------------------------------------------------------------

    def subscribe(self, event_type: Optional[EventType], handler: Handler) -> None:
        self.events.subscribe(event_type, handler)

    def unsubscribe(self, event_type: Optional[EventType], handler: Handler) -> None:
        self.events.unsubscribe(event_type, handler)

    @synchronized
    def snapshot(self) -> dict:
        from flightsurety.snapshot import state_to_payload

        return state_to_payload(self)

    @classmethod
    def from_snapshot(cls, payload: dict, settings: Optional[Settings] = None) -> "FlightSuretyApp":
        from flightsurety.snapshot import state_from_payload

        return state_from_payload(payload, settings)

    def save(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Persist the state to *path*, or to the configured ``snapshot_path``."""
        from flightsurety.snapshot import save_snapshot

        target = path or self.settings.snapshot_path
        if target is None:
            raise ValueError("No snapshot path given and none configured")
        with self._lock:
            return save_snapshot(self, target)

    @classmethod
    def load(cls, path: Union[str, Path], settings: Optional[Settings] = None) -> "FlightSuretyApp":
        from flightsurety.snapshot import load_snapshot

        return load_snapshot(path, settings)


__all__ = ["FlightSuretyApp", "synchronized"]
