"""Flight registration and one-time status finalization."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Tuple

from flightsurety.errors import AlreadyFinalized, UnknownFlight
from flightsurety.events import EventBus, EventType
from flightsurety.guard import OperationalGuard
from flightsurety.types import Flight, FlightKey, FlightStatusCode, Identity

if TYPE_CHECKING:
    from flightsurety.airlines import AirlineRegistry

LOGGER = logging.getLogger(__name__)

FlightId = Tuple[Identity, FlightKey, int]
FinalizationListener = Callable[[Flight], None]


class FlightRegistry:
    """Flights keyed by ``(airline, flight_key, timestamp)``."""

    def __init__(self, airlines: "AirlineRegistry", guard: OperationalGuard, events: EventBus) -> None:
        self._airlines = airlines
        self._guard = guard
        self._events = events
        self._flights: Dict[FlightId, Flight] = {}
        self._listeners: List[FinalizationListener] = []

    def add_finalization_listener(self, listener: FinalizationListener) -> None:
        """Call *listener* with the flight right after its status is finalized."""
        self._listeners.append(listener)

    def get_flight(self, airline: Identity, flight_key: FlightKey, timestamp: int) -> Optional[Flight]:
        return self._flights.get((airline, flight_key, timestamp))

    def require_flight(self, airline: Identity, flight_key: FlightKey, timestamp: int) -> Flight:
        flight = self.get_flight(airline, flight_key, timestamp)
        if flight is None:
            raise UnknownFlight(f"Flight {flight_key} of {airline} at {timestamp} is not registered")
        return flight

    def list_flights(self) -> List[Flight]:
        return list(self._flights.values())

    def flights_for_key(self, flight_key: FlightKey) -> List[Flight]:
        """Return every registered flight sharing *flight_key*, whatever the airline."""
        return [flight for flight in self._flights.values() if flight.flight_key == flight_key]

    def register_flight(self, airline: Identity, flight_key: FlightKey, timestamp: int) -> Flight:
        """Register a flight for an active airline.

        Registering the same flight twice returns the existing record.
        """
        self._guard.require_operational()
        self._airlines.require_active(airline)
        key = (airline, flight_key, timestamp)
        existing = self._flights.get(key)
        if existing is not None:
            LOGGER.debug("Flight %s already registered; ignoring duplicate", key)
            return existing

        flight = Flight(airline=airline, flight_key=flight_key, timestamp=timestamp)
        self._flights[key] = flight
        LOGGER.info("Flight %s registered by %s for %s", flight_key, airline, timestamp)
        self._events.publish(
            EventType.FLIGHT_REGISTERED, airline=airline, flight=flight_key, timestamp=timestamp
        )
        return flight

    def finalize_status(
        self,
        caller: Identity,
        airline: Identity,
        flight_key: FlightKey,
        timestamp: int,
        status_code: int,
    ) -> Flight:
        """Record the authoritative status of a flight.

        Only authorized callers (the oracle consensus) may finalize, and only
        once per flight.
        """
        self._guard.require_operational()
        self._guard.require_authorized_caller(caller)
        flight = self.require_flight(airline, flight_key, timestamp)
        if flight.finalized:
            raise AlreadyFinalized(f"Flight {flight_key} already finalized with {flight.status_code}")
        code = FlightStatusCode(status_code)

        flight.status_code = int(code)
        flight.finalized = True
        LOGGER.info("Flight %s of %s finalized with status %s", flight_key, airline, code.name)
        self._events.publish(
            EventType.FLIGHT_STATUS_INFO,
            airline=airline,
            flight=flight_key,
            timestamp=timestamp,
            status=int(code),
        )
        for listener in self._listeners:
            listener(flight)
        return flight

    def view_status(self, flight_key: FlightKey, airline: Identity) -> Optional[int]:
        """Return the finalized status for the airline's flight, or None while pending."""
        for flight in self._flights.values():
            if flight.airline == airline and flight.flight_key == flight_key and flight.finalized:
                return flight.status_code
        return None

    def restore(self, flights: List[Flight]) -> None:
        self._flights = {flight.key: flight for flight in flights}


__all__ = ["FlightRegistry", "FlightId", "FinalizationListener"]
