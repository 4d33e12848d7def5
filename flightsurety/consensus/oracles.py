"""Oracle registration, status requests and response tallying.

Each oracle holds three indexes. A status request picks one index and only
oracles holding it may answer; the first status code reported by
``min_responses`` distinct oracles for the same request key becomes the
flight's final status.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from flightsurety.config import Settings, get_settings
from flightsurety.consensus.indexes import assign_indexes, draw_index
from flightsurety.consensus.quorum import has_response_quorum
from flightsurety.errors import (
    DuplicateOracle,
    DuplicateResponse,
    IndexMismatch,
    InsufficientFunds,
    Unauthorized,
)
from flightsurety.events import EventBus, EventType
from flightsurety.flights import FlightRegistry
from flightsurety.guard import OperationalGuard
from flightsurety.ledger import ESCROW, Ledger
from flightsurety.types import (
    Amount,
    FlightKey,
    FlightStatusCode,
    Identity,
    Oracle,
    OracleResponseTally,
    ResponseKey,
)

LOGGER = logging.getLogger(__name__)

# Caller identity under which consensus finalizes flights.
CONSENSUS_CALLER: Identity = "flightsurety:oracle-consensus"


class OracleConsensus:
    """Collect oracle reports and finalize flight statuses at quorum."""

    def __init__(
        self,
        flights: FlightRegistry,
        ledger: Ledger,
        guard: OperationalGuard,
        events: EventBus,
        settings: Optional[Settings] = None,
        identity: Identity = CONSENSUS_CALLER,
    ) -> None:
        self.identity = identity
        self._flights = flights
        self._ledger = ledger
        self._guard = guard
        self._events = events
        self._settings = settings or get_settings()
        self._oracles: Dict[Identity, Oracle] = {}
        self._tallies: Dict[ResponseKey, OracleResponseTally] = {}
        self._request_sequence = 0

    @property
    def min_responses(self) -> int:
        return self._settings.min_responses

    # ------------------------------------------------------------------
    # Oracles
    # ------------------------------------------------------------------

    def register_oracle(self, identity: Identity, fee_paid: Amount) -> Tuple[int, ...]:
        """Register *identity* against the registration fee and return its indexes."""
        self._guard.require_operational()
        if identity in self._oracles:
            raise DuplicateOracle(f"{identity} is already a registered oracle")
        if fee_paid < self._settings.registration_fee:
            raise InsufficientFunds(
                f"Registration fee is {self._settings.registration_fee}, got {fee_paid}"
            )

        sequence = len(self._oracles)
        indexes = assign_indexes(
            self._settings.random_seed, identity, sequence, self._settings.index_range
        )
        self._ledger.transfer(identity, ESCROW, fee_paid)
        oracle = Oracle(identity=identity, indexes=indexes, sequence=sequence)  # type: ignore[arg-type]
        self._oracles[identity] = oracle
        LOGGER.info("Oracle %s registered with indexes %s", identity, indexes)
        self._events.publish(EventType.ORACLE_REGISTERED, oracle=identity, indexes=list(indexes))
        return oracle.indexes

    def get_oracle(self, identity: Identity) -> Optional[Oracle]:
        return self._oracles.get(identity)

    def is_registered_oracle(self, identity: Identity) -> bool:
        return identity in self._oracles

    def oracle_count(self) -> int:
        return len(self._oracles)

    def get_my_indexes(self, identity: Identity) -> Tuple[int, ...]:
        oracle = self._oracles.get(identity)
        if oracle is None:
            raise Unauthorized(f"{identity} is not a registered oracle")
        return oracle.indexes

    def list_oracles(self) -> List[Oracle]:
        return list(self._oracles.values())

    # ------------------------------------------------------------------
    # Requests and responses
    # ------------------------------------------------------------------

    def request_status(
        self, requester: Identity, airline: Identity, flight_key: FlightKey, timestamp: int
    ) -> int:
        """Open a status request and broadcast it to oracles.

        Returns immediately with the chosen index; the status is finalized
        later, if ever, by :meth:`submit_response`.
        """
        self._guard.require_operational()
        self._flights.require_flight(airline, flight_key, timestamp)

        index = draw_index(
            self._settings.random_seed,
            requester,
            self._request_sequence,
            0,
            self._settings.index_range,
        )
        self._request_sequence += 1
        key: ResponseKey = (index, airline, flight_key, timestamp)
        tally = self._tallies.get(key)
        if tally is None:
            self._tallies[key] = OracleResponseTally(key=key, requester=requester)
        elif tally.requester is None:
            tally.requester = requester

        LOGGER.info("Status requested for %s of %s at %s on index %s", flight_key, airline, timestamp, index)
        self._events.publish(
            EventType.ORACLE_REQUEST,
            index=index,
            airline=airline,
            flight=flight_key,
            timestamp=timestamp,
            requester=requester,
        )
        return index

    def submit_response(
        self,
        identity: Identity,
        index: int,
        airline: Identity,
        flight_key: FlightKey,
        timestamp: int,
        status_code: int,
    ) -> Optional[int]:
        """Record an oracle's report.

        Returns:
            The finalized status code when this response completed the
            quorum, otherwise None. Reports for a key or flight that is
            already finalized are ignored and also return None.
        """
        self._guard.require_operational()
        oracle = self._oracles.get(identity)
        if oracle is None:
            raise Unauthorized(f"{identity} is not a registered oracle")
        if not oracle.holds(index):
            raise IndexMismatch(f"Index {index} is not assigned to oracle {identity}")
        if not FlightStatusCode.is_valid(status_code):
            raise ValueError(f"Unknown flight status code {status_code}")
        flight = self._flights.require_flight(airline, flight_key, timestamp)

        key: ResponseKey = (index, airline, flight_key, timestamp)
        tally = self._tallies.get(key)
        if tally is not None and not tally.is_open:
            LOGGER.debug("Ignoring late response from %s for closed key %s", identity, key)
            return None
        if tally is not None and identity in tally.responders:
            raise DuplicateResponse(f"Oracle {identity} already responded for {key}")
        if flight.finalized:
            LOGGER.debug("Ignoring response from %s; flight %s already finalized", identity, flight_key)
            return None

        agreeing = set(tally.responses.get(status_code, ())) if tally is not None else set()
        completes_quorum = has_response_quorum(agreeing | {identity}, min_responses=self.min_responses)
        if completes_quorum:
            # Finalization must be allowed before the response is counted.
            self._guard.require_authorized_caller(self.identity)

        if tally is None:
            tally = self._tallies[key] = OracleResponseTally(key=key)
        tally.record(identity, status_code)
        self._events.publish(
            EventType.ORACLE_REPORT,
            oracle=identity,
            index=index,
            airline=airline,
            flight=flight_key,
            timestamp=timestamp,
            status=status_code,
        )

        if not completes_quorum:
            return None

        tally.is_open = False
        tally.finalized_code = status_code
        LOGGER.info("Quorum of %s reached for %s on status %s", self.min_responses, key, status_code)
        self._flights.finalize_status(self.identity, airline, flight_key, timestamp, status_code)
        return status_code

    def get_tally(self, key: ResponseKey) -> Optional[OracleResponseTally]:
        return self._tallies.get(key)

    def list_tallies(self) -> List[OracleResponseTally]:
        return list(self._tallies.values())

    @property
    def request_sequence(self) -> int:
        return self._request_sequence

    def restore(self, oracles: List[Oracle], tallies: List[OracleResponseTally], request_sequence: int) -> None:
        self._oracles = {oracle.identity: oracle for oracle in oracles}
        self._tallies = {tally.key: tally for tally in tallies}
        self._request_sequence = request_sequence


__all__ = ["OracleConsensus", "CONSENSUS_CALLER"]
