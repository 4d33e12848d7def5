"""Base types and data structures for the FlightSurety insurance system."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Set, Tuple


Identity = str
FlightKey = str
Amount = int
ResponseKey = Tuple[int, Identity, FlightKey, int]
EventPayload = Dict[str, Any]


class AirlineStatus(Enum):
    """Admission state of an airline in the registry."""

    APPLIED = "applied"
    REGISTERED = "registered"
    ACTIVE = "active"

    @property
    def rank(self) -> int:
        """Return the position of the status in the admission order."""
        return _AIRLINE_STATUS_ORDER.index(self)


_AIRLINE_STATUS_ORDER: List[AirlineStatus] = [
    AirlineStatus.APPLIED,
    AirlineStatus.REGISTERED,
    AirlineStatus.ACTIVE,
]


class FlightStatusCode(IntEnum):
    """Status codes oracles may report for a flight."""

    UNKNOWN = 0
    ON_TIME = 10
    LATE_AIRLINE = 20
    LATE_WEATHER = 30
    LATE_TECHNICAL = 40
    LATE_OTHER = 50

    @classmethod
    def is_valid(cls, code: int) -> bool:
        """Return True if *code* is one of the known status codes."""
        try:
            cls(code)
        except ValueError:
            return False
        return True

    @property
    def pays_out(self) -> bool:
        """Only delays attributed to the airline are insured."""
        return self is FlightStatusCode.LATE_AIRLINE


@dataclass
class Airline:
    """Airline participating in the trust network."""

    identity: Identity
    name: str
    status: AirlineStatus
    sponsor: Optional[Identity] = None
    votes: Set[Identity] = field(default_factory=set)
    funds: Amount = 0

    def advance(self, status: AirlineStatus) -> None:
        """Move the airline forward to *status*.

        Raises:
            ValueError: If the transition would move backwards or stand still.
        """
        if status.rank <= self.status.rank:
            raise ValueError(
                f"Airline {self.identity} cannot move from {self.status.value} to {status.value}"
            )
        self.status = status

    @property
    def is_registered(self) -> bool:
        """Registered airlines include the funded (active) ones."""
        return self.status in (AirlineStatus.REGISTERED, AirlineStatus.ACTIVE)

    @property
    def is_active(self) -> bool:
        return self.status is AirlineStatus.ACTIVE


@dataclass
class Flight:
    """Flight registered by an active airline."""

    airline: Identity
    flight_key: FlightKey
    timestamp: int
    status_code: Optional[int] = None
    finalized: bool = False

    @property
    def key(self) -> Tuple[Identity, FlightKey, int]:
        """Return the registry key of the flight."""
        return (self.airline, self.flight_key, self.timestamp)


@dataclass
class InsurancePurchase:
    """Insurance bought by a passenger against a flight delay."""

    passenger: Identity
    flight_key: FlightKey
    amount_paid: Amount
    credit_owed: Amount = 0
    # Set once the flight outcome has been applied to this purchase.
    settled: bool = False


@dataclass(frozen=True)
class Oracle:
    """Registered oracle and the indexes it is allowed to answer."""

    identity: Identity
    indexes: Tuple[int, int, int]
    sequence: int

    def holds(self, index: int) -> bool:
        """Return True if *index* is one of the oracle's assigned indexes."""
        return index in self.indexes


@dataclass
class OracleResponseTally:
    """Responses gathered for one (index, airline, flight, timestamp) key."""

    key: ResponseKey
    requester: Optional[Identity] = None
    is_open: bool = True
    responses: Dict[int, Set[Identity]] = field(default_factory=dict)
    finalized_code: Optional[int] = None

    @property
    def responders(self) -> Set[Identity]:
        """Return every oracle that answered this key, whatever the code."""
        seen: Set[Identity] = set()
        for voters in self.responses.values():
            seen |= voters
        return seen

    def record(self, oracle: Identity, status_code: int) -> int:
        """Add a response and return the count for *status_code*."""
        voters = self.responses.setdefault(status_code, set())
        voters.add(oracle)
        return len(voters)


__all__ = [
    "Identity",
    "FlightKey",
    "Amount",
    "ResponseKey",
    "EventPayload",
    "AirlineStatus",
    "FlightStatusCode",
    "Airline",
    "Flight",
    "InsurancePurchase",
    "Oracle",
    "OracleResponseTally",
]
