"""Airline admission and funding.

The registry decides who may act on behalf of the network. The first
``bootstrap_airlines`` airlines are admitted on the word of an active
sponsor; later candidates need votes from half of the active airlines,
counted at the moment each vote is cast. An admitted airline becomes active
once it has escrowed the minimum funding.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from flightsurety.config import Settings, get_settings
from flightsurety.consensus.quorum import required_vote_count, within_bootstrap
from flightsurety.errors import (
    AlreadyFunded,
    AlreadyRegistered,
    DuplicateAirline,
    DuplicateVote,
    InsufficientFunds,
    SponsorNotActive,
    Unauthorized,
    UnknownAirline,
)
from flightsurety.events import EventBus, EventType
from flightsurety.guard import OperationalGuard
from flightsurety.ledger import ESCROW, Ledger
from flightsurety.types import Airline, AirlineStatus, Amount, Identity

LOGGER = logging.getLogger(__name__)


class AirlineRegistry:
    """Append-only registry of airlines, in application order."""

    def __init__(
        self,
        ledger: Ledger,
        guard: OperationalGuard,
        events: EventBus,
        settings: Optional[Settings] = None,
    ) -> None:
        self._ledger = ledger
        self._guard = guard
        self._events = events
        self._settings = settings or get_settings()
        self._airlines: Dict[Identity, Airline] = {}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_airline(self, identity: Identity) -> Optional[Airline]:
        return self._airlines.get(identity)

    def is_registered(self, identity: Identity) -> bool:
        """Return True for admitted airlines, funded or not."""
        airline = self._airlines.get(identity)
        return airline is not None and airline.is_registered

    def is_active(self, identity: Identity) -> bool:
        airline = self._airlines.get(identity)
        return airline is not None and airline.is_active

    def list_airlines(self) -> List[Airline]:
        """Return every airline in insertion order."""
        return list(self._airlines.values())

    def registered_count(self) -> int:
        return sum(1 for airline in self._airlines.values() if airline.is_registered)

    def active_count(self) -> int:
        return sum(1 for airline in self._airlines.values() if airline.is_active)

    def required_votes(self) -> int:
        """Return the votes a pending candidate needs right now."""
        return required_vote_count(self.active_count())

    def require_active(self, identity: Identity) -> Airline:
        airline = self._airlines.get(identity)
        if airline is None or not airline.is_active:
            raise SponsorNotActive(f"{identity} is not an active airline")
        return airline

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_genesis(self, identity: Identity, name: str) -> Airline:
        """Seed the registry with the deploying airline, admitted but unfunded."""
        if self._airlines:
            raise ValueError("Genesis airline can only be added to an empty registry")
        airline = Airline(identity=identity, name=name, status=AirlineStatus.REGISTERED)
        self._airlines[identity] = airline
        LOGGER.info("Genesis airline %s (%s) registered", name, identity)
        self._events.publish(EventType.AIRLINE_REGISTERED, airline=identity, name=name, votes=0)
        return airline

    def apply(self, candidate: Identity, name: str, sponsor: Identity) -> Airline:
        """Submit *candidate* on behalf of an active *sponsor*.

        Returns:
            The new airline record, either ``REGISTERED`` (bootstrap phase)
            or ``APPLIED`` awaiting votes.
        """
        self._guard.require_operational()
        self.require_active(sponsor)
        if candidate in self._airlines:
            raise DuplicateAirline(f"{candidate} has already applied")

        if within_bootstrap(self.registered_count(), self._settings.bootstrap_airlines):
            status = AirlineStatus.REGISTERED
        else:
            status = AirlineStatus.APPLIED
        airline = Airline(identity=candidate, name=name, status=status, sponsor=sponsor)
        self._airlines[candidate] = airline

        self._events.publish(EventType.AIRLINE_APPLIED, airline=candidate, name=name, sponsor=sponsor)
        if status is AirlineStatus.REGISTERED:
            LOGGER.info("Airline %s admitted by %s without vote", candidate, sponsor)
            self._events.publish(EventType.AIRLINE_REGISTERED, airline=candidate, name=name, votes=0)
        else:
            LOGGER.info(
                "Airline %s applied; %s votes required", candidate, self.required_votes()
            )
        return airline

    def submit_vote(self, candidate: Identity, voter: Identity) -> bool:
        """Record *voter*'s approval of *candidate*.

        The threshold is recomputed from the active airlines at each vote.

        Returns:
            True if this vote admitted the candidate.
        """
        self._guard.require_operational()
        self.require_active(voter)
        airline = self._airlines.get(candidate)
        if airline is None:
            raise UnknownAirline(f"{candidate} has not applied")
        if airline.status is not AirlineStatus.APPLIED:
            raise AlreadyRegistered(f"{candidate} is already {airline.status.value}")
        if voter in airline.votes:
            raise DuplicateVote(f"{voter} already voted for {candidate}")

        airline.votes.add(voter)
        required = self.required_votes()
        self._events.publish(
            EventType.AIRLINE_VOTED, airline=candidate, voter=voter, votes=len(airline.votes), required=required
        )
        LOGGER.debug("Airline %s has %s/%s votes", candidate, len(airline.votes), required)
        if len(airline.votes) < required:
            return False

        airline.advance(AirlineStatus.REGISTERED)
        LOGGER.info("Airline %s registered after %s votes", candidate, len(airline.votes))
        self._events.publish(
            EventType.AIRLINE_REGISTERED, airline=candidate, name=airline.name, votes=len(airline.votes)
        )
        return True

    def fund(self, identity: Identity, amount: Amount) -> Airline:
        """Escrow *amount* from the airline and activate it.

        Raises:
            Unauthorized: If the airline has not been admitted.
            AlreadyFunded: If the airline is already active.
            InsufficientFunds: If *amount* is below the minimum or the
                airline's balance does not cover it.
        """
        self._guard.require_operational()
        airline = self._airlines.get(identity)
        if airline is None or not airline.is_registered:
            raise Unauthorized(f"{identity} is not a registered airline")
        if airline.is_active:
            raise AlreadyFunded(f"{identity} is already active")
        if amount < self._settings.min_funds:
            raise InsufficientFunds(
                f"Funding of {amount} is below the minimum of {self._settings.min_funds}"
            )

        self._ledger.transfer(identity, ESCROW, amount)
        airline.funds += amount
        airline.advance(AirlineStatus.ACTIVE)
        LOGGER.info("Airline %s funded with %s and is now active", identity, amount)
        self._events.publish(EventType.AIRLINE_FUNDED, airline=identity, amount=amount)
        return airline

    def restore(self, airlines: List[Airline]) -> None:
        """Replace the registry content, preserving the given order."""
        self._airlines = {airline.identity: airline for airline in airlines}


__all__ = ["AirlineRegistry"]
