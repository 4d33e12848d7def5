"""Passenger insurance purchases, delay credits and withdrawals."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set, Tuple

from flightsurety.config import Settings, get_settings
from flightsurety.errors import (
    AlreadyFinalized,
    DuplicatePurchase,
    InvalidAmount,
    NoCredit,
    UnknownFlight,
)
from flightsurety.events import EventBus, EventType
from flightsurety.flights import FlightRegistry
from flightsurety.guard import OperationalGuard
from flightsurety.ledger import ESCROW, Ledger
from flightsurety.types import (
    Amount,
    Flight,
    FlightKey,
    FlightStatusCode,
    Identity,
    InsurancePurchase,
)

LOGGER = logging.getLogger(__name__)

PurchaseId = Tuple[Identity, FlightKey]


class InsurancePolicy:
    """Book-keeping of policies keyed by ``(passenger, flight_key)``.

    Credit is computed once, when the insured flight is finalized, and paid
    out on demand. Withdrawal zeroes the owed credit before the transfer and
    restores it if the transfer fails.
    """

    def __init__(
        self,
        ledger: Ledger,
        flights: FlightRegistry,
        guard: OperationalGuard,
        events: EventBus,
        settings: Optional[Settings] = None,
    ) -> None:
        self._ledger = ledger
        self._flights = flights
        self._guard = guard
        self._events = events
        self._settings = settings or get_settings()
        self._purchases: Dict[PurchaseId, InsurancePurchase] = {}
        self._settled_flights: Set[FlightKey] = set()
        flights.add_finalization_listener(self.on_flight_finalized)

    def payout_for(self, amount_paid: Amount) -> Amount:
        """Return the credit owed for a policy whose flight was delayed by the airline."""
        return amount_paid * self._settings.payout_numerator // self._settings.payout_denominator

    def buy(self, passenger: Identity, flight_key: FlightKey, amount: Amount) -> InsurancePurchase:
        """Buy insurance for *flight_key* and escrow the premium.

        Raises:
            InvalidAmount: If *amount* is not in ``(0, max_insurance_amt]``.
            DuplicatePurchase: If the passenger already insured this flight.
            UnknownFlight: If no airline registered *flight_key*.
            AlreadyFinalized: If the flight outcome is already known.
            InsufficientFunds: If the passenger cannot pay the premium.
        """
        self._guard.require_operational()
        if amount <= 0 or amount > self._settings.max_insurance_amt:
            raise InvalidAmount(
                f"Insurance amount must be in (0, {self._settings.max_insurance_amt}], got {amount}"
            )
        purchase_id = (passenger, flight_key)
        if purchase_id in self._purchases:
            raise DuplicatePurchase(f"{passenger} already insured flight {flight_key}")
        flights = self._flights.flights_for_key(flight_key)
        if not flights:
            raise UnknownFlight(f"Flight {flight_key} is not registered")
        if flight_key in self._settled_flights or all(flight.finalized for flight in flights):
            raise AlreadyFinalized(f"Flight {flight_key} already has a final status")

        self._ledger.transfer(passenger, ESCROW, amount)
        purchase = InsurancePurchase(passenger=passenger, flight_key=flight_key, amount_paid=amount)
        self._purchases[purchase_id] = purchase
        LOGGER.info("%s insured flight %s for %s", passenger, flight_key, amount)
        self._events.publish(
            EventType.INSURANCE_PURCHASED, passenger=passenger, flight=flight_key, amount=amount
        )
        return purchase

    def on_flight_finalized(self, flight: Flight) -> None:
        """Apply the flight outcome to every policy on it, exactly once."""
        if flight.flight_key in self._settled_flights:
            LOGGER.debug("Flight %s already settled; skipping", flight.flight_key)
            return
        self._settled_flights.add(flight.flight_key)

        code = FlightStatusCode(flight.status_code)
        for purchase in self._purchases.values():
            if purchase.flight_key != flight.flight_key or purchase.settled:
                continue
            purchase.settled = True
            if not code.pays_out:
                continue
            purchase.credit_owed = self.payout_for(purchase.amount_paid)
            LOGGER.info("Credited %s with %s for flight %s", purchase.passenger, purchase.credit_owed, flight.flight_key)
            self._events.publish(
                EventType.CREDIT_ISSUED,
                passenger=purchase.passenger,
                flight=flight.flight_key,
                amount=purchase.credit_owed,
            )

    def get_purchase(self, passenger: Identity, flight_key: FlightKey) -> Optional[InsurancePurchase]:
        return self._purchases.get((passenger, flight_key))

    def list_purchases(self) -> List[InsurancePurchase]:
        return list(self._purchases.values())

    def is_passenger(self, identity: Identity) -> bool:
        return any(purchase.passenger == identity for purchase in self._purchases.values())

    def get_credit(self, passenger: Identity) -> Amount:
        """Return the total credit owed to *passenger*."""
        return sum(
            purchase.credit_owed for purchase in self._purchases.values() if purchase.passenger == passenger
        )

    def pay(self, passenger: Identity) -> Amount:
        """Withdraw every credit owed to *passenger* into their balance.

        Raises:
            NoCredit: If nothing is owed.
        """
        self._guard.require_operational()
        owed = [
            purchase
            for purchase in self._purchases.values()
            if purchase.passenger == passenger and purchase.credit_owed > 0
        ]
        if not owed:
            raise NoCredit(f"No credit owed to {passenger}")

        amounts = [(purchase, purchase.credit_owed) for purchase in owed]
        total = sum(amount for _, amount in amounts)
        for purchase in owed:
            purchase.credit_owed = 0
        try:
            self._ledger.transfer(ESCROW, passenger, total)
        except Exception:
            for purchase, amount in amounts:
                purchase.credit_owed = amount
            LOGGER.error("Payout of %s to %s failed; credit restored", total, passenger)
            raise

        LOGGER.info("Paid %s to %s", total, passenger)
        self._events.publish(EventType.CREDIT_PAID, passenger=passenger, amount=total)
        return total

    @property
    def settled_flights(self) -> Set[FlightKey]:
        return set(self._settled_flights)

    def restore(self, purchases: List[InsurancePurchase], settled_flights: Set[FlightKey]) -> None:
        self._purchases = {(purchase.passenger, purchase.flight_key): purchase for purchase in purchases}
        self._settled_flights = set(settled_flights)


__all__ = ["InsurancePolicy"]
