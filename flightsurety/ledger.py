"""In-memory balance bookkeeping for airlines, passengers, oracles and escrow."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, Tuple

from flightsurety.errors import InsufficientFunds
from flightsurety.types import Amount, Identity

LOGGER = logging.getLogger(__name__)

# Settlement account holding airline funding, premiums and oracle fees.
ESCROW: Identity = "flightsurety:escrow"


class Ledger:
    """Maintain balances and move value between identities without overdraft."""

    def __init__(self, balances: Iterable[Tuple[Identity, Amount]] = ()) -> None:
        self._balances: Dict[Identity, Amount] = defaultdict(int)
        for identity, amount in balances:
            self._check_amount(amount)
            self._balances[identity] = amount

    @staticmethod
    def _check_amount(amount: Amount) -> None:
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise TypeError(f"Amount must be an integer number of base units, got {amount!r}")
        if amount < 0:
            raise ValueError("Amount cannot be negative")

    def balance_of(self, identity: Identity) -> Amount:
        """Return the balance held by *identity* (0 when unknown)."""
        return self._balances.get(identity, 0)

    def credit(self, identity: Identity, amount: Amount) -> Amount:
        """Add *amount* to *identity* and return the new balance."""
        self._check_amount(amount)
        self._balances[identity] += amount
        LOGGER.debug("Credited %s with %s", identity, amount)
        return self._balances[identity]

    def debit(self, identity: Identity, amount: Amount) -> Amount:
        """Remove *amount* from *identity* and return the new balance.

        Raises:
            InsufficientFunds: If the balance does not cover the debit.
        """
        self._check_amount(amount)
        balance = self.balance_of(identity)
        if amount > balance:
            raise InsufficientFunds(f"{identity} holds {balance}, cannot debit {amount}")
        self._balances[identity] = balance - amount
        LOGGER.debug("Debited %s by %s", identity, amount)
        return self._balances[identity]

    def transfer(self, sender: Identity, recipient: Identity, amount: Amount) -> None:
        """Atomically move *amount* from *sender* to *recipient*."""
        self.debit(sender, amount)
        self.credit(recipient, amount)

    def balances(self) -> Dict[Identity, Amount]:
        """Return a copy of every non-zero balance."""
        return {identity: amount for identity, amount in self._balances.items() if amount}

    def total_supply(self) -> Amount:
        return sum(self._balances.values())


__all__ = ["Ledger", "ESCROW"]
