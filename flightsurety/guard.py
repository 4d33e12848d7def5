"""Operational switch and caller authorization shared by every component."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Set

from flightsurety.errors import SystemPaused, Unauthorized
from flightsurety.events import EventBus, EventType
from flightsurety.types import Identity

LOGGER = logging.getLogger(__name__)


class OperationalGuard:
    """Process-wide gate owned by the system owner.

    While the gate is closed every mutating operation fails with
    :class:`SystemPaused`. The guard also keeps the set of internal callers
    allowed to invoke restricted entry points such as flight finalization.
    """

    def __init__(
        self,
        owner: Identity,
        operational: bool = True,
        authorized_callers: Iterable[Identity] = (),
        events: Optional[EventBus] = None,
    ) -> None:
        self.owner = owner
        self._operational = operational
        self._authorized: Set[Identity] = set(authorized_callers)
        self._events = events

    def is_operational(self) -> bool:
        return self._operational

    def require_owner(self, caller: Identity) -> None:
        if caller != self.owner:
            raise Unauthorized(f"{caller} is not the contract owner")

    def require_operational(self) -> None:
        if not self._operational:
            raise SystemPaused("Contract is currently not operational")

    def set_operational_status(self, caller: Identity, value: bool) -> None:
        """Flip the operational flag.

        Raises:
            Unauthorized: If *caller* is not the owner.
            ValueError: If *value* equals the current status.
        """
        self.require_owner(caller)
        if value == self._operational:
            raise ValueError("New operational status must differ from the current one")
        self._operational = value
        LOGGER.info("Operational status set to %s by %s", value, caller)
        if self._events is not None:
            self._events.publish(EventType.OPERATIONAL_STATUS_CHANGED, operational=value)

    def authorize_caller(self, caller: Identity, identity: Identity) -> None:
        self.require_owner(caller)
        self.require_operational()
        self._authorized.add(identity)
        LOGGER.info("Authorized caller %s", identity)

    def deauthorize_caller(self, caller: Identity, identity: Identity) -> None:
        self.require_owner(caller)
        self.require_operational()
        self._authorized.discard(identity)
        LOGGER.info("Deauthorized caller %s", identity)

    def is_caller_authorized(self, identity: Identity) -> bool:
        return identity in self._authorized

    def require_authorized_caller(self, identity: Identity) -> None:
        if identity not in self._authorized:
            raise Unauthorized(f"{identity} is not an authorized caller")

    def authorized_callers(self) -> Set[Identity]:
        return set(self._authorized)

    def restore(self, operational: bool, authorized_callers: Iterable[Identity]) -> None:
        """Reload persisted state without emitting events."""
        self._operational = operational
        self._authorized = set(authorized_callers)


__all__ = ["OperationalGuard"]
