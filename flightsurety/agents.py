"""Simulated off-chain oracle agents.

Agents observe ``ORACLE_REQUEST`` events and answer them through the public
call interface, the way an external oracle server would. The subscriber only
queues requests; answers are sent when :meth:`OraclePool.dispatch` runs, so
the core never waits on an agent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from queue import Empty, Queue
from typing import Callable, Dict, List, Optional, Tuple

from flightsurety.app import FlightSuretyApp
from flightsurety.errors import DuplicateResponse, IndexMismatch, SystemPaused
from flightsurety.events import Event, EventType
from flightsurety.types import FlightStatusCode, Identity

LOGGER = logging.getLogger(__name__)

StatusPicker = Callable[[Identity, Dict[str, object]], int]


def fixed_status(code: FlightStatusCode) -> StatusPicker:
    """Return a picker that always reports *code*."""

    def pick(_oracle: Identity, _request: Dict[str, object]) -> int:
        return int(code)

    return pick


@dataclass
class OracleAgent:
    """One oracle identity together with the indexes it was assigned."""

    identity: Identity
    indexes: Tuple[int, ...] = field(default_factory=tuple)
    picker: Optional[StatusPicker] = None

    def answers(self, index: int) -> bool:
        return index in self.indexes


class OraclePool:
    """A set of oracle agents registered against one app."""

    def __init__(
        self,
        app: FlightSuretyApp,
        picker: StatusPicker = fixed_status(FlightStatusCode.ON_TIME),
    ) -> None:
        self.app = app
        self.picker = picker
        self.agents: List[OracleAgent] = []
        self._requests: "Queue[Dict[str, object]]" = Queue()
        app.subscribe(EventType.ORACLE_REQUEST, self._on_request)

    def _on_request(self, event: Event) -> None:
        self._requests.put(dict(event.payload))

    def register(self, identity: Identity, picker: Optional[StatusPicker] = None) -> OracleAgent:
        """Fund *identity* with the registration fee and register it as an oracle."""
        fee = self.app.settings.registration_fee
        self.app.deposit(identity, fee)
        indexes = self.app.register_oracle(identity, fee)
        agent = OracleAgent(identity=identity, indexes=indexes, picker=picker)
        self.agents.append(agent)
        return agent

    def register_many(self, count: int, prefix: str = "oracle") -> List[OracleAgent]:
        start = len(self.agents)
        return [self.register(f"{prefix}-{start + n}") for n in range(count)]

    def holders(self, index: int) -> List[OracleAgent]:
        """Return the agents allowed to answer *index*."""
        return [agent for agent in self.agents if agent.answers(index)]

    def pending(self) -> int:
        return self._requests.qsize()

    def dispatch(self) -> Optional[int]:
        """Answer every queued request.

        Returns:
            The last status code finalized while dispatching, if any.
        """
        finalized: Optional[int] = None
        while True:
            try:
                request = self._requests.get_nowait()
            except Empty:
                break
            index = int(request["index"])  # type: ignore[arg-type]
            for agent in self.holders(index):
                picker = agent.picker or self.picker
                code = picker(agent.identity, request)
                try:
                    result = self.app.submit_oracle_response(
                        agent.identity,
                        index,
                        str(request["airline"]),
                        str(request["flight"]),
                        int(request["timestamp"]),  # type: ignore[arg-type]
                        code,
                    )
                except (DuplicateResponse, IndexMismatch) as exc:
                    LOGGER.debug("Oracle %s response rejected: %s", agent.identity, exc.reason)
                    continue
                except SystemPaused:
                    LOGGER.warning("System paused; dropping request %s", request)
                    break
                if result is not None:
                    finalized = result
        return finalized


__all__ = ["OracleAgent", "OraclePool", "StatusPicker", "fixed_status"]
