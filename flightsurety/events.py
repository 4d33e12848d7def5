"""Event types and the publish/subscribe bus used to notify external observers.

Events mirror what the contract emitted as logs: a UI or an indexer may
subscribe to them, but the core never depends on a subscriber to complete a
transition.
"""

from __future__ import annotations

import json
import logging
import time
from collections import deque
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional
from uuid import UUID, uuid4

from flightsurety.types import EventPayload

LOGGER = logging.getLogger(__name__)


class EventType(Enum):
    """Kinds of notifications published by the core."""

    OPERATIONAL_STATUS_CHANGED = "operational_status_changed"
    AIRLINE_APPLIED = "airline_applied"
    AIRLINE_VOTED = "airline_voted"
    AIRLINE_REGISTERED = "airline_registered"
    AIRLINE_FUNDED = "airline_funded"
    FLIGHT_REGISTERED = "flight_registered"
    ORACLE_REGISTERED = "oracle_registered"
    ORACLE_REQUEST = "oracle_request"
    ORACLE_REPORT = "oracle_report"
    FLIGHT_STATUS_INFO = "flight_status_info"
    INSURANCE_PURCHASED = "insurance_purchased"
    CREDIT_ISSUED = "credit_issued"
    CREDIT_PAID = "credit_paid"


@dataclass
class Event:
    """A single published notification."""

    event_type: EventType
    payload: EventPayload
    event_id: UUID = field(default_factory=uuid4)
    timestamp: float = field(default_factory=time.time)

    def to_json(self) -> str:
        """Serialize event to JSON."""
        data = asdict(self)
        data["event_id"] = str(data["event_id"])
        data["event_type"] = data["event_type"].value
        return json.dumps(data)

    @classmethod
    def from_json(cls, json_str: str) -> "Event":
        """Deserialize event from JSON."""
        data = json.loads(json_str)
        data["event_id"] = UUID(data["event_id"])
        data["event_type"] = EventType(data["event_type"])
        return cls(**data)


Handler = Callable[[Event], Any]


class EventBus:
    """Synchronous in-process publish/subscribe hub."""

    def __init__(self, history_size: int = 1000) -> None:
        self._handlers: Dict[Optional[EventType], List[Handler]] = {}
        self._history: Deque[Event] = deque(maxlen=history_size)

    def subscribe(self, event_type: Optional[EventType], handler: Handler) -> None:
        """Register *handler* for *event_type*, or for every event when ``None``."""
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: Optional[EventType], handler: Handler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event_type: EventType, **payload: Any) -> Event:
        """Record an event and deliver it to the matching subscribers.

        A failing subscriber is logged and skipped; it never fails the
        operation that published the event.
        """
        event = Event(event_type=event_type, payload=payload)
        self._history.append(event)
        LOGGER.debug("Publishing %s %s", event_type.value, payload)
        for handler in self._handlers.get(event_type, []) + self._handlers.get(None, []):
            try:
                handler(event)
            except Exception:
                LOGGER.exception("Subscriber %r failed on %s", handler, event_type.value)
        return event

    def history(self, event_type: Optional[EventType] = None) -> List[Event]:
        """Return recorded events, optionally filtered by type."""
        if event_type is None:
            return list(self._history)
        return [event for event in self._history if event.event_type is event_type]


__all__ = ["EventType", "Event", "EventBus", "Handler"]
