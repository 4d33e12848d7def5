"""FlightSurety: airline governance, oracle consensus and delay insurance.

Airlines join a trust network under a voting rule, passengers insure flights
against delay, and independent oracles agree on the flight status before
passengers are credited.
"""

from __future__ import annotations

# Domain types
from .types import (  # noqa: F401
    Airline,
    AirlineStatus,
    Flight,
    FlightStatusCode,
    InsurancePurchase,
    Oracle,
    OracleResponseTally,
)

# Errors
from .errors import (  # noqa: F401
    AlreadyFinalized,
    DuplicatePurchase,
    DuplicateResponse,
    DuplicateVote,
    FlightSuretyError,
    IndexMismatch,
    InsufficientFunds,
    InvalidAmount,
    NoCredit,
    SponsorNotActive,
    SystemPaused,
    Unauthorized,
)

# Components
from .config import Settings, get_settings  # noqa: F401
from .events import Event, EventBus, EventType  # noqa: F401
from .ledger import ESCROW, Ledger  # noqa: F401
from .guard import OperationalGuard  # noqa: F401
from .airlines import AirlineRegistry  # noqa: F401
from .flights import FlightRegistry  # noqa: F401
from .consensus import OracleConsensus  # noqa: F401
from .insurance import InsurancePolicy  # noqa: F401
from .app import FlightSuretyApp  # noqa: F401

__all__ = [
    # core
    "Airline",
    "AirlineStatus",
    "Flight",
    "FlightStatusCode",
    "InsurancePurchase",
    "Oracle",
    "OracleResponseTally",
    # errors
    "FlightSuretyError",
    "Unauthorized",
    "SystemPaused",
    "SponsorNotActive",
    "InsufficientFunds",
    "InvalidAmount",
    "DuplicateVote",
    "DuplicateResponse",
    "DuplicatePurchase",
    "AlreadyFinalized",
    "IndexMismatch",
    "NoCredit",
    # components
    "Settings",
    "get_settings",
    "Event",
    "EventBus",
    "EventType",
    "ESCROW",
    "Ledger",
    "OperationalGuard",
    "AirlineRegistry",
    "FlightRegistry",
    "OracleConsensus",
    "InsurancePolicy",
    "FlightSuretyApp",
]
