"""Error taxonomy for FlightSurety operations.

Every failure is a local validation error raised synchronously to the caller.
None of them is retried internally, and raising one guarantees the state is
exactly what it was before the call.
"""

from __future__ import annotations


class FlightSuretyError(Exception):
    """Base class for all rejected FlightSurety operations."""

    kind: str = "FlightSuretyError"

    def __init__(self, reason: str = "") -> None:
        self.reason = reason or self.kind
        super().__init__(self.reason)

    def to_payload(self) -> dict:
        """Return the error kind and reason for the calling layer."""
        return {"kind": self.kind, "reason": self.reason}


class Unauthorized(FlightSuretyError):
    """Caller does not hold the role required for the operation."""

    kind = "Unauthorized"


class SystemPaused(FlightSuretyError):
    """The operational guard is switched off."""

    kind = "SystemPaused"


class SponsorNotActive(FlightSuretyError):
    """The acting airline is not registered and funded."""

    kind = "SponsorNotActive"


class InsufficientFunds(FlightSuretyError):
    """Payment below the required amount, or a debit above the balance."""

    kind = "InsufficientFunds"


class InvalidAmount(FlightSuretyError):
    """Insurance amount outside ``(0, MAX_INSURANCE_AMT]``."""

    kind = "InvalidAmount"


class DuplicateVote(FlightSuretyError):
    kind = "DuplicateVote"


class DuplicateResponse(FlightSuretyError):
    kind = "DuplicateResponse"


class DuplicatePurchase(FlightSuretyError):
    kind = "DuplicatePurchase"


class DuplicateAirline(FlightSuretyError):
    kind = "DuplicateAirline"


class DuplicateOracle(FlightSuretyError):
    kind = "DuplicateOracle"


class AlreadyFinalized(FlightSuretyError):
    """Flight status has already been recorded and is immutable."""

    kind = "AlreadyFinalized"


class AlreadyRegistered(FlightSuretyError):
    """The airline has already been admitted; votes are no longer needed."""

    kind = "AlreadyRegistered"


class AlreadyFunded(FlightSuretyError):
    kind = "AlreadyFunded"


class IndexMismatch(FlightSuretyError):
    """Oracle answered an index it was not assigned."""

    kind = "IndexMismatch"


class NoCredit(FlightSuretyError):
    kind = "NoCredit"


class UnknownAirline(FlightSuretyError):
    kind = "UnknownAirline"


class UnknownFlight(FlightSuretyError):
    kind = "UnknownFlight"


__all__ = [
    "FlightSuretyError",
    "Unauthorized",
    "SystemPaused",
    "SponsorNotActive",
    "InsufficientFunds",
    "InvalidAmount",
    "DuplicateVote",
    "DuplicateResponse",
    "DuplicatePurchase",
    "DuplicateAirline",
    "DuplicateOracle",
    "AlreadyFinalized",
    "AlreadyRegistered",
    "AlreadyFunded",
    "IndexMismatch",
    "NoCredit",
    "UnknownAirline",
    "UnknownFlight",
]
