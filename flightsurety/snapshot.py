"""Serialisation of the full FlightSurety state to and from JSON payloads.

A snapshot holds every entity (airlines, flights, purchases, oracles,
response tallies, balances) plus the operational flag and counters, so a
restored app answers reads and accepts operations exactly like the original.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from flightsurety.config import Settings
from flightsurety.types import (
    Airline,
    AirlineStatus,
    Flight,
    InsurancePurchase,
    Oracle,
    OracleResponseTally,
)

if TYPE_CHECKING:
    from flightsurety.app import FlightSuretyApp

LOGGER = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def _airline_to_payload(airline: Airline) -> Dict[str, Any]:
    return {
        "identity": airline.identity,
        "name": airline.name,
        "status": airline.status.value,
        "sponsor": airline.sponsor,
        "votes": sorted(airline.votes),
        "funds": airline.funds,
    }


def _airline_from_payload(payload: Dict[str, Any]) -> Airline:
    return Airline(
        identity=str(payload["identity"]),
        name=str(payload["name"]),
        status=AirlineStatus(payload["status"]),
        sponsor=payload.get("sponsor"),
        votes=set(payload.get("votes", [])),
        funds=int(payload.get("funds", 0)),
    )


def _tally_to_payload(tally: OracleResponseTally) -> Dict[str, Any]:
    return {
        "key": list(tally.key),
        "requester": tally.requester,
        "is_open": tally.is_open,
        "responses": {str(code): sorted(voters) for code, voters in tally.responses.items()},
        "finalized_code": tally.finalized_code,
    }


def _tally_from_payload(payload: Dict[str, Any]) -> OracleResponseTally:
    index, airline, flight_key, timestamp = payload["key"]
    return OracleResponseTally(
        key=(int(index), str(airline), str(flight_key), int(timestamp)),
        requester=payload.get("requester"),
        is_open=bool(payload["is_open"]),
        responses={int(code): set(voters) for code, voters in payload["responses"].items()},
        finalized_code=payload.get("finalized_code"),
    )


def state_to_payload(app: "FlightSuretyApp") -> Dict[str, Any]:
    """Convert the app state to a JSON-serialisable dictionary."""
    return {
        "version": SNAPSHOT_VERSION,
        "owner": app.owner,
        "operational": app.guard.is_operational(),
        "authorized_callers": sorted(app.guard.authorized_callers()),
        "balances": app.ledger.balances(),
        "airlines": [_airline_to_payload(airline) for airline in app.airlines.list_airlines()],
        "flights": [
            {
                "airline": flight.airline,
                "flight_key": flight.flight_key,
                "timestamp": flight.timestamp,
                "status_code": flight.status_code,
                "finalized": flight.finalized,
            }
            for flight in app.flights.list_flights()
        ],
        "oracles": [
            {"identity": oracle.identity, "indexes": list(oracle.indexes), "sequence": oracle.sequence}
            for oracle in app.oracles.list_oracles()
        ],
        "tallies": [_tally_to_payload(tally) for tally in app.oracles.list_tallies()],
        "request_sequence": app.oracles.request_sequence,
        "purchases": [
            {
                "passenger": purchase.passenger,
                "flight_key": purchase.flight_key,
                "amount_paid": purchase.amount_paid,
                "credit_owed": purchase.credit_owed,
                "settled": purchase.settled,
            }
            for purchase in app.insurance.list_purchases()
        ],
        "settled_flights": sorted(app.insurance.settled_flights),
    }


def state_from_payload(payload: Dict[str, Any], settings: Optional[Settings] = None) -> "FlightSuretyApp":
    """Rebuild an app from a payload produced by :func:`state_to_payload`."""
    from flightsurety.app import FlightSuretyApp

    if payload.get("version") != SNAPSHOT_VERSION:
        raise ValueError(f"Unsupported snapshot version {payload.get('version')!r}")
    airlines = [_airline_from_payload(entry) for entry in payload["airlines"]]
    if not airlines:
        raise ValueError("Snapshot holds no airline")

    app = FlightSuretyApp(payload["owner"], airlines[0].identity, airlines[0].name, settings)
    app.guard.restore(bool(payload["operational"]), payload["authorized_callers"])
    for identity, amount in payload["balances"].items():
        app.ledger.credit(identity, int(amount))
    app.airlines.restore(airlines)
    app.flights.restore([Flight(**entry) for entry in payload["flights"]])
    app.oracles.restore(
        [
            Oracle(identity=entry["identity"], indexes=tuple(entry["indexes"]), sequence=int(entry["sequence"]))
            for entry in payload["oracles"]
        ],
        [_tally_from_payload(entry) for entry in payload["tallies"]],
        int(payload["request_sequence"]),
    )
    app.insurance.restore(
        [InsurancePurchase(**entry) for entry in payload["purchases"]],
        set(payload["settled_flights"]),
    )
    return app


def save_snapshot(app: "FlightSuretyApp", path: Union[str, Path]) -> Path:
    """Write the app state to *path*, replacing any previous snapshot atomically."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    encoded = json.dumps(state_to_payload(app), sort_keys=True, indent=2)
    fd, tmp_name = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fp:
            fp.write(encoded)
        os.replace(tmp_name, target)
    except BaseException:
        os.unlink(tmp_name)
        raise
    LOGGER.info("Snapshot written to %s", target)
    return target


def load_snapshot(path: Union[str, Path], settings: Optional[Settings] = None) -> "FlightSuretyApp":
    with open(path, "r", encoding="utf-8") as fp:
        payload = json.load(fp)
    LOGGER.info("Snapshot loaded from %s", path)
    return state_from_payload(payload, settings)


__all__ = [
    "SNAPSHOT_VERSION",
    "state_to_payload",
    "state_from_payload",
    "save_snapshot",
    "load_snapshot",
]
