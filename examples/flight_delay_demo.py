"""Run the flight-delay insurance flow end to end and print a JSON summary.

Usage example:
    python examples/flight_delay_demo.py --oracles 20 --status 20 --out ./results/demo

Five airlines join (the fifth by vote), one registers flight ND1309, a
passenger insures it, simulated oracles report the status and the passenger
withdraws any credit.
"""

from __future__ import annotations

import argparse
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from web3 import Web3

from flightsurety.agents import OraclePool, fixed_status
from flightsurety.app import FlightSuretyApp
from flightsurety.config import Settings
from flightsurety.errors import FlightSuretyError
from flightsurety.logger import configure_logging
from flightsurety.types import FlightStatusCode

LOGGER = logging.getLogger("flightsurety.demo")


def parse_args() -> argparse.Namespace:
    """Parse CLI arguments.

    Returns:
        Parsed arguments as a namespace.
    """
    parser = argparse.ArgumentParser(description="Simulate a delayed flight and an insurance payout.")
    parser.add_argument("--flight", default="ND1309", help="Flight number to insure")
    parser.add_argument("--oracles", type=int, default=20, help="Number of oracles to register")
    parser.add_argument("--status", type=int, default=int(FlightStatusCode.LATE_AIRLINE),
                        choices=[int(code) for code in FlightStatusCode],
                        help="Status code every oracle reports")
    parser.add_argument("--premium", type=float, default=1.0, help="Insurance premium in currency units")
    parser.add_argument("--out", dest="output_dir", type=Path, default=None,
                        help="Directory to write the summary and a state snapshot")
    return parser.parse_args()


def run(args: argparse.Namespace, settings: Settings) -> Dict[str, Any]:
    """Drive the scenario and return a summary of what happened."""
    owner = "owner"
    airlines = [f"airline-{n}" for n in range(5)]
    passenger = "passenger-10"
    timestamp = int(datetime.now(timezone.utc).timestamp())

    app = FlightSuretyApp(owner, airlines[0], "Genesis Air", settings)

    def fund(airline: str) -> None:
        app.deposit(airline, settings.min_funds)
        app.fund_airline(airline, settings.min_funds)

    fund(airlines[0])
    for airline in airlines[1:4]:
        app.apply_airline(airlines[0], airline, airline.title())
        fund(airline)
    app.apply_airline(airlines[0], airlines[4], "United Test Airline")
    for voter in airlines[1:]:
        if app.is_airline_registered(airlines[4]):
            break
        app.submit_airline_vote(voter, airlines[4])
    fund(airlines[4])

    app.register_flight(airlines[4], args.flight, timestamp)
    premium = Web3.to_wei(args.premium, "ether")
    app.deposit(passenger, premium)
    app.buy_insurance(passenger, args.flight, premium)

    pool = OraclePool(app, picker=fixed_status(FlightStatusCode(args.status)))
    pool.register_many(args.oracles)
    index = app.request_flight_status(owner, airlines[4], args.flight, timestamp)
    pool.dispatch()

    status = app.view_flight_status(args.flight, airlines[4])
    credit = app.get_credit(passenger)
    paid = 0
    if credit:
        paid = app.withdraw_credit(passenger)

    if args.output_dir is not None:
        app.save(args.output_dir / "state.json")

    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "flight": args.flight,
        "request_index": index,
        "index_holders": len(pool.holders(index)),
        "status": status,
        "status_name": FlightStatusCode(status).name if status is not None else "PENDING",
        "credit": str(Web3.from_wei(credit, "ether")),
        "paid": str(Web3.from_wei(paid, "ether")),
        "passenger_balance": str(Web3.from_wei(app.balance_of(passenger), "ether")),
        "airlines": app.list_airlines(),
    }


def main() -> None:
    """Entrypoint for the demo script."""
    args = parse_args()
    settings = Settings()
    configure_logging(settings)

    try:
        summary = run(args, settings)
    except FlightSuretyError as exc:
        LOGGER.error("Scenario aborted: %s", exc.reason)
        raise SystemExit(1)

    if args.output_dir is not None:
        args.output_dir.mkdir(parents=True, exist_ok=True)
        with (args.output_dir / "summary.json").open("w", encoding="utf-8") as f:
            json.dump(summary, f, indent=2)
    print(json.dumps(summary, indent=2))
    if summary["status"] is None:
        LOGGER.warning("Only %s oracles hold index %s; status still pending",
                       summary["index_holders"], summary["request_index"])


if __name__ == "__main__":
    main()
