"""Tests for settings loading and validation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from flightsurety.config import UNIT, Settings
from flightsurety.logger import JsonFormatter, configure_logging

if TYPE_CHECKING:
    from _pytest.monkeypatch import MonkeyPatch


def test_defaults_match_protocol_constants() -> None:
    settings = Settings()

    assert UNIT == 10**18
    assert settings.min_funds == 10 * UNIT
    assert settings.max_insurance_amt == UNIT
    assert settings.registration_fee == UNIT
    assert settings.min_responses == 3
    assert settings.bootstrap_airlines == 4
    assert settings.index_range == 10


def test_environment_overrides(monkeypatch: "MonkeyPatch") -> None:
    monkeypatch.setenv("FLIGHTSURETY_MIN_RESPONSES", "5")
    monkeypatch.setenv("FLIGHTSURETY_LOG_FORMAT", "json")

    settings = Settings()

    assert settings.min_responses == 5
    assert settings.log_format == "json"


@pytest.mark.parametrize(
    "overrides",
    [
        {"min_responses": 0},
        {"index_range": 2},
        {"min_funds": -1},
        {"log_format": "xml"},
    ],
)
def test_invalid_values_are_rejected(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        Settings(**overrides)


def test_configure_logging_installs_single_handler() -> None:
    logger = configure_logging(Settings(log_format="json", log_level="debug"))
    configure_logging(Settings(log_format="json", log_level="debug"))

    ours = [handler for handler in logger.handlers if getattr(handler, "_flightsurety", False)]
    assert len(ours) == 1
    assert isinstance(ours[0].formatter, JsonFormatter)
    assert logger.level == logging.DEBUG

    logger.removeHandler(ours[0])
    logger.setLevel(logging.NOTSET)
