"""
Configuration management for FlightSurety.
"""
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from web3 import Web3

# One currency unit expressed in ledger base units.
UNIT: int = Web3.to_wei(1, "ether")


class Settings(BaseSettings):
    """Protocol constants and runtime options loaded from environment variables."""

    # Application Configuration
    app_name: str = "FlightSurety"
    environment: str = "development"

    # Airline governance
    min_funds: int = Field(default=10 * UNIT, description="Funding required to activate an airline")
    bootstrap_airlines: int = Field(default=4, description="Airlines admitted without a vote")

    # Insurance
    max_insurance_amt: int = Field(default=1 * UNIT, description="Upper bound on a single policy")
    payout_numerator: int = 3
    payout_denominator: int = 2

    # Oracles
    registration_fee: int = Field(default=1 * UNIT, description="Fee paid by an oracle to register")
    min_responses: int = Field(default=3, description="Matching responses needed to finalize a status")
    index_range: int = Field(default=10, description="Indexes are drawn from [0, index_range)")
    random_seed: str = "flightsurety"

    # Events
    event_history_size: int = 1000

    # Persistence
    snapshot_path: Optional[str] = None

    # Logging Configuration
    log_level: str = "INFO"
    log_format: str = "text"

    @field_validator("min_responses", "bootstrap_airlines", "payout_denominator")
    @classmethod
    def validate_positive(cls, v):
        """Thresholds and divisors must be strictly positive."""
        if v <= 0:
            raise ValueError("value must be positive")
        return v

    @field_validator("index_range")
    @classmethod
    def validate_index_range(cls, v):
        """Each oracle needs three distinct indexes, so the range holds at least three."""
        if v < 3:
            raise ValueError("index_range must be at least 3")
        return v

    @field_validator("min_funds", "max_insurance_amt", "registration_fee")
    @classmethod
    def validate_amount(cls, v):
        """Validate monetary constants are non-negative."""
        if v < 0:
            raise ValueError("amounts cannot be negative")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        if v not in ("text", "json"):
            raise ValueError("log_format must be 'text' or 'json'")
        return v

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "env_prefix": "FLIGHTSURETY_",
        "extra": "ignore",
    }


# Create global settings instance
settings = Settings()


def get_settings() -> Settings:
    return settings
