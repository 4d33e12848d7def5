"""Consensus utilities for FlightSurety.

Oracle registration and response tallying, index assignment, and the
threshold helpers shared with airline voting.
"""

from __future__ import annotations

from .indexes import ORACLE_INDEX_COUNT, assign_indexes, draw_index
from .oracles import CONSENSUS_CALLER, OracleConsensus
from .quorum import (
    has_response_quorum,
    has_vote_quorum,
    required_vote_count,
    within_bootstrap,
)

__all__ = [
    "ORACLE_INDEX_COUNT",
    "assign_indexes",
    "draw_index",
    "CONSENSUS_CALLER",
    "OracleConsensus",
    "has_response_quorum",
    "has_vote_quorum",
    "required_vote_count",
    "within_bootstrap",
]
