"""Threshold helpers for airline admission votes and oracle agreement.

Small pure functions kept apart from the registries so the arithmetic can be
unit-tested in isolation.
"""

from __future__ import annotations

from math import ceil
from typing import Iterable, Set


def required_vote_count(num_active: int, ratio: float = 0.5) -> int:
    """Return the number of distinct votes needed to admit an airline.

    Args:
        num_active: Active airlines at the moment the vote is cast.
        ratio: Fraction of active airlines that must agree (default: half).

    Returns:
        ``ceil(num_active * ratio)``, never less than one.
    """
    if num_active <= 0:
        return 1
    return max(ceil(num_active * ratio), 1)


def has_vote_quorum(voters: Iterable[str], *, num_active: int, ratio: float = 0.5) -> bool:
    """Check whether the distinct *voters* reach the admission threshold."""
    unique: Set[str] = set(voters)
    return len(unique) >= required_vote_count(num_active, ratio)


def within_bootstrap(num_registered: int, bootstrap_size: int) -> bool:
    """Return True while a new airline can join without a vote.

    The first ``bootstrap_size`` airlines are admitted directly; the next
    candidate, and every one after it, needs votes.
    """
    return num_registered < bootstrap_size


def has_response_quorum(responders: Iterable[str], *, min_responses: int) -> bool:
    """Check whether enough distinct oracles agree on one status code."""
    return len(set(responders)) >= min_responses


__all__ = [
    "required_vote_count",
    "has_vote_quorum",
    "within_bootstrap",
    "has_response_quorum",
]
