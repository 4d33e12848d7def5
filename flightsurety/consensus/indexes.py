"""Deterministic index assignment for oracles and status requests.

Indexes come from a keccak-256 digest over a fixed seed, the participant's
identity, a sequence number and a nonce. Participants cannot pick their
indexes, yet the assignment is reproducible from the same inputs.
"""

from __future__ import annotations

from typing import List, Tuple

from web3 import Web3

ORACLE_INDEX_COUNT = 3


def draw_index(seed: str, identity: str, sequence: int, nonce: int, index_range: int) -> int:
    """Return one index in ``[0, index_range)``."""
    if index_range <= 0:
        raise ValueError("index_range must be positive")
    digest = Web3.keccak(text=f"{seed}:{identity}:{sequence}:{nonce}")
    return int.from_bytes(digest, "big") % index_range


def assign_indexes(
    seed: str,
    identity: str,
    sequence: int,
    index_range: int,
    count: int = ORACLE_INDEX_COUNT,
) -> Tuple[int, ...]:
    """Return *count* distinct indexes for an oracle.

    Draws are repeated with an increasing nonce until the set holds *count*
    different values; indexes may still overlap between oracles.
    """
    if count > index_range:
        raise ValueError(f"Cannot draw {count} distinct indexes from a range of {index_range}")
    indexes: List[int] = []
    nonce = 0
    while len(indexes) < count:
        index = draw_index(seed, identity, sequence, nonce, index_range)
        nonce += 1
        if index not in indexes:
            indexes.append(index)
    return tuple(indexes)


__all__ = ["ORACLE_INDEX_COUNT", "draw_index", "assign_indexes"]
