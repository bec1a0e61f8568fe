"""Deterministic Park-Miller RNG threaded explicitly as ``seed -> (value, next_seed)``."""
from __future__ import annotations

from typing import List, Sequence, Tuple, TypeVar

T_co = TypeVar("T_co")

MULTIPLIER = 16807
MODULUS = 2147483647
NODE_HASH_FACTOR = 137


def coerce_seed(seed: int) -> int:
    """Return a positive, non-zero generator state for any integer seed."""
    return max(1, abs(int(seed)) % MODULUS)


def next_random(seed: int) -> Tuple[float, int]:
    """Return the next value in [0, 1) and the seed that follows it."""
    state = (coerce_seed(seed) * MULTIPLIER) % MODULUS
    return (state - 1) / (MODULUS - 1), state


def draw(seed: int, count: int) -> Tuple[List[float], int]:
    """Return ``count`` consecutive values and the seed after the last one."""
    values: List[float] = []
    for _ in range(count):
        value, seed = next_random(seed)
        values.append(value)
    return values, seed


def next_index(seed: int, size: int) -> Tuple[int, int]:
    """Return an index in ``range(size)`` and the following seed."""
    if size <= 0:
        raise ValueError("Cannot draw an index from an empty range.")
    value, seed = next_random(seed)
    return min(size - 1, int(value * size)), seed


def pick(seed: int, seq: Sequence[T_co]) -> Tuple[T_co, int]:
    """Return one element of the non-empty sequence and the following seed."""
    if not seq:
        raise ValueError("Cannot choose from an empty sequence.")
    index, seed = next_index(seed, len(seq))
    return seq[index], seed


def sample(seed: int, seq: Sequence[T_co], k: int) -> Tuple[List[T_co], int]:
    """Pick up to ``k`` distinct positions from ``seq`` without replacement."""
    remaining = list(seq)
    chosen: List[T_co] = []
    while remaining and len(chosen) < k:
        index, seed = next_index(seed, len(remaining))
        chosen.append(remaining.pop(index))
    return chosen, seed


def node_hash(node_id: str) -> int:
    """Sum of the character codes of a node id."""
    return sum(ord(char) for char in node_id)


def node_seed(seed: int, node_id: str) -> int:
    """Per-node seed used for outcome rolls at that node."""
    return seed + node_hash(node_id) * NODE_HASH_FACTOR


__all__ = [
    "MODULUS",
    "MULTIPLIER",
    "coerce_seed",
    "draw",
    "next_index",
    "next_random",
    "node_hash",
    "node_seed",
    "pick",
    "sample",
]
