"""
Random-source protocol and sampling primitives.

Every generation call receives its random source explicitly. A
``numpy.random.Generator`` satisfies the protocol; tests may pass any object
with the same methods to pin individual draws. The policy table and the
group aggregator only need uniform integers and uniform floats.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Protocol, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def integers(self, low: int, high: int) -> int: ...

    def uniform(self, low: float, high: float) -> float: ...

    def random(self) -> float: ...

    def bytes(self, length: int) -> bytes: ...


def randint(rng: RandomSource, low: int, high: int) -> int:
    """Uniform integer in [low, high], both ends inclusive."""
    return int(rng.integers(low, high + 1))


def uniform_2dp(rng: RandomSource, low: float, high: float) -> float:
    """Uniform float in [low, high] at 2-decimal precision."""
    return round(float(rng.uniform(low, high)), 2)


def pick(rng: RandomSource, options: Sequence[T]) -> T:
    """Uniform choice from a non-empty sequence."""
    if not options:
        raise ValueError("Cannot pick from an empty sequence")
    return options[randint(rng, 0, len(options) - 1)]


def random_uuid(rng: RandomSource) -> str:
    """Version-4 UUID drawn from the given source, reproducible under a seed."""
    return str(uuid.UUID(bytes=rng.bytes(16), version=4))
