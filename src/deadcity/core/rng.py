"""Deterministic RNG wrapper built on top of random.Random."""
from __future__ import annotations

from random import Random
from typing import Any, Dict, List, Protocol, Sequence, TypeVar

T_co = TypeVar("T_co")

RNGStatePayload = Dict[str, Any]


class RandomSource(Protocol):
    """Uniform source shared by combat, spawning and event rolls."""

    def random(self) -> float:
        ...

    def randint(self, a: int, b: int) -> int:
        ...

    def choice(self, seq: Sequence[T_co]) -> T_co:
        ...


class RNG:
    """Wrapper around random.Random that provides deterministic helpers."""

    def __init__(self, seed: int) -> None:
        self._seed = seed
        self._random = Random(seed)

    @property
    def seed(self) -> int:
        return self._seed

    def reseed(self, seed: int) -> None:
        """Restart the stream from ``seed`` without replacing this object."""
        self._seed = seed
        self._random.seed(seed)

    def randint(self, a: int, b: int) -> int:
        """Return a random integer N such that a <= N <= b."""
        return self._random.randint(a, b)

    def random(self) -> float:
        """Return the next random floating point number in the range [0.0, 1.0)."""
        return self._random.random()

    def choice(self, seq: Sequence[T_co]) -> T_co:
        """Return a random element from the non-empty sequence."""
        if not seq:
            raise ValueError("Cannot choose from an empty sequence.")
        return self._random.choice(seq)

    def export_state(self) -> RNGStatePayload:
        """Return a JSON-serializable snapshot of the generator state."""
        version, internal, gauss_next = self._random.getstate()
        return {
            "seed": self._seed,
            "version": version,
            "internal": list(internal),
            "gauss_next": gauss_next,
        }

    def restore_state(self, payload: RNGStatePayload) -> None:
        """Restore a snapshot produced by export_state."""
        try:
            version = int(payload["version"])
            internal = tuple(int(value) for value in payload["internal"])
            gauss_next = payload.get("gauss_next")
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError("Malformed RNG state payload.") from exc
        try:
            self._random.setstate((version, internal, gauss_next))
        except (TypeError, ValueError) as exc:
            raise ValueError("RNG state rejected by generator.") from exc
        seed = payload.get("seed")
        if isinstance(seed, int):
            self._seed = seed


class SequenceRNG:
    """Replays a fixed list of uniform draws; used to pin outcomes in tests.

    Integer and choice helpers are derived from the next float the same way a
    floor(random * span) draw would be, so one value always equals one roll.
    """

    def __init__(self, values: Sequence[float]) -> None:
        self._values: List[float] = list(values)
        self._index = 0

    @property
    def consumed(self) -> int:
        return self._index

    @property
    def remaining(self) -> int:
        return len(self._values) - self._index

    def random(self) -> float:
        if self._index >= len(self._values):
            raise IndexError("SequenceRNG exhausted.")
        value = self._values[self._index]
        self._index += 1
        return value

    def randint(self, a: int, b: int) -> int:
        return a + int(self.random() * (b - a + 1))

    def choice(self, seq: Sequence[T_co]) -> T_co:
        if not seq:
            raise ValueError("Cannot choose from an empty sequence.")
        return seq[int(self.random() * len(seq))]
