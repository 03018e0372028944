from __future__ import annotations

"""Deterministic random number generator shared by the maze builder and the
turn engine.

Every random decision of a game (start position, growth order, cuts, potion
placement, teleport landing) is drawn from a single :class:`GameRNG` so a
level can be replayed from its seed.  The generator is a thin layer over
``numpy.random.Generator``:

* ``get_int`` is inclusive on both ends, like ``random.randint``.
* ``get_randrange`` follows ``range`` semantics (stop excluded).
* ``get_state``/``set_state`` snapshot the underlying bit generator so tests
  can rewind it.
"""

import random
from typing import Any, Dict, Optional, Sequence, TypeVar

import numpy as np

T = TypeVar("T")


class GameRNG:
    def __init__(self, seed: Optional[int] = None) -> None:
        self.initial_seed = seed if seed is not None else random.randint(0, 2**32 - 1)
        self.rng = np.random.default_rng(self.initial_seed)

    # ------------------------------------------------------------------
    # basic random helpers
    # ------------------------------------------------------------------
    def get_int(self, a: int, b: int) -> int:
        if a > b:
            raise ValueError("a <= b")
        return int(self.rng.integers(a, b + 1))

    def get_randrange(self, start: int, stop: Optional[int] = None) -> int:
        if stop is None:
            stop = start
            start = 0
        if stop <= start:
            raise ValueError("empty range")
        return self.get_int(start, stop - 1)

    def get_float(self, a: float = 0.0, b: float = 1.0) -> float:
        if a > b:
            raise ValueError("a <= b")
        return a + (b - a) * float(self.rng.random())

    def chance(self, probability: float) -> bool:
        """Return ``True`` with the given probability."""
        if not 0.0 <= probability <= 1.0:
            raise ValueError("probability out of range")
        return self.get_float() < probability

    # ------------------------------------------------------------------
    # sequence utilities
    # ------------------------------------------------------------------
    def choice(self, seq: Sequence[T]) -> T:
        """Return a random element from *seq*."""
        if not seq:
            raise ValueError("cannot choose from an empty sequence")
        return seq[self.get_int(0, len(seq) - 1)]

    # ------------------------------------------------------------------
    # state management
    # ------------------------------------------------------------------
    def get_state(self) -> Dict[str, Any]:
        return {
            "random_state": self.rng.bit_generator.state,
            "initial_seed": self.initial_seed,
        }

    def set_state(self, state: Dict[str, Any]) -> None:
        if "random_state" in state:
            self.rng.bit_generator.state = state["random_state"]
        if "initial_seed" in state:
            self.initial_seed = state["initial_seed"]

    def reset(self, seed: Optional[int] = None) -> None:
        self.initial_seed = seed if seed is not None else random.randint(0, 2**32 - 1)
        self.rng = np.random.default_rng(self.initial_seed)


__all__ = ["GameRNG"]
