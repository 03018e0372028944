# labyrinth/world/position.py
"""Grid coordinates, dimensions and the four move directions."""

from __future__ import annotations

import math
import shutil
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional

import structlog

from labyrinth.constants import MIN_DIM

log = structlog.get_logger(__name__)


class Direction(Enum):
    """Orthogonal move direction."""

    UP = "up"
    RIGHT = "right"
    DOWN = "down"
    LEFT = "left"

    @property
    def delta(self) -> tuple[int, int]:
        return _DELTAS[self]

    @classmethod
    def parse(cls, name: str) -> "Direction":
        """Return the direction named ``name`` (case insensitive)."""
        try:
            return cls(name.lower())
        except ValueError:
            raise ValueError(f"Unknown direction: {name!r}") from None


_DELTAS: dict[Direction, tuple[int, int]] = {
    Direction.UP: (0, -1),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
}


class Pos(NamedTuple):
    """A cell position. Compares and hashes by value."""

    x: int
    y: int

    def manhattan_distance(self, other: Pos) -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)

    def sq_euclidean_distance(self, other: Pos) -> int:
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy

    def euclidean_distance(self, other: Pos) -> float:
        return math.sqrt(self.sq_euclidean_distance(other))

    def is_adjacent(self, other: Pos) -> bool:
        """Whether ``other`` is one orthogonal step away."""
        return self.manhattan_distance(other) == 1

    def dir_to(self, other: Pos) -> Optional[Direction]:
        """Direction toward ``other`` when both are on the same row or column."""
        dx = other.x - self.x
        dy = other.y - self.y
        if dx == 0 and dy < 0:
            return Direction.UP
        if dx == 0 and dy > 0:
            return Direction.DOWN
        if dy == 0 and dx > 0:
            return Direction.RIGHT
        if dy == 0 and dx < 0:
            return Direction.LEFT
        return None

    def step_dir_to(self, other: Pos) -> Optional[Direction]:
        """Direction toward ``other`` only if it is adjacent."""
        if not self.is_adjacent(other):
            return None
        return self.dir_to(other)

    def in_dir(self, direction: Direction) -> Optional[Pos]:
        """Step once in ``direction``; ``None`` when leaving the positive quadrant."""
        dx, dy = direction.delta
        x, y = self.x + dx, self.y + dy
        if x < 0 or y < 0:
            return None
        return Pos(x, y)


@dataclass(frozen=True)
class Dim:
    """A width/height pair (maze, screen)."""

    w: int
    h: int

    @property
    def cell_count(self) -> int:
        return self.w * self.h

    def idx(self, p: Pos) -> int:
        return p.x + self.w * p.y

    def pos(self, idx: int) -> Pos:
        """Inverse of :meth:`idx`."""
        return Pos(idx % self.w, idx // self.w)

    def contains(self, p: Pos) -> bool:
        return 0 <= p.x < self.w and 0 <= p.y < self.h

    def is_border(self, p: Pos) -> bool:
        return p.x == 0 or p.y == 0 or p.x == self.w - 1 or p.y == self.h - 1

    def even_height(self) -> Dim:
        """Same dimension with the height rounded down to an even number."""
        return Dim(self.w, (self.h // 2) * 2)

    def verticalized(self) -> Dim:
        """Trade width for height, keeping a playable width."""
        return Dim(max(self.h // 2, MIN_DIM), self.h + self.w)

    @classmethod
    def terminal(cls) -> Dim:
        size = shutil.get_terminal_size()
        log.debug("Terminal size", columns=size.columns, lines=size.lines)
        return cls(size.columns, size.lines)


__all__ = ["Direction", "Pos", "Dim"]
