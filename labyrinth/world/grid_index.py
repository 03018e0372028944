# labyrinth/world/grid_index.py
"""Dense per-cell storage backed by flat NumPy arrays.

A :class:`GridIndex` maps every cell of a :class:`Dim` to a scalar, with a
default value for cells never set.  The array is allocated once, indexed by
``x + width * y`` and never resized.  Positions are not bounds-checked:
callers must pass positions inside the dimension.
"""

from typing import Any, Iterator

import numpy as np

from labyrinth.world.position import Dim, Pos


class GridIndex:
    def __init__(self, dim: Dim, default: Any, dtype: Any = None):
        self.dim = dim
        self.default = default
        self.values: np.ndarray = np.full(dim.w * dim.h, default, dtype=dtype)

    def get(self, p: Pos) -> Any:
        return self.values[p.x + self.dim.w * p.y].item()

    def set(self, p: Pos, value: Any) -> None:
        self.values[p.x + self.dim.w * p.y] = value

    def clear(self) -> None:
        """Reset every cell to the default value."""
        self.values.fill(self.default)

    def remove(self, p: Pos) -> Any:
        """Return the value at ``p`` and reset the cell to the default."""
        idx = p.x + self.dim.w * p.y
        old = self.values[idx].item()
        self.values[idx] = self.default
        return old

    def as_grid(self) -> np.ndarray:
        """A ``(height, width)`` view of the values, indexed ``[y, x]``."""
        return self.values.reshape(self.dim.h, self.dim.w)


class GridSet(GridIndex):
    """Boolean :class:`GridIndex` used as a set of positions."""

    def __init__(self, dim: Dim):
        super().__init__(dim, False, dtype=bool)

    def __contains__(self, p: Pos) -> bool:
        return bool(self.values[p.x + self.dim.w * p.y])

    # is_empty and is_not_empty scan the whole grid; only call them on
    # rare events (a key press, not a search loop).
    def is_empty(self) -> bool:
        return not self.is_not_empty()

    def is_not_empty(self) -> bool:
        return bool(self.values.any())

    def count(self) -> int:
        return int(np.count_nonzero(self.values))

    def positions(self) -> Iterator[Pos]:
        """Members in index order (row by row)."""
        for idx in np.flatnonzero(self.values):
            yield self.dim.pos(int(idx))
