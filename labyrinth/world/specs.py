# labyrinth/world/specs.py
"""Generation parameters and the level difficulty curve."""

from __future__ import annotations

from dataclasses import astuple, dataclass
from enum import Enum
from typing import Final

import structlog

from game_rng import GameRNG
from labyrinth.constants import MIN_DIM
from labyrinth.world.position import Dim

log = structlog.get_logger(__name__)

DISK_MIN_SIDE: Final[int] = 24

LEVEL_HINTS: Final[dict[int, str]] = {
    1: "Use arrow keys to move and exit the maze",
    2: "Red monsters teleport you",
    4: "Red monsters teleport you",
    3: "Pick lives on green squares",
    6: "Pick lives on green squares",
    5: "You can abandon with key 'a'",
    8: "You can abandon with key 'a'",
    12: "You can abandon with key 'a'",
    10: "Hit 'w' to wait",
    14: "Hit 'w' to wait",
    17: "Hit 'w' to wait",
    11: "Sometimes there's no monster, just find the exit",
}


@dataclass(frozen=True)
class Specs:
    """Definition of a maze to build."""

    name: str
    dim: Dim
    cuts: int
    potions: int
    monsters: int
    lives: int
    status: str
    disk: bool
    fill: bool

    def canonical_fields(self) -> tuple:
        """Field values in declaration order, the dimension flattened."""
        return tuple(
            v for f in astuple(self) for v in (f if isinstance(f, tuple) else (f,))
        )


def twist(seed: int, max_value: int) -> int:
    """Capped, reproducible pseudo-random number (seed is typically a level).

    Not random at all: the same arguments always give the same result.
    """
    if max_value == 0:
        return 0
    return (seed * 27 + (max_value + 173) * 347 + seed * 293) % max_value


class SizeSpec(Enum):
    TINY = "tiny"
    SMALL = "small"
    NORMAL = "normal"
    LARGE = "large"
    HUGE = "huge"

    def dim(self, level: int) -> Dim:
        if self is SizeSpec.TINY:
            return Dim(13 + twist(level, 12), MIN_DIM + 1 + twist(level, 7))
        if self is SizeSpec.SMALL:
            return Dim(20 + twist(level, level // 10), 18 + twist(level, level // 12))
        if self is SizeSpec.LARGE:
            return Dim(30 + twist(level, level // 8), 24 + twist(level, level // 10))
        if self is SizeSpec.HUGE:
            return Dim(40 + twist(level, level // 4), 31 + twist(level, level // 6))
        return Dim(25 + twist(level, level // 9), 20 + twist(level, level // 11))

    @classmethod
    def for_level(cls, level: int) -> "SizeSpec":
        tier = level % 11
        if tier in (1, 4):
            return cls.TINY
        if tier in (2, 6, 8):
            return cls.SMALL
        if tier in (3, 10):
            return cls.LARGE
        if tier == 7:
            return cls.HUGE
        return cls.NORMAL


def _difficulty(level: int, s: int) -> tuple[int, int, int, int]:
    """Return ``(lives, monsters, potions, cuts)`` for a level.

    Levels go through a cycle of ten, most steps only kicking in once the
    player is past some level; anything unmatched falls back to the
    standard difficulty.
    """
    step = level % 10
    if step == 1:
        # simple walk
        return 1, 0, 0, 1 + s // 200
    if step == 2:
        # super easy
        return 3, 1, 5 + s // (40 + level), 1 + s // 100
    if step == 3 and level > 10:
        return 4, 2 + level // 60, 2 + s // (100 + level), 1 + s // 160
    if step == 4 and level > 10:
        return 2, 2, 5 + s // (100 + level), 1 + s // 200
    if step == 5 and level > 20:
        # lots of cuts, few potions and lives
        return 1, 2, 4 + s // (420 + level), 1 + s // 100
    if step == 6 and level > 30:
        return 1, 5 + level // 90, 1 + s // 150, 1 + s // 150
    if step == 7 and level > 30:
        return 2, 3 + level // 100, 5 + s // 100, 1 + s // 200
    if step == 8 and level > 40:
        return 2, 4, 1 + s // (150 + level), 1 + s // 200
    if step == 9 and level > 50:
        return 2, 5 + level // 100, 1 + s // (200 + 2 * level), 1 + s // 100
    return 1, 2, 7 + s // (30 + 4 * level), 1 + s // (60 + 2 * level)


def specs_for_level(level: int) -> Specs:
    """Deterministic specs of a level: same level, same specs."""
    dim = SizeSpec.for_level(level).dim(level)
    disk = level % 7 == 5
    if disk:
        dim = Dim(max(DISK_MIN_SIDE, dim.w), max(DISK_MIN_SIDE, dim.h))
    elif level % 13 == 7:
        dim = dim.verticalized()
    s = dim.cell_count
    fill = not disk and not (level % 4 == 1 and level > 6)
    lives, monsters, potions, cuts = _difficulty(level, s)
    return Specs(
        name=f"Level {level}",
        dim=dim,
        cuts=cuts,
        potions=potions,
        monsters=monsters,
        lives=lives,
        status=LEVEL_HINTS.get(level, ""),
        disk=disk,
        fill=fill,
    )


def specs_for_terminal_build(terminal: Dim, rng: GameRNG) -> Specs:
    """Random specs for a maze printed in a terminal of the given size.

    Not reproducible unless ``rng`` is seeded.
    """
    if rng.get_randrange(3) == 0:
        dim = Dim(rng.get_randrange(8, 35), rng.get_randrange(7, 20))
    else:
        dim = Dim(max(terminal.w - 2, MIN_DIM), max(terminal.h * 2 - 3, MIN_DIM + 1))
    s = dim.cell_count
    density = rng.get_randrange(3)
    if density == 0:
        cuts = s // 2300
    elif density == 1:
        cuts = s // 500
    else:
        cuts = s // 60
    specs = Specs(
        name="random",
        dim=dim,
        cuts=cuts,
        potions=0,
        monsters=0,
        lives=0,
        status="",
        disk=rng.get_randrange(20) == 0,
        fill=rng.get_randrange(5) < 4,
    )
    log.debug("Freeform specs drawn", specs=specs)
    return specs
