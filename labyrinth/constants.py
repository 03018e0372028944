from enum import Enum
from typing import Final


class Nature(Enum):
    """What a cell looks like, one visible "thing" per cell."""

    ROOM = "room"
    WALL = "wall"
    INVISIBLE_WALL = "invisible_wall"  # drawn like a room, never enterable
    PLAYER = "player"
    MONSTER = "monster"
    POTION = "potion"
    HIGHLIGHT = "highlight"


# Minimal manhattan distance of a teleport after a collision
MIN_JUMP: Final[int] = 2
# Half side of the teleport window, must be greater than MIN_JUMP
BLAST_RADIUS: Final[int] = 4
# Smallest maze side, must be greater than BLAST_RADIUS + 2
MIN_DIM: Final[int] = 7

DEFAULT_MAX_MONSTERS: Final[int] = 10
# Spawn period growth after the 1st, 2nd, and any later monster
SPAWN_PERIOD_INCREMENTS: Final[tuple[int, int, int]] = (105, 60, 35)

STATUS_WON: Final[str] = "You win. Hit any key for next level"
STATUS_LOST: Final[str] = "You lost. Hit any key to try again"

__all__ = [
    "Nature",
    "MIN_JUMP",
    "BLAST_RADIUS",
    "MIN_DIM",
    "DEFAULT_MAX_MONSTERS",
    "SPAWN_PERIOD_INCREMENTS",
    "STATUS_WON",
    "STATUS_LOST",
]
