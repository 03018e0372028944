# labyrinth/systems/death_system.py
"""
Handles the player losing lives: collision teleports and giving up.
"""
from typing import TYPE_CHECKING, List

import structlog

from labyrinth.constants import BLAST_RADIUS, MIN_JUMP
from labyrinth.world.position import Pos

if TYPE_CHECKING:
    from labyrinth.events import EventList
    from labyrinth.maze import Maze

log = structlog.get_logger(__name__)


def blast_radius(maze: "Maze") -> int:
    """Half side of the teleport window, shrunk for small mazes."""
    return max(1, min(BLAST_RADIUS, maze.dim.w // 2 - 3, maze.dim.h // 2 - 3))


def possible_jumps(maze: "Maze", origin: Pos) -> List[Pos]:
    """
    Rooms a collision can send the player to from ``origin``.

    The square window is re-centred so that it stays inside the grid, and
    only cells at least MIN_JUMP away (manhattan) without a monster qualify.
    """
    r = blast_radius(maze)
    cx = min(max(origin.x, r + 1), maze.dim.w - r - 1)
    cy = min(max(origin.y, r + 1), maze.dim.h - r - 1)
    jumps: List[Pos] = []
    for x in range(cx - r, cx + r + 1):
        for y in range(cy - r, cy + r + 1):
            dest = Pos(x, y)
            if maze.is_wall(dest) or maze.has_monster(dest):
                continue
            if origin.manhattan_distance(dest) >= MIN_JUMP:
                jumps.append(dest)
    return jumps


def kill_player(maze: "Maze", events: "EventList") -> None:
    """
    Remove a life and, if some remain, teleport the player.

    A potion on the landing cell is drunk at once.  With nowhere to land, or
    no player at all, the game is lost.
    """
    maze.lives -= 1
    player = maze.player
    if player is None:
        maze.lives = 0
    elif maze.lives > 0:
        jumps = possible_jumps(maze, player)
        if not jumps:
            log.debug("No room to teleport to", pos=player)
            maze.lives = 0
        else:
            dest = maze.rng.choice(jumps)
            events.add_teleport(player, jumps, dest)
            maze.player = dest
            if maze.potions.remove(dest):
                maze.lives += 1
            log.debug("Player teleported", start=player, dest=dest, candidates=len(jumps))
    log.debug("Remaining lives", lives=maze.lives)


def give_up(maze: "Maze") -> None:
    maze.lives = 0
    log.info("Player gave up", maze=maze.name, turn=maze.turn)
