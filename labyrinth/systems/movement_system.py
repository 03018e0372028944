"""Player movement helpers.

These functions move the player around the maze, then hand over to the
monster system to finish the turn.  They only check bounds and walls;
collisions and pickups are resolved in :func:`player_moved`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from labyrinth.systems import death_system, monster_system
from labyrinth.systems.pathfinding.astar import find_path
from labyrinth.world.position import Direction

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from labyrinth.events import EventList
    from labyrinth.maze import Maze

log = structlog.get_logger(__name__)


def try_move(maze: Maze, direction: Direction, events: EventList) -> bool:
    """Attempt to move the player one step.

    Parameters
    ----------
    maze:
        The maze being played.
    direction:
        Where to step.
    events:
        Receives the player move, then whatever the rest of the turn does.

    Returns
    -------
    bool
        ``True`` if the player moved (and a turn was played), ``False`` if
        there is no player or the destination is outside the grid or a wall.
    """
    player = maze.player
    if player is None:
        return False
    dest = maze.pos_in_dir(player, direction)
    if dest is None or not maze.is_room(dest):
        return False
    events.add_player_move(player, direction, maze.visible_nature(dest))
    maze.player = dest
    log.debug("Player moved", start=player, dest=dest, turn=maze.turn)
    player_moved(maze, events)
    return True


def player_moved(maze: Maze, events: EventList) -> None:
    """Resolve what the player walked into, then end the turn."""
    player = maze.player
    if player is not None:
        if maze.has_monster(player):
            log.debug("Player walked into a monster", pos=player)
            death_system.kill_player(maze, events)
        elif maze.potions.remove(player):
            maze.lives += 1
            log.debug("Potion taken", pos=player, lives=maze.lives)
    monster_system.end_player_turn(maze, events)


def move_player_auto(maze: Maze, events: EventList) -> None:
    """Play one step of the way to the exit for the player.

    Does nothing once the maze is won or lost.
    """
    player, exit_pos = maze.player, maze.exit
    if player is None or exit_pos is None or not maze.is_active():
        return
    path = find_path(maze, player, exit_pos)
    if path is None:
        # the generator left the player cut from the exit
        log.warning("No path from player to exit", player=player, exit=exit_pos)
        death_system.kill_player(maze, events)
        monster_system.end_player_turn(maze, events)
        return
    dest = path[0]
    if maze.has_monster(dest):
        monster_system.end_player_turn(maze, events)
        return
    direction = player.step_dir_to(dest)
    if direction is None:  # pragma: no cover - paths are made of adjacent steps
        raise ValueError(f"Path step {dest} is not next to {player}")
    try_move(maze, direction, events)
