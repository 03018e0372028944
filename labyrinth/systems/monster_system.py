# labyrinth/systems/monster_system.py
"""
Monster pursuit and spawning, run at the end of every player turn.
"""
from typing import TYPE_CHECKING

import structlog

from labyrinth.constants import DEFAULT_MAX_MONSTERS, SPAWN_PERIOD_INCREMENTS, Nature
from labyrinth.systems import death_system
from labyrinth.systems.pathfinding.astar import find_path

if TYPE_CHECKING:
    from labyrinth.events import EventList
    from labyrinth.maze import Maze

log = structlog.get_logger(__name__)


def end_player_turn(maze: "Maze", events: "EventList") -> None:
    """Advance the turn counter and move the world."""
    maze.turn += 1
    if maze.player is None or maze.exit is None or not maze.is_active():
        return
    resolve_monsters(maze, events)
    schedule_spawn(maze)


def resolve_monsters(maze: "Maze", events: "EventList") -> None:
    """
    Move every monster one step toward the player, in list order.

    The first monster reaching the player kills it and ends the resolution:
    the monsters after it don't move this turn.
    """
    player = maze.player
    for i, monster in enumerate(maze.monsters):
        direction = monster.step_dir_to(player)
        if direction is not None:
            # next to the player: jump on it
            events.add_monster_move(monster, direction, Nature.PLAYER)
            maze.monsters[i] = player
            log.debug("Monster caught the player", monster=i, pos=player)
            death_system.kill_player(maze, events)
            return
        path = find_path(maze, monster, player)
        if not path:
            continue
        dest = path[0]
        if maze.has_monster(dest):
            continue
        events.add_monster_move(monster, monster.dir_to(dest), maze.visible_nature(dest))
        maze.monsters[i] = dest
        # monsters drink potions but gain nothing
        maze.potions.set(dest, False)
        if dest == player:
            log.debug("Monster reached the player", monster=i, pos=player)
            death_system.kill_player(maze, events)
            return


def spawn_period_increment(monster_count: int) -> int:
    first, second, later = SPAWN_PERIOD_INCREMENTS
    if monster_count == 1:
        return first
    if monster_count == 2:
        return second
    return later


def schedule_spawn(maze: "Maze") -> None:
    """
    Make a monster appear on the exit when its turn has come.

    A blocked exit (player or monster on it) postpones the spawn by one
    turn.  After each spawn the period grows, by less as monsters add up.
    """
    if len(maze.monsters) >= maze.max_monsters or maze.turn != maze.next_monster:
        return
    exit_pos = maze.exit
    if exit_pos == maze.player or maze.has_monster(exit_pos):
        maze.next_monster += 1
        log.debug("Monster spawn postponed", turn=maze.turn)
        return
    maze.monsters.append(exit_pos)
    log.debug("Monster spawned", pos=exit_pos, turn=maze.turn, count=len(maze.monsters))
    if len(maze.monsters) < DEFAULT_MAX_MONSTERS:
        maze.next_monster = maze.turn + maze.monsters_period
        maze.monsters_period += spawn_period_increment(len(maze.monsters))
