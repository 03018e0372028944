# engine/action_handler.py
"""
Turns player action dictionaries (from key bindings or the screen-saver
timer) into calls on the maze.
"""
from typing import Any, Dict

import structlog

from labyrinth.events import EventList
from labyrinth.maze import Maze
from labyrinth.world.position import Direction

log = structlog.get_logger(__name__)


def process_player_action(
    action: Dict[str, Any],
    maze: Maze,
    events: EventList,
) -> bool:
    """
    Applies one action to the maze.

    Returns True if a turn was played. Actions on a maze which is already
    won or lost are ignored. Raises ValueError for an unknown action type
    or move direction.
    """
    action_type = action.get("type")
    log.debug("ActionHandler: Processing action", action_type=action_type, action=action)
    if not maze.is_active():
        log.debug("Maze is over, action ignored", action_type=action_type)
        return False

    turn_before = maze.turn
    match action_type:
        case "move":
            direction_name = action.get("direction")
            if not isinstance(direction_name, str):
                raise ValueError(f"Move action without direction: {action!r}")
            maze.try_move(Direction.parse(direction_name), events)
        case "wait":
            maze.end_player_turn(events)
        case "auto":
            maze.move_player_auto(events)
        case "give_up":
            maze.give_up()
            return True
        case _:
            raise ValueError(f"Unknown action type: {action_type!r}")

    player_acted = maze.turn != turn_before
    if player_acted:
        log.debug("Player action resulted in turn", action_type=action_type, turn=maze.turn)
    else:
        log.debug("Player action did not result in turn", action_type=action_type)
    return player_acted
