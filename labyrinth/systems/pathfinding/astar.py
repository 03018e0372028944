# labyrinth/systems/pathfinding/astar.py
"""Grid A* over room cells.

Used for monster pursuit, exit placement, reachability repair, the player's
auto-play and the "path to exit" highlight.

The heuristic is twice the euclidean distance to the goal.  It is not
admissible: searches reach the goal's side quickly but paths are not
guaranteed shortest.
"""

from __future__ import annotations

import heapq
from typing import TYPE_CHECKING, Final, List, Optional, Tuple

import numpy as np

from labyrinth.world.grid_index import GridIndex, GridSet
from labyrinth.world.position import Pos

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from labyrinth.maze import Maze


HEURISTIC_WEIGHT: Final[int] = 2
_UNREACHED: Final[int] = np.iinfo(np.int32).max


def _heuristic(p: Pos, goal: Pos) -> int:
    return HEURISTIC_WEIGHT * int(p.euclidean_distance(goal))


def find_path(maze: "Maze", start: Pos, goal: Pos) -> Optional[List[Pos]]:
    """Return a path from ``start`` to ``goal``, or ``None``.

    The path excludes ``start`` and ends with ``goal``.  The goal does not
    need to be a room: the search stops on the first room found next to it,
    which lets callers measure distances to border walls.
    """
    if start == goal:
        return []
    if start.is_adjacent(goal):
        return [goal]

    dim = maze.dim
    # nodes already expanded
    closed_set = GridSet(dim)
    # flat index of the node preceding each node on its cheapest known path
    came_from = GridIndex(dim, -1, dtype=np.int32)
    # cost of the cheapest known path from start
    g_score = GridIndex(dim, _UNREACHED, dtype=np.int32)
    g_score.set(start, 0)

    open_set: list[Tuple[int, Pos]] = [(0, start)]
    while open_set:
        _, current = heapq.heappop(open_set)
        closed_set.set(current, True)
        for neighbour in maze.enterable_neighbours(current):
            if neighbour.is_adjacent(goal):
                path = [goal, neighbour]
                while current != start:
                    path.append(current)
                    current = dim.pos(came_from.get(current))
                path.reverse()
                return path
            if neighbour in closed_set:
                continue
            tentative_g_score = g_score.get(current) + 1
            if tentative_g_score < g_score.get(neighbour):
                came_from.set(neighbour, dim.idx(current))
                g_score.set(neighbour, tentative_g_score)
                f_score = tentative_g_score + _heuristic(neighbour, goal)
                heapq.heappush(open_set, (f_score, neighbour))

    # open set exhausted: start and goal are not connected
    return None


def path_length(maze: "Maze", start: Pos, goal: Pos) -> Optional[int]:
    path = find_path(maze, start, goal)
    return None if path is None else len(path)
