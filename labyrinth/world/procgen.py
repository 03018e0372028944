# labyrinth/world/procgen.py
from typing import List, Optional

import numpy as np
import structlog

from game_rng import GameRNG
from labyrinth.maze import Maze
from labyrinth.systems.pathfinding.astar import find_path, path_length
from labyrinth.world.grid_index import GridSet
from labyrinth.world.position import Pos
from labyrinth.world.specs import Specs

log = structlog.get_logger(__name__)

# --- Configuration ---
DEFAULT_MAX_ATTEMPTS = 5
FILL_BATCH = 10
# Beyond this radius a disk maze is round enough to bother
MIN_DISK_HALF_SIDE = 10
# Growth pops one of the last few openings, the whole list from time to time
TAIL_CYCLE = 35
TAIL_LONG = 15
TAIL_SHORT = 4


class UnplayableMazeError(RuntimeError):
    """Raised when no generation attempt could place an exit."""

    def __init__(self, specs: Specs, attempts: int):
        super().__init__(f"No exit could be placed in {specs.name!r} after {attempts} attempts")
        self.specs = specs
        self.attempts = attempts


# --- Growth ---
def seek_open(maze: Maze) -> bool:
    """Open one more cell from the openings. Returns False when none is left."""
    openings = maze.openings
    rng = maze.rng
    while openings:
        length = len(openings)
        remainder = length % TAIL_CYCLE
        if remainder == 0:
            tail = length
        elif remainder == 1:
            tail = min(length, TAIL_LONG)
        else:
            tail = min(length, TAIL_SHORT)
        idx = length - rng.get_randrange(tail) - 1
        # swap remove
        opening = openings[idx]
        openings[idx] = openings[-1]
        openings.pop()
        # a wall next to two rooms would close a tiny loop
        if maze.is_room(opening) or maze.room_neighbour_count(opening) != 1:
            continue
        maze.open_cell(opening)
        return True
    return False


def grow(maze: Maze, max_cells: int) -> int:
    """Open up to ``max_cells`` cells, return how many were opened."""
    for n in range(max_cells):
        if not seek_open(maze):
            return n
    return max_cells


def possible_exits(maze: Maze) -> List[Pos]:
    """Border walls which, once open, would lead into the maze."""
    w, h = maze.dim.w, maze.dim.h
    exits: List[Pos] = []
    for x in range(1, w - 1):
        if maze.is_room(Pos(x, 1)):
            exits.append(Pos(x, 0))
        if maze.is_room(Pos(x, h - 2)):
            exits.append(Pos(x, h - 1))
    for y in range(1, h - 1):
        if maze.is_room(Pos(1, y)):
            exits.append(Pos(0, y))
        if maze.is_room(Pos(w - 2, y)):
            exits.append(Pos(w - 1, y))
    return exits


def can_place_exit(maze: Maze) -> bool:
    w, h = maze.dim.w, maze.dim.h
    rooms = maze.rooms.as_grid()
    return bool(
        rooms[1, 1 : w - 1].any()
        or rooms[h - 2, 1 : w - 1].any()
        or rooms[1 : h - 1, 1].any()
        or rooms[1 : h - 1, w - 2].any()
    )


# --- Placement ---
def place_start(maze: Maze) -> Pos:
    w, h = maze.dim.w, maze.dim.h
    rng = maze.rng
    while True:
        start = Pos(rng.get_randrange(w // 6, w * 5 // 6), rng.get_randrange(h // 6, h * 5 // 6))
        if maze.squared_radius is not None:
            # too close to the rim, growth could be stuck there
            if start.sq_euclidean_distance(maze.center()) + 2 > maze.squared_radius:
                continue
        maze.set_start(start)
        return start


def add_cuts(maze: Maze, n: int) -> int:
    """Open ``n`` random inside walls as shortcuts."""
    w, h = maze.dim.w, maze.dim.h
    candidates = [
        Pos(x, y)
        for x in range(1, w - 1)
        for y in range(1, h - 1)
        if maze.is_wall(Pos(x, y)) and Pos(x, y) != maze.player and maze.in_disk(Pos(x, y))
    ]
    added = 0
    while added < n and candidates:
        idx = maze.rng.get_randrange(len(candidates))
        cut = candidates[idx]
        candidates[idx] = candidates[-1]
        candidates.pop()
        maze.cuts.append(cut)
        maze.rooms.set(cut, True)
        added += 1
    log.debug("Cuts added", requested=n, added=added)
    return added


def add_potions(maze: Maze, n: int) -> int:
    """Put ``n`` potions in random empty rooms."""
    w, h = maze.dim.w, maze.dim.h
    candidates = [
        Pos(x, y)
        for x in range(1, w - 1)
        for y in range(1, h - 1)
        if maze.is_room(Pos(x, y))
        and Pos(x, y) != maze.player
        and not maze.has_potion(Pos(x, y))
        and not maze.has_monster(Pos(x, y))
    ]
    added = 0
    while added < n and candidates:
        idx = maze.rng.get_randrange(len(candidates))
        potion = candidates[idx]
        candidates[idx] = candidates[-1]
        candidates.pop()
        maze.potions.set(potion, True)
        added += 1
    log.debug("Potions added", requested=n, added=added)
    return added


def make_exit(maze: Maze) -> Optional[Pos]:
    """Open the possible exit farthest (by path) from the player."""
    if maze.player is None:
        return None
    best: Optional[Pos] = None
    best_len = -1
    for candidate in possible_exits(maze):
        length = path_length(maze, maze.player, candidate) or 0
        # on ties the last candidate wins
        if length >= best_len:
            best, best_len = candidate, length
    maze.exit = best
    if best is not None:
        maze.rooms.set(best, True)
        log.debug("Exit placed", exit=best, path_length=best_len)
    return best


# --- Post-processing ---
def grow_invisible_walls(maze: Maze) -> int:
    """Hide walls with no room among their 8 neighbours.

    Must run once the maze is fully grown and the exit is set.
    """
    rooms = maze.rooms.as_grid()
    padded = np.pad(rooms, 1, constant_values=False)
    h, w = rooms.shape
    near_room = np.zeros_like(rooms)
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            near_room |= padded[1 + dy : 1 + dy + h, 1 + dx : 1 + dx + w]
    hidden = ~rooms & ~near_room
    maze.invisible_walls.as_grid()[hidden] = True
    count = int(np.count_nonzero(hidden))
    log.debug("Invisible walls grown", count=count)
    return count


def change_unreachable_rooms_into_invisible_walls(maze: Maze) -> int:
    """Turn rooms with no path to the exit into invisible walls.

    Interrupted growth followed by cuts can leave stranded pockets; they
    must not stay rooms or a teleport could land there.
    """
    if maze.exit is None:
        return 0
    reachable = GridSet(maze.dim)
    stranded = 0
    for pos in list(maze.rooms.positions()):
        if pos in reachable:
            continue
        path = find_path(maze, pos, maze.exit)
        if path is None:
            maze.make_invisible(pos)
            stranded += 1
            continue
        reachable.set(pos, True)
        for p in path:
            reachable.set(p, True)
    if stranded:
        log.debug("Unreachable rooms hidden", count=stranded)
    return stranded


# --- Main Generation Function ---
def _generate(specs: Specs, rng: GameRNG) -> Maze:
    maze = Maze(specs.name, specs.dim, rng)
    w, h = maze.dim.w, maze.dim.h
    if specs.disk:
        d = min(w, h) // 2
        if d > MIN_DISK_HALF_SIDE:
            maze.squared_radius = (d + 1) * (d + 1)
    maze.lives = specs.lives
    place_start(maze)
    if specs.fill:
        while grow(maze, FILL_BATCH) > 0:
            pass
    else:
        batch = (w * h) // 3
        while grow(maze, batch) > 0:
            if can_place_exit(maze):
                break
    add_cuts(maze, specs.cuts)
    add_potions(maze, specs.potions)
    maze.max_monsters = specs.monsters
    make_exit(maze)
    grow_invisible_walls(maze)
    change_unreachable_rooms_into_invisible_walls(maze)
    maze.default_status = specs.status
    return maze


def build_maze(
    specs: Specs,
    rng: GameRNG | None = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Maze:
    """
    Builds a fully generated maze from ``specs``.

    Args:
        specs: The generation parameters.
        rng: Random source; a fresh unseeded one when omitted.
        max_attempts: Generations tried before giving up on placing an exit.

    Returns:
        The maze, with the player on its start cell.

    Raises:
        UnplayableMazeError: if no attempt produced an exit.
        ValueError: if ``specs.dim`` is too small.
    """
    rng = rng if rng is not None else GameRNG()
    for attempt in range(1, max_attempts + 1):
        maze = _generate(specs, rng)
        if maze.exit is not None:
            log.info(
                "Maze built",
                name=maze.name,
                dim=f"{maze.dim.w}x{maze.dim.h}",
                seed=rng.initial_seed,
                attempt=attempt,
                start=maze.start,
                exit=maze.exit,
                rooms=maze.rooms.count(),
            )
            return maze
        log.warning("No exit could be placed, retrying", name=specs.name, attempt=attempt)
    raise UnplayableMazeError(specs, max_attempts)
