# labyrinth/maze.py
from typing import List, Optional

import structlog

from game_rng import GameRNG
from labyrinth.constants import (
    DEFAULT_MAX_MONSTERS,
    MIN_DIM,
    STATUS_LOST,
    STATUS_WON,
    Nature,
)
from labyrinth.events import EventList
from labyrinth.systems import death_system, monster_system, movement_system
from labyrinth.systems.pathfinding.astar import find_path
from labyrinth.world.grid_index import GridSet
from labyrinth.world.position import Dim, Direction, Pos

log = structlog.get_logger(__name__)


class Maze:
    """A maze and the state of the game played in it.

    The grid is stored as parallel :class:`GridSet` layers:

    ``rooms``
        Enterable cells. Every other cell is a wall.
    ``invisible_walls``
        Walls drawn like rooms (cosmetic fill, stranded pockets). Only
        :meth:`make_invisible` writes it, and only on walls.
    ``potions``
        Extra lives, consumed by whoever steps on them.
    ``highlights``
        Purely cosmetic overlay (solution path).

    A maze is built once by :func:`labyrinth.world.procgen.build_maze`, then
    mutated by the turn operations until :meth:`is_won` or :meth:`is_lost`,
    after which it is discarded.  Every mutating operation accepts an optional
    :class:`EventList` and returns the list it appended to.
    """

    def __init__(self, name: str, dim: Dim, rng: GameRNG | None = None):
        if dim.w < MIN_DIM or dim.h < MIN_DIM:
            log.error("Invalid maze dimensions", width=dim.w, height=dim.h)
            raise ValueError(f"Maze sides must be at least {MIN_DIM}, got {dim}")
        # two maze rows are drawn per text row
        dim = dim.even_height()
        self.name: str = name
        self.dim: Dim = dim
        self.rng: GameRNG = rng if rng is not None else GameRNG()
        self.rooms: GridSet = GridSet(dim)
        self.invisible_walls: GridSet = GridSet(dim)
        self.potions: GridSet = GridSet(dim)
        self.highlights: GridSet = GridSet(dim)
        # walls next to exactly one room when queued, candidates for growth
        self.openings: List[Pos] = []
        # shortcuts opened after growth
        self.cuts: List[Pos] = []
        self.start: Optional[Pos] = None
        self.exit: Optional[Pos] = None
        self.player: Optional[Pos] = None
        # order matters: the first monster to reach the player wins the turn
        self.monsters: List[Pos] = []
        self.turn: int = 0
        self.next_monster: int = min(50, (dim.w + dim.h) // 3)
        self.monsters_period: int = dim.w + dim.h - 3
        self.max_monsters: int = DEFAULT_MAX_MONSTERS
        self.lives: int = 1
        self.default_status: str = ""
        self.squared_radius: Optional[int] = None

    def __repr__(self) -> str:
        return (
            f"Maze(name={self.name!r}, dim={self.dim}, player={self.player}, "
            f"exit={self.exit}, lives={self.lives}, monsters={len(self.monsters)})"
        )

    # --- Read accessors ---
    def is_room(self, p: Pos) -> bool:
        return p in self.rooms

    def is_wall(self, p: Pos) -> bool:
        return p not in self.rooms

    def is_invisible_wall(self, p: Pos) -> bool:
        return p in self.invisible_walls

    def has_monster(self, p: Pos) -> bool:
        return p in self.monsters

    def has_potion(self, p: Pos) -> bool:
        return p in self.potions

    def is_won(self) -> bool:
        return self.player is not None and self.player == self.exit

    def is_lost(self) -> bool:
        return self.lives < 1

    def is_active(self) -> bool:
        return not (self.is_won() or self.is_lost())

    def status(self) -> str:
        if self.is_won():
            return STATUS_WON
        if self.is_lost():
            return STATUS_LOST
        return self.default_status

    def visible_nature(self, p: Pos) -> Nature:
        """The one thing shown in a cell, when several share it."""
        if p not in self.rooms:
            if p in self.invisible_walls:
                return Nature.INVISIBLE_WALL
            return Nature.WALL
        if p in self.monsters:
            return Nature.MONSTER
        if p == self.player:
            return Nature.PLAYER
        if p in self.potions:
            return Nature.POTION
        if p in self.highlights:
            return Nature.HIGHLIGHT
        return Nature.ROOM

    # --- Geometry ---
    def center(self) -> Pos:
        return Pos(self.dim.w // 2, self.dim.h // 2)

    def in_disk(self, p: Pos) -> bool:
        """Whether ``p`` is inside the growth radius (always true without one)."""
        if self.squared_radius is None:
            return True
        return p.sq_euclidean_distance(self.center()) <= self.squared_radius

    def pos_in_dir(self, pos: Pos, direction: Direction) -> Optional[Pos]:
        dest = pos.in_dir(direction)
        if dest is None or not self.dim.contains(dest):
            return None
        return dest

    def inside_neighbours(self, p: Pos) -> List[Pos]:
        """Orthogonal neighbours, not counting the border."""
        w, h = self.dim.w, self.dim.h
        neighbours = []
        if p.y > 1:
            neighbours.append(Pos(p.x, p.y - 1))
        if p.x < w - 2:
            neighbours.append(Pos(p.x + 1, p.y))
        if p.y < h - 2:
            neighbours.append(Pos(p.x, p.y + 1))
        if p.x > 1:
            neighbours.append(Pos(p.x - 1, p.y))
        return neighbours

    def enterable_neighbours(self, p: Pos) -> List[Pos]:
        """Up, right, down, left neighbours that are rooms."""
        w, h = self.dim.w, self.dim.h
        rooms = self.rooms
        neighbours = []
        if p.y > 0 and Pos(p.x, p.y - 1) in rooms:
            neighbours.append(Pos(p.x, p.y - 1))
        if p.x < w - 1 and Pos(p.x + 1, p.y) in rooms:
            neighbours.append(Pos(p.x + 1, p.y))
        if p.y < h - 1 and Pos(p.x, p.y + 1) in rooms:
            neighbours.append(Pos(p.x, p.y + 1))
        if p.x > 0 and Pos(p.x - 1, p.y) in rooms:
            neighbours.append(Pos(p.x - 1, p.y))
        return neighbours

    def room_neighbour_count(self, p: Pos) -> int:
        return sum(1 for n in self.inside_neighbours(p) if n in self.rooms)

    # --- Cell writers ---
    def open_cell(self, p: Pos) -> None:
        """Make ``p`` a room and queue its inside wall neighbours as openings."""
        self.rooms.set(p, True)
        self.invisible_walls.set(p, False)
        for neighbour in self.inside_neighbours(p):
            if neighbour in self.rooms or not self.in_disk(neighbour):
                continue
            if self.room_neighbour_count(neighbour) == 1:
                self.openings.append(neighbour)

    def make_invisible(self, p: Pos) -> None:
        """Turn ``p`` into a wall drawn like a room."""
        self.rooms.set(p, False)
        self.potions.set(p, False)
        self.invisible_walls.set(p, True)

    def set_start(self, p: Pos) -> None:
        self.start = p
        self.player = p
        self.open_cell(p)

    # --- Highlights (cosmetic) ---
    def clear_highlight(self) -> bool:
        """Remove all highlights; return whether there were any."""
        if self.highlights.is_empty():
            return False
        self.highlights.clear()
        return True

    def highlight_start(self) -> None:
        if self.start is not None:
            self.highlights.set(self.start, True)

    def highlight_path_to_exit(self, from_pos: Optional[Pos]) -> None:
        if from_pos is None or self.exit is None:
            return
        path = find_path(self, from_pos, self.exit)
        if path is not None:
            for p in path:
                self.highlights.set(p, True)
        else:
            log.debug("No path to highlight", start=from_pos, exit=self.exit)
        self.highlights.set(self.exit, True)

    # --- Turn operations ---
    def try_move(self, direction: Direction, events: EventList | None = None) -> EventList:
        events = events if events is not None else EventList()
        movement_system.try_move(self, direction, events)
        return events

    def player_moved(self, events: EventList | None = None) -> EventList:
        events = events if events is not None else EventList()
        movement_system.player_moved(self, events)
        return events

    def move_player_auto(self, events: EventList | None = None) -> EventList:
        events = events if events is not None else EventList()
        movement_system.move_player_auto(self, events)
        return events

    def end_player_turn(self, events: EventList | None = None) -> EventList:
        events = events if events is not None else EventList()
        monster_system.end_player_turn(self, events)
        return events

    def kill_player(self, events: EventList | None = None) -> EventList:
        events = events if events is not None else EventList()
        death_system.kill_player(self, events)
        return events

    def possible_jumps(self, origin: Pos) -> List[Pos]:
        return death_system.possible_jumps(self, origin)

    def give_up(self) -> None:
        death_system.give_up(self)
