"""Events describing what changed during a turn.

The turn engine appends to an :class:`EventList`; the window reads it to
animate moves and teleports, then clears it.  The simulation never reads
events back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Union

from labyrinth.constants import Nature
from labyrinth.world.position import Direction, Pos


@dataclass(frozen=True)
class PosMove:
    """A one-step move of the player or of a monster."""

    start: Pos
    direction: Direction
    moving_nature: Nature
    start_background_nature: Nature
    dest_background_nature: Nature

    @property
    def dest(self) -> Pos | None:
        return self.start.in_dir(self.direction)


@dataclass(frozen=True)
class Teleport:
    """A collision jump, with every cell that could have been chosen."""

    start: Pos
    possible_jumps: List[Pos]
    arrival: Pos


Event = Union[PosMove, Teleport]


@dataclass
class EventList:
    events: List[Event] = field(default_factory=list)

    def add_teleport(self, start: Pos, possible_jumps: List[Pos], arrival: Pos) -> None:
        self.events.append(Teleport(start, list(possible_jumps), arrival))

    def add_player_move(
        self, start: Pos, direction: Direction, dest_background_nature: Nature
    ) -> None:
        self.events.append(
            PosMove(
                start=start,
                direction=direction,
                moving_nature=Nature.PLAYER,
                start_background_nature=Nature.ROOM,
                dest_background_nature=dest_background_nature,
            )
        )

    def add_monster_move(
        self, start: Pos, direction: Direction, dest_background_nature: Nature
    ) -> None:
        dest = start.in_dir(direction)
        if dest is None:
            return
        # If something left the destination during this turn, the monster is
        # drawn over that mover rather than over the final state.
        for event in self.events:
            if isinstance(event, PosMove) and event.start == dest:
                dest_background_nature = event.moving_nature
                break
        self.events.append(
            PosMove(
                start=start,
                direction=direction,
                moving_nature=Nature.MONSTER,
                start_background_nature=Nature.ROOM,
                dest_background_nature=dest_background_nature,
            )
        )

    def moves(self) -> Iterator[PosMove]:
        return (e for e in self.events if isinstance(e, PosMove))

    def teleports(self) -> Iterator[Teleport]:
        return (e for e in self.events if isinstance(e, Teleport))

    def is_empty(self) -> bool:
        return not self.events

    def clear(self) -> None:
        self.events.clear()

    def __len__(self) -> int:
        return len(self.events)
