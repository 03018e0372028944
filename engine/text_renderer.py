# engine/text_renderer.py
"""
Prints mazes to a terminal, for ``--build``.

Colored output packs two maze rows in each text row with the upper half
block: the foreground paints the upper cell, the background the lower one.
When the output isn't a terminal the maze is written with one character
per cell instead.
"""
from typing import Dict

import structlog
from rich.console import Console
from rich.text import Text

from labyrinth.constants import Nature
from labyrinth.maze import Maze
from labyrinth.world.position import Pos

log = structlog.get_logger(__name__)

UPPER_HALF_BLOCK = "▀"

CELL_STYLES: Dict[Nature, str] = {
    Nature.ROOM: "rgb(20,20,20)",
    Nature.WALL: "rgb(150,150,150)",
    Nature.INVISIBLE_WALL: "rgb(20,20,20)",
    Nature.PLAYER: "rgb(255,215,0)",
    Nature.MONSTER: "rgb(220,40,40)",
    Nature.POTION: "rgb(40,200,80)",
    Nature.HIGHLIGHT: "rgb(60,90,200)",
}

CELL_CHARS: Dict[Nature, str] = {
    Nature.ROOM: " ",
    Nature.WALL: "#",
    Nature.INVISIBLE_WALL: " ",
    Nature.PLAYER: "@",
    Nature.MONSTER: "M",
    Nature.POTION: "+",
    Nature.HIGHLIGHT: ".",
}


def render_text(maze: Maze) -> Text:
    """Colored rendering, two maze rows per line."""
    text = Text()
    for y in range(0, maze.dim.h, 2):
        for x in range(maze.dim.w):
            top = CELL_STYLES[maze.visible_nature(Pos(x, y))]
            bottom = CELL_STYLES[maze.visible_nature(Pos(x, y + 1))]
            text.append(UPPER_HALF_BLOCK, style=f"{top} on {bottom}")
        text.append("\n")
    return text


def render_ascii(maze: Maze) -> str:
    """Plain rendering, one character per cell."""
    rows = []
    for y in range(maze.dim.h):
        rows.append(
            "".join(CELL_CHARS[maze.visible_nature(Pos(x, y))] for x in range(maze.dim.w))
        )
    return "\n".join(rows)


def print_maze(maze: Maze, console: Console | None = None) -> None:
    console = console if console is not None else Console()
    if console.is_terminal:
        console.print(Text(maze.name, style="bold"))
        console.print(render_text(maze), end="", soft_wrap=True)
    else:
        console.print(maze.name, markup=False, highlight=False)
        console.print(render_ascii(maze), markup=False, highlight=False, soft_wrap=True)
    log.debug("Maze printed", name=maze.name, terminal=console.is_terminal)
