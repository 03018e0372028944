# engine/main_loop.py
from typing import TYPE_CHECKING, Any, Self

import structlog

from game_rng import GameRNG
from labyrinth.achievements import SCREEN_SAVER_USER, Achievement, AchievementStore
from labyrinth.events import EventList
from labyrinth.maze import Maze
from labyrinth.world.procgen import DEFAULT_MAX_ATTEMPTS, build_maze
from labyrinth.world.specs import specs_for_level

from . import action_handler

if TYPE_CHECKING:
    from .window_manager import WindowManager

log = structlog.get_logger(__name__)


class MainLoop:
    """
    Owns the maze being played and moves from level to level.

    The window forwards actions to :meth:`handle_action`. Once the maze is
    won or lost, key presses go to :meth:`acknowledge` and the screen-saver
    timer calls :meth:`continue_game`, which builds the following maze.
    """

    def __init__(
        self: Self,
        level: int,
        user: str,
        store: AchievementStore | None,
        rng: GameRNG | None = None,
        window: "WindowManager | None" = None,
        screen_saver: bool = False,
        max_won_levels: int | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        """
        Initializes the MainLoop and builds the maze of the first level.

        Args:
            level: The level to start with.
            user: Name under which won levels are recorded.
            store: Achievement store; None disables recording.
            rng: Random source of every maze built.
            window: The WindowManager animating events, set later if None.
            screen_saver: Whether the program plays alone.
            max_won_levels: Stop after this many won levels.
            max_attempts: Generation attempts per maze.
        """
        self.level: int = level
        self.user: str = user
        self.store: AchievementStore | None = store
        self.rng: GameRNG = rng if rng is not None else GameRNG()
        self.window: "WindowManager | None" = window
        self.screen_saver: bool = screen_saver
        self.max_won_levels: int | None = max_won_levels
        self.max_attempts: int = max_attempts
        self.won_levels: int = 0
        self.finished: bool = False
        self.events: EventList = EventList()
        self.maze: Maze = self._build_maze()
        log.info(
            "MainLoop initialized",
            level=level,
            user=user,
            screen_saver=screen_saver,
            seed=self.rng.initial_seed,
        )

    def _build_maze(self: Self) -> Maze:
        return build_maze(specs_for_level(self.level), self.rng, self.max_attempts)

    def handle_action(self: Self, action: dict[str, Any]) -> bool:
        """
        Receives an action, processes it via the action_handler,
        then hands the produced events to the window.
        Returns True if a turn was played, False otherwise.
        """
        if self.finished:
            return False
        try:
            player_acted = action_handler.process_player_action(action, self.maze, self.events)
        except ValueError as e:
            log.error("Invalid action", action=action, error=str(e))
            player_acted = False

        # animate before a won maze is replaced
        self._drain_events()
        if player_acted:
            if self.maze.is_won():
                self._on_won()
            elif self.maze.is_lost():
                self._on_lost()
        if self.window is not None:
            self.window.update_frame()
        return player_acted

    def auto_move(self: Self) -> bool:
        """One step of the screen-saver."""
        return self.handle_action({"type": "auto"})

    def _drain_events(self: Self) -> None:
        if self.window is not None and not self.events.is_empty():
            self.window.animate_events(self.events)
        self.events.clear()

    def _on_won(self: Self) -> None:
        self.won_levels += 1
        log.info("Level won", level=self.level, user=self.user, turn=self.maze.turn)
        if self.store is not None and self.user != SCREEN_SAVER_USER:
            self.level = self.store.advance(Achievement(self.user, self.level))
        else:
            self.level += 1
        if self.max_won_levels is not None and self.won_levels >= self.max_won_levels:
            log.info("Requested number of levels won", won=self.won_levels)
            self.finished = True
            if self.window is not None:
                self.window.ui_quit_game()
            return
        if self.screen_saver:
            self.continue_game()

    def _on_lost(self: Self) -> None:
        log.info("Level lost", level=self.level, user=self.user, turn=self.maze.turn)
        self.maze.highlight_start()
        self.maze.highlight_path_to_exit(self.maze.start)
        if self.screen_saver and self.window is not None:
            self.window.schedule_continue()

    def acknowledge(self: Self) -> bool:
        """A key pressed once the maze is over.

        After a loss the first press hides the way out, the next one builds
        the new maze.
        """
        if self.maze.is_lost() and self.maze.clear_highlight():
            log.debug("Way out hidden", level=self.level)
            if self.window is not None:
                self.window.update_frame()
            return True
        return self.continue_game()

    def continue_game(self: Self) -> bool:
        """Build the next maze once the current one is over.

        Returns False (and does nothing) while the maze is still played.
        """
        if self.finished or self.maze.is_active():
            return False
        self.maze = self._build_maze()
        self.events.clear()
        if self.window is not None:
            self.window.maze_changed()
        return True
