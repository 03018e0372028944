# engine/window_manager.py
# Standard library imports
from typing import TYPE_CHECKING, Any
from typing import Dict as PyDict
from typing import List, Set, Tuple

# PySide6 imports
from PySide6.QtCore import QRect, Qt, QTimer
from PySide6.QtGui import QColor, QFont, QKeyEvent, QPainter, QPaintEvent
from PySide6.QtWidgets import QApplication, QWidget

# --- Modularized Imports ---
from engine.window_manager_modules.input_handler import InputHandler
from labyrinth.constants import Nature
from labyrinth.events import EventList
from labyrinth.world.position import Pos

# --- Type Checking ---
if TYPE_CHECKING:
    from engine.main_loop import MainLoop

# --- Logging Setup ---
import structlog
log = structlog.get_logger(__name__)
# ---

DEFAULT_CELL_SIZE = 16
DEFAULT_AUTO_MOVE_INTERVAL_MS = 140
DEFAULT_CONTINUE_DELAY_MS = 2000
DEFAULT_EVENT_FLASH_MS = 300
TEXT_LINE_HEIGHT = 22

DEFAULT_COLORS: PyDict[Nature, Tuple[int, int, int]] = {
    Nature.ROOM: (20, 20, 20),
    Nature.WALL: (150, 150, 150),
    Nature.INVISIBLE_WALL: (20, 20, 20),
    Nature.PLAYER: (255, 215, 0),
    Nature.MONSTER: (220, 40, 40),
    Nature.POTION: (40, 200, 80),
    Nature.HIGHLIGHT: (60, 90, 200),
}


def load_colors(colors_cfg: PyDict[str, Any] | None) -> PyDict[Nature, QColor]:
    """Builds the palette from the ``window.colors`` config (RGB triples by nature)."""
    colors = dict(DEFAULT_COLORS)
    for name, rgb in (colors_cfg or {}).items():
        try:
            nature = Nature(name)
        except ValueError:
            log.warning("Unknown nature in colors config", name=name)
            continue
        if not isinstance(rgb, (list, tuple)) or len(rgb) != 3:
            log.warning("Invalid color in config", name=name, value=rgb)
            continue
        colors[nature] = tuple(int(c) for c in rgb)
    # invisible walls must look like rooms
    colors[Nature.INVISIBLE_WALL] = colors[Nature.ROOM]
    return {nature: QColor(*rgb) for nature, rgb in colors.items()}


class WindowManager(QWidget):
    def __init__(
        self,
        app_config: PyDict[str, Any],
        keybindings_config: PyDict[str, Any],
    ):
        super().__init__()
        self.app_config = app_config
        self.keybindings_config = keybindings_config
        log.info("Initializing WindowManager...")

        window_cfg = app_config.get("window", {}) or {}
        self.cell_size: int = window_cfg.get("cell_size", DEFAULT_CELL_SIZE)
        self.auto_move_interval_ms: int = window_cfg.get(
            "auto_move_interval_ms", DEFAULT_AUTO_MOVE_INTERVAL_MS
        )
        self.continue_delay_ms: int = window_cfg.get("continue_delay_ms", DEFAULT_CONTINUE_DELAY_MS)
        self.event_flash_ms: int = window_cfg.get("event_flash_ms", DEFAULT_EVENT_FLASH_MS)
        self.colors: PyDict[Nature, QColor] = load_colors(window_cfg.get("colors"))

        self.setWindowTitle("Labyrinth")
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

        self.main_loop: "MainLoop | None" = None
        # teleport candidates, shown for a moment after a collision
        self.flash_cells: Set[Pos] = set()

        # Timers
        self._auto_move_timer = QTimer(self)
        self._auto_move_timer.setInterval(self.auto_move_interval_ms)
        self._auto_move_timer.timeout.connect(self._on_auto_move)
        self._continue_timer = QTimer(self)
        self._continue_timer.setSingleShot(True)
        self._continue_timer.setInterval(self.continue_delay_ms)
        self._continue_timer.timeout.connect(self._on_continue)
        self._flash_timer = QTimer(self)
        self._flash_timer.setSingleShot(True)
        self._flash_timer.setInterval(self.event_flash_ms)
        self._flash_timer.timeout.connect(self._end_flash)

        # Active keybindings
        self.active_keybinding_sets: List[str] = ["common", "arrows", "vim"]
        log.info("Active keybinding sets", sets=self.active_keybinding_sets)
        self.input_handler = InputHandler(self.keybindings_config, self)

        log.debug("WindowManager __init__ complete")

    def set_main_loop(self, main_loop: "MainLoop") -> None:
        self.main_loop = main_loop
        main_loop.window = self
        log.info("MainLoop instance set in WindowManager")
        if main_loop.screen_saver:
            self._auto_move_timer.start()
        self.maze_changed()

    # --- Callbacks from the main loop ---
    def maze_changed(self) -> None:
        """Fits the window to a newly built maze."""
        self._end_flash()
        if self.main_loop is not None:
            dim = self.main_loop.maze.dim
            self.resize(dim.w * self.cell_size, dim.h * self.cell_size + 2 * TEXT_LINE_HEIGHT)
            log.debug("Window fitted to maze", maze=self.main_loop.maze.name, dim=dim)
        self.update_frame()

    def animate_events(self, events: EventList) -> None:
        teleports = list(events.teleports())
        if not teleports:
            return
        self.flash_cells = {pos for tp in teleports for pos in tp.possible_jumps}
        log.debug("Flashing teleport candidates", count=len(self.flash_cells))
        self._flash_timer.start()

    def schedule_continue(self) -> None:
        self._continue_timer.start()

    def cancel_continue(self) -> None:
        self._continue_timer.stop()

    def update_frame(self) -> None:
        self.update()

    # --- Timer slots ---
    def _on_auto_move(self) -> None:
        if self.main_loop is not None and self.main_loop.maze.is_active():
            self.main_loop.auto_move()

    def _on_continue(self) -> None:
        if self.main_loop is not None:
            self.main_loop.continue_game()

    def _end_flash(self) -> None:
        self._flash_timer.stop()
        if self.flash_cells:
            self.flash_cells = set()
            self.update_frame()

    # --- Painting ---
    def cell_color(self, pos: Pos) -> QColor:
        maze = self.main_loop.maze
        nature = maze.visible_nature(pos)
        if pos in self.flash_cells and nature in (Nature.ROOM, Nature.INVISIBLE_WALL):
            nature = Nature.HIGHLIGHT
        return self.colors[nature]

    def header_text(self) -> str:
        maze = self.main_loop.maze
        return f"{maze.name}    lives: {maze.lives}"

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        try:
            painter.fillRect(self.rect(), self.colors[Nature.ROOM])
            if self.main_loop is None:
                return
            maze = self.main_loop.maze
            cs = self.cell_size
            top = TEXT_LINE_HEIGHT
            for y in range(maze.dim.h):
                for x in range(maze.dim.w):
                    painter.fillRect(
                        QRect(x * cs, top + y * cs, cs, cs), self.cell_color(Pos(x, y))
                    )
            painter.setPen(QColor(230, 230, 230))
            painter.setFont(QFont("Monospace", 11))
            text_width = max(self.width(), maze.dim.w * cs)
            painter.drawText(
                QRect(0, 0, text_width, TEXT_LINE_HEIGHT),
                Qt.AlignmentFlag.AlignCenter,
                self.header_text(),
            )
            painter.drawText(
                QRect(0, top + maze.dim.h * cs, text_width, TEXT_LINE_HEIGHT),
                Qt.AlignmentFlag.AlignCenter,
                maze.status(),
            )
        finally:
            painter.end()

    def keyPressEvent(self, event: QKeyEvent) -> None:
        if self.main_loop is None:
            event.ignore()
            return
        key_handled = self.input_handler.process_key_event(
            event, self.main_loop, self.active_keybinding_sets
        )
        if not key_handled:
            super().keyPressEvent(event)

    # --- UI Callback methods ---
    def ui_quit_game(self) -> None:
        self._auto_move_timer.stop()
        self._continue_timer.stop()
        app_instance = QApplication.instance()
        if app_instance:
            app_instance.quit()
