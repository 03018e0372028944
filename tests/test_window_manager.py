import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

pytest.importorskip("PySide6.QtWidgets")

from PySide6.QtCore import QEvent, Qt
from PySide6.QtGui import QColor, QKeyEvent
from PySide6.QtWidgets import QApplication

from engine.main_loop import MainLoop
from engine.window_manager import WindowManager, load_colors
from engine.window_manager_modules.input_handler import parse_key
from game_rng import GameRNG
from labyrinth.achievements import AchievementStore
from labyrinth.constants import Nature
from labyrinth.events import EventList
from main import load_configs

NO_MODS = Qt.KeyboardModifier.NoModifier
SETS = ["common", "arrows", "vim"]


@pytest.fixture(scope="module")
def app():
    return QApplication.instance() or QApplication([])


@pytest.fixture
def window(app, tmp_path):
    configs = load_configs()
    main_loop = MainLoop(
        level=1,
        user="bob",
        store=AchievementStore(tmp_path / "achievements.csv"),
        rng=GameRNG(5),
    )
    window = WindowManager(app_config=configs.main, keybindings_config=configs.keybindings)
    window.set_main_loop(main_loop)
    yield window
    window.close()


def key_event(key, mods=NO_MODS):
    return QKeyEvent(QEvent.Type.KeyPress, key, mods)


def test_load_colors():
    colors = load_colors(
        {"room": [1, 2, 3], "invisible_wall": [9, 9, 9], "wall": "red", "lava": [1, 1, 1]}
    )
    assert colors[Nature.ROOM] == QColor(1, 2, 3)
    # invisible walls can't be told from rooms
    assert colors[Nature.INVISIBLE_WALL] == QColor(1, 2, 3)
    assert colors[Nature.WALL] == QColor(150, 150, 150)


def test_key_mapping(window):
    handler = window.input_handler
    assert handler.get_action_for_key(Qt.Key.Key_Up, NO_MODS, SETS) == {
        "type": "move",
        "direction": "up",
    }
    assert handler.get_action_for_key(Qt.Key.Key_H, NO_MODS, SETS) == {
        "type": "move",
        "direction": "left",
    }
    assert handler.get_action_for_key(Qt.Key.Key_W, NO_MODS, SETS) == {"type": "wait"}
    assert handler.get_action_for_key(Qt.Key.Key_A, NO_MODS, SETS) == {"type": "give_up"}
    assert handler.get_action_for_key(
        Qt.Key.Key_C, Qt.KeyboardModifier.ControlModifier, SETS
    ) == {"type": "ui", "ui_action": "quit"}
    assert handler.get_action_for_key(Qt.Key.Key_C, NO_MODS, SETS) is None


def test_keypad_keys_are_mapped(window):
    action = window.input_handler.get_action_for_key(
        Qt.Key.Key_Down, Qt.KeyboardModifier.KeypadModifier, SETS
    )
    assert action == {"type": "move", "direction": "down"}


def test_inactive_binding_sets_are_ignored(window):
    assert window.input_handler.get_action_for_key(Qt.Key.Key_K, NO_MODS, ["arrows"]) is None


def test_window_fits_the_maze(window):
    dim = window.main_loop.maze.dim
    assert window.width() >= dim.w * window.cell_size
    assert window.height() >= dim.h * window.cell_size


def test_header_text(window):
    assert window.header_text().startswith("Level 1")
    assert f"lives: {window.main_loop.maze.lives}" in window.header_text()


def test_give_up_then_keys_hide_the_way_out_and_rebuild(window):
    main_loop = window.main_loop
    maze = main_loop.maze
    window.keyPressEvent(key_event(Qt.Key.Key_A))
    assert maze.is_lost()
    # the way out is shown
    assert window.cell_color(maze.exit) == window.colors[Nature.HIGHLIGHT]
    window.keyPressEvent(key_event(Qt.Key.Key_Space))
    assert main_loop.maze is maze
    assert window.cell_color(maze.exit) == window.colors[Nature.ROOM]
    window.keyPressEvent(key_event(Qt.Key.Key_Space))
    assert main_loop.maze is not maze
    assert main_loop.maze.is_active()


def test_unbound_key_plays_no_turn(window):
    window.keyPressEvent(key_event(Qt.Key.Key_Z))
    assert window.main_loop.maze.turn == 0


def test_teleport_candidates_flash(window):
    maze = window.main_loop.maze
    room = next(
        p
        for p in maze.rooms.positions()
        if p != maze.player and p not in maze.potions and p not in maze.highlights
    )
    events = EventList()
    events.add_teleport(maze.player, [room], maze.player)
    window.animate_events(events)
    assert window.flash_cells == {room}
    assert window.cell_color(room) == window.colors[Nature.HIGHLIGHT]
    window._end_flash()
    assert window.flash_cells == set()
    assert window.cell_color(room) == window.colors[Nature.ROOM]


def test_paint(window):
    assert not window.grab().isNull()


def test_parse_key():
    assert parse_key("Up") == parse_key("up") == Qt.Key.Key_Up.value
    assert parse_key("k") == Qt.Key.Key_K.value
    assert parse_key("esc") == Qt.Key.Key_Escape.value
    assert parse_key("NoSuchKey") is None
    assert parse_key(None) is None
