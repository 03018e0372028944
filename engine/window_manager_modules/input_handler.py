# engine/window_manager_modules/input_handler.py
"""
Maps key presses to maze actions or UI commands.

Bindings come from ``keybindings.toml``: one ``[bindings.<set>]`` table per
set, each entry naming a Qt key (``"Up"``, ``"K"``), optional modifiers and
an action.  They are parsed once into a lookup table per set; the window
decides which sets are active and in which order they are searched.
"""
from typing import TYPE_CHECKING, Any
from typing import Dict as PyDict
from typing import List, Tuple

import structlog
from PySide6.QtCore import Qt
from PySide6.QtGui import QKeyEvent

if TYPE_CHECKING:
    from engine.main_loop import MainLoop
    from engine.window_manager import WindowManager

log = structlog.get_logger(__name__)

KEY_ALIASES: PyDict[str, str] = {
    "esc": "Escape",
    "enter": "Return",
}

MODIFIER_NAMES: PyDict[str, Qt.KeyboardModifier] = {
    "ctrl": Qt.KeyboardModifier.ControlModifier,
    "control": Qt.KeyboardModifier.ControlModifier,
    "shift": Qt.KeyboardModifier.ShiftModifier,
    "alt": Qt.KeyboardModifier.AltModifier,
    "meta": Qt.KeyboardModifier.MetaModifier,
}

# (key code, modifier bits)
KeyCombo = Tuple[int, int]


def parse_key(key_str: str | None) -> int | None:
    """The Qt key code named ``key_str`` (case insensitive), None if unknown."""
    if not key_str:
        return None
    name = KEY_ALIASES.get(key_str.lower(), key_str)
    for candidate in (name, name.capitalize(), name.upper()):
        qt_key = getattr(Qt.Key, f"Key_{candidate}", None)
        if qt_key is not None:
            return qt_key.value
    return None


def parse_mods(mods_list: List[str]) -> Qt.KeyboardModifier:
    modifiers = Qt.KeyboardModifier.NoModifier
    for mod_str in mods_list:
        modifier = MODIFIER_NAMES.get(mod_str.lower())
        if modifier is None:
            log.warning("Unknown key modifier in binding", modifier=mod_str)
            continue
        modifiers |= modifier
    return modifiers


def binding_action(binding_data: PyDict[str, Any]) -> PyDict[str, Any] | None:
    """The action dict a binding produces, None for an unknown action."""
    action_type = binding_data.get("action")
    match action_type:
        case "move":
            return {"type": "move", "direction": binding_data.get("direction")}
        case "wait" | "give_up":
            return {"type": action_type}
        case "quit":
            return {"type": "ui", "ui_action": "quit"}
    return None


class InputHandler:
    """
    Processes keyboard events and translates them into maze actions or UI calls.
    """

    def __init__(
        self,
        keybindings_config: PyDict[str, Any],
        window_manager_ref: "WindowManager",
    ):
        self.window_manager_ref: "WindowManager" = window_manager_ref
        self.binding_tables: PyDict[str, PyDict[KeyCombo, PyDict[str, Any]]] = (
            self._build_tables(keybindings_config.get("bindings", {}))
        )
        log.debug("InputHandler initialized", sets=list(self.binding_tables))

    def _build_tables(
        self, bindings: PyDict[str, Any]
    ) -> PyDict[str, PyDict[KeyCombo, PyDict[str, Any]]]:
        tables: PyDict[str, PyDict[KeyCombo, PyDict[str, Any]]] = {}
        for set_name, binding_set in bindings.items():
            if not isinstance(binding_set, dict):
                log.warning("Keybinding set is not a table", set=set_name)
                continue
            table: PyDict[KeyCombo, PyDict[str, Any]] = {}
            for binding_name, binding_data in binding_set.items():
                if not isinstance(binding_data, dict):
                    continue
                key_code = parse_key(binding_data.get("key"))
                action = binding_action(binding_data)
                if key_code is None or action is None:
                    log.warning(
                        "Invalid keybinding ignored",
                        set=set_name,
                        binding=binding_name,
                        key=binding_data.get("key"),
                        action=binding_data.get("action"),
                    )
                    continue
                combo = (key_code, parse_mods(binding_data.get("mods", [])).value)
                # first binding of a combo wins within a set
                table.setdefault(combo, action)
            tables[set_name] = table
        return tables

    def get_action_for_key(
        self,
        key_code: int,
        modifiers: Qt.KeyboardModifier,
        active_keybinding_sets: List[str],
    ) -> PyDict[str, Any] | None:
        """Finds the action bound to a key press in the active sets, in order."""
        # keypad keys carry an extra modifier
        modifiers = modifiers & ~Qt.KeyboardModifier.KeypadModifier
        combo = (getattr(key_code, "value", key_code), getattr(modifiers, "value", modifiers))
        for set_name in active_keybinding_sets:
            action = self.binding_tables.get(set_name, {}).get(combo)
            if action is not None:
                return dict(action)
        return None

    def process_key_event(
        self,
        event: QKeyEvent,
        main_loop_ref: "MainLoop",
        active_keybinding_sets: List[str],
    ) -> bool:
        """Returns True if the key was handled."""
        action = self.get_action_for_key(event.key(), event.modifiers(), active_keybinding_sets)
        log.debug("Key pressed", key_text=event.text(), action=action)

        if action is not None and action.get("ui_action") == "quit":
            log.info("Quit key pressed")
            self.window_manager_ref.ui_quit_game()
            return True

        if not main_loop_ref.maze.is_active():
            # the won or lost message waits for any key
            self.window_manager_ref.cancel_continue()
            main_loop_ref.acknowledge()
            return True

        if main_loop_ref.screen_saver or action is None:
            # the screen-saver plays alone, only quit keys count
            return False
        main_loop_ref.handle_action(action)
        return True
