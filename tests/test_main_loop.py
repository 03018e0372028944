import pytest

from engine import main_loop as ml_module
from game_rng import GameRNG
from labyrinth.achievements import Achievement, AchievementStore
from labyrinth.constants import STATUS_LOST

MainLoop = ml_module.MainLoop


class DummyWindow:
    def __init__(self):
        self.calls = []

    def animate_events(self, events):
        self.calls.append(("animate_events", len(events.events)))

    def update_frame(self):
        self.calls.append(("update_frame",))

    def maze_changed(self):
        self.calls.append(("maze_changed",))

    def schedule_continue(self):
        self.calls.append(("schedule_continue",))

    def cancel_continue(self):
        self.calls.append(("cancel_continue",))

    def ui_quit_game(self):
        self.calls.append(("ui_quit_game",))

    def called(self, name):
        return any(call[0] == name for call in self.calls)


def create_main_loop(tmp_path, **kwargs):
    store = kwargs.pop("store", AchievementStore(tmp_path / "achievements.csv"))
    window = DummyWindow()
    ml = MainLoop(level=1, user="bob", store=store, rng=GameRNG(7), window=window, **kwargs)
    return ml, window


def clear_monsters(ml):
    ml.maze.monsters = []
    ml.maze.max_monsters = 0


def play_to_the_end(ml, max_steps=2000):
    for _ in range(max_steps):
        if not ml.maze.is_active():
            return
        ml.auto_move()
    raise AssertionError("the maze was never finished")


def test_first_maze_is_built(tmp_path):
    ml, _ = create_main_loop(tmp_path)
    assert ml.maze.name == "Level 1"
    assert ml.maze.is_active()
    assert ml.won_levels == 0


def test_value_error_is_handled(tmp_path, monkeypatch):
    ml, window = create_main_loop(tmp_path)

    def raise_value_error(action, maze, events):
        raise ValueError("bad action")

    monkeypatch.setattr(ml_module.action_handler, "process_player_action", raise_value_error)

    assert ml.handle_action({"type": "test"}) is False
    assert window.called("update_frame")


def test_unexpected_exception_propagates(tmp_path, monkeypatch):
    ml, _ = create_main_loop(tmp_path)

    def raise_runtime_error(action, maze, events):
        raise RuntimeError("boom")

    monkeypatch.setattr(ml_module.action_handler, "process_player_action", raise_runtime_error)

    with pytest.raises(RuntimeError):
        ml.handle_action({"type": "test"})


def test_unknown_action_plays_no_turn(tmp_path):
    ml, _ = create_main_loop(tmp_path)
    assert ml.handle_action({"type": "dance"}) is False
    assert ml.maze.turn == 0


def test_events_are_handed_to_the_window(tmp_path):
    ml, window = create_main_loop(tmp_path)
    clear_monsters(ml)
    assert ml.auto_move() is True
    assert ("animate_events", 1) in window.calls
    assert ml.events.is_empty()


def test_give_up_shows_the_way_out(tmp_path):
    ml, window = create_main_loop(tmp_path)
    assert ml.handle_action({"type": "give_up"}) is True
    assert ml.maze.is_lost()
    assert ml.maze.status() == STATUS_LOST
    assert ml.maze.exit in ml.maze.highlights
    assert ml.maze.start in ml.maze.highlights
    assert not window.called("schedule_continue")


def test_continue_game_waits_for_the_end_of_the_maze(tmp_path):
    ml, window = create_main_loop(tmp_path)
    maze = ml.maze
    assert ml.continue_game() is False
    assert ml.maze is maze
    ml.handle_action({"type": "give_up"})
    assert ml.continue_game() is True
    assert ml.maze is not maze
    assert ml.maze.is_active()
    assert ml.level == 1
    assert window.called("maze_changed")


def test_first_key_after_a_loss_hides_the_way_out(tmp_path):
    ml, window = create_main_loop(tmp_path)
    maze = ml.maze
    ml.handle_action({"type": "give_up"})
    assert ml.acknowledge() is True
    assert ml.maze is maze
    assert maze.highlights.is_empty()
    assert ("update_frame",) in window.calls
    assert ml.acknowledge() is True
    assert ml.maze is not maze
    assert ml.maze.is_active()


def test_acknowledge_after_a_win_builds_the_next_level(tmp_path):
    ml, _ = create_main_loop(tmp_path)
    clear_monsters(ml)
    play_to_the_end(ml)
    assert ml.acknowledge() is True
    assert ml.maze.name == "Level 2"


def test_acknowledge_while_playing_does_nothing(tmp_path):
    ml, _ = create_main_loop(tmp_path)
    maze = ml.maze
    assert ml.acknowledge() is False
    assert ml.maze is maze

def test_winning_records_the_level(tmp_path):
    ml, _ = create_main_loop(tmp_path)
    clear_monsters(ml)
    play_to_the_end(ml)
    assert ml.maze.is_won()
    assert ml.won_levels == 1
    assert ml.level == 2
    assert AchievementStore(tmp_path / "achievements.csv").contains(Achievement("bob", 1))
    # the won maze stays until a key is pressed
    assert ml.maze.name == "Level 1"
    assert ml.continue_game() is True
    assert ml.maze.name == "Level 2"


def test_actions_on_a_finished_maze_are_ignored(tmp_path):
    ml, _ = create_main_loop(tmp_path)
    ml.handle_action({"type": "give_up"})
    turn = ml.maze.turn
    assert ml.handle_action({"type": "wait"}) is False
    assert ml.maze.turn == turn


def test_max_won_levels_finishes_the_game(tmp_path):
    ml, window = create_main_loop(tmp_path, max_won_levels=1)
    clear_monsters(ml)
    play_to_the_end(ml)
    assert ml.finished
    assert window.called("ui_quit_game")
    assert ml.continue_game() is False
    assert ml.handle_action({"type": "wait"}) is False


def test_screen_saver_moves_on_alone(tmp_path):
    ml, window = create_main_loop(tmp_path, store=None, screen_saver=True)
    clear_monsters(ml)
    play_to_the_end(ml)
    # a won maze is replaced at once
    assert ml.maze.name == "Level 2"
    assert ml.maze.is_active()
    assert window.called("maze_changed")
    assert not (tmp_path / "achievements.csv").exists()


def test_screen_saver_schedules_a_retry_when_lost(tmp_path):
    ml, window = create_main_loop(tmp_path, store=None, screen_saver=True)
    ml.handle_action({"type": "give_up"})
    assert window.called("schedule_continue")
