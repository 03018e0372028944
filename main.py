# main.py
import argparse
import getpass
import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List
from typing import Dict as PyDict

import structlog
import yaml
from rich.console import Console
from rich.table import Table
from structlog.stdlib import add_log_level, add_logger_name

from engine.text_renderer import print_maze
from game_rng import GameRNG
from labyrinth.achievements import FILE_NAME, SCREEN_SAVER_USER, AchievementStore
from labyrinth.world.position import Dim
from labyrinth.world.procgen import DEFAULT_MAX_ATTEMPTS, UnplayableMazeError, build_maze
from labyrinth.world.specs import specs_for_level, specs_for_terminal_build

# --- Paths relative to this script's location ---
SCRIPT_DIR = Path(__file__).parent.resolve()
CONFIG_DIR = SCRIPT_DIR / "config"

CONFIG_FILE = CONFIG_DIR / "config.yaml"
KEYBINDINGS_FILE = CONFIG_DIR / "keybindings.toml"
DEFAULT_DATA_DIR = "~/.local/share/labyrinth"
# --- End Paths ---


# --- Structlog Setup ---
def setup_logging(level: str = "INFO") -> None:
    """Configures structlog for console output on stderr."""
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level!r}")
    logging.basicConfig(level=numeric_level, format="%(message)s", stream=sys.stderr, force=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_logger_name,
            add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=False),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # the level may be changed once the config is read
        cache_logger_on_first_use=False,
    )


log = structlog.get_logger()  # module-level logger
# --- End Structlog Setup ---


# --- Config Loading Helpers ---
def load_toml_config(config_path: Path, config_name: str) -> PyDict[str, Any]:
    """Loads a TOML configuration file, {} when it's missing or invalid."""
    if not config_path.is_file():
        log.error(f"{config_name} config file not found", path=str(config_path))
        return {}
    try:
        with config_path.open("rb") as f:  # tomllib requires bytes mode
            config_data = tomllib.load(f)
        log.info(f"{config_name} config loaded", path=str(config_path))
        return config_data
    except tomllib.TOMLDecodeError as e:
        log.error(f"Error parsing TOML for {config_name}", path=str(config_path), error=str(e))
        return {}


def load_yaml_config(config_path: Path, config_name: str) -> PyDict[str, Any]:
    """Loads a YAML configuration file. Missing or invalid files raise."""
    if not config_path.is_file():
        log.error(f"{config_name} config file not found", path=str(config_path))
        raise FileNotFoundError(f"{config_name} configuration file not found: {config_path}")
    try:
        with config_path.open("r") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        log.error(f"Error parsing YAML for {config_name}", path=str(config_path), error=str(e))
        raise
    if config_data is None:
        log.warning(f"{config_name} config file is empty.", path=str(config_path))
        return {}
    log.info(f"{config_name} config loaded", path=str(config_path))
    return config_data


@dataclass
class Configs:
    main: PyDict[str, Any]
    keybindings: PyDict[str, Any]


def load_configs(config_path: Path = CONFIG_FILE) -> Configs:
    main_cfg = load_yaml_config(config_path, "Main")
    keybindings = load_toml_config(config_path.parent / KEYBINDINGS_FILE.name, "Keybindings")
    return Configs(main=main_cfg, keybindings=keybindings)

# --- End Config Loading ---


# --- Command Line ---
def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Find the exit of mazes while monsters chase you."
    )
    parser.add_argument("--build", action="store_true", help="print a maze and quit")
    parser.add_argument("--reset", action="store_true", help="forget the achievements of the user")
    parser.add_argument("--hof", action="store_true", help="print the hall of fame")
    parser.add_argument("--level", type=int, help="level to play or build")
    parser.add_argument("--user", default=None, help="player name (default: login name)")
    parser.add_argument("--screen-saver", action="store_true", help="let the program play alone")
    parser.add_argument("--levels", type=int, help="stop after this many won levels")
    parser.add_argument("--seed", type=int, help="seed of every generated maze")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="overrides log_level of the config",
    )
    parser.add_argument("--config", type=Path, default=CONFIG_FILE, help="path of config.yaml")
    return parser.parse_args(argv)


def resolve_user(args: argparse.Namespace) -> str:
    if args.screen_saver:
        return SCREEN_SAVER_USER
    user = (args.user if args.user is not None else getpass.getuser()).strip()
    if not user or user == SCREEN_SAVER_USER:
        raise ValueError(f"Invalid user name: {user!r}")
    return user


def open_store(configs: Configs) -> AchievementStore:
    data_dir = Path(configs.main.get("data_dir") or DEFAULT_DATA_DIR).expanduser()
    return AchievementStore(data_dir / FILE_NAME)


def choose_level(args: argparse.Namespace, user: str, store: AchievementStore) -> int:
    if args.level is not None:
        if args.level < 0:
            raise ValueError(f"Invalid level: {args.level}")
        if not args.screen_saver and not store.can_play(user, args.level):
            raise ValueError(
                f"User {user!r} must win the previous levels before trying level {args.level}"
            )
        return args.level
    if args.screen_saver:
        return 1
    return store.first_not_won(user)


def print_hall_of_fame(store: AchievementStore, console: Console) -> None:
    entries = store.hall_of_fame()
    if not entries:
        console.print("The Hall of Fame is empty")
        return
    table = Table(title="Hall of Fame")
    table.add_column("User")
    table.add_column("Level", justify="right")
    for user, level in entries:
        table.add_row(user, str(level))
    console.print(table)


def run_reset(user: str, store: AchievementStore, console: Console) -> None:
    removed = store.reset(user)
    if removed.height == 0:
        console.print(f"No achievement was found for user {user!r}", markup=False)
        return
    console.print(f"Removing achievements of user {user!r}", markup=False)
    console.print(
        f"If you change your mind, you can put the following lines back in {store.file_path}",
        markup=False,
    )
    console.print(removed.write_csv(), markup=False, highlight=False, end="")


def run_build(
    args: argparse.Namespace,
    user: str,
    store: AchievementStore,
    rng: GameRNG,
    max_attempts: int,
    console: Console,
) -> None:
    if args.level is not None:
        specs = specs_for_level(choose_level(args, user, store))
    else:
        specs = specs_for_terminal_build(Dim.terminal(), rng)
    print_maze(build_maze(specs, rng, max_attempts), console)


def run_game(
    args: argparse.Namespace,
    configs: Configs,
    user: str,
    store: AchievementStore,
    rng: GameRNG,
    max_attempts: int,
) -> int:
    # Qt is only needed to play
    from PySide6.QtWidgets import QApplication

    from engine.main_loop import MainLoop
    from engine.window_manager import WindowManager

    level = choose_level(args, user, store)
    app = QApplication.instance() or QApplication(sys.argv)
    main_loop = MainLoop(
        level=level,
        user=user,
        store=None if args.screen_saver else store,
        rng=rng,
        screen_saver=args.screen_saver,
        max_won_levels=args.levels,
        max_attempts=max_attempts,
    )
    window = WindowManager(app_config=configs.main, keybindings_config=configs.keybindings)
    window.set_main_loop(main_loop)
    log.info("Showing window and starting application loop...")
    window.show()
    return app.exec()


def main(argv: List[str] | None = None) -> None:
    """Main entry point for the application."""
    args = parse_args(argv)
    setup_logging(args.log_level or "INFO")
    console = Console()
    try:
        configs = load_configs(args.config)
        if args.log_level is None and configs.main.get("log_level"):
            setup_logging(configs.main["log_level"])
        seed = args.seed if args.seed is not None else configs.main.get("seed")
        rng = GameRNG(None if seed is None else int(seed))
        log.info("Using seed", seed=rng.initial_seed)
        max_attempts: int = configs.main.get("generation", {}).get(
            "max_attempts", DEFAULT_MAX_ATTEMPTS
        )
        store = open_store(configs)

        if args.hof:
            print_hall_of_fame(store, console)
            return
        user = resolve_user(args)
        if args.reset:
            run_reset(user, store, console)
            return
        if args.build:
            run_build(args, user, store, rng, max_attempts, console)
            return
        exit_code = run_game(args, configs, user, store, rng, max_attempts)

    # --- Exception Handling ---
    except FileNotFoundError as e:
        log.critical("Required file not found during init", error=str(e))
        sys.exit(f"Initialization failed: File not found - {e}")
    except yaml.YAMLError as e:
        log.critical("Invalid configuration", error=str(e))
        sys.exit(f"Configuration failed: {e}")
    except KeyError as e:
        log.critical("Missing required key, possibly in config", key=str(e))
        sys.exit(f"Configuration failed: Missing key {e}")
    except UnplayableMazeError as e:
        log.critical("No playable maze could be generated", error=str(e))
        sys.exit(f"Generation failed: {e}")
    except ValueError as e:
        log.critical("Invalid argument", error=str(e))
        sys.exit(str(e))
    # --- End Exception Handling ---

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
