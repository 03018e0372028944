# labyrinth/achievements.py
"""Won levels, per user, in a CSV file.

Each record carries a salted hash of the user and of the specs of the level,
so a record stops counting when the level it was won on changes (or when the
file is edited by hand).
"""
import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import List, Self, Tuple

import polars as pl
import structlog

from labyrinth.world.specs import specs_for_level

log = structlog.get_logger(__name__)

SALT: bytes = b"20220722"
FILE_NAME = "achievements.csv"
SCREEN_SAVER_USER = "screen-saver"

ACHIEVEMENT_SCHEMA: dict[str, pl.DataType] = {
    "user": pl.Utf8,
    "level": pl.UInt32,
    "hash": pl.UInt64,
}


@dataclass(frozen=True)
class Achievement:
    user: str
    level: int

    def hash(self) -> int:
        hasher = hashlib.blake2b(digest_size=8, key=SALT)
        hasher.update(self.user.encode("utf-8"))
        for value in specs_for_level(self.level).canonical_fields():
            hasher.update(b"\x1f")
            hasher.update(str(value).encode("utf-8"))
        return int.from_bytes(hasher.digest(), "little")


class AchievementStore:
    """The achievements of every user, backed by ``file_path``.

    Records are loaded on construction; invalid ones are dropped (and will
    be gone from the file at the next save).
    """

    def __init__(self: Self, file_path: Path | str):
        self.file_path = Path(file_path)
        self.records_df: pl.DataFrame = pl.DataFrame(schema=ACHIEVEMENT_SCHEMA)
        self.load()

    def load(self: Self) -> None:
        if not self.file_path.exists():
            log.debug("No achievement file yet", path=str(self.file_path))
            self.records_df = pl.DataFrame(schema=ACHIEVEMENT_SCHEMA)
            return
        df = pl.read_csv(self.file_path, schema=ACHIEVEMENT_SCHEMA)
        valid = [
            Achievement(user, level).hash() == stored
            for user, level, stored in df.iter_rows()
        ]
        invalid_count = valid.count(False)
        if invalid_count:
            # most often the specs of a level changed since it was won
            log.warning(
                "Invalid achievement records dropped",
                path=str(self.file_path),
                count=invalid_count,
            )
        self.records_df = df.filter(pl.Series(valid, dtype=pl.Boolean))
        log.debug("Achievements loaded", path=str(self.file_path), records=self.records_df.height)

    def add(self: Self, ach: Achievement) -> None:
        row = pl.DataFrame(
            {"user": [ach.user], "level": [ach.level], "hash": [ach.hash()]},
            schema=ACHIEVEMENT_SCHEMA,
        )
        self.records_df = pl.concat([self.records_df, row])

    def save(self: Self) -> None:
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        self.records_df.write_csv(self.file_path)
        log.debug("Achievements saved", path=str(self.file_path), records=self.records_df.height)

    def contains(self: Self, ach: Achievement) -> bool:
        matches = self.records_df.filter(
            (pl.col("user") == ach.user) & (pl.col("level") == ach.level)
        )
        return matches.height > 0

    def advance(self: Self, ach: Achievement) -> int:
        """Record ``ach`` and return the first following level not won."""
        if ach.user == SCREEN_SAVER_USER:
            raise ValueError("The screen-saver doesn't record achievements")
        self.add(ach)
        self.save()
        log.info("Achievement recorded", user=ach.user, level=ach.level)
        level = ach.level + 1
        while self.contains(Achievement(ach.user, level)):
            level += 1
        return level

    def first_not_won(self: Self, user: str) -> int:
        level = 1
        while self.contains(Achievement(user, level)):
            level += 1
        return level

    def can_play(self: Self, user: str, level: int) -> bool:
        """Whether every level below ``level`` was won by ``user``."""
        return all(self.contains(Achievement(user, lower)) for lower in range(1, level))

    def reset(self: Self, user: str) -> pl.DataFrame:
        """Forget the achievements of ``user``, return the removed records."""
        removed = self.records_df.filter(pl.col("user") == user)
        if removed.height == 0:
            return removed
        self.records_df = self.records_df.filter(pl.col("user") != user)
        self.save()
        log.info("Achievements reset", user=user, removed=removed.height)
        return removed

    def hall_of_fame(self: Self) -> List[Tuple[str, int]]:
        """``(user, best level)`` pairs, best first."""
        best = (
            self.records_df.group_by("user")
            .agg(pl.col("level").max().alias("level"))
            .sort(["level", "user"], descending=[True, False])
        )
        return [(user, int(level)) for user, level in best.iter_rows()]

