"""Domain models for the game session."""

import random
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class GameStatus(str, Enum):
    """Lifecycle states of the game session."""

    WAITING = "waiting"
    RUNNING = "running"
    FINISHED = "finished"


@dataclass(frozen=True)
class GameSessionRecord:
    """The single persisted game session."""

    status: GameStatus = GameStatus.WAITING
    order: tuple[int, ...] = field(default_factory=tuple)
    index: int = 0
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def total(self) -> int:
        return len(self.order)


@dataclass(frozen=True)
class NextPhoto:
    """Result of advancing the game by one photo."""

    done: bool
    photo_id: int | None = None
    remaining: int | None = None


@dataclass(frozen=True)
class GameStatusView:
    """Read-only snapshot of the game progress."""

    status: GameStatus
    index: int
    total: int


@dataclass(frozen=True)
class PhotoContent:
    """Stored photo bytes with their declared media type."""

    content: bytes
    media_type: str


def shuffle_photo_ids(photo_ids: list[int], rng: random.Random) -> list[int]:
    """Return a uniformly shuffled copy of the ids (Fisher-Yates)."""
    ids = list(photo_ids)
    for i in range(len(ids) - 1, 0, -1):
        j = rng.randint(0, i)
        ids[i], ids[j] = ids[j], ids[i]
    return ids
