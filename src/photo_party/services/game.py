"""Game session engine: shuffled, admin-driven photo reveal."""

import logging
import random
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Protocol

from photo_party.domain.errors import ForbiddenError, GoneError, NotFoundError
from photo_party.domain.game import (
    GameSessionRecord,
    GameStatus,
    GameStatusView,
    NextPhoto,
    PhotoContent,
    shuffle_photo_ids,
)
from photo_party.services.access import AccessService
from photo_party.services.locks import KeyedLock
from photo_party.services.photos import PhotoRepository, PhotoStorage

logger = logging.getLogger(__name__)

_GAME_KEY = "game"


class GameRepository(Protocol):
    """Persistence interface for the single game session."""

    def read_game_session(self) -> GameSessionRecord:
        """Return the session, or a waiting one if none was stored yet."""

    def write_game_session(self, session: GameSessionRecord) -> None:
        """Replace the stored session."""


@dataclass
class GameService:
    """State machine: waiting -> running -> finished.

    Starting again from any state discards the previous run.
    """

    game_repository: GameRepository
    photo_repository: PhotoRepository
    storage: PhotoStorage
    access: AccessService
    rng: random.Random = field(default_factory=random.Random)
    locks: KeyedLock = field(default_factory=KeyedLock)

    def start(self, caller_id: int | None) -> int:
        """Shuffle every current photo into a new session and return the total."""
        self.access.require_admin(caller_id)
        with self.locks.hold(_GAME_KEY):
            photo_ids = [photo.id for photo in self.photo_repository.list_all_photos()]
            session = GameSessionRecord(
                status=GameStatus.RUNNING,
                order=tuple(shuffle_photo_ids(photo_ids, self.rng)),
                index=0,
                started_at=datetime.now(tz=UTC),
                finished_at=None,
            )
            self.game_repository.write_game_session(session)
        logger.info("Game started", extra={"total": session.total})
        return session.total

    def next_photo(self, caller_id: int | None) -> NextPhoto:
        """Reveal the next photo id, or report that the game is over."""
        self.access.require_admin(caller_id)
        with self.locks.hold(_GAME_KEY):
            session = self.game_repository.read_game_session()
            if session.status is not GameStatus.RUNNING:
                return NextPhoto(done=True)
            if session.index >= session.total:
                self.game_repository.write_game_session(
                    replace(
                        session,
                        status=GameStatus.FINISHED,
                        finished_at=datetime.now(tz=UTC),
                    )
                )
                logger.info("Game finished", extra={"total": session.total})
                return NextPhoto(done=True)
            photo_id = session.order[session.index]
            advanced = replace(session, index=session.index + 1)
            self.game_repository.write_game_session(advanced)
        return NextPhoto(
            done=False,
            photo_id=photo_id,
            remaining=advanced.total - advanced.index,
        )

    def status(self, caller_id: int | None) -> GameStatusView:
        """Return the current progress without changing it."""
        self.access.require_admin(caller_id)
        session = self.game_repository.read_game_session()
        return GameStatusView(
            status=session.status, index=session.index, total=session.total
        )

    def photo_content(self, caller_id: int | None, photo_id: int) -> PhotoContent:
        """Return the bytes of a photo while the game is running."""
        self.access.require_admin(caller_id)
        session = self.game_repository.read_game_session()
        if session.status is not GameStatus.RUNNING:
            raise ForbiddenError("game not running")
        photo = self.photo_repository.get_photo(photo_id)
        if photo is None:
            raise NotFoundError("photo not found")
        try:
            content = self.storage.read(photo.filename)
        except FileNotFoundError as exc:
            raise GoneError("file missing") from exc
        return PhotoContent(content=content, media_type=photo.media_type)
