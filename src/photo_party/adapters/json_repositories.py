"""File-backed repositories sharing one JSON document.

The document keeps the layout written by earlier releases::

    {"users": [...], "photos": [...], "game": {...}, "sequences": {...}}

``sequences`` remembers the last issued ids so deleted photo ids are never
handed out again.
"""

import copy
import json
import logging
import os
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from photo_party.domain.errors import StorageError
from photo_party.domain.game import GameSessionRecord, GameStatus
from photo_party.domain.models import PhotoRecord, PhotoSlot, Role, UserRecord
from photo_party.services.game import GameRepository
from photo_party.services.photos import PhotoRepository
from photo_party.services.users import UserRepository

logger = logging.getLogger(__name__)


def default_state() -> dict[str, Any]:
    """Return an empty but valid document."""
    return {
        "users": [],
        "photos": [],
        "game": {"status": GameStatus.WAITING.value, "order": [], "index": 0},
        "sequences": {"users": 0, "photos": 0},
    }


class JsonStateStore:
    """In-memory copy of the state document, written through on every change.

    Mutations run inside :meth:`transaction`, which restores the previous
    document when the write fails. Writes go to a temporary file that
    replaces the target, so the document is never left half-written.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.lock = threading.RLock()
        self.data = self._load()
        if not self.path.exists():
            self.save()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return default_state()
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                loaded = json.load(fh)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Could not load state from %s: %s", self.path, exc)
            return default_state()
        if not isinstance(loaded, dict):
            logger.warning("Ignoring malformed state in %s", self.path)
            return default_state()
        state = default_state()
        for key in ("users", "photos"):
            if isinstance(loaded.get(key), list):
                state[key] = loaded[key]
        if isinstance(loaded.get("game"), dict):
            state["game"] = loaded["game"]
        sequences = loaded.get("sequences")
        state["sequences"] = {
            key: max(
                _int(sequences.get(key)) if isinstance(sequences, dict) else 0,
                max((_int(row.get("id")) for row in state[key]), default=0),
            )
            for key in ("users", "photos")
        }
        return state

    def save(self) -> None:
        """Persist the document atomically."""
        with self.lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as fh:
                        json.dump(self.data, fh, indent=2)
                    os.replace(tmp_path, self.path)
                except OSError:
                    Path(tmp_path).unlink(missing_ok=True)
                    raise
            except OSError as exc:
                raise StorageError("Failed to write state file") from exc

    @contextmanager
    def transaction(self) -> Iterator[dict[str, Any]]:
        """Mutate the document and persist it, or roll back if the write fails."""
        with self.lock:
            snapshot = copy.deepcopy(self.data)
            try:
                yield self.data
                self.save()
            except BaseException:
                self.data = snapshot
                raise

    def next_id(self, collection: str) -> int:
        """Reserve the next id of a collection."""
        with self.lock:
            value = self.data["sequences"][collection] + 1
            self.data["sequences"][collection] = value
            return value


@dataclass
class JsonUserRepository(UserRepository):
    """JSON document implementation for users."""

    store: JsonStateStore

    def create_user(self, name: str, role: Role, color: str) -> UserRecord:
        """Append a user row with the next id."""
        with self.store.transaction():
            user = UserRecord(
                id=self.store.next_id("users"),
                name=name,
                role=role,
                color=color,
                created_at=datetime.now(tz=UTC),
            )
            self.store.data["users"].append(_user_row(user))
        return user

    def get_user(self, user_id: int) -> UserRecord | None:
        """Return a user by id, if present."""
        with self.store.lock:
            for row in self.store.data["users"]:
                if row.get("id") == user_id:
                    return _user_from_row(row)
        return None

    def find_user_by_name(self, name: str) -> UserRecord | None:
        """Return the user whose name matches case-insensitively."""
        wanted = name.casefold()
        with self.store.lock:
            for row in self.store.data["users"]:
                if str(row.get("name", "")).casefold() == wanted:
                    return _user_from_row(row)
        return None

    def count_users(self) -> int:
        """Return the number of users."""
        with self.store.lock:
            return len(self.store.data["users"])

    def list_users(self) -> list[UserRecord]:
        """Return users ordered by id."""
        with self.store.lock:
            users = [_user_from_row(row) for row in self.store.data["users"]]
        return sorted(users, key=lambda user: user.id)


@dataclass
class JsonPhotoRepository(PhotoRepository):
    """JSON document implementation for photo metadata."""

    store: JsonStateStore

    def create_photo(  # noqa: PLR0913
        self,
        owner_id: int,
        tipo: PhotoSlot,
        filename: str,
        media_type: str,
        size: int,
    ) -> PhotoRecord:
        """Append a photo row with the next id."""
        with self.store.transaction():
            photo = PhotoRecord(
                id=self.store.next_id("photos"),
                owner_id=owner_id,
                tipo=tipo,
                filename=filename,
                media_type=media_type,
                size=size,
                created_at=datetime.now(tz=UTC),
            )
            self.store.data["photos"].append(_photo_row(photo))
        return photo

    def get_photo(self, photo_id: int) -> PhotoRecord | None:
        """Return a photo by id, if present."""
        with self.store.lock:
            for row in self.store.data["photos"]:
                if row.get("id") == photo_id:
                    return _photo_from_row(row)
        return None

    def list_photos_by_owner(self, owner_id: int) -> list[PhotoRecord]:
        """Return an owner's photos ordered by id."""
        with self.store.lock:
            photos = [
                _photo_from_row(row)
                for row in self.store.data["photos"]
                if row.get("ownerId") == owner_id
            ]
        return sorted(photos, key=lambda photo: photo.id)

    def list_all_photos(self) -> list[PhotoRecord]:
        """Return every photo in insertion order."""
        with self.store.lock:
            return [_photo_from_row(row) for row in self.store.data["photos"]]

    def count_photos_by_owner(self, owner_id: int) -> int:
        """Return how many photos an owner holds."""
        with self.store.lock:
            return sum(
                1 for row in self.store.data["photos"] if row.get("ownerId") == owner_id
            )

    def delete_photo(self, photo_id: int) -> None:
        """Remove a photo row."""
        with self.store.transaction():
            self.store.data["photos"] = [
                row for row in self.store.data["photos"] if row.get("id") != photo_id
            ]

    def delete_all_photos(self) -> None:
        """Remove every photo row."""
        with self.store.transaction():
            self.store.data["photos"] = []


@dataclass
class JsonGameRepository(GameRepository):
    """JSON document implementation for the game session."""

    store: JsonStateStore

    def read_game_session(self) -> GameSessionRecord:
        """Return the stored session, falling back to a waiting one."""
        with self.store.lock:
            row = dict(self.store.data.get("game") or {})
        try:
            status = GameStatus(row.get("status", GameStatus.WAITING.value))
        except ValueError:
            logger.warning("Unknown game status %r, resetting", row.get("status"))
            return GameSessionRecord()
        return GameSessionRecord(
            status=status,
            order=tuple(_int(photo_id) for photo_id in row.get("order") or []),
            index=_int(row.get("index")),
            started_at=_parse_datetime(row.get("startedAt")),
            finished_at=_parse_datetime(row.get("finishedAt")),
        )

    def write_game_session(self, session: GameSessionRecord) -> None:
        """Replace the stored session."""
        with self.store.transaction():
            self.store.data["game"] = {
                "status": session.status.value,
                "order": list(session.order),
                "index": session.index,
                "startedAt": _format_datetime(session.started_at),
                "finishedAt": _format_datetime(session.finished_at),
            }


def _user_row(user: UserRecord) -> dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "role": user.role.value,
        "color": user.color,
        "createdAt": _format_datetime(user.created_at),
    }


def _user_from_row(row: dict[str, Any]) -> UserRecord:
    return UserRecord(
        id=_int(row.get("id")),
        name=str(row.get("name", "")),
        role=Role(row.get("role", Role.HOST.value)),
        color=str(row.get("color") or ""),
        created_at=_parse_datetime(row.get("createdAt")),
    )


def _photo_row(photo: PhotoRecord) -> dict[str, Any]:
    return {
        "id": photo.id,
        "ownerId": photo.owner_id,
        "tipo": photo.tipo.value,
        "filename": photo.filename,
        "mime": photo.media_type,
        "size": photo.size,
        "createdAt": _format_datetime(photo.created_at),
    }


def _photo_from_row(row: dict[str, Any]) -> PhotoRecord:
    return PhotoRecord(
        id=_int(row.get("id")),
        owner_id=_int(row.get("ownerId")),
        # Rows written before slots existed default to the first slot.
        tipo=PhotoSlot(row.get("tipo") or PhotoSlot.CHICO.value),
        filename=str(row.get("filename", "")),
        media_type=str(row.get("mime") or "image/jpeg"),
        size=_int(row.get("size")),
        created_at=_parse_datetime(row.get("createdAt")) or datetime.now(tz=UTC),
    )


def _int(value: object) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return 0


def _parse_datetime(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def _format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
