"""Shared test fixtures."""

import random
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from photo_party.api.app import create_app
from photo_party.config import Settings
from photo_party.containers import AppContainer
from photo_party.domain.game import GameSessionRecord
from photo_party.domain.models import PhotoRecord, PhotoSlot, Role, UserRecord
from photo_party.services.access import AccessService
from photo_party.services.game import GameRepository, GameService
from photo_party.services.photos import PhotoRepository, PhotoService, PhotoStorage
from photo_party.services.users import UserRepository, UserService


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user repository for tests."""

    users: dict[int, UserRecord] = field(default_factory=dict)

    def create_user(self, name: str, role: Role, color: str) -> UserRecord:
        user = UserRecord(
            id=max(self.users, default=0) + 1,
            name=name,
            role=role,
            color=color,
            created_at=datetime.now(tz=UTC),
        )
        self.users[user.id] = user
        return user

    def get_user(self, user_id: int) -> UserRecord | None:
        return self.users.get(user_id)

    def find_user_by_name(self, name: str) -> UserRecord | None:
        for user in self.users.values():
            if user.name.lower() == name.lower():
                return user
        return None

    def count_users(self) -> int:
        return len(self.users)

    def list_users(self) -> list[UserRecord]:
        return [self.users[user_id] for user_id in sorted(self.users)]


@dataclass
class InMemoryPhotoRepository(PhotoRepository):
    """In-memory photo repository for tests."""

    photos: dict[int, PhotoRecord] = field(default_factory=dict)
    last_id: int = 0

    def create_photo(  # noqa: PLR0913
        self,
        owner_id: int,
        tipo: PhotoSlot,
        filename: str,
        media_type: str,
        size: int,
    ) -> PhotoRecord:
        self.last_id += 1
        photo = PhotoRecord(
            id=self.last_id,
            owner_id=owner_id,
            tipo=tipo,
            filename=filename,
            media_type=media_type,
            size=size,
            created_at=datetime.now(tz=UTC),
        )
        self.photos[photo.id] = photo
        return photo

    def get_photo(self, photo_id: int) -> PhotoRecord | None:
        return self.photos.get(photo_id)

    def list_photos_by_owner(self, owner_id: int) -> list[PhotoRecord]:
        return [p for p in self.list_all_photos() if p.owner_id == owner_id]

    def list_all_photos(self) -> list[PhotoRecord]:
        return [self.photos[photo_id] for photo_id in sorted(self.photos)]

    def count_photos_by_owner(self, owner_id: int) -> int:
        return len(self.list_photos_by_owner(owner_id))

    def delete_photo(self, photo_id: int) -> None:
        self.photos.pop(photo_id, None)

    def delete_all_photos(self) -> None:
        self.photos.clear()


@dataclass
class InMemoryGameRepository(GameRepository):
    """In-memory game repository for tests."""

    session: GameSessionRecord = field(default_factory=GameSessionRecord)
    writes: int = 0

    def read_game_session(self) -> GameSessionRecord:
        return self.session

    def write_game_session(self, session: GameSessionRecord) -> None:
        self.session = session
        self.writes += 1


@dataclass
class InMemoryPhotoStorage(PhotoStorage):
    """Photo storage keeping bytes in a dict."""

    files: dict[str, bytes] = field(default_factory=dict)
    failing_deletes: set[str] = field(default_factory=set)
    saved: int = 0

    def save(self, content: bytes, media_type: str) -> str:
        self.saved += 1
        filename = f"photo_{self.saved:016d}.jpg"
        self.files[filename] = content
        return filename

    def read(self, filename: str) -> bytes:
        if filename not in self.files:
            raise FileNotFoundError(filename)
        return self.files[filename]

    def delete(self, filename: str) -> None:
        if filename in self.failing_deletes:
            raise OSError(f"cannot delete {filename}")
        self.files.pop(filename, None)


@dataclass
class Services:
    """Services wired to in-memory adapters."""

    users: UserService
    access: AccessService
    photos: PhotoService
    game: GameService
    user_repository: InMemoryUserRepository
    photo_repository: InMemoryPhotoRepository
    game_repository: InMemoryGameRepository
    storage: InMemoryPhotoStorage


def build_services(seed: int = 7) -> Services:
    user_repository = InMemoryUserRepository()
    photo_repository = InMemoryPhotoRepository()
    game_repository = InMemoryGameRepository()
    storage = InMemoryPhotoStorage()
    access = AccessService(user_repository)
    return Services(
        users=UserService(user_repository),
        access=access,
        photos=PhotoService(photo_repository, storage, access),
        game=GameService(
            game_repository=game_repository,
            photo_repository=photo_repository,
            storage=storage,
            access=access,
            rng=random.Random(seed),
        ),
        user_repository=user_repository,
        photo_repository=photo_repository,
        game_repository=game_repository,
        storage=storage,
    )


@pytest.fixture
def services() -> Services:
    return build_services()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        storage_backend="file",
        upload_dir=tmp_path / "uploads",
        environment="test",
    )


@pytest.fixture
def container(settings: Settings, services: Services) -> AppContainer:
    return AppContainer(
        settings=settings,
        storage=services.storage,
        user_service=services.users,
        access_service=services.access,
        photo_service=services.photos,
        game_service=services.game,
    )


@pytest.fixture
def client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))
