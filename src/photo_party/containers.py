"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from photo_party.adapters.json_repositories import (
    JsonGameRepository,
    JsonPhotoRepository,
    JsonStateStore,
    JsonUserRepository,
)
from photo_party.adapters.local_photo_storage import LocalPhotoStorage
from photo_party.adapters.supabase_game_repository import SupabaseGameRepository
from photo_party.adapters.supabase_photo_repository import SupabasePhotoRepository
from photo_party.adapters.supabase_user_repository import SupabaseUserRepository
from photo_party.config import Settings
from photo_party.services.access import AccessService
from photo_party.services.game import GameRepository, GameService
from photo_party.services.photos import PhotoRepository, PhotoService, PhotoStorage
from photo_party.services.users import UserRepository, UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    storage: PhotoStorage
    user_service: UserService
    access_service: AccessService
    photo_service: PhotoService
    game_service: GameService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    user_repository, photo_repository, game_repository = _build_repositories(
        resolved_settings
    )
    storage = LocalPhotoStorage(resolved_settings.upload_dir)
    access_service = AccessService(user_repository)
    photo_service = PhotoService(
        repository=photo_repository,
        storage=storage,
        access=access_service,
        max_photos_per_user=resolved_settings.max_photos_per_user,
        max_upload_bytes=resolved_settings.max_upload_bytes,
    )
    game_service = GameService(
        game_repository=game_repository,
        photo_repository=photo_repository,
        storage=storage,
        access=access_service,
    )
    return AppContainer(
        settings=resolved_settings,
        storage=storage,
        user_service=UserService(user_repository),
        access_service=access_service,
        photo_service=photo_service,
        game_service=game_service,
    )


def _build_repositories(
    settings: Settings,
) -> tuple[UserRepository, PhotoRepository, GameRepository]:
    if settings.storage_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY are required "
                "for the supabase storage backend"
            )
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return (
            SupabaseUserRepository(client),
            SupabasePhotoRepository(client),
            SupabaseGameRepository(client),
        )
    if settings.storage_backend != "file":
        raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
    store = JsonStateStore(settings.resolved_data_file)
    return (
        JsonUserRepository(store),
        JsonPhotoRepository(store),
        JsonGameRepository(store),
    )
