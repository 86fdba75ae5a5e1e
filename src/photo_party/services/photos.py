"""Photo admission control: quotas, slots and deletion."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

from photo_party.domain.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    QuotaExceededError,
    ValidationError,
)
from photo_party.domain.models import (
    MEDIA_TYPE_EXTENSIONS,
    PhotoRecord,
    PhotoSlot,
    PhotoUpload,
)
from photo_party.services.access import AccessService
from photo_party.services.locks import KeyedLock

logger = logging.getLogger(__name__)

DEFAULT_MAX_PHOTOS_PER_USER = 2
DEFAULT_MAX_UPLOAD_BYTES = 15 * 1024 * 1024


class PhotoRepository(Protocol):
    """Persistence interface for photo metadata."""

    def create_photo(  # noqa: PLR0913
        self,
        owner_id: int,
        tipo: PhotoSlot,
        filename: str,
        media_type: str,
        size: int,
    ) -> PhotoRecord:
        """Create a photo record with the next id and return it."""

    def get_photo(self, photo_id: int) -> PhotoRecord | None:
        """Return a photo by id, if present."""

    def list_photos_by_owner(self, owner_id: int) -> list[PhotoRecord]:
        """Return an owner's photos ordered by id."""

    def list_all_photos(self) -> list[PhotoRecord]:
        """Return every photo."""

    def count_photos_by_owner(self, owner_id: int) -> int:
        """Return how many photos an owner holds."""

    def delete_photo(self, photo_id: int) -> None:
        """Delete a photo record."""

    def delete_all_photos(self) -> None:
        """Delete every photo record."""


class PhotoStorage(Protocol):
    """Byte storage for uploaded photos."""

    def save(self, content: bytes, media_type: str) -> str:
        """Persist bytes under a new opaque filename and return it."""

    def read(self, filename: str) -> bytes:
        """Return stored bytes; raise FileNotFoundError when missing."""

    def delete(self, filename: str) -> None:
        """Remove stored bytes; missing files are ignored."""


@dataclass
class PhotoService:
    """Validate uploads against quotas and slots, and delete photos."""

    repository: PhotoRepository
    storage: PhotoStorage
    access: AccessService
    max_photos_per_user: int = DEFAULT_MAX_PHOTOS_PER_USER
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    locks: KeyedLock = field(default_factory=KeyedLock)

    def upload(
        self, caller_id: int | None, slots: Mapping[str, PhotoUpload]
    ) -> set[PhotoSlot]:
        """Accept a batch of slot uploads, all or nothing.

        The whole batch is rejected when it would push the owner past the
        quota or reuse a slot the owner already filled.
        """
        owner = self.access.require_user(caller_id)
        if not slots:
            raise ValidationError("no files")
        batch = self._validate_batch(slots)
        with self.locks.hold(owner.id):
            existing = self.repository.count_photos_by_owner(owner.id)
            if existing + len(batch) > self.max_photos_per_user:
                logger.info(
                    "Rejected upload batch over quota",
                    extra={"owner_id": owner.id, "existing": existing},
                )
                raise QuotaExceededError(
                    f"max {self.max_photos_per_user} photos per user"
                )
            filled = {
                photo.tipo for photo in self.repository.list_photos_by_owner(owner.id)
            }
            taken = sorted(slot.value for slot in batch if slot in filled)
            if taken:
                raise ConflictError(f"slot already used: {', '.join(taken)}")
            for tipo, upload in batch.items():
                self._store(owner.id, tipo, upload)
        return set(batch)

    def list_own_photos(self, caller_id: int | None) -> list[PhotoRecord]:
        """Return the caller's photos ordered by id."""
        owner = self.access.require_user(caller_id)
        photos = self.repository.list_photos_by_owner(owner.id)
        return sorted(photos, key=lambda photo: photo.id)

    def list_all_photos(self, caller_id: int | None) -> list[PhotoRecord]:
        """Return every photo, grouped by owner."""
        self.access.require_admin(caller_id)
        photos = self.repository.list_all_photos()
        return sorted(photos, key=lambda photo: (photo.owner_id, photo.id))

    def delete_photo(self, caller_id: int | None, photo_id: int) -> PhotoRecord:
        """Delete one photo owned by the caller, or any photo for the admin."""
        caller = self.access.require_user(caller_id)
        photo = self.repository.get_photo(photo_id)
        if photo is None:
            raise NotFoundError("photo not found")
        if not caller.is_admin and photo.owner_id != caller.id:
            raise ForbiddenError("only the owner or the admin can delete a photo")
        with self.locks.hold(photo.owner_id):
            if self.repository.get_photo(photo.id) is None:
                raise NotFoundError("photo not found")
            self.repository.delete_photo(photo.id)
        self._discard_file(photo.filename)
        return photo

    def delete_all_photos(self, caller_id: int | None) -> int:
        """Remove every stored file, then clear all photo records."""
        self.access.require_admin(caller_id)
        photos = self.repository.list_all_photos()
        for photo in photos:
            self._discard_file(photo.filename)
        self.repository.delete_all_photos()
        logger.info("Deleted all photos", extra={"count": len(photos)})
        return len(photos)

    def _validate_batch(
        self, slots: Mapping[str, PhotoUpload]
    ) -> dict[PhotoSlot, PhotoUpload]:
        parsed: dict[PhotoSlot, PhotoUpload] = {}
        for name, upload in slots.items():
            try:
                slot = PhotoSlot(name)
            except ValueError as exc:
                raise ValidationError(f"unknown photo slot: {name}") from exc
            if upload.media_type not in MEDIA_TYPE_EXTENSIONS:
                raise ValidationError("Only jpg/png/webp allowed")
            if not upload.content:
                raise ValidationError(f"empty file for slot {slot.value}")
            if len(upload.content) > self.max_upload_bytes:
                raise ValidationError(f"file too large for slot {slot.value}")
            parsed[slot] = upload
        # Enum order keeps the commit sequence stable.
        return {slot: parsed[slot] for slot in PhotoSlot if slot in parsed}

    def _store(self, owner_id: int, tipo: PhotoSlot, upload: PhotoUpload) -> None:
        filename = self.storage.save(upload.content, upload.media_type)
        try:
            self.repository.create_photo(
                owner_id=owner_id,
                tipo=tipo,
                filename=filename,
                media_type=upload.media_type,
                size=len(upload.content),
            )
        except Exception:
            self._discard_file(filename)
            raise

    def _discard_file(self, filename: str) -> None:
        try:
            self.storage.delete(filename)
        except OSError:
            logger.warning(
                "Failed to delete photo file", exc_info=True, extra={"file": filename}
            )
