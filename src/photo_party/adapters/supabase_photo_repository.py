"""Supabase-backed photo repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from photo_party.domain.errors import StorageError
from photo_party.domain.models import PhotoRecord, PhotoSlot
from photo_party.services.photos import PhotoRepository

_PHOTO_COLUMNS = "id, owner_id, tipo, filename, media_type, size, created_at"


@dataclass
class SupabasePhotoRepository(PhotoRepository):
    """Supabase implementation for photo metadata persistence."""

    client: Client

    def create_photo(  # noqa: PLR0913
        self,
        owner_id: int,
        tipo: PhotoSlot,
        filename: str,
        media_type: str,
        size: int,
    ) -> PhotoRecord:
        """Insert a photo row and return it."""
        response = (
            self.client.table("photos")
            .insert(
                {
                    "owner_id": owner_id,
                    "tipo": tipo.value,
                    "filename": filename,
                    "media_type": media_type,
                    "size": size,
                }
            )
            .execute()
        )
        if not response.data:
            raise StorageError("Failed to create photo metadata")
        return _photo_from_row(response.data[0])

    def get_photo(self, photo_id: int) -> PhotoRecord | None:
        """Return a photo by id, if present."""
        response = (
            self.client.table("photos")
            .select(_PHOTO_COLUMNS)
            .eq("id", photo_id)
            .limit(1)
            .execute()
        )
        if response.data:
            return _photo_from_row(response.data[0])
        return None

    def list_photos_by_owner(self, owner_id: int) -> list[PhotoRecord]:
        """Return an owner's photos ordered by id."""
        response = (
            self.client.table("photos")
            .select(_PHOTO_COLUMNS)
            .eq("owner_id", owner_id)
            .order("id")
            .execute()
        )
        return [_photo_from_row(row) for row in response.data or []]

    def list_all_photos(self) -> list[PhotoRecord]:
        """Return every photo ordered by owner, then id."""
        response = (
            self.client.table("photos")
            .select(_PHOTO_COLUMNS)
            .order("owner_id")
            .order("id")
            .execute()
        )
        return [_photo_from_row(row) for row in response.data or []]

    def count_photos_by_owner(self, owner_id: int) -> int:
        """Return how many photos an owner holds."""
        response = (
            self.client.table("photos")
            .select("id", count="exact")
            .eq("owner_id", owner_id)
            .execute()
        )
        return response.count or 0

    def delete_photo(self, photo_id: int) -> None:
        """Delete a photo row."""
        self.client.table("photos").delete().eq("id", photo_id).execute()

    def delete_all_photos(self) -> None:
        """Delete every photo row."""
        # PostgREST refuses unfiltered deletes.
        self.client.table("photos").delete().gt("id", 0).execute()


def _photo_from_row(row: dict[str, object]) -> PhotoRecord:
    created = row.get("created_at")
    return PhotoRecord(
        id=int(row["id"]),
        owner_id=int(row["owner_id"]),
        tipo=PhotoSlot(row["tipo"]),
        filename=str(row["filename"]),
        media_type=str(row.get("media_type") or "image/jpeg"),
        size=int(row.get("size") or 0),
        created_at=(
            datetime.fromisoformat(created)
            if isinstance(created, str) and created
            else datetime.now(tz=UTC)
        ),
    )
