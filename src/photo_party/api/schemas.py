"""Request payloads and response serializers for the HTTP API."""

from pydantic import BaseModel

from photo_party.domain.game import GameStatusView, NextPhoto
from photo_party.domain.models import PhotoRecord, UserRecord


class CredentialsRequest(BaseModel):
    """Body of the register and login endpoints."""

    name: str | None = None
    color: str | None = None


def serialize_user(user: UserRecord) -> dict[str, object]:
    # The color is a login secret and never leaves the server.
    return {
        "id": user.id,
        "name": user.name,
        "role": user.role.value,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
    }


def serialize_photo(photo: PhotoRecord) -> dict[str, object]:
    return {
        "id": photo.id,
        "ownerId": photo.owner_id,
        "tipo": photo.tipo.value,
        "mime": photo.media_type,
        "size": photo.size,
        "createdAt": photo.created_at.isoformat(),
    }


def serialize_next_photo(result: NextPhoto) -> dict[str, object]:
    if result.done:
        return {"done": True, "message": "Game Over"}
    return {"done": False, "photoId": result.photo_id, "remaining": result.remaining}


def serialize_status(view: GameStatusView) -> dict[str, object]:
    return {"status": view.status.value, "index": view.index, "total": view.total}
