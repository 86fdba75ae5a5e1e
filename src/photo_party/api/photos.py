"""Photo upload, listing and deletion endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, File, Query, Request, UploadFile

from photo_party.api.schemas import serialize_photo
from photo_party.domain.models import PhotoSlot, PhotoUpload

if TYPE_CHECKING:
    from photo_party.containers import AppContainer

router = APIRouter(prefix="/api", tags=["photos"])


@router.post("/upload")
async def upload_photos(
    request: Request,
    user_id: int | None = Query(default=None, alias="userId"),
    chico: UploadFile | None = File(default=None),
    vergonzosa: UploadFile | None = File(default=None),
) -> dict[str, object]:
    """Upload up to one photo per slot; the batch is accepted or rejected whole."""
    container: AppContainer = request.app.state.container
    files = {PhotoSlot.CHICO.value: chico, PhotoSlot.VERGONZOSA.value: vergonzosa}
    slots: dict[str, PhotoUpload] = {}
    try:
        for name, file in files.items():
            if file is None:
                continue
            slots[name] = PhotoUpload(
                content=await file.read(),
                media_type=file.content_type or "",
            )
    finally:
        # Staged uploads are discarded whatever the outcome.
        for file in files.values():
            if file is not None:
                await file.close()
    accepted = container.photo_service.upload(user_id, slots)
    tipos = [slot.value for slot in PhotoSlot if slot in accepted]
    return {"ok": True, "added": len(tipos), "tipos": tipos}


@router.get("/photos/mine")
async def list_own_photos(
    request: Request, user_id: int | None = Query(default=None, alias="userId")
) -> dict[str, object]:
    """Return the caller's photos."""
    container: AppContainer = request.app.state.container
    photos = container.photo_service.list_own_photos(user_id)
    return {"photos": [serialize_photo(photo) for photo in photos]}


@router.get("/photos")
async def list_all_photos(
    request: Request, user_id: int | None = Query(default=None, alias="userId")
) -> dict[str, object]:
    """Return every photo grouped by owner (admin only)."""
    container: AppContainer = request.app.state.container
    photos = container.photo_service.list_all_photos(user_id)
    return {"photos": [serialize_photo(photo) for photo in photos]}


@router.delete("/photos/{photo_id}")
async def delete_photo(
    photo_id: int,
    request: Request,
    user_id: int | None = Query(default=None, alias="userId"),
) -> dict[str, object]:
    """Delete one photo (owner or admin)."""
    container: AppContainer = request.app.state.container
    container.photo_service.delete_photo(user_id, photo_id)
    return {"ok": True, "deletedId": photo_id}


@router.delete("/photos")
async def delete_all_photos(
    request: Request, user_id: int | None = Query(default=None, alias="userId")
) -> dict[str, object]:
    """Delete every photo (admin only)."""
    container: AppContainer = request.app.state.container
    deleted = container.photo_service.delete_all_photos(user_id)
    return {"ok": True, "deleted": deleted}
