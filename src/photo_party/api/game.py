"""Game session endpoints, all admin only."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Query, Request, Response

from photo_party.api.schemas import serialize_next_photo, serialize_status

if TYPE_CHECKING:
    from photo_party.containers import AppContainer

router = APIRouter(prefix="/api", tags=["game"])


@router.post("/game/start")
async def start_game(
    request: Request, user_id: int | None = Query(default=None, alias="userId")
) -> dict[str, object]:
    """Shuffle all photos and start a new run."""
    container: AppContainer = request.app.state.container
    total = container.game_service.start(user_id)
    return {"ok": True, "total": total}


@router.get("/game/next")
async def next_photo(
    request: Request, user_id: int | None = Query(default=None, alias="userId")
) -> dict[str, object]:
    """Reveal the next photo."""
    container: AppContainer = request.app.state.container
    return serialize_next_photo(container.game_service.next_photo(user_id))


@router.get("/game/status")
async def game_status(
    request: Request, user_id: int | None = Query(default=None, alias="userId")
) -> dict[str, object]:
    """Return the game progress."""
    container: AppContainer = request.app.state.container
    return serialize_status(container.game_service.status(user_id))


@router.get("/image/{photo_id}")
async def photo_image(
    photo_id: int,
    request: Request,
    user_id: int | None = Query(default=None, alias="userId"),
) -> Response:
    """Stream a photo while the game is running."""
    container: AppContainer = request.app.state.container
    photo = container.game_service.photo_content(user_id, photo_id)
    return Response(content=photo.content, media_type=photo.media_type)
