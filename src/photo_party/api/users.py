"""User registration and lookup endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request

from photo_party.api.schemas import CredentialsRequest, serialize_user

if TYPE_CHECKING:
    from photo_party.containers import AppContainer

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("/register")
async def register(body: CredentialsRequest, request: Request) -> dict[str, object]:
    """Register a participant; the first one becomes the admin."""
    container: AppContainer = request.app.state.container
    user = container.user_service.register(body.name, body.color)
    return serialize_user(user)


@router.post("/login")
async def login(body: CredentialsRequest, request: Request) -> dict[str, object]:
    """Log in with name and color."""
    container: AppContainer = request.app.state.container
    user = container.user_service.login(body.name, body.color)
    return serialize_user(user)


@router.get("")
async def list_users(request: Request) -> dict[str, object]:
    """Return all participants ordered by id."""
    container: AppContainer = request.app.state.container
    return {"users": [serialize_user(u) for u in container.user_service.list_users()]}


@router.get("/by-name")
async def user_by_name(request: Request, name: str | None = None) -> dict[str, object]:
    """Look a participant up by case-insensitive name."""
    container: AppContainer = request.app.state.container
    return serialize_user(container.user_service.find_by_name(name))


@router.get("/{user_id}")
async def user_detail(user_id: int, request: Request) -> dict[str, object]:
    """Return a participant by id."""
    container: AppContainer = request.app.state.container
    return serialize_user(container.user_service.get_user(user_id))
