"""Registration and login of participants."""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from photo_party.domain.errors import ConflictError, NotFoundError, ValidationError
from photo_party.domain.models import Role, UserRecord
from photo_party.services.locks import KeyedLock

logger = logging.getLogger(__name__)

_REGISTRATION_KEY = "registration"


class UserRepository(Protocol):
    """Persistence interface for users."""

    def create_user(self, name: str, role: Role, color: str) -> UserRecord:
        """Create a user, assigning the next id, and return it."""

    def get_user(self, user_id: int) -> UserRecord | None:
        """Return a user by id, if present."""

    def find_user_by_name(self, name: str) -> UserRecord | None:
        """Return the user whose name matches case-insensitively."""

    def count_users(self) -> int:
        """Return the number of registered users."""

    def list_users(self) -> list[UserRecord]:
        """Return all users ordered by id."""


@dataclass
class UserService:
    """Application service for participant identity."""

    repository: UserRepository
    locks: KeyedLock = field(default_factory=KeyedLock)

    def register(self, name: str | None, color: str | None) -> UserRecord:
        """Register a participant. The very first one becomes the admin."""
        cleaned_name = _require_text(name, "name")
        # The color is a secret compared verbatim, so it is stored as sent.
        _require_text(color, "color")
        with self.locks.hold(_REGISTRATION_KEY):
            if self.repository.find_user_by_name(cleaned_name) is not None:
                raise ConflictError("user already exists, please login")
            role = Role.ADMIN if self.repository.count_users() == 0 else Role.HOST
            user = self.repository.create_user(cleaned_name, role, color)
        logger.info("Registered user %s as %s", user.id, user.role.value)
        return user

    def login(self, name: str | None, color: str | None) -> UserRecord:
        """Return the user when name and color match.

        The color is a plaintext shared secret compared case-sensitively.
        """
        cleaned_name = _require_text(name, "name")
        user = self.repository.find_user_by_name(cleaned_name)
        if user is None:
            raise NotFoundError("user not found, please register first")
        if color != user.color:
            raise ValidationError("invalid color")
        return user

    def list_users(self) -> list[UserRecord]:
        """Return all users ordered by id."""
        return self.repository.list_users()

    def get_user(self, user_id: int) -> UserRecord:
        """Return a user by id."""
        user = self.repository.get_user(user_id)
        if user is None:
            raise NotFoundError("user not found")
        return user

    def find_by_name(self, name: str | None) -> UserRecord:
        """Return a user by case-insensitive name."""
        user = self.repository.find_user_by_name(_require_text(name, "name"))
        if user is None:
            raise NotFoundError("user not found, please register first")
        return user


def _require_text(value: str | None, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} required")
    return value.strip()
