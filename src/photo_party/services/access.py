"""Caller resolution and role checks."""

from dataclasses import dataclass

from photo_party.domain.errors import ForbiddenError, NotFoundError, ValidationError
from photo_party.domain.models import UserRecord
from photo_party.services.users import UserRepository


@dataclass
class AccessService:
    """Authorization gate shared by the photo and game services."""

    user_repository: UserRepository

    def require_user(self, caller_id: int | None) -> UserRecord:
        """Resolve the caller or fail."""
        if caller_id is None or caller_id <= 0:
            raise ValidationError("userId required")
        user = self.user_repository.get_user(caller_id)
        if user is None:
            raise NotFoundError("user not found")
        return user

    def require_admin(self, caller_id: int | None) -> UserRecord:
        """Resolve the caller and ensure it holds the admin role."""
        user = self.require_user(caller_id)
        if not user.is_admin:
            raise ForbiddenError("admin only")
        return user
