"""Supabase-backed user repository."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from photo_party.domain.errors import StorageError
from photo_party.domain.models import Role, UserRecord
from photo_party.services.users import UserRepository

_USER_COLUMNS = "id, name, role, color, created_at"


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user persistence."""

    client: Client

    def create_user(self, name: str, role: Role, color: str) -> UserRecord:
        """Insert a user row and return it."""
        response = (
            self.client.table("users")
            .insert({"name": name, "role": role.value, "color": color})
            .execute()
        )
        if not response.data:
            raise StorageError("Failed to create user in Supabase")
        return _user_from_row(response.data[0])

    def get_user(self, user_id: int) -> UserRecord | None:
        """Return a user by id, if present."""
        response = (
            self.client.table("users")
            .select(_USER_COLUMNS)
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        if response.data:
            return _user_from_row(response.data[0])
        return None

    def find_user_by_name(self, name: str) -> UserRecord | None:
        """Return the user whose name matches case-insensitively."""
        response = (
            self.client.table("users")
            .select(_USER_COLUMNS)
            .ilike("name", _escape_like(name))
            .execute()
        )
        wanted = name.casefold()
        for row in response.data or []:
            if str(row["name"]).casefold() == wanted:
                return _user_from_row(row)
        return None

    def count_users(self) -> int:
        """Return the number of user rows."""
        response = self.client.table("users").select("id", count="exact").execute()
        return response.count or 0

    def list_users(self) -> list[UserRecord]:
        """Return all users ordered by id."""
        response = (
            self.client.table("users").select(_USER_COLUMNS).order("id").execute()
        )
        return [_user_from_row(row) for row in response.data or []]


def _user_from_row(row: dict[str, object]) -> UserRecord:
    created = row.get("created_at")
    return UserRecord(
        id=int(row["id"]),
        name=str(row["name"]),
        role=Role(row["role"]),
        color=str(row.get("color") or ""),
        created_at=(
            datetime.fromisoformat(created)
            if isinstance(created, str) and created
            else None
        ),
    )


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so the pattern matches the literal name."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
