"""Domain models for the photo party game."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    """User roles. The first registered user is the only admin."""

    ADMIN = "admin"
    HOST = "host"


class PhotoSlot(str, Enum):
    """Named upload slots, at most one photo per slot and owner."""

    CHICO = "chico"
    VERGONZOSA = "vergonzosa"


@dataclass(frozen=True)
class UserRecord:
    """Represents a registered participant."""

    id: int
    name: str
    role: Role
    color: str
    created_at: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


@dataclass(frozen=True)
class PhotoRecord:
    """Metadata for an uploaded photo."""

    id: int
    owner_id: int
    tipo: PhotoSlot
    filename: str
    media_type: str
    size: int
    created_at: datetime


MEDIA_TYPE_EXTENSIONS: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


@dataclass(frozen=True)
class PhotoUpload:
    """Photo bytes submitted for one slot."""

    content: bytes
    media_type: str
