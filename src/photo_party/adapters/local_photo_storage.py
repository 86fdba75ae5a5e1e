"""Local disk storage for photo bytes."""

import secrets
import string
from dataclasses import dataclass
from pathlib import Path

from photo_party.domain.errors import StorageError
from photo_party.domain.models import MEDIA_TYPE_EXTENSIONS
from photo_party.services.photos import PhotoStorage

_ALPHABET = string.digits + string.ascii_lowercase
_TOKEN_LENGTH = 16


@dataclass
class LocalPhotoStorage(PhotoStorage):
    """Store photos as files inside a single upload directory."""

    upload_dir: Path

    def save(self, content: bytes, media_type: str) -> str:
        """Write bytes under a new random filename and return it."""
        extension = MEDIA_TYPE_EXTENSIONS.get(media_type, ".jpg")
        filename = f"photo_{_random_token()}{extension}"
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            self._path(filename).write_bytes(content)
        except OSError as exc:
            raise StorageError("Failed to store photo file") from exc
        return filename

    def read(self, filename: str) -> bytes:
        """Return the file bytes; raises FileNotFoundError when missing."""
        return self._path(filename).read_bytes()

    def delete(self, filename: str) -> None:
        """Remove the file if it exists."""
        self._path(filename).unlink(missing_ok=True)

    def _path(self, filename: str) -> Path:
        return self.upload_dir / Path(filename).name


def _random_token() -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(_TOKEN_LENGTH))
