"""On-disk storage for user profile pictures."""
from __future__ import annotations

import logging
from pathlib import Path

from fastapi import UploadFile

from greenpact.core.errors import ValidationError

logger = logging.getLogger(__name__)

PICTURE_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif"}
PICTURE_SUBDIR = "profile_pictures"


class ProfilePictureStore:
    """Save one picture per user under ``<root>/profile_pictures``.

    Paths handed back are relative to ``root`` so they can be served from the
    ``/uploads`` mount.
    """

    def __init__(self, root: Path | str, max_bytes: int) -> None:
        self.root = Path(root)
        self.max_bytes = max_bytes

    def validate(self, filename: str | None, content_type: str | None, size: int) -> str:
        if not filename:
            raise ValidationError("No file uploaded.")
        ext = Path(filename).suffix.lower()
        major, _, subtype = (content_type or "").lower().partition("/")
        if ext not in PICTURE_EXTENSIONS or major != "image" or f".{subtype}" not in PICTURE_EXTENSIONS:
            raise ValidationError("Only image files (JPEG, JPG, PNG, GIF) are allowed!")
        if size > self.max_bytes:
            raise ValidationError(self._too_large_message())
        return ext

    async def read_upload(self, upload: UploadFile) -> bytes:
        """Read an upload, stopping one byte past the size limit."""

        content = await upload.read(self.max_bytes + 1)
        if len(content) > self.max_bytes:
            raise ValidationError(self._too_large_message())
        return content

    def _too_large_message(self) -> str:
        return f"Profile picture must be under {self.max_bytes // (1024 * 1024)}MB."

    def save(self, user_id: int, filename: str | None, content_type: str | None, content: bytes) -> str:
        ext = self.validate(filename, content_type, len(content))
        directory = self.root / PICTURE_SUBDIR
        directory.mkdir(parents=True, exist_ok=True)
        relative = f"{PICTURE_SUBDIR}/{user_id}-profile{ext}"
        (self.root / relative).write_bytes(content)
        logger.info("Stored profile picture for user %s at %s", user_id, relative)
        return relative

    def remove(self, relative: str | None) -> None:
        if not relative:
            return
        path = (self.root / relative).resolve()
        if self.root.resolve() not in path.parents:
            logger.warning("Refusing to delete %s outside the upload directory", relative)
            return
        path.unlink(missing_ok=True)
