# brokerdesk/services/uploads.py
from __future__ import annotations

import logging
import os
import time
import uuid
from pathlib import Path
from typing import BinaryIO

from ..config import settings
from ..errors import InternalError, NotFound, ValidationError

log = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")
PUBLIC_PREFIX = "/uploads/"
CHUNK_SIZE = 64 * 1024


def upload_root() -> Path:
    return Path(settings.upload_path)


def is_valid_image_name(filename: str) -> bool:
    return Path(filename or "").suffix.lower() in ALLOWED_IMAGE_EXTENSIONS


def save_profile_photo(stream: BinaryIO, filename: str, *, max_size: int | None = None) -> tuple[str, Path]:
    """
    Store an uploaded image under the upload root.

    Returns (public reference, path on disk). The size limit is enforced while
    copying, so a client cannot get past it by lying about Content-Length.
    """
    limit = int(max_size or settings.max_file_size)

    if not is_valid_image_name(filename):
        raise ValidationError("Only JPEG, PNG, GIF, and WebP images are allowed")

    root = upload_root()
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError:
        log.exception("upload directory not writable")
        raise InternalError("failed to create upload directory")

    ext = Path(filename).suffix.lower()
    name = f"{uuid.uuid4()}_{int(time.time())}{ext}"
    path = root / name

    written = 0
    try:
        with open(path, "wb") as dst:
            while True:
                chunk = stream.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > limit:
                    break
                dst.write(chunk)
    except OSError:
        remove_upload(path)
        log.exception("upload write failed")
        raise InternalError("failed to save file")

    if written > limit:
        remove_upload(path)
        raise ValidationError(f"File size must be less than {limit // 1024 // 1024} MB")

    return f"{PUBLIC_PREFIX}{name}", path


def remove_upload(path: Path) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def resolve_upload(filename: str) -> Path:
    if not filename or ".." in filename or "/" in filename or "\\" in filename:
        raise ValidationError("Invalid filename")

    path = upload_root() / filename
    if not path.is_file():
        raise NotFound("File not found")
    return path
