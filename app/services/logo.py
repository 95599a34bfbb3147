"""Site logo storage: validate an upload, write it under a unique name, swap it in.

The file-system write and the settings update are not transactional. A crash
in between can orphan a file in ``UPLOADS_DIR``; the logo is not critical so
that is tolerated.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO
from uuid import uuid4

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import PayloadTooLarge, UnsupportedMediaType, ValidationError
from ..crud.app_settings import get_logo_filename, set_logo_filename
from .logo_store import logo_store

logger = logging.getLogger(__name__)

ALLOWED_LOGO_TYPES = {
    "image/png",
    "image/jpeg",
    "image/webp",
    "image/svg+xml",
}
DEFAULT_EXTENSION = ".png"
CHUNK_SIZE = 64 * 1024


def _uploads_dir() -> Path:
    path = Path(settings.UPLOADS_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def logo_url(filename: str | None) -> str:
    base = settings.public_base_url
    if filename:
        # Older rows stored a full path; only the basename is meaningful.
        return f"{base}/uploads/{Path(filename).name}"
    return f"{base}/{settings.DEFAULT_LOGO_NAME}"


def current_logo_url(db: Session) -> str:
    url = logo_url(get_logo_filename(db))
    logo_store.set(url)
    return url


def _storage_name(original: str | None) -> str:
    ext = Path(original or "").suffix.lower() or DEFAULT_EXTENSION
    return f"logo-{uuid4().hex}{ext}"


def _write_limited(file_data: IO[bytes], dest: Path, limit: int) -> int:
    written = 0
    try:
        file_data.seek(0)
    except (AttributeError, OSError):
        pass
    with dest.open("wb") as buffer:
        while True:
            chunk = file_data.read(CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > limit:
                raise PayloadTooLarge(f"File too large (max {limit} bytes)")
            buffer.write(chunk)
    return written


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove logo file %s: %s", path.name, exc)


def replace_logo(db: Session, filename: str | None, content_type: str | None, file_data: IO[bytes]) -> str:
    """Persist a new logo and return its public URL."""

    media_type = (content_type or "").lower()
    if media_type not in ALLOWED_LOGO_TYPES:
        raise UnsupportedMediaType("Invalid file type")

    uploads = _uploads_dir()
    new_name = _storage_name(filename)
    dest = uploads / new_name
    try:
        size = _write_limited(file_data, dest, settings.LOGO_MAX_BYTES)
    except BaseException:
        _discard(dest)
        raise
    if size == 0:
        _discard(dest)
        raise ValidationError("No file uploaded")

    previous = get_logo_filename(db)
    set_logo_filename(db, new_name)

    old_name = Path(previous).name if previous else None
    if old_name and old_name != new_name:
        # Best effort; a leftover file is harmless.
        _discard(uploads / old_name)

    url = logo_url(new_name)
    logo_store.set(url)
    logger.info("logo.replaced", extra={"extra_data": {"filename": new_name, "size": size}})
    return url
