"""File upload helpers for profile pictures served under /uploads."""

import time
import uuid
from pathlib import Path
from typing import Optional

from fastapi import HTTPException, UploadFile, status

from tourmerch.core.config import get_settings
from tourmerch.core.logging import get_logger

logger = get_logger(__name__)

UPLOAD_URL_PREFIX = "/uploads"
ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}
ALLOWED_MIME_TYPES = {"image/png", "image/jpeg", "image/jpg", "image/gif", "image/webp"}


def upload_dir() -> Path:
    path = Path(get_settings().UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def validate_image_file(file: UploadFile) -> str:
    """Return the lower-cased extension of a valid image upload."""
    extension = Path(file.filename or "").suffix.lower()
    if extension not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid file type. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}",
        )
    if file.content_type not in ALLOWED_MIME_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid content type. Must be an image.",
        )
    return extension


async def save_profile_picture(file: UploadFile, user_id: int) -> str:
    """Store an uploaded picture and return its public path."""
    extension = validate_image_file(file)

    content = await file.read()
    if len(content) > get_settings().MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="File too large",
        )

    filename = f"user_{user_id}_{int(time.time())}_{uuid.uuid4().hex[:8]}{extension}"
    (upload_dir() / filename).write_bytes(content)

    logger.info("profile_picture_saved", user_id=user_id, filename=filename, size=len(content))
    return f"{UPLOAD_URL_PREFIX}/{filename}"


def delete_uploaded_file(public_path: Optional[str]) -> None:
    """Remove a previously uploaded file; paths outside /uploads are ignored."""
    if not public_path or not public_path.startswith(f"{UPLOAD_URL_PREFIX}/"):
        return

    target = upload_dir() / Path(public_path).name
    try:
        target.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("upload_delete_failed", path=str(target), error=str(e))
