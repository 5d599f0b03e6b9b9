"""Prescription images stored on local disk under ``settings.UPLOAD_DIR``."""
import logging
import os
import uuid
from pathlib import Path

from fastapi import UploadFile

from pharmacy.core.config import settings
from pharmacy.core.exceptions import ValidationError

logger = logging.getLogger(__name__)


async def save_image(file: UploadFile, folder: str = "prescriptions") -> str:
    """Validate an uploaded image and write it to disk. Returns the stored path."""
    if not file.content_type or not file.content_type.startswith("image/"):
        raise ValidationError("Only image files are allowed")

    # One byte past the limit is enough to know the file is too large
    contents = await file.read(settings.MAX_FILE_SIZE + 1)
    if len(contents) > settings.MAX_FILE_SIZE:
        raise ValidationError(
            f"File too large. Maximum size is {settings.MAX_FILE_SIZE // (1024 * 1024)}MB"
        )
    if not contents:
        raise ValidationError("Uploaded file is empty")

    suffix = Path(file.filename or "").suffix.lower() or ".jpg"
    target_dir = Path(settings.UPLOAD_DIR) / folder
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / f"{uuid.uuid4().hex}{suffix}"
    target.write_bytes(contents)

    logger.info("Stored upload %s (%s bytes)", target, len(contents))
    return str(target)


def delete_upload(path: str) -> None:
    """Remove a stored upload; a file that is already gone is not an error."""
    try:
        os.remove(path)
    except FileNotFoundError:
        logger.warning("Upload %s was already removed", path)
