import logging
import shutil
from pathlib import Path
from uuid import uuid4

from fastapi import UploadFile, status

from .config import settings
from .errors import ServerError, TrailMateError, ValidationError

logger = logging.getLogger(__name__)

PROFILE_IMAGE_DIR = "profile_images"


def ensure_upload_dir(subdir: str) -> Path:
    """Ensure an upload directory exists."""
    upload_path = Path(settings.UPLOAD_DIR) / subdir
    upload_path.mkdir(parents=True, exist_ok=True)
    return upload_path


def get_file_extension(filename: str) -> str:
    """Get file extension in lowercase."""
    return Path(filename).suffix.lower()


def validate_file(file: UploadFile) -> None:
    """Validate uploaded file."""
    if not file.filename:
        raise ValidationError("No filename provided")

    extension = get_file_extension(file.filename)
    if extension not in settings.ALLOWED_EXTENSIONS:
        allowed = ", ".join(sorted(settings.ALLOWED_EXTENSIONS))
        raise ValidationError(f"File type {extension or 'unknown'} not allowed. Allowed types: {allowed}")


def generate_unique_filename(original_filename: str) -> str:
    """Generate a unique filename while preserving the extension."""
    return f"{uuid4()}{get_file_extension(original_filename)}"


def save_profile_image(file: UploadFile) -> str:
    """
    Save an uploaded profile image to disk.

    Returns:
        str: the URL path the image is served from
    """
    validate_file(file)

    file.file.seek(0, 2)
    file_size = file.file.tell()
    file.file.seek(0)

    if file_size > settings.MAX_FILE_SIZE:
        raise TrailMateError(
            f"File too large. Maximum size: {settings.MAX_FILE_SIZE / (1024 * 1024):.1f}MB",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )

    filename = generate_unique_filename(file.filename)
    file_path = ensure_upload_dir(PROFILE_IMAGE_DIR) / filename

    try:
        with open(file_path, "wb") as buffer:
            shutil.copyfileobj(file.file, buffer)
    except OSError as e:
        logger.exception(f"Failed to save profile image {filename}")
        raise ServerError("Failed to save file") from e

    return f"{settings.MEDIA_URL.rstrip('/')}/{PROFILE_IMAGE_DIR}/{filename}"


def delete_stored_file(url: str | None) -> None:
    """Remove a file previously returned by ``save_profile_image``; other URLs are ignored."""
    prefix = f"{settings.MEDIA_URL.rstrip('/')}/"
    if not url or not url.startswith(prefix):
        return

    path = Path(settings.UPLOAD_DIR) / url[len(prefix):]
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove {path}: {e}")
