import os
from fastapi import UploadFile

from app.config import settings
from app.core.errors import ValidationError, FileTooLargeError
from app.schemas.album import UploadedPhoto

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}
ALLOWED_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}

CHUNK_SIZE = 1024 * 1024


def validate_photo(original_name: str, content_type: str | None, size: int) -> None:
    """Extension and declared content type must both name an allowed image type."""
    ext = os.path.splitext(original_name or "")[1].lower()
    ctype = (content_type or "").split(";")[0].strip().lower()
    if ext not in ALLOWED_EXTENSIONS or ctype not in ALLOWED_TYPES:
        raise ValidationError("Only image files are allowed (JPEG, PNG, GIF, WebP)")
    if size > settings.MAX_FILE_SIZE:
        raise FileTooLargeError(f"File too large: {original_name}")


def validate_customer_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Customer name is required")
    if len(name) > settings.MAX_CUSTOMER_NAME_LENGTH:
        raise ValidationError("Customer name is too long")
    return name


def validate_batch(files) -> None:
    if not files:
        raise ValidationError("No files uploaded")
    if len(files) > settings.MAX_FILES_PER_UPLOAD:
        raise ValidationError(f"Too many files (max {settings.MAX_FILES_PER_UPLOAD})")
    for f in files:
        validate_photo(f.original_name, f.content_type, f.size)


async def read_upload(file: UploadFile) -> UploadedPhoto:
    """Validate an upload and hand back its spooled body without copying it into memory."""
    name = file.filename or ""
    # cheap rejection before touching the body
    validate_photo(name, file.content_type, 0)

    # The multipart parser has already spooled the part (to disk past its memory threshold);
    # walk it in chunks and stop as soon as the ceiling is passed.
    await file.seek(0)
    total = 0
    while True:
        chunk = await file.read(CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > settings.MAX_FILE_SIZE:
            raise FileTooLargeError(f"File too large: {name}")
    await file.seek(0)

    return UploadedPhoto(original_name=name, content_type=file.content_type or "", size=total, source=file.file)
