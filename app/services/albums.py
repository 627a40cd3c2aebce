"""
Album writer and reader.

The writer persists an upload batch, builds the ZIP and QR side files and
publishes the album by writing its manifest last. The reader loads that
manifest and re-checks every listed photo against the album directory
before handing out URLs.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Sequence, Tuple

from pydantic import ValidationError as SchemaError
from slugify import slugify

from app.core.errors import (
    AlbumError,
    CorruptDataError,
    EmptyAlbumError,
    NotFoundError,
    QrGenerationError,
    StorageError,
    ValidationError,
)
from app.schemas.album import AlbumCreated, AlbumManifest, AlbumView, UploadedPhoto
from app.services.archive import build_album_zip
from app.services.metrics import record_album_created, record_album_viewed
from app.services.storage import QR_NAME, ZIP_NAME, storage
from app.services.upload_validate import validate_batch, validate_customer_name
from app.utils.qr_utils import generate_qr_for_link

logger = logging.getLogger(__name__)


def album_base_url(base_url: str, album_id: str) -> str:
    return f"{base_url.rstrip('/')}/albums/{album_id}/"


def view_url(base_url: str, album_id: str) -> str:
    return f"{base_url.rstrip('/')}/view/{album_id}"


def create_album(customer_name: str, files: Sequence[UploadedPhoto], base_url: str) -> AlbumCreated:
    try:
        result = _create_album(customer_name, files, base_url)
    except AlbumError as e:
        record_album_created(e.code)
        raise
    record_album_created("ok", result.photo_count)
    return result


def _create_album(customer_name: str, files: Sequence[UploadedPhoto], base_url: str) -> AlbumCreated:
    if not files:
        raise ValidationError("No files uploaded")
    name = validate_customer_name(customer_name)
    validate_batch(files)

    # The id is fixed before the first byte is written so the whole batch lands in one directory.
    album_id = storage.allocate_album_id()
    logger.info("Creating album %s for %s with %d upload(s)", album_id, name, len(files))
    try:
        album_dir = storage.ensure_album_dir(album_id)
        saved = storage.persist_files(album_id, files)
    except OSError as e:
        raise StorageError(f"Could not store photos: {e.strerror or e}") from e

    # Disk contents, not the list above, decide what the album holds.
    photos = storage.list_photos(album_id)
    if len(photos) != len(saved):
        logger.warning("Album %s: saved %d file(s) but found %d on disk", album_id, len(saved), len(photos))
    if not photos:
        raise EmptyAlbumError("No valid image files found in album directory")

    link = view_url(base_url, album_id)
    try:
        generate_qr_for_link(link, str(album_dir / QR_NAME))
        logger.info("QR code generated for album %s", album_id)
    except QrGenerationError as e:
        logger.error("Album %s: %s; continuing without QR image", album_id, e.message)

    build_album_zip(album_dir, photos, album_dir / ZIP_NAME)

    manifest = AlbumManifest(
        album_id=album_id,
        customer_name=name,
        created_at=datetime.now(timezone.utc).date(),
        photos=photos,
        zip=ZIP_NAME,
        qr=QR_NAME,
    )
    try:
        storage.write_manifest(album_id, manifest.model_dump_json(by_alias=True, indent=2))
    except OSError as e:
        raise StorageError(f"Could not write album data: {e.strerror or e}") from e
    logger.info("Album %s published with %d photo(s)", album_id, len(photos))

    base = album_base_url(base_url, album_id)
    return AlbumCreated(
        album_id=album_id,
        link=link,
        zip_url=base + ZIP_NAME,
        qr_url=base + QR_NAME,
        customer_name=name,
        photo_count=len(photos),
        photos=[base + p for p in photos],
    )


def load_manifest(album_id: str) -> AlbumManifest:
    if not storage.manifest_exists(album_id):
        logger.info("Album data not found for %s", album_id)
        raise NotFoundError("Album not found")
    try:
        return AlbumManifest.model_validate_json(storage.read_manifest_text(album_id))
    except (SchemaError, UnicodeDecodeError, OSError) as e:
        logger.error("Album %s has unreadable data.json: %s", album_id, e)
        raise CorruptDataError(f"Failed to fetch album data: {album_id} has corrupt data") from e


def verified_photos(album_id: str, photos: List[str]) -> List[str]:
    kept = [p for p in photos if storage.photo_exists(album_id, p)]
    missing = len(photos) - len(kept)
    if missing:
        logger.warning("Album %s: %d listed photo(s) missing on disk", album_id, missing)
    return kept


def get_album(album_id: str, base_url: str) -> AlbumView:
    try:
        view = _get_album(album_id, base_url)
    except AlbumError as e:
        record_album_viewed(e.code)
        raise
    record_album_viewed("ok")
    return view


def _get_album(album_id: str, base_url: str) -> AlbumView:
    manifest = load_manifest(album_id)

    if not storage.album_exists(album_id):
        logger.info("Album directory not found for %s", album_id)
        raise NotFoundError("Album directory not found")

    if manifest.album_id != album_id:
        logger.warning("Album %s: manifest names id %s", album_id, manifest.album_id)

    photos = verified_photos(album_id, manifest.photos)
    if not photos:
        logger.warning("No verified photos found in album %s", album_id)

    base = album_base_url(base_url, album_id)
    return AlbumView(
        album_id=album_id,
        customer_name=manifest.customer_name,
        created_at=manifest.created_at,
        photos=[base + p for p in photos],
        photo_count=len(photos),
        zip=manifest.zip,
        qr=manifest.qr,
        zip_url=base + manifest.zip,
        qr_url=base + manifest.qr,
        view_url=view_url(base_url, album_id),
    )


def album_archive(album_id: str) -> Tuple[Path, str]:
    """Path of the album's ZIP and the filename offered to the browser."""
    manifest = load_manifest(album_id)
    zip_name = manifest.zip if storage.photo_exists(album_id, manifest.zip) else None
    if not zip_name:
        raise NotFoundError("Album archive not found")
    stem = slugify(manifest.customer_name) or "album"
    return storage.album_dir(album_id) / zip_name, f"{stem}-{album_id}.zip"
