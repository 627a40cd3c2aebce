"""
Filesystem layout shared by the album writer and reader.

    <STORAGE_DIR>/albums/<albumId>/
        photo_<ms>_<seq>_<rand>.<ext>   original images
        album.zip
        qr.png
        data.json

The directory is the album; there is no other index.
"""

import logging
import os
import re
import secrets
import shutil
import tempfile
import time
from pathlib import Path
from typing import Iterable, List

from app.config import settings
from app.core.errors import NotFoundError
from app.schemas.album import UploadedPhoto

logger = logging.getLogger(__name__)

MANIFEST_NAME = "data.json"
ZIP_NAME = "album.zip"
QR_NAME = "qr.png"

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")
ARTIFACT_NAMES = {MANIFEST_NAME, ZIP_NAME, QR_NAME}

ALBUM_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
ALBUM_ID_BYTES = 6  # 8 url-safe characters
COPY_CHUNK = 1024 * 1024


def is_image_name(name: str) -> bool:
    return name.lower().endswith(IMAGE_EXTENSIONS)


class AlbumStorage:
    def __init__(self, root: Path):
        self.root = Path(root)

    def album_dir(self, album_id: str) -> Path:
        if not ALBUM_ID_RE.match(album_id or ""):
            raise NotFoundError("Album not found")
        return self.root / album_id

    def ensure_album_dir(self, album_id: str) -> Path:
        folder = self.album_dir(album_id)
        folder.mkdir(parents=True, exist_ok=True)
        return folder

    def allocate_album_id(self) -> str:
        """Pick a fresh id whose directory does not exist yet."""
        while True:
            album_id = secrets.token_urlsafe(ALBUM_ID_BYTES)
            if not (self.root / album_id).exists():
                logger.info("Allocated album id %s", album_id)
                return album_id
            logger.warning("Album id %s already in use, drawing another", album_id)

    def persist_files(self, album_id: str, files: Iterable[UploadedPhoto]) -> List[str]:
        folder = self.ensure_album_dir(album_id)
        saved = []
        for seq, f in enumerate(files):
            ext = os.path.splitext(f.original_name)[1].lower()
            f.source.seek(0)
            while True:
                # <ms>_<seq> keeps upload order when the directory is listed by name
                filename = f"photo_{time.time_ns() // 1_000_000}_{seq:03d}_{secrets.token_hex(3)}{ext}"
                try:
                    # exclusive create; a clash just draws a new suffix
                    with open(folder / filename, "xb") as out:
                        shutil.copyfileobj(f.source, out, COPY_CHUNK)
                    break
                except FileExistsError:
                    continue
            logger.info("Saved %s (%d bytes) as %s/%s", f.original_name, f.size, album_id, filename)
            saved.append(filename)
        return saved

    def list_photos(self, album_id: str) -> List[str]:
        folder = self.album_dir(album_id)
        if not folder.is_dir():
            return []
        return sorted(
            p.name for p in folder.iterdir()
            if p.is_file() and is_image_name(p.name) and p.name not in ARTIFACT_NAMES
        )

    def photo_exists(self, album_id: str, name: str) -> bool:
        if not name or Path(name).name != name or name in (".", ".."):
            return False
        return (self.album_dir(album_id) / name).is_file()

    def album_exists(self, album_id: str) -> bool:
        return self.album_dir(album_id).is_dir()

    def manifest_path(self, album_id: str) -> Path:
        return self.album_dir(album_id) / MANIFEST_NAME

    def manifest_exists(self, album_id: str) -> bool:
        return self.manifest_path(album_id).is_file()

    def read_manifest_text(self, album_id: str) -> str:
        return self.manifest_path(album_id).read_text(encoding="utf-8")

    def write_manifest(self, album_id: str, payload: str) -> Path:
        folder = self.album_dir(album_id)
        target = folder / MANIFEST_NAME
        fd, tmp = tempfile.mkstemp(dir=folder, prefix=".data-", suffix=".json.tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp, target)
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise
        return target


storage = AlbumStorage(settings.albums_dir)
