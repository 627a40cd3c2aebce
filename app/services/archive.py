import logging
import os
import zipfile
from pathlib import Path
from typing import Sequence

from app.core.errors import ArchiveError

logger = logging.getLogger(__name__)


def build_album_zip(album_dir: Path, photos: Sequence[str], zip_path: Path) -> int:
    """Bundle the listed photos into ``zip_path``; returns how many were added."""
    album_dir = Path(album_dir)
    added = 0
    try:
        with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
            for name in photos:
                src = album_dir / name
                if not src.is_file():
                    logger.warning("File not found for ZIP: %s", src)
                    continue
                zf.write(src, arcname=name)
                added += 1
        if added == 0:
            raise ArchiveError("No files were added to the ZIP archive")
    except ArchiveError:
        _discard(zip_path)
        raise
    except (OSError, zipfile.BadZipFile, ValueError) as e:
        _discard(zip_path)
        raise ArchiveError(f"ZIP creation failed: {e}") from e

    logger.info("ZIP created: %s (%d bytes, %d files)", zip_path, os.path.getsize(zip_path), added)
    return added


def _discard(zip_path: Path) -> None:
    try:
        os.remove(zip_path)
    except FileNotFoundError:
        pass
    except OSError as e:
        # the original failure is what gets reported
        logger.warning("Could not remove partial ZIP %s: %s", zip_path, e)
