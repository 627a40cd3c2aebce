# tests/test_albums.py
"""Album writer/reader consistency"""

import json
import zipfile
from datetime import date, datetime, timezone

import pytest

from app.config import settings
from app.core.errors import (
    ArchiveError,
    CorruptDataError,
    EmptyAlbumError,
    FileTooLargeError,
    NotFoundError,
    QrGenerationError,
    StorageError,
    ValidationError,
)
from app.services import albums
from app.services.albums import album_archive, create_album, get_album

BASE_URL = "http://photos.test"


def _manifest(albums_root, album_id):
    return json.loads((albums_root / album_id / "data.json").read_text())


def test_create_album_writes_files_zip_qr_and_manifest(albums_root, make_photo):
    files = [make_photo(f"IMG_{i}.JPG") for i in range(3)]
    result = create_album("Jane", files, BASE_URL)

    album_dir = albums_root / result.album_id
    manifest = _manifest(albums_root, result.album_id)
    on_disk = sorted(p.name for p in album_dir.iterdir() if p.name.startswith("photo_"))

    assert set(manifest) == {"albumId", "customerName", "createdAt", "photos", "zip", "qr"}
    assert manifest["albumId"] == result.album_id
    assert manifest["customerName"] == "Jane"
    assert manifest["createdAt"] == datetime.now(timezone.utc).date().isoformat()
    assert manifest["photos"] == on_disk
    assert len(on_disk) == 3
    assert manifest["zip"] == "album.zip"
    assert manifest["qr"] == "qr.png"
    assert (album_dir / "qr.png").is_file()

    with zipfile.ZipFile(album_dir / "album.zip") as zf:
        assert sorted(zf.namelist()) == on_disk


def test_created_at_is_the_utc_date(albums_root, make_photo, monkeypatch):
    class LateEvening(datetime):
        @classmethod
        def now(cls, tz=None):
            return datetime(2024, 5, 1, 23, 30, tzinfo=timezone.utc).astimezone(tz)

    monkeypatch.setattr(albums, "datetime", LateEvening)
    result = create_album("Jane", [make_photo()], BASE_URL)
    assert _manifest(albums_root, result.album_id)["createdAt"] == "2024-05-01"


def test_stored_names_never_use_client_filename(albums_root, make_photo):
    result = create_album("Jane", [make_photo("../../evil.png", "image/png")], BASE_URL)
    names = _manifest(albums_root, result.album_id)["photos"]
    assert len(names) == 1
    assert names[0].startswith("photo_")
    assert names[0].endswith(".png")
    assert "evil" not in names[0]
    assert not (albums_root.parent / "evil.png").exists()


def test_create_album_response_urls(albums_root, make_photo):
    result = create_album("Jane", [make_photo()], BASE_URL)
    base = f"{BASE_URL}/albums/{result.album_id}/"
    assert result.success is True
    assert result.link == f"{BASE_URL}/view/{result.album_id}"
    assert result.zip_url == base + "album.zip"
    assert result.qr_url == base + "qr.png"
    assert result.photo_count == 1
    assert result.photos[0].startswith(base + "photo_")


def test_each_request_gets_its_own_directory(albums_root, make_photo):
    a = create_album("Jane", [make_photo(), make_photo("b.png", "image/png")], BASE_URL)
    b = create_album("Joe", [make_photo()], BASE_URL)
    assert a.album_id != b.album_id
    assert sorted(p.name for p in albums_root.iterdir()) == sorted([a.album_id, b.album_id])
    assert a.photo_count == 2
    assert b.photo_count == 1


def test_no_files_fails_without_side_effects(albums_root):
    with pytest.raises(ValidationError):
        create_album("Jane", [], BASE_URL)
    assert list(albums_root.iterdir()) == []


@pytest.mark.parametrize("name", ["", "   ", None])
def test_blank_customer_name_fails_without_side_effects(albums_root, make_photo, name):
    with pytest.raises(ValidationError):
        create_album(name, [make_photo()], BASE_URL)
    assert list(albums_root.iterdir()) == []


@pytest.mark.parametrize(
    "filename,content_type",
    [
        ("notes.txt", "text/plain"),
        ("notes.txt", "image/jpeg"),
        ("photo.jpg", "text/plain"),
        ("photo.bmp", "image/bmp"),
        ("photo", "image/png"),
    ],
)
def test_disallowed_file_rejects_whole_upload(albums_root, make_photo, filename, content_type):
    files = [make_photo(), make_photo(filename, content_type)]
    with pytest.raises(ValidationError):
        create_album("Jane", files, BASE_URL)
    assert list(albums_root.iterdir()) == []


def test_oversized_file_rejected(albums_root, make_photo, monkeypatch):
    monkeypatch.setattr(settings, "MAX_FILE_SIZE", 16)
    with pytest.raises(FileTooLargeError):
        create_album("Jane", [make_photo(data=b"x" * 17)], BASE_URL)
    assert list(albums_root.iterdir()) == []


def test_too_many_files_rejected(albums_root, make_photo, monkeypatch):
    monkeypatch.setattr(settings, "MAX_FILES_PER_UPLOAD", 2)
    with pytest.raises(ValidationError):
        create_album("Jane", [make_photo() for _ in range(3)], BASE_URL)


def test_zip_failure_publishes_nothing(albums_root, make_photo, monkeypatch):
    def broken_zip(album_dir, photos, zip_path):
        raise ArchiveError("disk full")

    monkeypatch.setattr(albums, "build_album_zip", broken_zip)
    with pytest.raises(ArchiveError):
        create_album("Jane", [make_photo()], BASE_URL)
    assert list(albums_root.glob("*/data.json")) == []


def test_qr_failure_still_publishes_album(albums_root, make_photo, monkeypatch):
    def broken_qr(link, qr_path):
        raise QrGenerationError("encoder exploded")

    monkeypatch.setattr(albums, "generate_qr_for_link", broken_qr)
    result = create_album("Jane", [make_photo()], BASE_URL)

    assert (albums_root / result.album_id / "data.json").is_file()
    assert not (albums_root / result.album_id / "qr.png").exists()

    view = get_album(result.album_id, BASE_URL)
    assert view.photo_count == 1
    assert view.qr_url == f"{BASE_URL}/albums/{result.album_id}/qr.png"


def test_nothing_landed_on_disk_is_empty_album(albums_root, make_photo, monkeypatch):
    from app.services.storage import storage

    monkeypatch.setattr(storage, "persist_files", lambda album_id, files: [])
    with pytest.raises(EmptyAlbumError):
        create_album("Jane", [make_photo()], BASE_URL)
    assert list(albums_root.glob("*/data.json")) == []


def test_disk_error_is_storage_error_and_publishes_nothing(albums_root, make_photo, monkeypatch):
    from app.services.storage import storage

    def full_disk(album_id, files):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(storage, "persist_files", full_disk)
    with pytest.raises(StorageError) as exc:
        create_album("Jane", [make_photo()], BASE_URL)
    assert exc.value.code == "storage_error"
    assert not list(albums_root.glob("*/data.json"))


def test_round_trip(albums_root, make_photo):
    created = create_album("Jane", [make_photo(f"{i}.jpg") for i in range(3)], BASE_URL)
    view = get_album(created.album_id, BASE_URL)

    base = f"{BASE_URL}/albums/{created.album_id}/"
    assert view.customer_name == "Jane"
    assert view.photo_count == 3
    assert view.photos == created.photos
    assert view.zip_url == base + "album.zip"
    assert view.qr_url == base + "qr.png"
    assert view.view_url == f"{BASE_URL}/view/{created.album_id}"


def test_read_unknown_album_is_not_found(albums_root):
    with pytest.raises(NotFoundError):
        get_album("nope1234", BASE_URL)


@pytest.mark.parametrize("album_id", ["..", "../albums", "a/b", "", "x" * 65])
def test_read_rejects_unsafe_ids(albums_root, album_id):
    with pytest.raises(NotFoundError):
        get_album(album_id, BASE_URL)


def _write_manifest(albums_root, album_id, photos, existing):
    album_dir = albums_root / album_id
    album_dir.mkdir()
    for name in existing:
        (album_dir / name).write_bytes(b"img")
    (album_dir / "data.json").write_text(json.dumps({
        "albumId": album_id,
        "customerName": "Jane",
        "createdAt": "2024-05-01",
        "photos": photos,
        "zip": "album.zip",
        "qr": "qr.png",
    }))


def test_reader_drops_photos_missing_on_disk(albums_root):
    _write_manifest(albums_root, "abc123", ["a.jpg", "b.jpg"], existing=["a.jpg"])
    view = get_album("abc123", BASE_URL)
    assert view.photos == [f"{BASE_URL}/albums/abc123/a.jpg"]
    assert view.photo_count == 1


def test_reader_keeps_manifest_order_and_ignores_unlisted_files(albums_root):
    _write_manifest(albums_root, "ord3r", ["c.png", "a.jpg", "b.gif"], existing=["a.jpg", "b.gif", "c.png", "z.webp"])
    view = get_album("ord3r", BASE_URL)
    assert [u.rsplit("/", 1)[1] for u in view.photos] == ["c.png", "a.jpg", "b.gif"]


def test_reader_ignores_path_like_manifest_entries(albums_root):
    _write_manifest(albums_root, "trav", ["../secret.jpg", "a.jpg"], existing=["a.jpg"])
    (albums_root / "secret.jpg").write_bytes(b"img")
    view = get_album("trav", BASE_URL)
    assert view.photo_count == 1


def test_reader_all_photos_gone_is_still_a_result(albums_root):
    _write_manifest(albums_root, "gone", ["a.jpg"], existing=[])
    view = get_album("gone", BASE_URL)
    assert view.photos == []
    assert view.photo_count == 0
    assert view.customer_name == "Jane"
    assert view.created_at == date(2024, 5, 1)


@pytest.mark.parametrize("payload", ["{not json", "[]", '{"albumId": "x"}', ""])
def test_corrupt_manifest(albums_root, payload):
    album_dir = albums_root / "bad1"
    album_dir.mkdir()
    (album_dir / "data.json").write_text(payload)
    with pytest.raises(CorruptDataError):
        get_album("bad1", BASE_URL)


def test_base_url_trailing_slash_is_normalised(albums_root):
    _write_manifest(albums_root, "slash", ["a.jpg"], existing=["a.jpg"])
    view = get_album("slash", BASE_URL + "/")
    assert view.photos == [f"{BASE_URL}/albums/slash/a.jpg"]
    assert view.view_url == f"{BASE_URL}/view/slash"


def test_album_archive_download_name(albums_root, make_photo):
    created = create_album("Jane Doe", [make_photo()], BASE_URL)
    path, filename = album_archive(created.album_id)
    assert path == albums_root / created.album_id / "album.zip"
    assert filename == f"jane-doe-{created.album_id}.zip"


def test_album_archive_missing_zip(albums_root):
    _write_manifest(albums_root, "nozip", ["a.jpg"], existing=["a.jpg"])
    with pytest.raises(NotFoundError):
        album_archive("nozip")
