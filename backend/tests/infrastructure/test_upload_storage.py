"""Short Upload Storage — disk behaviour of store_short and the orphan sweep.

Tests:
    - A stored file lands under the shorts dir with the generated name
    - Overflowing the byte limit mid-copy leaves no file behind
    - Concurrent first uploads all succeed (directory creation race)
    - A name collision draws a new name and never overwrites
"""

import io
import os
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

import app.infrastructure.upload_storage as storage
from app.core.errors import FileTooLargeError, UploadError
from app.infrastructure.upload_storage import (
    discard_stored_file,
    ensure_upload_dir,
    list_stored_files,
    remove_orphans,
    store_short,
)


def test_store_short_writes_file(tmp_path):
    directory = tmp_path / "uploads" / "shorts"
    stored = store_short(
        io.BytesIO(b"fake-mp4-bytes"), directory, "u1", "Clip.MP4", "video/mp4",
    )
    assert stored.stored_path.parent == directory
    assert stored.stored_path.read_bytes() == b"fake-mp4-bytes"
    assert stored.size_bytes == len(b"fake-mp4-bytes")
    assert stored.filename.startswith("short-u1-")
    assert stored.filename.endswith(".mp4")
    assert stored.public_url == f"/uploads/shorts/{stored.filename}"


def test_overflow_during_copy_leaves_nothing(tmp_path):
    with pytest.raises(FileTooLargeError):
        store_short(
            io.BytesIO(b"x" * 20), tmp_path, "u1", "a.mp4", "video/mp4",
            max_bytes=10,
        )
    assert list(tmp_path.iterdir()) == []


def test_write_at_exact_limit_is_kept(tmp_path):
    stored = store_short(
        io.BytesIO(b"x" * 10), tmp_path, "u1", "a.mp4", "video/mp4",
        max_bytes=10,
    )
    assert stored.size_bytes == 10


def test_ensure_upload_dir_is_idempotent(tmp_path):
    directory = tmp_path / "a" / "b"
    ensure_upload_dir(directory)
    ensure_upload_dir(directory)
    assert directory.is_dir()


def test_concurrent_first_uploads_all_succeed(tmp_path):
    directory = tmp_path / "uploads" / "shorts"

    def upload(i):
        return store_short(
            io.BytesIO(f"clip-{i}".encode()), directory, "u1", "a.mp4", "video/mp4",
        )

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(upload, range(16)))

    names = {r.filename for r in results}
    assert len(names) == 16
    assert set(os.listdir(directory)) == names


def test_collision_draws_new_name(tmp_path, monkeypatch):
    (tmp_path / "taken.mp4").write_bytes(b"original")
    names = iter(["taken.mp4", "fresh.mp4"])
    monkeypatch.setattr(storage, "build_short_filename", lambda *a, **k: next(names))

    stored = store_short(io.BytesIO(b"new"), tmp_path, "u1", "a.mp4", "video/mp4")

    assert stored.filename == "fresh.mp4"
    assert (tmp_path / "taken.mp4").read_bytes() == b"original"


def test_persistent_collision_fails_without_overwrite(tmp_path, monkeypatch):
    (tmp_path / "taken.mp4").write_bytes(b"original")
    monkeypatch.setattr(storage, "build_short_filename", lambda *a, **k: "taken.mp4")

    with pytest.raises(UploadError):
        store_short(io.BytesIO(b"new"), tmp_path, "u1", "a.mp4", "video/mp4")
    assert (tmp_path / "taken.mp4").read_bytes() == b"original"


def test_discard_missing_file_returns_false(tmp_path):
    assert discard_stored_file(tmp_path / "nope.mp4") is False


def test_list_stored_files_of_missing_dir_is_empty(tmp_path):
    assert list_stored_files(tmp_path / "missing") == {}


def test_remove_orphans_respects_references_and_age(tmp_path):
    for name in ("orphan.mp4", "kept.mp4", "fresh.mp4"):
        (tmp_path / name).write_bytes(b"x")
    old = time.time() - 7200
    os.utime(tmp_path / "orphan.mp4", (old, old))
    os.utime(tmp_path / "kept.mp4", (old, old))

    removed = remove_orphans(tmp_path, {"kept.mp4"}, min_age_seconds=3600)

    assert removed == ["orphan.mp4"]
    assert sorted(os.listdir(tmp_path)) == ["fresh.mp4", "kept.mp4"]


def test_upload_dir_writable_creates_missing_dir(tmp_path):
    directory = tmp_path / "uploads" / "shorts"
    assert storage.upload_dir_writable(directory)
    assert directory.is_dir()


def test_upload_dir_under_a_file_is_not_writable(tmp_path):
    (tmp_path / "uploads").write_bytes(b"")
    assert not storage.upload_dir_writable(tmp_path / "uploads" / "shorts")
