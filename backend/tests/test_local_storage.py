"""
Unit tests for the local filesystem storage provider.
"""
import io
import os

import pytest

from photon.core.exceptions import StorageError
from photon.services.storage_interface import UploadedContent, discard_file, spool_content, DeleteOutcome
from photon.services.storage_providers.local_service import LocalStorageService


class BrokenStream(io.RawIOBase):
    def readable(self):
        return True

    def readinto(self, b):
        raise OSError("stream closed by client")


def test_store_creates_missing_root(local_storage, upload_dir):
    """Storing into a root that doesn't exist yet creates it and writes the file."""
    assert not upload_dir.exists()

    reference = local_storage.store(UploadedContent.from_bytes(b"jpeg-bytes", "cat.jpg", "image/jpeg"))

    assert upload_dir.is_dir()
    assert (upload_dir / reference).read_bytes() == b"jpeg-bytes"
    assert reference.endswith("_cat.jpg")


def test_store_names_are_unique(local_storage):
    first = local_storage.store(UploadedContent.from_bytes(b"a", "same.png"))
    second = local_storage.store(UploadedContent.from_bytes(b"b", "same.png"))

    assert first != second


def test_store_strips_directories_from_original_name(local_storage, upload_dir):
    reference = local_storage.store(UploadedContent.from_bytes(b"x", "../../etc/passwd"))

    assert "/" not in reference
    assert (upload_dir / reference).exists()


def test_store_unreadable_stream_raises_and_leaves_nothing(local_storage, upload_dir):
    content = UploadedContent(BrokenStream(), "broken.jpg", "image/jpeg", 10)

    with pytest.raises(StorageError):
        local_storage.store(content)

    assert list(upload_dir.iterdir()) == []


def test_store_unwritable_root_raises(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way")
    storage = LocalStorageService(upload_dir=str(blocker / "uploads"))

    with pytest.raises(StorageError):
        storage.store(UploadedContent.from_bytes(b"x", "a.jpg"))


def test_delete_removes_file(local_storage, upload_dir):
    reference = local_storage.store(UploadedContent.from_bytes(b"x", "a.jpg"))

    local_storage.delete(reference)

    assert not (upload_dir / reference).exists()


def test_delete_missing_or_empty_is_noop(local_storage):
    local_storage.delete("")
    local_storage.delete(None)
    local_storage.delete("never-stored.jpg")


def test_delete_outside_root_is_rejected(local_storage):
    with pytest.raises(StorageError):
        local_storage.delete("../outside.jpg")


def test_delete_invalid_reference_raises_storage_error(local_storage):
    with pytest.raises(StorageError):
        local_storage.delete("bad\x00name")

    failed = discard_file(local_storage, "bad\x00name")
    assert failed.outcome == DeleteOutcome.FAILED


def test_store_invalid_filename_raises_storage_error(local_storage, upload_dir):
    with pytest.raises(StorageError):
        local_storage.store(UploadedContent.from_bytes(b"x", "a\x00.jpg"))

    assert list(upload_dir.iterdir()) == []


def test_url_for_is_local_path(local_storage):
    assert local_storage.url_for("abc_cat.jpg") == "/uploads/abc_cat.jpg"


def test_url_for_escapes_reference(local_storage):
    assert local_storage.url_for("a b#c.jpg") == "/uploads/a%20b%23c.jpg"


def test_url_prefix_trailing_slash(tmp_path):
    storage = LocalStorageService(upload_dir=str(tmp_path), url_prefix="/media/")
    assert storage.url_for("x.jpg") == "/media/x.jpg"


def test_list_files(local_storage):
    assert local_storage.list_files() == []

    reference = local_storage.store(UploadedContent.from_bytes(b"12345", "a.jpg"))

    files = local_storage.list_files()
    assert [f["file_id"] for f in files] == [reference]
    assert files[0]["size"] == 5


def test_discard_file_reports_outcomes(local_storage):
    reference = local_storage.store(UploadedContent.from_bytes(b"x", "a.jpg"))

    assert discard_file(local_storage, reference).outcome == DeleteOutcome.DELETED
    assert discard_file(local_storage, "").outcome == DeleteOutcome.SKIPPED

    failed = discard_file(local_storage, "../escape.jpg")
    assert failed.outcome == DeleteOutcome.FAILED
    assert not failed.ok
    assert failed.error


def test_uploaded_content_size_measured_from_stream():
    stream = io.BytesIO(b"0123456789")
    stream.seek(4)
    content = UploadedContent(stream, "a.jpg")

    assert content.byte_size() == 6
    assert stream.tell() == 4
    assert not content.is_empty()
    assert UploadedContent.from_bytes(b"", "empty.jpg").is_empty()


class OneShot(io.RawIOBase):
    def __init__(self, data):
        self._data = io.BytesIO(data)

    def readable(self):
        return True

    def readinto(self, b):
        chunk = self._data.read(len(b))
        b[:len(chunk)] = chunk
        return len(chunk)


def test_uploaded_content_size_unknown_for_unseekable_stream():
    content = UploadedContent(OneShot(b"abc"), "a.jpg")

    assert content.byte_size() is None
    assert not content.is_empty()


def test_spool_content_measures_and_rewinds():
    spooled = spool_content(UploadedContent(OneShot(b"abcdef"), "a.jpg", "image/jpeg"))

    try:
        assert spooled.size == 6
        assert spooled.content_type == "image/jpeg"
        assert spooled.stream.read() == b"abcdef"
    finally:
        spooled.stream.close()


def test_spool_content_read_failure_raises_storage_error():
    with pytest.raises(StorageError):
        spool_content(UploadedContent(BrokenStream(), "a.jpg"))
