"""Tests for the file store."""

import io
import os

import pytest
import pytest_asyncio

from fileuploader.services.errors import (
    FileAccessDeniedError,
    FileTooLargeError,
    StoredFileNotFoundError,
    UnsupportedFileTypeError,
)
from fileuploader.services.files import FileStore, is_image_content_type, safe_filename


class TestContentType:
    @pytest.mark.parametrize(
        "content_type",
        ["image/png", "image/jpeg", "image/jpg", "IMAGE/PNG", "image/svg+xml", "image/tif"],
    )
    def test_accepted(self, content_type):
        assert is_image_content_type(content_type) is True

    @pytest.mark.parametrize(
        "content_type",
        [None, "", "text/plain", "application/octet-stream", "image/png; charset=binary"],
    )
    def test_rejected(self, content_type):
        assert is_image_content_type(content_type) is False


class TestSafeFilename:
    def test_plain_name_kept(self):
        assert safe_filename("cat.png") == "cat.png"

    def test_directories_stripped(self):
        assert safe_filename("../../etc/passwd") == "passwd"
        assert safe_filename("..\\..\\boot.ini") == "boot.ini"

    def test_empty_name(self):
        assert safe_filename(None) == "upload"
        assert safe_filename("") == "upload"
        assert safe_filename("dir/") == "dir"


@pytest.fixture
def file_store(db_session, tmp_path):
    return FileStore(db_session, str(tmp_path / "files"), max_upload_size=16)


@pytest_asyncio.fixture
async def owner_id(credential_store):
    account = await credential_store.create_account("owner", "password1")
    return account.id


@pytest.mark.asyncio
async def test_save_and_get(file_store, owner_id):
    stored = await file_store.save_upload(owner_id, "a.png", "image/png", io.BytesIO(b"12345"))
    assert stored.size == 5
    assert stored.owner_id == owner_id

    loaded = await file_store.get(stored.id)
    assert loaded.file_path == stored.file_path
    with open(loaded.file_path, "rb") as fh:
        assert fh.read() == b"12345"


@pytest.mark.asyncio
async def test_save_strips_path_components(file_store, owner_id, tmp_path):
    stored = await file_store.save_upload(
        owner_id, "../../evil.png", "image/png", io.BytesIO(b"x")
    )
    assert stored.filename == "evil.png"
    assert os.path.dirname(stored.file_path) == str(tmp_path / "files")


@pytest.mark.asyncio
async def test_oversized_upload_leaves_nothing_behind(file_store, owner_id, tmp_path):
    with pytest.raises(FileTooLargeError):
        await file_store.save_upload(owner_id, "big.png", "image/png", io.BytesIO(b"x" * 17))
    assert os.listdir(tmp_path / "files") == []


@pytest.mark.asyncio
async def test_non_image_rejected(file_store, owner_id):
    with pytest.raises(UnsupportedFileTypeError):
        await file_store.save_upload(owner_id, "a.txt", "text/plain", io.BytesIO(b"x"))


@pytest.mark.asyncio
async def test_get_owned(file_store, owner_id):
    stored = await file_store.save_upload(owner_id, "a.png", "image/png", io.BytesIO(b"x"))

    assert (await file_store.get_owned(stored.id, owner_id)).id == stored.id
    with pytest.raises(FileAccessDeniedError):
        await file_store.get_owned(stored.id, owner_id + 1)


@pytest.mark.asyncio
async def test_foreign_owner_denied_before_disk_check(file_store, owner_id):
    stored = await file_store.save_upload(owner_id, "a.png", "image/png", io.BytesIO(b"x"))
    os.remove(stored.file_path)

    with pytest.raises(FileAccessDeniedError):
        await file_store.get_owned(stored.id, owner_id + 1)
    with pytest.raises(StoredFileNotFoundError):
        await file_store.get_owned(stored.id, owner_id)


@pytest.mark.asyncio
async def test_get_missing(file_store):
    with pytest.raises(StoredFileNotFoundError):
        await file_store.get(42)


@pytest.fixture
def frozen_time(monkeypatch):
    """Pin the upload timestamp so uploads share the same second."""
    from fileuploader.services import files

    monkeypatch.setattr(files.time, "time", lambda: 1_700_000_000.0)


@pytest.mark.asyncio
async def test_same_name_same_second_kept_apart(file_store, owner_id, frozen_time):
    first = await file_store.save_upload(owner_id, "a.png", "image/png", io.BytesIO(b"first"))
    second = await file_store.save_upload(owner_id, "a.png", "image/png", io.BytesIO(b"second"))

    assert first.file_path != second.file_path
    with open((await file_store.get(first.id)).file_path, "rb") as fh:
        assert fh.read() == b"first"
    with open((await file_store.get(second.id)).file_path, "rb") as fh:
        assert fh.read() == b"second"


@pytest.mark.asyncio
async def test_failed_upload_does_not_remove_earlier_file(
    file_store, owner_id, frozen_time, tmp_path
):
    first = await file_store.save_upload(owner_id, "a.png", "image/png", io.BytesIO(b"first"))

    with pytest.raises(FileTooLargeError):
        await file_store.save_upload(owner_id, "a.png", "image/png", io.BytesIO(b"x" * 17))

    loaded = await file_store.get(first.id)
    with open(loaded.file_path, "rb") as fh:
        assert fh.read() == b"first"
    assert os.listdir(tmp_path / "files") == [os.path.basename(first.file_path)]


@pytest.mark.asyncio
async def test_existing_path_never_truncated(file_store, owner_id, frozen_time, monkeypatch):
    from fileuploader.services import files

    first = await file_store.save_upload(owner_id, "a.png", "image/png", io.BytesIO(b"first"))
    # Force the random component to repeat so the path collides
    suffix = os.path.basename(first.file_path).split("_")[3]
    monkeypatch.setattr(files.secrets, "token_hex", lambda n: suffix)

    with pytest.raises(FileExistsError):
        await file_store.save_upload(owner_id, "a.png", "image/png", io.BytesIO(b"other"))

    with open(first.file_path, "rb") as fh:
        assert fh.read() == b"first"
