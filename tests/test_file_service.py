"""Tests for uploads, listings and folders."""

import pytest
import pytest_asyncio

from common.constants import ROOT_FOLDER_ID
from common.types import FileType, Provider
from cloudfire.exceptions import AccountDisabledError, NotFoundError, StoreUnavailableError, ValidationError
from cloudfire.repositories import StorageConfig
from cloudfire.utils import build_storage_key, classify_file_type


@pytest.mark.parametrize("mime_type,expected", [
    ("image/png", FileType.IMAGE),
    ("video/mp4", FileType.VIDEO),
    ("audio/mpeg", FileType.AUDIO),
    ("application/pdf", FileType.DOCUMENT),
    ("text/plain", FileType.DOCUMENT),
    ("application/vnd.openxmlformats-officedocument.wordprocessingml.document", FileType.DOCUMENT),
    ("application/zip", FileType.ARCHIVE),
    ("application/x-7z-compressed", FileType.ARCHIVE),
    ("text/x-zip", FileType.DOCUMENT),
    ("application/octet-stream", FileType.UNKNOWN),
    ("", FileType.UNKNOWN),
])
def test_classify_file_type(mime_type, expected):
    assert classify_file_type(mime_type) == expected


def test_build_storage_key_defaults():
    assert build_storage_key(None, "a.txt") == "public/content/a.txt"
    assert build_storage_key("  ", "a.txt") == "public/content/a.txt"
    assert build_storage_key("media/", "a.txt") == "media/a.txt"


@pytest_asyncio.fixture
async def alice(engine):
    return await engine.register("alice", "secret")


class TestUpload:
    @pytest.mark.asyncio
    async def test_upload_records_metadata_and_charges_quota(self, engine, alice):
        uploaded = await engine.upload(alice.user_id, ROOT_FOLDER_ID, "photo.png", "image/png", 2048, b"png")

        assert uploaded.file_type == FileType.IMAGE
        assert uploaded.storage_key == "public/content/photo.png"
        assert uploaded.is_shared is False
        assert uploaded.is_trashed is False
        assert await engine.get_content(uploaded.file_id) == b"png"
        used, _ = await engine.get_usage(alice.user_id)
        assert used == 2048

    @pytest.mark.asyncio
    async def test_storage_key_uses_configured_root(self, engine, alice):
        await engine.put_config(StorageConfig(provider=Provider.AWS, root_path="bucket/files"))

        uploaded = await engine.upload(alice.user_id, ROOT_FOLDER_ID, "a.txt", "text/plain", 1)

        assert uploaded.storage_key == "bucket/files/a.txt"

    @pytest.mark.asyncio
    async def test_empty_mime_type_defaults(self, engine, alice):
        uploaded = await engine.upload(alice.user_id, ROOT_FOLDER_ID, "blob", "", 1)
        assert uploaded.mime_type == "application/octet-stream"
        assert uploaded.file_type == FileType.UNKNOWN

    @pytest.mark.asyncio
    async def test_upload_over_limit_is_accepted(self, engine, alice):
        await engine.edit_user("alice", storage_limit=10)

        await engine.upload(alice.user_id, ROOT_FOLDER_ID, "big.bin", "", 50)

        used, limit = await engine.get_usage(alice.user_id)
        assert (used, limit) == (50, 10)

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, engine, alice):
        with pytest.raises(ValidationError):
            await engine.upload(alice.user_id, ROOT_FOLDER_ID, "a.txt", "text/plain", -1)
        with pytest.raises(ValidationError):
            await engine.upload(alice.user_id, ROOT_FOLDER_ID, "   ", "text/plain", 1)

    @pytest.mark.asyncio
    async def test_unknown_owner(self, engine):
        with pytest.raises(NotFoundError):
            await engine.upload("ghost", ROOT_FOLDER_ID, "a.txt", "text/plain", 1)

    @pytest.mark.asyncio
    async def test_disabled_owner(self, engine, alice):
        await engine.edit_user("alice", is_active=False)
        with pytest.raises(AccountDisabledError):
            await engine.upload(alice.user_id, ROOT_FOLDER_ID, "a.txt", "text/plain", 1)

    @pytest.mark.asyncio
    async def test_unknown_parent_folder(self, engine, alice):
        with pytest.raises(NotFoundError):
            await engine.upload(alice.user_id, "missing-folder", "a.txt", "text/plain", 1)

    @pytest.mark.asyncio
    async def test_failed_write_reverts_quota(self, engine, alice, monkeypatch):
        async def failing_create(cloud_file, content):
            raise StoreUnavailableError("Storage operation failed")

        monkeypatch.setattr(engine.file_service.file_repo, "create_file", failing_create)

        with pytest.raises(StoreUnavailableError):
            await engine.upload(alice.user_id, ROOT_FOLDER_ID, "a.txt", "text/plain", 500)

        used, _ = await engine.get_usage(alice.user_id)
        assert used == 0
        assert await engine.list_files(alice.user_id) == []


class TestListing:
    @pytest.mark.asyncio
    async def test_listing_is_scoped_to_owner_and_parent(self, engine, alice):
        bob = await engine.register("bob", "secret")
        docs = await engine.create_folder(alice.user_id, "docs")
        await engine.upload(alice.user_id, ROOT_FOLDER_ID, "a.txt", "text/plain", 1)
        await engine.upload(alice.user_id, docs.folder_id, "b.txt", "text/plain", 1)
        await engine.upload(bob.user_id, ROOT_FOLDER_ID, "c.txt", "text/plain", 1)

        root_listing = await engine.list(alice.user_id)
        docs_listing = await engine.list(alice.user_id, docs.folder_id)

        assert [f.name for f in root_listing.files] == ["a.txt"]
        assert [f.name for f in root_listing.folders] == ["docs"]
        assert [f.name for f in docs_listing.files] == ["b.txt"]
        assert docs_listing.folders == []

    @pytest.mark.asyncio
    async def test_listing_keeps_upload_order(self, engine, alice):
        for name in ["z.txt", "a.txt", "m.txt"]:
            await engine.upload(alice.user_id, ROOT_FOLDER_ID, name, "text/plain", 1)

        files = await engine.list_files(alice.user_id)
        assert [f.name for f in files] == ["z.txt", "a.txt", "m.txt"]

    @pytest.mark.asyncio
    async def test_list_all_files_spans_owners(self, engine, alice):
        bob = await engine.register("bob", "secret")
        await engine.upload(alice.user_id, ROOT_FOLDER_ID, "a.txt", "text/plain", 1)
        await engine.upload(bob.user_id, ROOT_FOLDER_ID, "b.txt", "text/plain", 1)

        assert len(await engine.list_all_files()) == 2


class TestFolders:
    @pytest.mark.asyncio
    async def test_create_nested_folder(self, engine, alice):
        parent = await engine.create_folder(alice.user_id, "docs")
        child = await engine.create_folder(alice.user_id, "2024", parent.folder_id)

        assert child.parent_id == parent.folder_id
        assert [f.name for f in await engine.list_folders(alice.user_id, parent.folder_id)] == ["2024"]

    @pytest.mark.asyncio
    async def test_folder_of_other_user_is_not_a_valid_parent(self, engine, alice):
        bob = await engine.register("bob", "secret")
        bobs = await engine.create_folder(bob.user_id, "private")

        with pytest.raises(NotFoundError):
            await engine.create_folder(alice.user_id, "sneaky", bobs.folder_id)

    @pytest.mark.asyncio
    async def test_blank_folder_name(self, engine, alice):
        with pytest.raises(ValidationError):
            await engine.create_folder(alice.user_id, "")
