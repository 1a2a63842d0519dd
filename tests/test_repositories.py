"""Integration tests for database repositories."""

import sqlite3
from datetime import timedelta

import pytest

from common.constants import FREE_STORAGE_LIMIT, ROOT_FOLDER_ID
from common.types import FileType, Provider
from cloudfire.repositories import (
    CloudFile,
    ConfigRepository,
    FileRepository,
    Folder,
    FolderRepository,
    StorageConfig,
    User,
    UserRepository,
)
from cloudfire.utils import utcnow


def make_user(user_id="user-1", username="alice", storage_used=0) -> User:
    return User(
        user_id=user_id,
        username=username,
        password_hash="hash",
        email=f"{username}@example.com",
        role="user",
        plan="free",
        storage_used=storage_used,
        storage_limit=FREE_STORAGE_LIMIT,
        is_active=True,
        created_at=utcnow(),
    )


def make_file(file_id="file-1", owner_id="user-1", size=100, file_type=FileType.DOCUMENT, parent_id=ROOT_FOLDER_ID) -> CloudFile:
    return CloudFile(
        file_id=file_id,
        name=f"{file_id}.txt",
        size=size,
        file_type=file_type,
        parent_id=parent_id,
        owner_id=owner_id,
        mime_type="text/plain",
        storage_key=f"public/content/{file_id}.txt",
        created_at=utcnow(),
    )


class TestUserRepository:
    @pytest.mark.asyncio
    async def test_create_and_fetch(self, test_db):
        await UserRepository.create_user(make_user())

        by_name = await UserRepository.get_by_username("alice")
        by_id = await UserRepository.get_by_user_id("user-1")

        assert by_name is not None and by_id is not None
        assert by_name.user_id == "user-1"
        assert by_id.email == "alice@example.com"
        assert by_id.is_active is True
        assert by_id.api_key is None

    @pytest.mark.asyncio
    async def test_duplicate_username_raises_integrity_error(self, test_db):
        await UserRepository.create_user(make_user())
        with pytest.raises(sqlite3.IntegrityError):
            await UserRepository.create_user(make_user(user_id="user-2"))

    @pytest.mark.asyncio
    async def test_get_missing_user(self, test_db):
        assert await UserRepository.get_by_username("nobody") is None
        assert await UserRepository.get_by_user_id("nobody") is None

    @pytest.mark.asyncio
    async def test_api_key_lookup(self, test_db):
        await UserRepository.create_user(make_user())
        await UserRepository.update_api_key("user-1", "cf_key")

        user = await UserRepository.get_by_api_key("cf_key")
        assert user is not None
        assert user.username == "alice"
        assert await UserRepository.get_by_api_key("cf_other") is None

    @pytest.mark.asyncio
    async def test_increment_storage_used(self, test_db):
        await UserRepository.create_user(make_user(storage_used=10))

        assert await UserRepository.increment_storage_used("user-1", 5) == 15
        assert await UserRepository.increment_storage_used("user-1", -20) == -5

    @pytest.mark.asyncio
    async def test_increment_missing_user_returns_none(self, test_db):
        assert await UserRepository.increment_storage_used("ghost", 5) is None

    @pytest.mark.asyncio
    async def test_update_user_missing_returns_none(self, test_db):
        assert await UserRepository.update_user(make_user()) is None

    @pytest.mark.asyncio
    async def test_update_user_leaves_usage_and_key_alone(self, test_db):
        stale = await UserRepository.create_user(make_user(storage_used=10))
        await UserRepository.increment_storage_used("user-1", 500)
        await UserRepository.update_api_key("user-1", "cf_fresh")

        stale.plan = "pro"
        stale.api_key = "cf_stale"
        updated = await UserRepository.update_user(stale)

        assert updated.plan == "pro"
        assert updated.storage_used == 510
        assert updated.api_key == "cf_fresh"
        assert await UserRepository.get_by_api_key("cf_stale") is None

    @pytest.mark.asyncio
    async def test_users_listed_in_insertion_order(self, test_db):
        await UserRepository.create_user(make_user("u1", "zed"))
        await UserRepository.create_user(make_user("u2", "amy"))

        users = await UserRepository.get_all_users()
        assert [u.username for u in users] == ["zed", "amy"]
        assert await UserRepository.count_users() == 2

    @pytest.mark.asyncio
    async def test_delete_by_username(self, test_db):
        await UserRepository.create_user(make_user())
        assert await UserRepository.delete_by_username("alice") is True
        assert await UserRepository.delete_by_username("alice") is False


class TestFileRepository:
    @pytest.mark.asyncio
    async def test_create_and_fetch_with_content(self, test_db):
        await FileRepository.create_file(make_file(), b"hello")

        stored = await FileRepository.get_by_id("file-1")
        assert stored is not None
        assert stored.file_type == FileType.DOCUMENT
        assert stored.is_trashed is False
        assert stored.is_shared is False
        assert await FileRepository.get_content("file-1") == b"hello"

    @pytest.mark.asyncio
    async def test_list_by_parent_filters_owner_and_trash(self, test_db):
        await FileRepository.create_file(make_file("a"), None)
        await FileRepository.create_file(make_file("b"), None)
        await FileRepository.create_file(make_file("c", owner_id="user-2"), None)
        await FileRepository.mark_trashed("b", utcnow())

        files = await FileRepository.list_by_parent(ROOT_FOLDER_ID, "user-1")
        assert [f.file_id for f in files] == ["a"]

    @pytest.mark.asyncio
    async def test_mark_trashed_revokes_share(self, test_db):
        await FileRepository.create_file(make_file(), None)
        await FileRepository.update_share("file-1", True, "tok", utcnow())

        trashed = await FileRepository.mark_trashed("file-1", utcnow())

        assert trashed.is_trashed is True
        assert trashed.trashed_at is not None
        assert trashed.is_shared is False
        assert trashed.share_token is None
        assert trashed.share_created_at is None

    @pytest.mark.asyncio
    async def test_update_share_leaves_trashed_file_unshared(self, test_db):
        await FileRepository.create_file(make_file(), None)
        await FileRepository.mark_trashed("file-1", utcnow())

        result = await FileRepository.update_share("file-1", True, "tok", utcnow())

        assert result.is_trashed is True
        assert result.is_shared is False
        assert await FileRepository.find_shared_by_token("tok") is None

    @pytest.mark.asyncio
    async def test_toggles_on_missing_file_return_none(self, test_db):
        assert await FileRepository.mark_trashed("ghost", utcnow()) is None
        assert await FileRepository.mark_restored("ghost") is None
        assert await FileRepository.update_share("ghost", False, None, None) is None

    @pytest.mark.asyncio
    async def test_list_trashed_before(self, test_db):
        await FileRepository.create_file(make_file("old"), None)
        await FileRepository.create_file(make_file("new"), None)
        await FileRepository.mark_trashed("old", utcnow() - timedelta(days=40))
        await FileRepository.mark_trashed("new", utcnow())

        expired = await FileRepository.list_trashed_before(utcnow() - timedelta(days=30))
        assert [f.file_id for f in expired] == ["old"]

    @pytest.mark.asyncio
    async def test_aggregates(self, test_db):
        await FileRepository.create_file(make_file("a", size=10, file_type=FileType.IMAGE), None)
        await FileRepository.create_file(make_file("b", size=20, file_type=FileType.IMAGE), None)
        await FileRepository.create_file(make_file("c", size=5, owner_id="user-2"), None)

        assert await FileRepository.get_totals() == (3, 35)
        assert await FileRepository.sum_sizes_by_owner("user-1") == 30
        assert await FileRepository.sum_sizes_by_owner("nobody") == 0
        assert await FileRepository.count_by_type() == {FileType.IMAGE: 2, FileType.DOCUMENT: 1}

    @pytest.mark.asyncio
    async def test_delete_file(self, test_db):
        await FileRepository.create_file(make_file(), None)
        assert await FileRepository.delete_file("file-1") is True
        assert await FileRepository.delete_file("file-1") is False
        assert await FileRepository.get_by_id("file-1") is None


class TestFolderRepository:
    @pytest.mark.asyncio
    async def test_create_list_and_trash(self, test_db):
        folder = Folder(
            folder_id="folder-1",
            name="docs",
            parent_id=ROOT_FOLDER_ID,
            owner_id="user-1",
            created_at=utcnow(),
        )
        await FolderRepository.create_folder(folder)

        assert [f.name for f in await FolderRepository.list_by_parent(ROOT_FOLDER_ID, "user-1")] == ["docs"]

        trashed = await FolderRepository.set_trashed("folder-1", utcnow())
        assert trashed.is_trashed is True
        assert await FolderRepository.list_by_parent(ROOT_FOLDER_ID, "user-1") == []
        assert [f.folder_id for f in await FolderRepository.list_trashed_by_owner("user-1")] == ["folder-1"]

        restored = await FolderRepository.set_trashed("folder-1", None)
        assert restored.is_trashed is False
        assert restored.trashed_at is None

    @pytest.mark.asyncio
    async def test_set_trashed_missing_returns_none(self, test_db):
        assert await FolderRepository.set_trashed("ghost", utcnow()) is None


class TestConfigRepository:
    @pytest.mark.asyncio
    async def test_absent_config(self, test_db):
        assert await ConfigRepository.get() is None

    @pytest.mark.asyncio
    async def test_put_replaces_single_row(self, test_db):
        await ConfigRepository.put(StorageConfig(provider=Provider.AWS, bucket="b1"))
        await ConfigRepository.put(StorageConfig(provider=Provider.WASABI, root_path="media"))

        stored = await ConfigRepository.get()
        assert stored == StorageConfig(provider=Provider.WASABI, root_path="media")
