"""Tests for the trash lifecycle and its quota effects."""

from datetime import timedelta

import pytest
import pytest_asyncio

from common.constants import ROOT_FOLDER_ID
from cloudfire.exceptions import StoreUnavailableError
from cloudfire.repositories import FileRepository
from cloudfire.utils import utcnow


@pytest_asyncio.fixture
async def alice(engine):
    return await engine.register("alice", "secret")


class TestTrashLifecycle:
    @pytest.mark.asyncio
    async def test_quota_follows_upload_trash_restore_purge(self, engine, alice):
        uploaded = await engine.upload(alice.user_id, ROOT_FOLDER_ID, "video.mp4", "video/mp4", 1_000_000)
        assert (await engine.get_usage(alice.user_id))[0] == 1_000_000

        await engine.trash(uploaded.file_id)
        assert (await engine.get_usage(alice.user_id))[0] == 1_000_000
        assert await engine.list_files(alice.user_id) == []
        assert [f.file_id for f in (await engine.get_trashed(alice.user_id)).files] == [uploaded.file_id]

        await engine.restore(uploaded.file_id)
        assert [f.file_id for f in await engine.list_files(alice.user_id)] == [uploaded.file_id]

        await engine.trash(uploaded.file_id)
        assert await engine.purge(uploaded.file_id) is True
        assert (await engine.get_usage(alice.user_id))[0] == 0
        assert await engine.get_file(uploaded.file_id) is None
        assert await engine.get_content(uploaded.file_id) is None
        assert (await engine.get_trashed(alice.user_id)).files == []

    @pytest.mark.asyncio
    async def test_trash_revokes_share_and_restore_does_not_reshare(self, engine, alice):
        uploaded = await engine.upload(alice.user_id, ROOT_FOLDER_ID, "a.txt", "text/plain", 5)
        await engine.set_share(uploaded.file_id, True, "tok-1")

        trashed = await engine.trash(uploaded.file_id)
        assert trashed.is_shared is False
        assert trashed.share_token is None

        restored = await engine.restore(uploaded.file_id)
        assert restored.is_trashed is False
        assert restored.trashed_at is None
        assert restored.is_shared is False
        assert await engine.resolve_share("tok-1") is None

    @pytest.mark.asyncio
    async def test_operations_on_missing_ids_are_noops(self, engine):
        assert await engine.trash("ghost") is None
        assert await engine.restore("ghost") is None
        assert await engine.purge("ghost") is False
        assert await engine.trash_folder("ghost") is None
        assert await engine.restore_folder("ghost") is None

    @pytest.mark.asyncio
    async def test_purge_active_file(self, engine, alice):
        uploaded = await engine.upload(alice.user_id, ROOT_FOLDER_ID, "a.txt", "text/plain", 70)

        assert await engine.purge(uploaded.file_id) is True
        assert (await engine.get_usage(alice.user_id))[0] == 0

    @pytest.mark.asyncio
    async def test_failed_delete_restores_quota(self, engine, alice, monkeypatch):
        uploaded = await engine.upload(alice.user_id, ROOT_FOLDER_ID, "a.txt", "text/plain", 70)

        async def failing_delete(file_id):
            raise StoreUnavailableError("Storage operation failed")

        monkeypatch.setattr(engine.trash_service.file_repo, "delete_file", failing_delete)

        with pytest.raises(StoreUnavailableError):
            await engine.purge(uploaded.file_id)

        assert (await engine.get_usage(alice.user_id))[0] == 70
        assert await engine.get_file(uploaded.file_id) is not None


class TestTrashListing:
    @pytest.mark.asyncio
    async def test_get_trashed_returns_files_and_folders(self, engine, alice):
        folder = await engine.create_folder(alice.user_id, "old")
        uploaded = await engine.upload(alice.user_id, ROOT_FOLDER_ID, "a.txt", "text/plain", 1)
        await engine.upload(alice.user_id, ROOT_FOLDER_ID, "keep.txt", "text/plain", 1)
        await engine.trash(uploaded.file_id)
        await engine.trash_folder(folder.folder_id)

        listing = await engine.get_trashed(alice.user_id)

        assert [f.file_id for f in listing.files] == [uploaded.file_id]
        assert [f.folder_id for f in listing.folders] == [folder.folder_id]
        assert await engine.list_folders(alice.user_id) == []

    @pytest.mark.asyncio
    async def test_restore_folder(self, engine, alice):
        folder = await engine.create_folder(alice.user_id, "old")
        await engine.trash_folder(folder.folder_id)

        restored = await engine.restore_folder(folder.folder_id)

        assert restored.is_trashed is False
        assert [f.name for f in await engine.list_folders(alice.user_id)] == ["old"]

    @pytest.mark.asyncio
    async def test_empty_trash_purges_files_only(self, engine, alice):
        folder = await engine.create_folder(alice.user_id, "old")
        await engine.trash_folder(folder.folder_id)
        for size in (10, 20, 30):
            uploaded = await engine.upload(alice.user_id, ROOT_FOLDER_ID, f"{size}.txt", "text/plain", size)
            await engine.trash(uploaded.file_id)
        await engine.upload(alice.user_id, ROOT_FOLDER_ID, "keep.txt", "text/plain", 5)

        assert await engine.empty_trash(alice.user_id) == 3

        listing = await engine.get_trashed(alice.user_id)
        assert listing.files == []
        assert [f.folder_id for f in listing.folders] == [folder.folder_id]
        assert (await engine.get_usage(alice.user_id))[0] == 5

    @pytest.mark.asyncio
    async def test_empty_trash_when_empty(self, engine, alice):
        assert await engine.empty_trash(alice.user_id) == 0

    @pytest.mark.asyncio
    async def test_empty_trash_leaves_other_users_alone(self, engine, alice):
        bob = await engine.register("bob", "secret")
        bobs = await engine.upload(bob.user_id, ROOT_FOLDER_ID, "b.txt", "text/plain", 1)
        await engine.trash(bobs.file_id)

        assert await engine.empty_trash(alice.user_id) == 0
        assert await engine.get_file(bobs.file_id) is not None


class TestRetention:
    @pytest.mark.asyncio
    async def test_purge_trashed_before_cutoff(self, engine, alice):
        old = await engine.upload(alice.user_id, ROOT_FOLDER_ID, "old.txt", "text/plain", 40)
        recent = await engine.upload(alice.user_id, ROOT_FOLDER_ID, "recent.txt", "text/plain", 2)
        await FileRepository.mark_trashed(old.file_id, utcnow() - timedelta(days=40))
        await engine.trash(recent.file_id)

        purged = await engine.purge_trashed_before(utcnow() - timedelta(days=30))

        assert purged == 1
        assert await engine.get_file(old.file_id) is None
        assert await engine.get_file(recent.file_id) is not None
        assert (await engine.get_usage(alice.user_id))[0] == 2
