"""Folder API routes."""

from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from common.constants import ROOT_FOLDER_ID
from cloudfire.engine import StorageEngine
from cloudfire.exceptions import UnauthorizedAccessError
from cloudfire.repositories.user_repository import User
from cloudfire.routes.deps import engine_dependency, get_current_user
from cloudfire.schemas.files import CreateFolderRequest, FolderResponse

router = APIRouter(prefix="/folders", tags=["Folders"])


async def _check_access(engine: StorageEngine, folder_id: str, user: User) -> None:
    folder = await engine.get_folder(folder_id)
    if folder is not None and folder.owner_id != user.user_id and not user.is_admin:
        raise UnauthorizedAccessError(f"Folder '{folder_id}' belongs to another user")


@router.post("", response_model=FolderResponse, status_code=status.HTTP_201_CREATED)
async def create_folder(
    request: CreateFolderRequest,
    current_user: User = Depends(get_current_user),
    engine: StorageEngine = Depends(engine_dependency),
):
    """
    Create a folder under 'root' or one of the caller's folders.

    Raises:
        - 400: Empty folder name
        - 404: Parent folder not found
    """
    folder = await engine.create_folder(current_user.user_id, request.name, request.parent_id)
    return FolderResponse.from_folder(folder)


@router.get("", response_model=List[FolderResponse])
async def list_folders(
    parent_id: str = Query(ROOT_FOLDER_ID),
    current_user: User = Depends(get_current_user),
    engine: StorageEngine = Depends(engine_dependency),
):
    folders = await engine.list_folders(current_user.user_id, parent_id)
    return [FolderResponse.from_folder(folder) for folder in folders]


@router.post("/{folder_id}/trash", status_code=status.HTTP_204_NO_CONTENT)
async def trash_folder(
    folder_id: str,
    current_user: User = Depends(get_current_user),
    engine: StorageEngine = Depends(engine_dependency),
):
    """
    Move a single folder to the trash. Its contents are not touched.
    """
    await _check_access(engine, folder_id, current_user)
    await engine.trash_folder(folder_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{folder_id}/restore", status_code=status.HTTP_204_NO_CONTENT)
async def restore_folder(
    folder_id: str,
    current_user: User = Depends(get_current_user),
    engine: StorageEngine = Depends(engine_dependency),
):
    await _check_access(engine, folder_id, current_user)
    await engine.restore_folder(folder_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
