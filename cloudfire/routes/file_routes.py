"""File operation API routes."""

from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, Request, Response, UploadFile, status

from common.constants import DEFAULT_MIME_TYPE, ROOT_FOLDER_ID
from cloudfire.auth import generate_share_token
from cloudfire.engine import StorageEngine
from cloudfire.exceptions import UnauthorizedAccessError
from cloudfire.repositories.user_repository import User
from cloudfire.routes.deps import engine_dependency, get_current_user
from cloudfire.schemas.files import (
    FileMetadataResponse,
    ListingResponse,
    ShareRequest,
    ShareResponse,
)

router = APIRouter(prefix="/files", tags=["Files"])


def content_disposition(name: str) -> str:
    return f"attachment; filename*=UTF-8''{quote(name)}"


async def _check_access(engine: StorageEngine, file_id: str, user: User) -> None:
    """
    Refuse access to another user's file. A missing file passes so that
    trash/restore/purge keep their no-op semantics.
    """
    cloud_file = await engine.get_file(file_id)
    if cloud_file is not None and cloud_file.owner_id != user.user_id and not user.is_admin:
        raise UnauthorizedAccessError(f"File '{file_id}' belongs to another user")


@router.post("", response_model=FileMetadataResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile = File(...),
    parent_id: str = Form(ROOT_FOLDER_ID),
    current_user: User = Depends(get_current_user),
    engine: StorageEngine = Depends(engine_dependency),
):
    """
    Upload a file into one of the caller's folders.

    Parameters:
        - file: File to upload (multipart/form-data)
        - parent_id: Target folder id, 'root' by default
        - Authorization header: Bearer <api_key> (required)

    Raises:
        - 400: Empty file name
        - 401: Invalid or missing API Key
        - 404: Parent folder not found
    """
    file_content = await file.read()

    cloud_file = await engine.upload(
        owner_id=current_user.user_id,
        parent_id=parent_id,
        name=file.filename or "",
        mime_type=file.content_type or DEFAULT_MIME_TYPE,
        size=len(file_content),
        content=file_content,
    )

    return FileMetadataResponse.from_file(cloud_file)


@router.get("", response_model=ListingResponse)
async def list_directory(
    parent_id: str = Query(ROOT_FOLDER_ID),
    current_user: User = Depends(get_current_user),
    engine: StorageEngine = Depends(engine_dependency),
):
    """
    List the caller's non-trashed files and folders directly under parent_id.
    """
    listing = await engine.list(current_user.user_id, parent_id)
    return ListingResponse.from_listing(listing)


@router.get("/{file_id}", response_model=FileMetadataResponse)
async def get_file_metadata(
    file_id: str,
    current_user: User = Depends(get_current_user),
    engine: StorageEngine = Depends(engine_dependency),
):
    cloud_file = await engine.get_owned_file(file_id, current_user)
    return FileMetadataResponse.from_file(cloud_file)


@router.get("/{file_id}/download")
async def download_file(
    file_id: str,
    current_user: User = Depends(get_current_user),
    engine: StorageEngine = Depends(engine_dependency),
):
    """
    Download file content.

    Raises:
        - 403: File belongs to another user
        - 404: File not found
    """
    cloud_file = await engine.get_owned_file(file_id, current_user)
    content = await engine.get_content(file_id) or b""

    return Response(
        content=content,
        media_type=cloud_file.mime_type,
        headers={"Content-Disposition": content_disposition(cloud_file.name)},
    )


@router.post("/{file_id}/trash", status_code=status.HTTP_204_NO_CONTENT)
async def trash_file(
    file_id: str,
    current_user: User = Depends(get_current_user),
    engine: StorageEngine = Depends(engine_dependency),
):
    """
    Move a file to the trash; its share link stops working.
    """
    await _check_access(engine, file_id, current_user)
    await engine.trash(file_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{file_id}/restore", status_code=status.HTTP_204_NO_CONTENT)
async def restore_file(
    file_id: str,
    current_user: User = Depends(get_current_user),
    engine: StorageEngine = Depends(engine_dependency),
):
    await _check_access(engine, file_id, current_user)
    await engine.restore(file_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_file(
    file_id: str,
    current_user: User = Depends(get_current_user),
    engine: StorageEngine = Depends(engine_dependency),
):
    """
    Permanently delete one of the caller's files and release its quota.
    """
    cloud_file = await engine.get_file(file_id)
    if cloud_file is not None and cloud_file.owner_id != current_user.user_id:
        raise UnauthorizedAccessError(f"File '{file_id}' belongs to another user")

    await engine.purge(file_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{file_id}/share", response_model=ShareResponse)
async def share_file(
    file_id: str,
    share_request: ShareRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    engine: StorageEngine = Depends(engine_dependency),
):
    """
    Enable or revoke the public link of a file.

    A fresh token is generated every time sharing is enabled.

    Raises:
        - 400: File is in the trash
        - 403: File belongs to another user
        - 404: File not found
    """
    await engine.get_owned_file(file_id, current_user)

    token = generate_share_token() if share_request.enabled else None
    cloud_file = await engine.set_share(file_id, share_request.enabled, token)

    share_url = None
    if cloud_file.is_shared:
        share_url = f"{str(request.base_url).rstrip('/')}/shared?share={cloud_file.share_token}"

    return ShareResponse(
        file_id=cloud_file.file_id,
        is_shared=cloud_file.is_shared,
        share_token=cloud_file.share_token,
        share_url=share_url,
    )
