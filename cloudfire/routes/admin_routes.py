"""Admin API routes: storage config, dashboard stats and user management."""

from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from cloudfire.engine import StorageEngine
from cloudfire.exceptions import NotFoundError, ValidationError
from cloudfire.repositories.user_repository import User
from cloudfire.routes.deps import engine_dependency, require_admin
from cloudfire.schemas.admin import StorageConfigSchema, SystemStatsResponse
from cloudfire.schemas.auth import UpdateUserRequest, UserResponse
from cloudfire.schemas.files import FileMetadataResponse

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/config", response_model=StorageConfigSchema)
async def get_config(
    admin: User = Depends(require_admin),
    engine: StorageEngine = Depends(engine_dependency),
):
    storage_config = await engine.get_config()
    return StorageConfigSchema.from_config(storage_config)


@router.put("/config", response_model=StorageConfigSchema)
async def put_config(
    request: StorageConfigSchema,
    admin: User = Depends(require_admin),
    engine: StorageEngine = Depends(engine_dependency),
):
    """
    Replace the storage backend configuration. The root_path prefixes the
    storage key of every later upload.
    """
    storage_config = await engine.put_config(request.to_config())
    return StorageConfigSchema.from_config(storage_config)


@router.get("/stats", response_model=SystemStatsResponse)
async def get_stats(
    admin: User = Depends(require_admin),
    engine: StorageEngine = Depends(engine_dependency),
):
    stats = await engine.system_stats()
    return SystemStatsResponse.from_stats(stats)


@router.get("/users", response_model=List[UserResponse])
async def list_users(
    admin: User = Depends(require_admin),
    engine: StorageEngine = Depends(engine_dependency),
):
    users = await engine.list_users()
    return [UserResponse.from_user(user) for user in users]


@router.put("/users/{username}", response_model=UserResponse)
async def update_user(
    username: str,
    request: UpdateUserRequest,
    admin: User = Depends(require_admin),
    engine: StorageEngine = Depends(engine_dependency),
):
    """
    Edit a user. Fields left out of the body are unchanged.

    Raises:
        - 400: Non-positive storage limit
        - 404: User not found
    """
    user = await engine.edit_user(username, **request.model_dump(exclude_unset=True))
    return UserResponse.from_user(user)


@router.delete("/users/{username}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    username: str,
    cascade: bool = Query(False),
    admin: User = Depends(require_admin),
    engine: StorageEngine = Depends(engine_dependency),
):
    """
    Delete a user. With cascade=true their files and folders go too.

    Raises:
        - 400: Admin tried to delete their own account
        - 404: User not found
    """
    if username == admin.username:
        raise ValidationError("Admins cannot delete their own account")

    if not await engine.delete_user(username, cascade=cascade):
        raise NotFoundError(f"User '{username}' not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/files", response_model=List[FileMetadataResponse])
async def list_all_files(
    admin: User = Depends(require_admin),
    engine: StorageEngine = Depends(engine_dependency),
):
    files = await engine.list_all_files()
    return [FileMetadataResponse.from_file(cloud_file) for cloud_file in files]


@router.delete("/files/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_any_file(
    file_id: str,
    admin: User = Depends(require_admin),
    engine: StorageEngine = Depends(engine_dependency),
):
    """
    Permanently delete any user's file, trashed or not.
    """
    await engine.purge(file_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
