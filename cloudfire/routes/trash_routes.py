"""Trash API routes."""

from fastapi import APIRouter, Depends

from cloudfire.engine import StorageEngine
from cloudfire.repositories.user_repository import User
from cloudfire.routes.deps import engine_dependency, get_current_user
from cloudfire.schemas.common import CountResponse
from cloudfire.schemas.files import ListingResponse

router = APIRouter(prefix="/trash", tags=["Trash"])


@router.get("", response_model=ListingResponse)
async def list_trash(
    current_user: User = Depends(get_current_user),
    engine: StorageEngine = Depends(engine_dependency),
):
    listing = await engine.get_trashed(current_user.user_id)
    return ListingResponse.from_listing(listing)


@router.delete("", response_model=CountResponse)
async def empty_trash(
    current_user: User = Depends(get_current_user),
    engine: StorageEngine = Depends(engine_dependency),
):
    """
    Permanently delete every trashed file of the caller.

    Returns:
        - count: Number of files purged
    """
    purged = await engine.empty_trash(current_user.user_id)
    return CountResponse(count=purged)
