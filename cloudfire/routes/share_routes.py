"""Anonymous access to shared files."""

from fastapi import APIRouter, Depends, Query, Response

from cloudfire.engine import StorageEngine
from cloudfire.exceptions import NotFoundError
from cloudfire.routes.deps import engine_dependency
from cloudfire.routes.file_routes import content_disposition
from cloudfire.schemas.files import FileMetadataResponse

router = APIRouter(prefix="/shared", tags=["Sharing"])


@router.get("", response_model=FileMetadataResponse)
async def get_shared_file(
    share: str = Query(...),
    engine: StorageEngine = Depends(engine_dependency),
):
    """
    Resolve a share token. No authentication required.

    Raises:
        - 404: Unknown or revoked token, or the file is in the trash
    """
    cloud_file = await engine.resolve_share(share)
    if cloud_file is None:
        raise NotFoundError("Shared file not found")
    return FileMetadataResponse.from_file(cloud_file)


@router.get("/download")
async def download_shared_file(
    share: str = Query(...),
    engine: StorageEngine = Depends(engine_dependency),
):
    shared = await engine.get_shared_content(share)
    if shared is None:
        raise NotFoundError("Shared file not found")

    cloud_file, content = shared
    return Response(
        content=content,
        media_type=cloud_file.mime_type,
        headers={"Content-Disposition": content_disposition(cloud_file.name)},
    )
