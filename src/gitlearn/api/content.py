"""Repository content API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..core.schemas.content import (
    FileWriteRequest,
    FolderChild,
    FolderCreateRequest,
    RemoteFile,
    TreeResponse,
    WriteResult,
)
from ..core.services import ContentService, get_tree_cache
from ..core.session import GitHubSession
from ..middleware.auth import get_github_session

router = APIRouter(prefix="/content", tags=["content"])


@router.get("/tree", response_model=TreeResponse)
async def list_tree(
    q: str = Query("", description="Filter paths by substring"),
    refresh: bool = Query(False, description="Reload from GitHub instead of the cached listing"),
    github: GitHubSession = Depends(get_github_session),
):
    """All file paths in the repository, folder placeholders hidden."""
    cache = get_tree_cache(github)
    if refresh:
        await cache.refresh()
    else:
        await cache.ensure_loaded()
    entries = cache.search(q)
    return TreeResponse(ref=github.branch, entries=entries, total=len(entries))


@router.get("/files", response_model=RemoteFile)
async def read_file(
    path: str = Query(..., min_length=1),
    ref: Optional[str] = Query(None, description="Commit sha for a read-only historical view"),
    github: GitHubSession = Depends(get_github_session),
):
    """Read one file."""
    content_service = ContentService()
    return await content_service.read_file(github, path, ref)


@router.put("/files", response_model=WriteResult)
async def write_file(
    request: FileWriteRequest,
    github: GitHubSession = Depends(get_github_session),
):
    """Create a file, or update it when expected_sha is given."""
    content_service = ContentService()
    result = await content_service.write_file(
        github,
        request.path,
        request.content,
        request.expected_sha,
        message=request.message,
        content_is_base64=request.content_is_base64,
    )
    get_tree_cache(github).schedule_refresh()
    return result


@router.get("/folders", response_model=List[FolderChild])
async def list_folder(
    path: str = Query("", description="Folder path, empty for the root"),
    github: GitHubSession = Depends(get_github_session),
):
    """List one folder level, directories first."""
    content_service = ContentService()
    return await content_service.list_folder_children(github, path)


@router.post("/folders", response_model=WriteResult, status_code=201)
async def create_folder(
    request: FolderCreateRequest,
    github: GitHubSession = Depends(get_github_session),
):
    """Create a folder."""
    content_service = ContentService()
    result = await content_service.create_folder(github, request.path)
    get_tree_cache(github).schedule_refresh()
    return result
